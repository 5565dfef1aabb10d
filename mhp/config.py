from __future__ import annotations
import os
from dotenv import load_dotenv

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "MHP")
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mhp.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

# Insert the demo catalog on startup when the categories table is empty
SEED_DEMO_MENU = os.getenv("SEED_DEMO_MENU", "true").strip().lower() in ("1", "true", "yes")

# Set true behind HTTPS
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").strip().lower() in ("1", "true", "yes")

# Cost factor for password hashes
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
