from __future__ import annotations
import bcrypt
from itsdangerous import URLSafeTimedSerializer, BadSignature
from fastapi import Request, Response
from .config import SECRET_KEY, COOKIE_SECURE, BCRYPT_ROUNDS

SESSION_COOKIE = "mhp_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 14  # 14 days, checked on every read
MIN_PASSWORD_LENGTH = 8

# Timed tokens so a copied cookie stops working after SESSION_MAX_AGE
_sessions = URLSafeTimedSerializer(SECRET_KEY, salt="identity")

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")

def check_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # malformed stored hash
        return False

def start_session(response: Response, user_id: str) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        _sessions.dumps({"uid": user_id}),
        max_age=SESSION_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=COOKIE_SECURE,
    )

def end_session(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, path="/")

def session_user_id(request: Request) -> str | None:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    try:
        payload = _sessions.loads(token, max_age=SESSION_MAX_AGE)
    except BadSignature:
        # also covers SignatureExpired
        return None
    uid = payload.get("uid") if isinstance(payload, dict) else None
    return str(uid) if uid else None

def email_ok(email: str) -> bool:
    local, sep, domain = email.partition("@")
    return bool(local and sep and domain) and "@" not in domain
