from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from .config import CURRENCY_SYMBOL

CENT = Decimal("0.01")

def now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

def fmt_dt(dt: datetime) -> str:
    # e.g. "Oct 18, 2026, 1:05:09 PM"
    hour = dt.hour % 12 or 12
    return f"{dt:%b} {dt.day}, {dt.year}, {hour}:{dt:%M:%S} {dt:%p}"

def to_cents(v: Decimal | float | int) -> Decimal:
    return Decimal(str(v)).quantize(CENT, rounding=ROUND_HALF_UP)

def money(v: Decimal | float | int | None) -> str:
    if v is None:
        return "-"
    return f"{CURRENCY_SYMBOL}{to_cents(v)}"
