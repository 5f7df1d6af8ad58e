"""One-time code helpers shared by signup and login."""
import secrets
from datetime import datetime, timedelta, timezone

CODE_MIN = 100000
CODE_MAX = 999999


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes even for timezone=True columns; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_code() -> str:
    """Uniformly random 6-digit code in [100000, 999999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def code_expiry(minutes: int, now: datetime | None = None) -> datetime:
    return (now or utcnow()) + timedelta(minutes=minutes)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    if expires_at is None:
        return True
    return as_utc(expires_at) <= (now or utcnow())


def codes_match(stored: str | None, submitted: str | None) -> bool:
    if not stored or not submitted:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), submitted.encode("utf-8"))
