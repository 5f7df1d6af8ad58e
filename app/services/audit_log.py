"""Append-only audit log service. Never update or delete - immutable audit trail."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

CATEGORY_STATUS_CHANGE = "status_change"
CATEGORY_FAILED_ATTEMPT = "failed_attempt"

# Column limits (match model)
_CATEGORY_LEN = 32
_TITLE_LEN = 255
_PHONE_LEN = 15
_ACTOR_EMAIL_LEN = 255
_IP_LEN = 64
_USER_AGENT_LEN = 500
_MESSAGE_LEN = 10_000


def _sanitize_meta_value(v: Any) -> Any:
    """Convert to JSON-serializable value so meta never raises on INSERT."""
    if v is None:
        return None
    if isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return str(v)


def _sanitize_meta(meta: dict[str, Any] | None) -> dict[str, Any] | None:
    if meta is None:
        return None
    return {str(k): _sanitize_meta_value(v) for k, v in meta.items()}


def create_log(
    db: Session,
    category: str,
    title: str,
    message: str,
    *,
    actor_user_id: int | None = None,
    actor_phone: str | None = None,
    actor_email: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    """Append one immutable audit log record. All timestamps are UTC (server_default).
    String fields are truncated to column limits; meta is sanitized for JSON."""
    cat = (category or "")[: _CATEGORY_LEN].strip() or CATEGORY_STATUS_CHANGE
    tit = (title or "")[: _TITLE_LEN].strip() or "-"
    msg = (message or "")[: _MESSAGE_LEN].strip() or "-"

    entry = AuditLog(
        category=cat,
        title=tit,
        message=msg,
        actor_user_id=actor_user_id,
        actor_phone=(actor_phone[: _PHONE_LEN] if actor_phone else None),
        actor_email=(actor_email[: _ACTOR_EMAIL_LEN] if actor_email else None),
        ip_address=(ip_address[: _IP_LEN] if ip_address else None),
        user_agent=(str(user_agent)[: _USER_AGENT_LEN] if user_agent else None),
        meta=_sanitize_meta(meta),
    )
    db.add(entry)
    db.flush()  # commit remains with caller
    return entry
