"""Delete pending signups whose code has expired."""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.pending_signup import PendingSignup
from app.services.otp import utcnow

logger = logging.getLogger("uvicorn.error")


def delete_expired_pending_signups(db: Session, now: datetime | None = None) -> int:
    deleted = (
        db.query(PendingSignup)
        .filter(PendingSignup.expires_at <= (now or utcnow()))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def run_pending_signup_cleanup_job() -> None:
    """Scheduler entry point: opens its own session."""
    db: Session = SessionLocal()
    try:
        deleted = delete_expired_pending_signups(db)
        if deleted:
            logger.info("Pending signup cleanup: deleted %d expired pending signup(s).", deleted)
    finally:
        db.close()
