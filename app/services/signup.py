"""Phone signup: pending signup lifecycle and code verification.

A signup request stores a PendingSignup keyed by phone and texts a code; the
account is created only when that code is verified. Requesting again replaces
the pending row (new code, new expiry, attempts back to 0).
"""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ExpiredCodeError, InvalidCodeError, NotFoundError, RateLimitError
from app.models.pending_signup import PendingSignup
from app.models.user import Gender, User
from app.schemas.auth import SignupRequest
from app.services.audit_log import CATEGORY_FAILED_ATTEMPT, CATEGORY_STATUS_CHANGE, create_log
from app.services.auth import get_password_hash
from app.services.otp import code_expiry, codes_match, generate_code, is_expired
from app.services.sms import OtpConfig, SmsGateway

logger = logging.getLogger("uvicorn.error")

NO_PENDING_MESSAGE = "No OTP found. Please register again."


def _upsert_pending(db: Session, phone: str, values: dict) -> PendingSignup:
    pending = db.query(PendingSignup).filter(PendingSignup.phone == phone).first()
    if pending is None:
        pending = PendingSignup(phone=phone, **values)
        db.add(pending)
    else:
        for key, value in values.items():
            setattr(pending, key, value)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent request inserted this phone first; last write wins
        db.rollback()
        pending = db.query(PendingSignup).filter(PendingSignup.phone == phone).one()
        for key, value in values.items():
            setattr(pending, key, value)
        db.commit()
    db.refresh(pending)
    return pending


def request_signup(db: Session, data: SignupRequest, gateway: SmsGateway) -> PendingSignup:
    """Store (or replace) the pending signup for data.phone and text it a fresh code.

    The pending row is committed before sending, so a DeliveryError leaves it in place.
    """
    code = generate_code()
    pending = _upsert_pending(
        db,
        data.phone,
        {
            "code": code,
            "expires_at": code_expiry(gateway.config.expiry_minutes),
            "attempts": 0,
            "profile": data.profile(),
            "hashed_password": get_password_hash(data.password),
        },
    )
    logger.info("[Signup] Pending signup stored for phone=%s (pending_id=%s)", data.phone, pending.id)
    gateway.send_code(data.phone, code)
    return pending


def _delete_pending(db: Session, pending: PendingSignup) -> None:
    db.delete(pending)
    db.commit()


def verify_signup_code(
    db: Session,
    phone: str,
    code: str,
    config: OtpConfig,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> User:
    """Complete a pending signup. Returns the newly created, verified User.

    Order matters: the attempt limit is checked before the code, so the attempt
    that crosses the limit is rejected even when its code is correct.
    """
    pending = db.query(PendingSignup).filter(PendingSignup.phone == phone).first()
    if not pending:
        raise NotFoundError(NO_PENDING_MESSAGE)

    if is_expired(pending.expires_at):
        _delete_pending(db, pending)
        raise ExpiredCodeError("OTP expired. Please register again.")

    attempts = (pending.attempts or 0) + 1
    if attempts > config.attempt_limit:
        create_log(
            db,
            CATEGORY_FAILED_ATTEMPT,
            "Signup verification locked",
            f"Too many invalid codes for phone {phone}; pending signup discarded.",
            actor_phone=phone,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"attempts": attempts, "reason": "attempt_limit", "expires_at": pending.expires_at},
        )
        _delete_pending(db, pending)
        raise RateLimitError()

    if not codes_match(pending.code, code):
        pending.attempts = attempts
        create_log(
            db,
            CATEGORY_FAILED_ATTEMPT,
            "Signup verification failed",
            f"Invalid code for phone {phone}.",
            actor_phone=phone,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"attempts": attempts, "reason": "invalid_code", "expires_at": pending.expires_at},
        )
        db.commit()
        raise InvalidCodeError()

    profile = pending.profile or {}
    email = profile.get("email")
    if not email:
        _delete_pending(db, pending)
        raise NotFoundError("User data missing. Please register again.")

    existing = db.query(User).filter(or_(User.email == email, User.phone == pending.phone)).first()
    if existing:
        _delete_pending(db, pending)
        raise ConflictError()

    hashed_password = pending.hashed_password
    # Only the request that actually removes the pending row may create the user
    consumed = (
        db.query(PendingSignup)
        .filter(PendingSignup.id == pending.id, PendingSignup.code == pending.code)
        .delete(synchronize_session="fetch")
    )
    if consumed != 1:
        db.rollback()
        raise NotFoundError(NO_PENDING_MESSAGE)

    gender = profile.get("gender")
    user = User(
        full_name=profile.get("full_name") or "",
        phone=phone,
        email=email,
        hashed_password=hashed_password,
        state=profile.get("state"),
        city=profile.get("city"),
        gender=Gender(gender) if gender else None,
        verified=True,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        db.query(PendingSignup).filter(PendingSignup.phone == phone).delete(synchronize_session=False)
        db.commit()
        raise ConflictError()
    create_log(
        db,
        CATEGORY_STATUS_CHANGE,
        "Account created",
        f"Phone {phone} verified; account {user.id} created.",
        actor_user_id=user.id,
        actor_phone=phone,
        actor_email=email,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.commit()
    db.refresh(user)
    logger.info("[Signup] Phone verified, user created: id=%s phone=%s", user.id, phone)
    return user
