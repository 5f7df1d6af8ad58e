"""Login for verified users: password check, or a one-time code texted to the phone."""
import logging

from sqlalchemy.orm import Session

from app.exceptions import (
    ExpiredCodeError,
    InvalidCodeError,
    InvalidCredentialsError,
    NotFoundError,
    NotVerifiedError,
    RateLimitError,
)
from app.models.user import User
from app.services.audit_log import CATEGORY_FAILED_ATTEMPT, create_log
from app.services.auth import verify_password
from app.services.otp import code_expiry, codes_match, generate_code, is_expired
from app.services.sms import OtpConfig, SmsGateway

logger = logging.getLogger("uvicorn.error")

USER_NOT_FOUND_OR_UNVERIFIED = "User not found or not verified."


def _clear_login_otp(user: User) -> None:
    user.otp = None
    user.otp_expires_at = None
    user.otp_attempts = 0


def request_login_otp(db: Session, phone: str, gateway: SmsGateway) -> User:
    """Store a fresh login code on the user and text it. No pending signup is involved."""
    user = db.query(User).filter(User.phone == phone).first()
    if not user:
        raise NotFoundError("User not found.")
    if not user.verified:
        raise NotVerifiedError()
    code = generate_code()
    user.otp = code
    user.otp_expires_at = code_expiry(gateway.config.expiry_minutes)
    user.otp_attempts = 0
    db.commit()
    logger.info("[Login] Login OTP stored for user id=%s", user.id)
    gateway.send_code(phone, code)
    return user


def verify_login_code(
    db: Session,
    phone: str,
    code: str,
    config: OtpConfig,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> User:
    """Same discipline as signup verification: expiry, then attempt limit, then code."""
    user = db.query(User).filter(User.phone == phone).first()
    if not user or not user.verified:
        raise NotFoundError(USER_NOT_FOUND_OR_UNVERIFIED)
    if not user.otp or not user.otp_expires_at:
        raise InvalidCodeError("No OTP found. Please request OTP.")
    if is_expired(user.otp_expires_at):
        _clear_login_otp(user)
        db.commit()
        raise ExpiredCodeError("OTP expired. Please request OTP again.")

    attempts = (user.otp_attempts or 0) + 1
    if attempts > config.attempt_limit:
        _clear_login_otp(user)
        create_log(
            db,
            CATEGORY_FAILED_ATTEMPT,
            "Login locked",
            f"Too many invalid login codes for user {user.id}; code discarded.",
            actor_user_id=user.id,
            actor_phone=phone,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"attempts": attempts, "reason": "attempt_limit"},
        )
        db.commit()
        raise RateLimitError()

    if not codes_match(user.otp, code):
        user.otp_attempts = attempts
        create_log(
            db,
            CATEGORY_FAILED_ATTEMPT,
            "Login failed",
            f"Invalid login code for user {user.id}.",
            actor_user_id=user.id,
            actor_phone=phone,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"attempts": attempts, "reason": "invalid_code", "expires_at": user.otp_expires_at},
        )
        db.commit()
        raise InvalidCodeError()

    _clear_login_otp(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_password(
    db: Session,
    email: str,
    password: str,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.verified:
        raise NotFoundError(USER_NOT_FOUND_OR_UNVERIFIED)
    if not verify_password(password, user.hashed_password):
        create_log(
            db,
            CATEGORY_FAILED_ATTEMPT,
            "Login failed",
            f"Failed password login for email: {email}.",
            actor_user_id=user.id,
            actor_email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            meta={"reason": "invalid_password"},
        )
        db.commit()
        raise InvalidCredentialsError()
    return user
