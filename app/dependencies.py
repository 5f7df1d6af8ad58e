"""Shared dependencies: DB session, OTP config, SMS gateway, current user."""
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.services.auth import decode_token_with_error
from app.services.sms import OtpConfig, SmsGateway

security = HTTPBearer(auto_error=False)


def get_otp_config() -> OtpConfig:
    return OtpConfig.from_settings(get_settings())


def get_sms_gateway(config: OtpConfig = Depends(get_otp_config)) -> SmsGateway:
    return SmsGateway(config)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """Token from the Authorization header, falling back to the HTTP-only cookie set at sign-in."""
    token_str = (credentials.credentials if credentials else None) or request.cookies.get(get_settings().auth_cookie_name)
    if not token_str:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload, _ = decode_token_with_error(token_str)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
