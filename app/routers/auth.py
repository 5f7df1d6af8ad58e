"""User signup (phone OTP), login and current-user endpoints."""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.dependencies import get_current_user, get_otp_config, get_sms_gateway
from app.models.user import User
from app.schemas.auth import (
    SignupRequest,
    VerifyOtpRequest,
    SendOtpRequest,
    SigninRequest,
    StatusResponse,
    Token,
    UserResponse,
)
from app.services.auth import create_access_token
from app.services.login import authenticate_password, request_login_otp, verify_login_code
from app.services.signup import request_signup, verify_signup_code
from app.services.sms import OtpConfig, SmsGateway

router = APIRouter(prefix="/api/user", tags=["user"])


def _client_context(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": (request.headers.get("user-agent") or "").strip() or None,
    }


@router.post("/signup", response_model=StatusResponse)
def signup(data: SignupRequest, db: Session = Depends(get_db), gateway: SmsGateway = Depends(get_sms_gateway)):
    request_signup(db, data, gateway)
    return StatusResponse(message="OTP sent to phone. Please verify to complete registration.")


@router.post("/verify-otp", response_model=StatusResponse)
def verify_otp(
    request: Request,
    data: VerifyOtpRequest,
    db: Session = Depends(get_db),
    config: OtpConfig = Depends(get_otp_config),
):
    """Verify the signup code; creates the user. No token is issued here, the user signs in next."""
    verify_signup_code(db, data.phone, data.otp, config, **_client_context(request))
    return StatusResponse(message="Phone verified. You can now log in.")


@router.post("/send-otp", response_model=StatusResponse)
def send_otp(data: SendOtpRequest, db: Session = Depends(get_db), gateway: SmsGateway = Depends(get_sms_gateway)):
    request_login_otp(db, data.phone, gateway)
    return StatusResponse(message="OTP sent to phone.")


@router.post("/signin", response_model=Token)
def signin(
    request: Request,
    response: Response,
    data: SigninRequest,
    db: Session = Depends(get_db),
    config: OtpConfig = Depends(get_otp_config),
):
    if data.uses_password:
        user = authenticate_password(db, data.email, data.password, **_client_context(request))
    else:
        user = verify_login_code(db, data.phone, data.otp, config, **_client_context(request))
    token = create_access_token(user)
    settings = get_settings()
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        httponly=True,
        secure=settings.app_env == "production",
        samesite="lax",
        max_age=settings.jwt_access_token_expire_minutes * 60,
        path="/",
    )
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
