from app.schemas.auth import (
    SignupRequest,
    VerifyOtpRequest,
    SendOtpRequest,
    SigninRequest,
    StatusResponse,
    Token,
    UserResponse,
)
