"""Account schemas: signup, phone verification, sign-in."""
from pydantic import BaseModel, EmailStr, Field, model_validator
from app.models.user import Gender

PHONE_PATTERN = r"^\d{10,15}$"
OTP_LENGTH = 6


class SignupRequest(BaseModel):
    full_name: str = Field(min_length=2)
    phone: str = Field(pattern=PHONE_PATTERN)
    email: EmailStr
    password: str = Field(min_length=8)
    state: str = Field(min_length=2)
    city: str = Field(min_length=2)
    gender: Gender

    def profile(self) -> dict:
        """Candidate profile kept on the pending signup (everything except the password)."""
        return self.model_dump(mode="json", exclude={"password"})


class VerifyOtpRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)
    otp: str = Field(min_length=OTP_LENGTH, max_length=OTP_LENGTH)


class SendOtpRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)


class SigninRequest(BaseModel):
    """Either email + password, or phone + login OTP."""
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    otp: str | None = Field(default=None, min_length=OTP_LENGTH, max_length=OTP_LENGTH)

    @model_validator(mode="after")
    def one_login_method(self):
        if not (self.email and self.password) and not (self.phone and self.otp):
            raise ValueError("Provide email and password, or phone and otp")
        return self

    @property
    def uses_password(self) -> bool:
        return bool(self.email and self.password)


class StatusResponse(BaseModel):
    success: bool = True
    message: str


class UserResponse(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str
    state: str | None = None
    city: str | None = None
    gender: Gender | None = None
    verified: bool = False

    class Config:
        from_attributes = True


class Token(BaseModel):
    success: bool = True
    message: str = "Login successful."
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
