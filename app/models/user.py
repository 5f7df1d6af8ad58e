"""Verified user accounts."""
from sqlalchemy import Column, Integer, String, Enum as SQLEnum, DateTime, Boolean
from sqlalchemy.sql import func
from app.database import Base
import enum


class Gender(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"
    prefer_not_to_say = "prefer-not-to-say"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    # Unique indexes are the last line of defence against two verifications racing for one phone/email
    phone = Column(String(15), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    state = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    gender = Column(SQLEnum(Gender, values_callable=lambda e: [m.value for m in e]), nullable=True)

    verified = Column(Boolean, default=False, nullable=False)

    # Login OTP (send-otp / signin); overwritten on every request
    otp = Column(String(10), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    otp_attempts = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
