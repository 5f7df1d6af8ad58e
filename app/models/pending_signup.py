"""Pending signup data: user is created only after phone verification."""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func

from app.database import Base


class PendingSignup(Base):
    __tablename__ = "pending_signups"

    id = Column(Integer, primary_key=True, index=True)
    # One pending signup per phone; signup requests upsert on this column
    phone = Column(String(15), unique=True, index=True, nullable=False)

    code = Column(String(10), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)

    # {full_name, phone, email, state, city, gender}; password is never stored here in plaintext
    profile = Column(JSON, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
