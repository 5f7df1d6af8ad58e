"""Shared fixtures: in-memory SQLite database, recording SMS gateway, API client."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["PENDING_CLEANUP_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.dependencies import get_otp_config, get_sms_gateway
from app.exceptions import DeliveryError
from app.main import app
from app.models.user import Gender, User
from app.schemas.auth import SignupRequest
from app.services.auth import get_password_hash
from app.services.sms import OtpConfig, SmsGateway


class RecordingGateway(SmsGateway):
    """Keeps every code instead of calling the provider; `fail` simulates a provider error."""

    def __init__(self, config: OtpConfig):
        super().__init__(config)
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send_code(self, phone: str, code: str) -> None:
        self.sent.append((phone, code))
        if self.fail:
            raise DeliveryError()

    def last_code(self, phone: str) -> str:
        return [code for to, code in self.sent if to == phone][-1]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def otp_config() -> OtpConfig:
    return OtpConfig(api_key="test-key", template_id="tpl-1", expiry_minutes=15, attempt_limit=5)


@pytest.fixture
def gateway(otp_config) -> RecordingGateway:
    return RecordingGateway(otp_config)


@pytest.fixture
def client(engine, gateway, otp_config):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sms_gateway] = lambda: gateway
    app.dependency_overrides[get_otp_config] = lambda: otp_config
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def signup_payload() -> dict:
    return {
        "full_name": "Asha Verma",
        "phone": "9999999999",
        "email": "a@b.com",
        "password": "longenough",
        "state": "Delhi",
        "city": "New Delhi",
        "gender": "female",
    }


@pytest.fixture
def signup_request(signup_payload) -> SignupRequest:
    return SignupRequest(**signup_payload)


@pytest.fixture
def verified_user(db) -> User:
    user = User(
        full_name="Ravi Kumar",
        phone="9876543210",
        email="ravi@example.com",
        hashed_password=get_password_hash("secret-pass"),
        state="Maharashtra",
        city="Pune",
        gender=Gender.male,
        verified=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
