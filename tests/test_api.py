from app.models.pending_signup import PendingSignup
from app.models.user import User

PHONE = "9999999999"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_signup_verify_and_sign_in(client, gateway, signup_payload):
    r = client.post("/api/user/signup", json=signup_payload)
    assert r.status_code == 200
    assert r.json()["success"] is True

    code = gateway.last_code(PHONE)
    r = client.post("/api/user/verify-otp", json={"phone": PHONE, "otp": code})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Phone verified. You can now log in."}

    r = client.post("/api/user/signin", json={"email": "a@b.com", "password": "longenough"})
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["phone"] == PHONE
    assert body["user"]["verified"] is True
    assert "password" not in body["user"]
    assert "token" in r.cookies

    r = client.get("/api/user/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert r.status_code == 200
    assert r.json()["email"] == "a@b.com"
    assert "otp" not in r.json()


def test_signup_rejects_invalid_profile(client, gateway, db, signup_payload):
    for field, value in [("phone", "12345"), ("email", "not-an-email"), ("password", "short"), ("gender", "unknown")]:
        r = client.post("/api/user/signup", json={**signup_payload, field: value})
        assert r.status_code == 422, field
    assert gateway.sent == []
    assert db.query(PendingSignup).count() == 0


def test_signup_delivery_failure_is_502_and_keeps_pending(client, gateway, db, signup_payload):
    gateway.fail = True
    r = client.post("/api/user/signup", json=signup_payload)
    assert r.status_code == 502
    assert db.query(PendingSignup).filter(PendingSignup.phone == PHONE).count() == 1


def test_verify_error_statuses(client, gateway, signup_payload):
    r = client.post("/api/user/verify-otp", json={"phone": PHONE, "otp": "123456"})
    assert r.status_code == 404

    client.post("/api/user/signup", json=signup_payload)
    code = gateway.last_code(PHONE)
    wrong = "000000" if code != "000000" else "111111"
    for _ in range(5):
        r = client.post("/api/user/verify-otp", json={"phone": PHONE, "otp": wrong})
        assert r.status_code == 400
        assert r.json()["detail"] == "Invalid OTP."
    r = client.post("/api/user/verify-otp", json={"phone": PHONE, "otp": code})
    assert r.status_code == 429


def test_verify_conflict_is_409(client, gateway, db, signup_payload, verified_user):
    client.post("/api/user/signup", json={**signup_payload, "phone": verified_user.phone})
    code = gateway.last_code(verified_user.phone)
    r = client.post("/api/user/verify-otp", json={"phone": verified_user.phone, "otp": code})
    assert r.status_code == 409
    assert db.query(PendingSignup).count() == 0


def test_send_otp_and_phone_sign_in(client, gateway, verified_user):
    r = client.post("/api/user/send-otp", json={"phone": verified_user.phone})
    assert r.status_code == 200
    code = gateway.last_code(verified_user.phone)

    r = client.post("/api/user/signin", json={"phone": verified_user.phone, "otp": code})
    assert r.status_code == 200
    assert r.json()["user"]["id"] == verified_user.id

    # cookie set by sign-in authenticates /me
    r = client.get("/api/user/me")
    assert r.status_code == 200
    assert r.json()["phone"] == verified_user.phone


def test_send_otp_unknown_and_unverified(client, db, verified_user):
    assert client.post("/api/user/send-otp", json={"phone": "1234567890"}).status_code == 404

    db.query(User).filter(User.id == verified_user.id).update({User.verified: False})
    db.commit()
    assert client.post("/api/user/send-otp", json={"phone": verified_user.phone}).status_code == 400


def test_send_otp_delivery_failure(client, gateway, verified_user):
    gateway.fail = True
    assert client.post("/api/user/send-otp", json={"phone": verified_user.phone}).status_code == 502


def test_signin_requires_a_method(client):
    assert client.post("/api/user/signin", json={"email": "a@b.com"}).status_code == 422


def test_signin_wrong_password(client, verified_user):
    r = client.post("/api/user/signin", json={"email": verified_user.email, "password": "wrong-pass"})
    assert r.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/user/me").status_code == 401
    assert client.get("/api/user/me", headers={"Authorization": "Bearer nope"}).status_code == 401
