"""Signup, login, profile and password reset over HTTP"""
from mtbm_api.templates import EmailTemplateKey


def test_signup_returns_token_and_safe_user(client):
    response = client.post("/api/auth/signup", json={
        "email": "  Eve@MTBM.test ",
        "password": "secret123",
        "role": "engineer",
        "fullName": "Eve Engineer",
        "organization": "Herrenknecht",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["token"]
    user = data["user"]
    assert user["email"] == "eve@mtbm.test"
    assert user["role"] == "engineer"
    assert user["fullName"] == "Eve Engineer"
    assert user["_id"].startswith("USR-")
    assert "passwordHash" not in user
    assert "resetToken" not in user


def test_same_email_may_hold_one_account_per_role(client, register):
    register("engineer", email="dual@mtbm.test")
    register("technician", email="dual@mtbm.test")

    response = client.post("/api/auth/signup", json={
        "email": "dual@mtbm.test",
        "password": "secret123",
        "role": "engineer",
        "fullName": "Dual",
        "organization": "Org",
    })
    assert response.status_code == 409
    assert response.json()["message"] == "An account with this email already exists"


def test_signup_validation_messages(client):
    base = {
        "email": "new@mtbm.test",
        "password": "secret123",
        "role": "technician",
        "fullName": "New Person",
        "organization": "Org",
    }
    cases = [
        ({"role": "admin"}, "Invalid role"),
        ({"fullName": "   "}, "Full name is required"),
        ({"organization": ""}, "Organization is required"),
        ({"email": "not-an-email"}, "Invalid email address"),
        ({"password": "123"}, None),
    ]
    for override, message in cases:
        response = client.post("/api/auth/signup", json={**base, **override})
        assert response.status_code == 400, override
        if message:
            assert response.json()["message"] == message


def test_login(client, register):
    register("technician", email="tom@mtbm.test", password="wrench42")

    response = client.post("/api/auth/login", json={
        "email": "TOM@mtbm.test", "password": "wrench42", "role": "technician"
    })
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "tom@mtbm.test"


def test_login_failures_are_indistinguishable(client, register):
    register("technician", email="tom@mtbm.test", password="wrench42")

    for body in [
        {"email": "tom@mtbm.test", "password": "wrong", "role": "technician"},
        {"email": "tom@mtbm.test", "password": "wrench42", "role": "engineer"},
        {"email": "nobody@mtbm.test", "password": "wrench42", "role": "technician"},
    ]:
        response = client.post("/api/auth/login", json=body)
        assert response.status_code == 401
        assert response.json()["message"] == "Wrong email or password"
        assert response.headers["WWW-Authenticate"] == "Bearer"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_me_and_profile(client, engineer, auth):
    token, user = engineer

    for path in ["/api/auth/me", "/api/auth/profile"]:
        response = client.get(path, headers=auth(token))
        assert response.status_code == 200
        assert response.json()["user"]["_id"] == user["_id"]

    response = client.patch(
        "/api/auth/profile",
        headers=auth(token),
        json={"fullName": "Eve Renamed", "photoUrl": "/uploads/avatars/eve.png"},
    )
    assert response.status_code == 200
    updated = response.json()["user"]
    assert updated["fullName"] == "Eve Renamed"
    assert updated["photoUrl"] == "/uploads/avatars/eve.png"
    assert updated["organization"] == user["organization"]


def test_password_reset_flow(client, register, mail):
    register("engineer", email="reset@mtbm.test", password="old-pass")
    register("technician", email="reset@mtbm.test", password="old-pass")

    response = client.post("/api/auth/forgot-password", json={"email": "reset@mtbm.test"})
    assert response.status_code == 200
    assert response.json()["message"] == "If email exists, reset link will be sent"
    assert mail.sent[-1]["template"] == EmailTemplateKey.PASSWORD_RESET_CODE
    code = mail.last_code("reset@mtbm.test")
    assert len(code) == 6 and code.isdigit()

    wrong = "000000" if code != "000000" else "111111"
    response = client.post("/api/auth/verify-reset-otp", json={"email": "reset@mtbm.test", "otp": wrong})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired reset code"

    response = client.post("/api/auth/verify-reset-otp", json={"email": "reset@mtbm.test", "otp": code})
    assert response.json() == {"verified": True}

    response = client.post("/api/auth/reset-password", json={
        "email": "reset@mtbm.test", "token": code, "newPassword": "new-pass"
    })
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset successful"

    for role in ["engineer", "technician"]:
        ok = client.post("/api/auth/login", json={"email": "reset@mtbm.test", "password": "new-pass", "role": role})
        assert ok.status_code == 200
        old = client.post("/api/auth/login", json={"email": "reset@mtbm.test", "password": "old-pass", "role": role})
        assert old.status_code == 401

    # Codes are single use
    response = client.post("/api/auth/reset-password", json={
        "email": "reset@mtbm.test", "otp": code, "newPassword": "another-pass"
    })
    assert response.status_code == 400


def test_forgot_password_for_unknown_email_sends_nothing(client, mail):
    response = client.post("/api/auth/forgot-password", json={"email": "ghost@mtbm.test"})
    assert response.status_code == 200
    assert response.json()["message"] == "If email exists, reset link will be sent"
    assert mail.sent == []


def test_forgot_password_survives_mail_failure(client, register, mail):
    register("engineer", email="flaky@mtbm.test")
    mail.fail = True

    response = client.post("/api/auth/forgot-password", json={"email": "flaky@mtbm.test"})
    assert response.status_code == 200
