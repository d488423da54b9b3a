"""Bearer token issue and validation"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from mtbm_api.config.settings import Settings
from mtbm_api.domain.errors import AuthenticationError
from mtbm_api.domain.models import User
from mtbm_api.utils.jwt import TokenService


@pytest.fixture
def token_service():
    return TokenService(Settings(mongodb_uri="mongodb://localhost", jwt_secret="unit-secret"))


@pytest.fixture
def user():
    now = datetime(2026, 10, 1)
    return User(
        id="USR-1",
        email="eve@mtbm.test",
        role="engineer",
        full_name="Eve Engineer",
        organization="Herrenknecht",
        password_hash="x",
        created_at=now,
        updated_at=now,
    )


def test_round_trip_claims(token_service, user):
    claims = token_service.decode(token_service.issue(user))
    assert claims["sub"] == "USR-1"
    assert claims["role"] == "engineer"
    assert claims["email"] == "eve@mtbm.test"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_accepts_bearer_prefix(token_service, user):
    token = token_service.issue(user)
    assert token_service.decode(f"Bearer {token}")["sub"] == "USR-1"


def test_rejects_expired_token(token_service):
    past = datetime.now(timezone.utc) - timedelta(days=1)
    token = jwt.encode({"sub": "USR-1", "exp": past}, "unit-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError) as exc_info:
        token_service.decode(token)
    assert exc_info.value.message == "Token has expired"


def test_rejects_wrong_signature(token_service, user):
    other = TokenService(Settings(mongodb_uri="mongodb://localhost", jwt_secret="another-secret"))
    with pytest.raises(AuthenticationError) as exc_info:
        token_service.decode(other.issue(user))
    assert exc_info.value.message == "Invalid token"


def test_rejects_token_without_subject(token_service):
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"exp": future}, "unit-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        token_service.decode(token)


def test_rejects_garbage(token_service):
    with pytest.raises(AuthenticationError):
        token_service.decode("not-a-token")
