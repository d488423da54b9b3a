"""
Pytest Configuration and Fixtures

This file contains shared fixtures and configuration for all tests.
The application runs against an in-memory mongomock database and a mail
service that records what it would have sent.
"""

from typing import Any, Callable, Dict, List, Tuple

import mongomock
import pytest
from fastapi.testclient import TestClient

from mtbm_api.api.deps import get_mail_service
from mtbm_api.config.settings import Settings
from mtbm_api.domain.errors import EmailSendError
from mtbm_api.main import create_app
from mtbm_api.services.mail_service import MailService
from scripts.create_admin import create_admin


class RecordingMailService(MailService):
    """Renders templates for real but keeps messages instead of sending them"""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent: List[Dict[str, Any]] = []
        self.fail = False

    @property
    def enabled(self) -> bool:
        return True

    def send_template(self, template_key, recipients, payload):
        self.sent.append({
            "template": template_key,
            "recipients": list(recipients),
            "payload": dict(payload),
        })
        return super().send_template(template_key, recipients, payload)

    def send_email(self, recipients, subject, body):
        if self.fail:
            raise EmailSendError("Graph rejected the message")
        self.sent[-1]["subject"] = subject
        return True

    def last_code(self, email: str) -> str:
        for item in reversed(self.sent):
            if email in item["recipients"]:
                return item["payload"]["code"]
        raise AssertionError(f"No code was sent to {email}")


# =============================================================================
# Application
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        mongodb_uri="mongodb://localhost:27017",
        jwt_secret="test-secret",
        uploads_path=str(tmp_path / "uploads"),
        logs_path=str(tmp_path / "logs"),
        service_mailbox_email="ops@mtbm.test",
        log_level="WARNING",
        debug=False,
    )


@pytest.fixture
def db():
    return mongomock.MongoClient()["mtbm_test"]


@pytest.fixture
def mail(settings) -> RecordingMailService:
    return RecordingMailService(settings)


@pytest.fixture
def app(settings, db, mail):
    application = create_app(settings=settings, database=db)
    application.dependency_overrides[get_mail_service] = lambda: mail
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Accounts
# =============================================================================

def _bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth() -> Callable[[str], Dict[str, str]]:
    return _bearer


@pytest.fixture
def register(client) -> Callable[..., Tuple[str, Dict[str, Any]]]:
    """Sign up through the API and return (token, user)"""
    counter = {"n": 0}

    def _register(role: str, email: str = None, password: str = "secret123", **fields):
        counter["n"] += 1
        body = {
            "email": email or f"{role}{counter['n']}@mtbm.test",
            "password": password,
            "role": role,
            "fullName": fields.get("full_name", f"{role.title()} {counter['n']}"),
            "organization": fields.get("organization", "Herrenknecht"),
        }
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return data["token"], data["user"]

    return _register


@pytest.fixture
def engineer(register):
    return register("engineer")


@pytest.fixture
def technician(register):
    return register("technician")


@pytest.fixture
def admin(client, db):
    """Admins are provisioned by the create_admin script, then log in"""
    create_admin(db, "admin@mtbm.test", "admin-pass", "Site Admin", "MTBM")
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@mtbm.test", "password": "admin-pass", "role": "admin"},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    return data["token"], data["user"]
