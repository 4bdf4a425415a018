"""Shared fixtures.

Environment is pinned before ``app`` is imported because ``Settings`` reads
it once at import time.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

os.environ.setdefault("HR_DATA_DIR", tempfile.mkdtemp(prefix="hr-tests-"))
os.environ.setdefault("HR_BCRYPT_ROUNDS", "4")
os.environ.setdefault("HR_AUTH_SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.security import PasswordHasher, TokenService  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.auth import RegisterRequest  # noqa: E402
from app.services.audit_service import EventLogger  # noqa: E402
from app.services.container import build_container  # noqa: E402


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingSink:
    def __init__(self) -> None:
        self.messages: list[dict[str, str]] = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.messages.append({"to": to, "subject": subject, "body": body})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def event_logger(tmp_path, clock) -> EventLogger:
    return EventLogger(tmp_path / "events.jsonl", clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service(clock) -> TokenService:
    return TokenService(secret_key="unit-secret", algorithm="HS256", ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def container(clock, sink, event_logger, hasher):
    return build_container(event_logger=event_logger, hasher=hasher, notifier=sink, clock=clock)


@pytest.fixture
def auth_service(container):
    return container.auth_service


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def register(auth_service):
    """Register an account through the service and return the ``AuthResult``."""

    def _register(identifier: str = "alice", password: str = "secret1", **extra):
        return auth_service.register(RegisterRequest(identifier=identifier, password=password, **extra))

    return _register


@pytest.fixture
def bearer(client):
    """Register over HTTP and return ready-to-use Authorization headers."""

    def _bearer(identifier: str, password: str = "secret1", **extra) -> dict[str, str]:
        response = client.post("/auth/register", json={"identifier": identifier, "password": password, **extra})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _bearer
