"""Pytest configuration and fixtures"""
import os

# Settings are read at import time; configure before importing the app
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_BASE_URL"] = "http://testserver"

from typing import Any, Dict, Generator, List, Tuple
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from blogapi.api.deps import get_mailer, get_publisher
from blogapi.config import settings
from blogapi.database import Base, SessionLocal, engine, get_db
from blogapi.errors import UpstreamError
from blogapi.main import app
from blogapi.utils.jwt_utils import TokenService


class FakeMailer:
    """Records outgoing mail instead of talking SMTP"""

    is_configured = True

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = False

    def send_mail(self, to: str, subject: str, text: str) -> None:
        if self.fail:
            raise UpstreamError("SMTP unavailable")
        self.sent.append((to, subject, text))

    def last_token(self) -> str:
        text = self.sent[-1][2]
        url = text[text.index("http"):]
        return parse_qs(urlparse(url).query)["token"][0]


class FakePublisher:
    """Records broadcast events instead of calling Pusher"""

    def __init__(self):
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []
        self.fail = False
        self.is_configured = True

    def publish(self, channel: str, event: str, data: Dict[str, Any]) -> None:
        if self.fail:
            raise UpstreamError("Push service replied 500")
        self.events.append((channel, event, data))


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture(scope="function")
def client(db: Session, mailer: FakeMailer, publisher: FakePublisher) -> Generator[TestClient, None, None]:
    """Create test client with database session and collaborator overrides"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_publisher] = lambda: publisher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture
def sample_user_data() -> dict:
    """Sample registration payload"""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "analytical-engine"
    }


@pytest.fixture
def sample_blog_data() -> dict:
    """Sample blog payload"""
    return {
        "title": "First post",
        "snippet": "A short teaser",
        "body": "The full body of the first post."
    }


@pytest.fixture
def verified_user(client: TestClient, mailer: FakeMailer, sample_user_data: dict) -> dict:
    """Register a user and follow the emailed verification link"""
    client.post("/api/auth/register", json=sample_user_data)
    response = client.get("/api/auth/verify-email", params={"token": mailer.last_token()})
    assert response.status_code == 200
    return sample_user_data


@pytest.fixture
def auth_headers(client: TestClient, verified_user: dict) -> dict:
    """Bearer headers for a logged-in, verified user"""
    response = client.post(
        "/api/auth/login",
        json={"email": verified_user["email"], "password": verified_user["password"]},
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}
