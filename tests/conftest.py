"""
Test fixtures for portfolio-api tests.

Provides an in-memory database, an API client wired to it, and sample
contacts and posts.
"""

import pytest
from typing import Any, Dict, Generator, List
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from portfolio_api.core.config import settings
from portfolio_api.models.contact import Contact
from portfolio_api.models.post import Post
from portfolio_api.services.contact_store import ContactStore
from portfolio_api.services.post_store import PostStore


# Use in-memory SQLite for unit tests (fast, isolated)
TEST_DATABASE_URL = "sqlite:///:memory:"

ADMIN_PASSWORD = "correct-horse-battery"

LONG_CONTENT = (
    "<p>FastAPI makes it pleasant to build small JSON APIs. "
    "This post covers routing, validation and persistence.</p>"
)


@pytest.fixture(autouse=True)
def clear_rate_limiters():
    """Clear rate limiters before each test to prevent 429 errors."""
    from portfolio_api.core.rate_limit import rate_limiter

    rate_limiter.clear()
    yield
    rate_limiter.clear()


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Generator[Session, None, None]:
    """Provide a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(scope="function")
def client(test_engine):
    """Create test client with test database."""
    from portfolio_api.db import get_session
    from portfolio_api.main import app

    # Override the get_session dependency
    def override_get_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    client = TestClient(app, raise_server_exceptions=False)
    yield client

    # Clean up
    app.dependency_overrides.clear()


@pytest.fixture
def admin_password(monkeypatch) -> str:
    """Enable admin endpoints with a known secret."""
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    return ADMIN_PASSWORD


@pytest.fixture
def admin_headers(admin_password: str) -> Dict[str, str]:
    return {"X-Admin-Password": admin_password}


@pytest.fixture
def contact_store(test_session: Session) -> ContactStore:
    return ContactStore(test_session)


@pytest.fixture
def post_store(test_session: Session) -> PostStore:
    return PostStore(test_session)


def contact_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "subject": "Hello",
        "message": "I enjoyed reading your blog posts.",
    }
    payload.update(overrides)
    return payload


def post_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "title": "Getting Started with FastAPI",
        "content": LONG_CONTENT,
        "category": "Programming",
        "tags": ["python", "fastapi"],
        "status": "published",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def sample_contacts(contact_store: ContactStore) -> List[Contact]:
    """Three submissions from two senders."""
    return [
        contact_store.create(contact_payload(name="Ada Lovelace", email="ada@example.com"), ip_address="10.0.0.1"),
        contact_store.create(contact_payload(name="Alan Turing", email="alan@example.com"), ip_address="10.0.0.2"),
        contact_store.create(contact_payload(name="Ada Again", email="ADA@example.com"), ip_address="10.0.0.1"),
    ]


@pytest.fixture
def sample_posts(post_store: PostStore) -> List[Post]:
    """Two published posts, one draft and one archived post."""
    return [
        post_store.create(post_payload(
            title="Getting Started with FastAPI",
            category="Programming",
            tags=["python", "fastapi"],
            featured=True,
        )),
        post_store.create(post_payload(
            title="Career Notes From Year One",
            content="<p>Lessons learned during the first year of professional software work.</p>",
            category="Career",
            tags=["career", "python"],
        )),
        post_store.create(post_payload(title="Unfinished Draft Post", status="draft", tags=["draft"])),
        post_store.create(post_payload(title="Old Archived Post", status="archived", tags=["old"])),
    ]


@pytest.fixture
def contact_data():
    """Builder for valid contact payloads: contact_data(email="x@y.com")."""
    return contact_payload


@pytest.fixture
def post_data():
    """Builder for valid post payloads: post_data(status="draft")."""
    return post_payload
