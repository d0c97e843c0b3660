import os

# Tests never talk to a real Redis; the rate limiter fails open without one.
os.environ.setdefault("REDIS_URL", "")

import pytest  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.session import get_db, get_session_factory  # noqa: E402
from app.domain.identity import CurrentUser  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, User  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402


@pytest.fixture()
def engine(tmp_path):
    # Override at runtime: TEST_DATABASE_URL=postgresql+psycopg://... pytest
    url = os.getenv("TEST_DATABASE_URL")
    if url:
        eng = create_engine(url, pool_pre_ping=True)
    else:
        # A file-backed SQLite DB so batch saves can use one connection per thread.
        eng = create_engine(
            f"sqlite+pysqlite:///{tmp_path / 'booktrack-test.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, user_id: str, email: str) -> CurrentUser:
    db.add(User(id=user_id, email=email))
    db.commit()
    return CurrentUser(id=user_id, display_name=email)


@pytest.fixture()
def user(db_session) -> CurrentUser:
    return _make_user(db_session, "user_reader", "reader@example.com")


@pytest.fixture()
def other_user(db_session) -> CurrentUser:
    return _make_user(db_session, "user_other", "other@example.com")


@pytest.fixture()
def auth_headers(user):
    token = create_access_token(user.id, extra_claims={"email": user.display_name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def client(session_factory, db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class FakeOcr:
    name = "fake_ocr"

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = 0

    async def detect_text(self, image_bytes):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


class FakeLlm:
    name = "fake_llm"

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.prompts = []

    async def complete(self, prompt, *, system=None, response_format="json"):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeCovers:
    """Covers keyed by title; a title mapped to an exception raises it."""

    name = "fake_covers"

    def __init__(self, covers=None):
        self.covers = covers or {}
        self.calls = []

    async def find_cover(self, *, title, author):
        self.calls.append((title, author))
        result = self.covers.get(title)
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture()
def fake_ocr():
    return FakeOcr


@pytest.fixture()
def fake_llm():
    return FakeLlm


@pytest.fixture()
def fake_covers():
    return FakeCovers


@pytest.fixture()
def missing_cover_fixture(monkeypatch, tmp_path):
    """Configure the fixture cover provider with a file that does not exist."""
    from app.core.config import settings
    from app.services.covers.factory import get_cover_provider

    monkeypatch.setattr(settings, "cover_provider", "fixture")
    monkeypatch.setattr(settings, "fixture_covers_path", str(tmp_path / "missing.json"))
    get_cover_provider.cache_clear()
    yield
    get_cover_provider.cache_clear()
