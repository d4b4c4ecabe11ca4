# ruff: noqa: E402
import os
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

# Set testing environment flags before importing the app or settings
_TEST_DB = Path(__file__).resolve().parent / "test.db"
os.environ["APP_ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", f"sqlite:///{_TEST_DB}")
os.environ.setdefault("SECRET_KEY", "dear-diary-test-secret")

from dear_diary.core.config import settings
from dear_diary.core.database import Base, build_engine, get_db
from dear_diary.main import app
from dear_diary.models import registry  # noqa: F401 - populate Base.metadata
from dear_diary.modules.users import UserRole
from tests.helpers import auth_headers, create_user
from tests.testclient import TestClient

test_db_url = settings.get_database_url(use_test=True)

# Safety: never run tests against a non-test Postgres database.
_parsed = make_url(test_db_url)
if _parsed.drivername.startswith("postgresql") and not (
    _parsed.database or ""
).endswith("_test"):
    raise RuntimeError(
        f"Refusing to run tests against non-test database '{_parsed.database}'."
    )

engine = build_engine(test_db_url)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)


def _truncate_all() -> None:
    with engine.begin() as connection:
        if engine.dialect.name == "sqlite":
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())
        else:
            table_names = ", ".join(f'"{tbl.name}"' for tbl in Base.metadata.sorted_tables)
            connection.execute(text(f"TRUNCATE {table_names} RESTART IDENTITY CASCADE"))


@pytest.fixture(scope="function")
def session():
    """Fresh tables and a new session for every test."""
    _truncate_all()
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(session):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_user(session):
    return create_user(session, "alice")


@pytest.fixture(scope="function")
def test_user2(session):
    return create_user(session, "bob")


@pytest.fixture(scope="function")
def admin_user(session):
    return create_user(session, "moddy", role=UserRole.ADMIN)


@pytest.fixture(scope="function")
def user_headers(test_user):
    return auth_headers(test_user)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture(scope="function")
def session_factory(session):
    """Independent sessions on the same test database (for concurrent writers)."""
    return TestingSessionLocal
