# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("JWT_SECRET", "test-user-secret-0123456789")
os.environ.setdefault("ADMIN_JWT_SECRET", "test-admin-secret-9876543210")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ABUSE_SWEEP_ENABLED", "false")

from byteverse.core.security import hash_password
from byteverse.db.session import Base
from byteverse.db.session import get_db as app_get_session
from byteverse.main import app as fastapi_app
from byteverse.models import Admin, Role, User
from byteverse.services.tokens import create_access_token, create_admin_token

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "password123"

_USER_COUNTER = count(1)
# Hashing is deliberately slow; hash the shared test password once.
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def reset_abuse_monitor(app: FastAPI) -> Iterator[None]:
    """Give every test a clean abuse monitor; the test client is not loopback."""
    monitor = app.state.abuse_monitor
    monitor.reset()
    try:
        yield
    finally:
        app.state.abuse_monitor = monitor
        monitor.reset()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory persisting community members."""

    def _make_user(
        *,
        name: str = "Test User",
        role: Role = Role.USER,
        email: str | None = None,
        username: str | None = None,
        is_email_public: bool = False,
    ) -> User:
        n = next(_USER_COUNTER)
        user = User(
            name=name,
            email=email or f"member{n}@byteverse.tech",
            username=username or f"member{n}",
            password_hash=_TEST_PASSWORD_HASH,
            role=role,
            is_email_public=is_email_public,
        )
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted member with the ``user`` role."""
    return make_user(name="Test User")


@pytest.fixture()
def staff_user(make_user: Callable[..., User]) -> User:
    """Member account that holds the ``admin`` role."""
    return make_user(name="Staff User", role=Role.ADMIN)


@pytest.fixture()
def test_admin(db_session: Session) -> Admin:
    """Create and return a persisted platform administrator."""
    admin = Admin(
        username="root",
        email="root@byteverse.tech",
        name="Root Admin",
        password_hash=_TEST_PASSWORD_HASH,
    )
    db_session.add(admin)
    db_session.flush()
    db_session.refresh(admin)
    return admin


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture()
def staff_token(staff_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(staff_user.id)}"}


@pytest.fixture()
def admin_token(test_admin: Admin) -> dict[str, str]:
    """Return authorization headers carrying an admin-domain token."""
    return {"Authorization": f"Bearer {create_admin_token(test_admin.id)}"}


@pytest.fixture()
def test_password() -> str:
    """Plain-text password shared by every fixture account."""
    return TEST_PASSWORD
