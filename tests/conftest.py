# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from kemotown.api.v1.dependencies import create_access_token  # noqa: E402
from kemotown.db.session import Base  # noqa: E402
from kemotown.db.session import get_db as app_get_session  # noqa: E402
from kemotown.main import app as fastapi_app  # noqa: E402
from kemotown.models import (  # noqa: E402
    Context,
    ContextType,
    ContextVisibility,
    Follow,
    FollowStatus,
    MemberRole,
    Membership,
    MembershipStatus,
    User,
)

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
_CONTEXT_COUNTER = count(1)


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


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory creating persisted users."""

    def _make(username: str | None = None, display_name: str | None = None) -> User:
        username = username or f"user{next(_USER_COUNTER)}"
        user = User(username=username, display_name=display_name or username.title())
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol")


@pytest.fixture()
def make_context(db_session: Session) -> Callable[..., Context]:
    """Return a factory creating persisted contexts."""

    def _make(
        *,
        type: str = ContextType.GROUP,
        visibility: str = ContextVisibility.PRIVATE,
        features: list[str] | None = None,
        slug: str | None = None,
    ) -> Context:
        number = next(_CONTEXT_COUNTER)
        context = Context(
            type=type,
            slug=slug or f"context-{number}",
            name=f"Context {number}",
            visibility=visibility,
            features=list(features or []),
            plugins={},
        )
        db_session.add(context)
        db_session.flush()
        return context

    return _make


@pytest.fixture()
def join(db_session: Session) -> Callable[..., Membership]:
    """Return a factory adding a user to a context."""

    def _join(
        context: Context,
        user: User,
        *,
        role: str = MemberRole.MEMBER,
        status: str = MembershipStatus.APPROVED,
        plugin_data: dict[str, Any] | None = None,
    ) -> Membership:
        membership = Membership(
            context_id=context.id,
            user_id=user.id,
            role=role,
            status=status,
            plugin_data=plugin_data or {},
        )
        db_session.add(membership)
        db_session.flush()
        return membership

    return _join


@pytest.fixture()
def follow(db_session: Session) -> Callable[..., Follow]:
    """Return a factory creating follow edges (accepted by default)."""

    def _follow(follower: User, following: User, status: str = FollowStatus.ACCEPTED) -> Follow:
        edge = Follow(follower_id=follower.id, following_id=following.id, status=status)
        db_session.add(edge)
        db_session.flush()
        return edge

    return _follow


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
