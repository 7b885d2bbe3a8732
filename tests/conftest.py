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

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from agora_stage.core.security import create_access_token
from agora_stage.db.session import Base
from agora_stage.db.session import get_db as app_get_session
from agora_stage.main import app as fastapi_app
from agora_stage.models import Category, CategoryModerator, GroupMembership, Post, Topic, User
from agora_stage.models.topic import TOPIC_KIND_QUESTION
from agora_stage.models.user import ADMINISTRATORS_GROUP, GLOBAL_MODERATORS_GROUP
from agora_stage.services.roles import RoleFacts, resolve_role_facts

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)


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


def _create_user(db: Session, prefix: str, groups: tuple[str, ...] = ()) -> User:
    user = User(username=f"{prefix}_{next(_USERNAME_COUNTER)}", signature=f"{prefix} signature")
    db.add(user)
    db.flush()
    for group in groups:
        db.add(GroupMembership(group_name=group, uid=user.uid))
    db.flush()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """Member of the administrators group."""
    return _create_user(db_session, "admin", (ADMINISTRATORS_GROUP,))


@pytest.fixture()
def global_mod_user(db_session: Session) -> User:
    """Member of the Global Moderators group."""
    return _create_user(db_session, "globalmod", (GLOBAL_MODERATORS_GROUP,))


@pytest.fixture()
def regular_user(db_session: Session) -> User:
    """Plain member with no privileges."""
    return _create_user(db_session, "regular")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Second plain member."""
    return _create_user(db_session, "other")


@pytest.fixture()
def category(db_session: Session) -> Category:
    """Create a default test category."""
    category = Category(name="Test Category", description="Category for tests")
    db_session.add(category)
    db_session.flush()
    db_session.refresh(category)
    return category


@pytest.fixture()
def other_category(db_session: Session) -> Category:
    category = Category(name="Other Category")
    db_session.add(category)
    db_session.flush()
    db_session.refresh(category)
    return category


@pytest.fixture()
def category_mod_user(db_session: Session, category: Category) -> User:
    """Moderator of ``category`` only."""
    user = _create_user(db_session, "catmod")
    db_session.add(CategoryModerator(cid=category.cid, uid=user.uid))
    db_session.flush()
    return user


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a factory producing bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.uid)}"}

    return _headers


@pytest.fixture()
def facts_for(db_session: Session) -> Callable[[User | None], RoleFacts]:
    """Return a factory resolving role facts; None stands for the guest."""

    def _facts(user: User | None) -> RoleFacts:
        return resolve_role_facts(db_session, user.uid if user is not None else 0)

    return _facts


@pytest.fixture()
def make_topic(db_session: Session, category: Category) -> Callable[..., tuple[Topic, Post]]:
    """Return a factory inserting a topic with its main post."""

    def _make(
        owner: User,
        *,
        kind: str = TOPIC_KIND_QUESTION,
        cid: int | None = None,
        title: str = "Test topic",
        content: str = "Main post content",
        mod_only: bool = False,
        anonymous: bool = False,
    ) -> tuple[Topic, Post]:
        topic_cid = cid if cid is not None else category.cid
        topic = Topic(
            cid=topic_cid,
            owner_uid=owner.uid,
            title=title,
            slug="pending",
            kind=kind,
            solved=0,
            post_count=1,
        )
        db_session.add(topic)
        db_session.flush()
        topic.slug = f"{topic.tid}/test-topic"
        post = Post(
            tid=topic.tid,
            cid=topic_cid,
            author_uid=owner.uid,
            content=content,
            anonymous=anonymous,
            mod_only=mod_only,
        )
        db_session.add(post)
        db_session.flush()
        topic.main_pid = post.pid
        db_session.flush()
        db_session.refresh(topic)
        db_session.refresh(post)
        return topic, post

    return _make


@pytest.fixture()
def make_reply(db_session: Session) -> Callable[..., Post]:
    """Return a factory inserting a reply into an existing topic."""

    def _make(
        topic: Topic,
        author: User,
        *,
        content: str = "Reply content",
        mod_only: bool = False,
        anonymous: bool = False,
    ) -> Post:
        post = Post(
            tid=topic.tid,
            cid=topic.cid,
            author_uid=author.uid,
            content=content,
            anonymous=anonymous,
            mod_only=mod_only,
        )
        db_session.add(post)
        topic.post_count += 1
        db_session.flush()
        db_session.refresh(post)
        return post

    return _make
