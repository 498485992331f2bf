from __future__ import annotations

import os
import sys
from pathlib import Path
from uuid import uuid4

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PUSH_ENABLED", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lovemarket import models  # noqa: F401
from lovemarket.core.config import MatchConfig, Settings
from lovemarket.db import Base, enable_sqlite_savepoints
from lovemarket.models import Lover, PrivateUser, User

SYSTEM_USER_ID = "love-system"


class Seeder:
    """Create committed users, love profiles and private users for a test."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def user(
        self,
        user_id: str,
        *,
        username: str | None = None,
        balance: float = 1000,
        lover: bool = True,
        private: bool = True,
        blocked: tuple[str, ...] = (),
        preferences: dict[str, list[str]] | None = None,
        opt_out_all: tuple[str, ...] = (),
        push_token: str | None = None,
    ) -> User:
        username = username or user_id
        user = User(
            id=user_id,
            username=username,
            name=username.capitalize(),
            avatar_url=f"https://example.com/{username}.png",
            balance=balance,
        )
        self.session.add(user)
        if lover:
            self.session.add(Lover(id=uuid4().hex, user_id=user_id))
        if private:
            self.session.add(
                PrivateUser(
                    id=user_id,
                    blocked_user_ids=list(blocked),
                    notification_preferences=preferences or {},
                    opt_out_all=list(opt_out_all),
                    push_token=push_token,
                )
            )
        self.session.commit()
        return user

    def system_account(self, user_id: str = SYSTEM_USER_ID) -> User:
        return self.user(user_id, username="ManifoldLove", balance=1_000_000, lover=False)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=True, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db_session) -> Seeder:
    return Seeder(db_session)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        love_user_id_dev=SYSTEM_USER_ID,
        push_enabled=False,
    )


@pytest.fixture
def match_config(test_settings) -> MatchConfig:
    return test_settings.match_config()
