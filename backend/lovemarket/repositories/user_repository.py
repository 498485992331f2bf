"""User, private user and love profile records."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from lovemarket.models import Lover, PrivateUser, User


class UserRepository:
    """Access to user identity records, love profiles and private settings."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_user(self, user_id: str) -> User | None:
        return self._session.get(User, user_id)

    def get_users(self, user_ids: Iterable[str]) -> dict[str, User]:
        """Resolve several users with a single query, keyed by id."""

        ids = sorted(set(user_ids))
        if not ids:
            return {}
        query = select(User).where(User.id.in_(ids))
        return {user.id: user for user in self._session.execute(query).scalars()}

    def get_private_user(self, user_id: str) -> PrivateUser | None:
        return self._session.get(PrivateUser, user_id)

    def get_private_users(self, user_ids: Iterable[str]) -> dict[str, PrivateUser]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        query = select(PrivateUser).where(PrivateUser.id.in_(ids))
        return {record.id: record for record in self._session.execute(query).scalars()}

    def get_lovers_by_user_id(self, user_ids: Iterable[str]) -> dict[str, Lover]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        query = select(Lover).where(Lover.user_id.in_(ids))
        return {lover.user_id: lover for lover in self._session.execute(query).scalars()}

    def get_user_for_update(self, user_id: str) -> User | None:
        query = select(User).where(User.id == user_id).with_for_update()
        return self._session.execute(query).scalar_one_or_none()

    def get_user_by_username(self, username: str) -> User | None:
        query = select(User).where(User.username == username)
        return self._session.execute(query).scalar_one_or_none()

    def upsert_user(self, *, user_id: str, username: str, name: str, balance: float) -> User:
        user = self._session.get(User, user_id)
        if user is None:
            user = User(id=user_id, username=username, name=name, balance=balance)
            self._session.add(user)
        else:
            user.username = username
            user.name = name
            user.balance = balance
        self._session.flush()
        return user

    def ensure_private_user(self, user_id: str) -> PrivateUser:
        private_user = self._session.get(PrivateUser, user_id)
        if private_user is None:
            private_user = PrivateUser(id=user_id, blocked_user_ids=[], notification_preferences={})
            self._session.add(private_user)
            self._session.flush()
        return private_user

    def ensure_lover(self, user_id: str) -> Lover:
        lover = self.get_lovers_by_user_id([user_id]).get(user_id)
        if lover is None:
            lover = Lover(id=uuid4().hex, user_id=user_id)
            self._session.add(lover)
            self._session.flush()
        return lover


__all__ = ["UserRepository"]
