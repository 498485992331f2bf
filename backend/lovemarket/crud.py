from __future__ import annotations

from sqlalchemy.orm import Session

from lovemarket.repositories import UserRepository

from .models import Lover, PrivateUser, User


def get_user_by_username(session: Session, username: str) -> User | None:
    return UserRepository(session).get_user_by_username(username)


def upsert_user(
    session: Session,
    *,
    user_id: str,
    username: str,
    name: str,
    balance: float,
) -> User:
    return UserRepository(session).upsert_user(
        user_id=user_id, username=username, name=name, balance=balance
    )


def ensure_private_user(session: Session, user_id: str) -> PrivateUser:
    return UserRepository(session).ensure_private_user(user_id)


def ensure_lover(session: Session, user_id: str) -> Lover:
    return UserRepository(session).ensure_lover(user_id)
