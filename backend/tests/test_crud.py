from __future__ import annotations

from unittest.mock import MagicMock, patch

from lovemarket import crud
from lovemarket.models import Lover, PrivateUser


@patch("lovemarket.crud.UserRepository")
def test_upsert_user(mock_user_repo):
    """Verify that upsert_user delegates to the user repository."""
    mock_session = MagicMock()

    crud.upsert_user(mock_session, user_id="u1", username="alice", name="Alice", balance=10)

    mock_user_repo.assert_called_once_with(mock_session)
    mock_user_repo.return_value.upsert_user.assert_called_once_with(
        user_id="u1", username="alice", name="Alice", balance=10
    )


@patch("lovemarket.crud.UserRepository")
def test_get_user_by_username(mock_user_repo):
    """Verify that get_user_by_username calls the repository method correctly."""
    mock_session = MagicMock()

    crud.get_user_by_username(mock_session, "alice")

    mock_user_repo.return_value.get_user_by_username.assert_called_once_with("alice")


def test_upsert_user_updates_existing_row(db_session):
    """Verify that a second upsert refreshes the stored user instead of duplicating it."""
    crud.upsert_user(db_session, user_id="u1", username="alice", name="Alice", balance=10)
    user = crud.upsert_user(db_session, user_id="u1", username="alice", name="Al", balance=25)
    db_session.commit()

    assert user.name == "Al"
    assert user.balance == 25
    assert crud.get_user_by_username(db_session, "alice") is user
    assert crud.get_user_by_username(db_session, "nobody") is None


def test_ensure_helpers_are_idempotent(db_session):
    """Verify that private users and love profiles are created once per user."""
    crud.upsert_user(db_session, user_id="u1", username="alice", name="Alice", balance=10)

    private_user = crud.ensure_private_user(db_session, "u1")
    lover = crud.ensure_lover(db_session, "u1")
    db_session.commit()

    assert crud.ensure_private_user(db_session, "u1") is private_user
    assert crud.ensure_lover(db_session, "u1") is lover
    assert private_user.blocked_user_ids == []
    assert db_session.query(PrivateUser).count() == 1
    assert db_session.query(Lover).count() == 1
