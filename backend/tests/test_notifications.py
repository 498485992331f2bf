from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from lovemarket.repositories import NotificationRepository
from lovemarket.services.market_creation import CreateMarketOptions, MarketCreationService
from lovemarket.services.notifications import (
    NEW_MATCH_PUSH_TITLE,
    NotificationService,
    build_new_match_notification,
)
from lovemarket.services.push import PushDeliveryError


@pytest.fixture
def contract(db_session, seed, test_settings):
    creator = seed.system_account()
    return MarketCreationService(db_session, test_settings).create_market(
        CreateMarketOptions(
            question="Will @alice and @bob date for six months?",
            outcome_type="BINARY",
            close_time=datetime(2100, 1, 1, tzinfo=timezone.utc),
            initial_prob=15,
        ),
        creator.id,
    )


def test_build_new_match_notification_fields(seed, contract):
    """Verify that the notification points at the market and the matched user."""
    carol = seed.user("carol")
    alice = seed.user("alice")
    bob = seed.user("bob")

    notification = build_new_match_notification(alice.private_user, carol, bob, contract)

    assert notification.user_id == "alice"
    assert notification.reason == "tagged_user"
    assert notification.source_type == "new_match"
    assert notification.source_update_type == "created"
    assert notification.source_id == contract.id
    assert notification.source_text == "Check out @bob now!"
    assert notification.source_user_username == "carol"
    assert notification.source_contract_slug == contract.slug
    assert notification.source_contract_creator_username == "ManifoldLove"
    assert notification.data["matchUserId"] == "bob"
    assert notification.data["matchUserUsername"] == "bob"


def test_notification_is_stored_and_pushed(db_session, seed, contract):
    """Verify that both channels are attempted for a user with a push token."""
    carol = seed.user("carol")
    alice = seed.user("alice", push_token="tok")
    bob = seed.user("bob")
    push_client = MagicMock()
    push_client.send.return_value = True

    service = NotificationService(db_session, push_client=push_client)
    delivery = service.create_new_match_notification(alice, carol, bob, contract)

    assert not delivery.skipped
    assert delivery.failures == []
    assert [(c.channel, c.attempted, c.ok) for c in delivery.channels] == [
        ("browser", True, True),
        ("mobile", True, True),
    ]
    items, total = NotificationRepository(db_session).list_for_user("alice")
    assert total == 1
    assert items[0].id == delivery.notification.id
    args = push_client.send.call_args.args
    assert args[2] == NEW_MATCH_PUSH_TITLE
    assert args[3] == "Check out @bob now!"


def test_push_failure_does_not_block_browser_delivery(db_session, seed, contract):
    """Verify that a failing push still leaves the stored notification in place."""
    carol = seed.user("carol")
    alice = seed.user("alice", push_token="tok")
    bob = seed.user("bob")
    push_client = MagicMock()
    push_client.send.side_effect = PushDeliveryError("provider down")

    service = NotificationService(db_session, push_client=push_client)
    delivery = service.create_new_match_notification(alice, carol, bob, contract)

    assert [(f.channel, f.error) for f in delivery.failures] == [("mobile", "provider down")]
    assert NotificationRepository(db_session).list_for_user("alice")[1] == 1


def test_browser_failure_does_not_block_push(db_session, seed, contract):
    """Verify that a storage failure still attempts the mobile channel."""
    carol = seed.user("carol")
    alice = seed.user("alice", push_token="tok")
    bob = seed.user("bob")
    push_client = MagicMock()
    push_client.send.return_value = True
    service = NotificationService(db_session, push_client=push_client)

    with patch.object(
        NotificationRepository, "insert_notification", side_effect=RuntimeError("db down")
    ):
        delivery = service.create_new_match_notification(alice, carol, bob, contract)

    assert [f.channel for f in delivery.failures] == ["browser"]
    push_client.send.assert_called_once()


def test_opted_out_channels_are_not_attempted(db_session, seed, contract):
    """Verify that opted-out channels are reported as not attempted."""
    carol = seed.user("carol")
    alice = seed.user("alice", push_token="tok", opt_out_all=("mobile",))
    bob = seed.user("bob")
    push_client = MagicMock()

    service = NotificationService(db_session, push_client=push_client)
    delivery = service.create_new_match_notification(alice, carol, bob, contract)

    mobile = [c for c in delivery.channels if c.channel == "mobile"][0]
    assert mobile.attempted is False
    push_client.send.assert_not_called()


def test_missing_private_user_is_skipped(db_session, seed, contract):
    """Verify that recipients without private data get no notification."""
    carol = seed.user("carol")
    alice = seed.user("alice", private=False)
    bob = seed.user("bob")

    delivery = NotificationService(db_session).create_new_match_notification(
        alice, carol, bob, contract
    )

    assert delivery.skipped
    assert delivery.channels == []
    assert NotificationRepository(db_session).list_for_user("alice") == ([], 0)


def test_deferred_push_waits_for_send_pending_pushes(db_session, seed, contract):
    """Verify that deferred mobile sends only go out when explicitly released."""
    carol = seed.user("carol")
    alice = seed.user("alice", push_token="tok")
    bob = seed.user("bob")
    push_client = MagicMock()
    push_client.send.return_value = True
    service = NotificationService(db_session, push_client=push_client, defer_push=True)

    delivery = service.create_new_match_notification(alice, carol, bob, contract)
    db_session.commit()

    push_client.send.assert_not_called()
    assert [c.channel for c in delivery.channels] == ["browser"]

    results = service.send_pending_pushes([delivery])

    assert [(r.channel, r.attempted, r.ok) for r in results] == [("mobile", True, True)]
    assert [c.channel for c in delivery.channels] == ["browser", "mobile"]
    assert push_client.send.call_args.args[3] == "Check out @bob now!"
    assert service.send_pending_pushes([delivery]) == []
