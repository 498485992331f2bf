from __future__ import annotations

from lovemarket.models import PrivateUser
from lovemarket.services.notification_preferences import get_notification_destinations


def test_tagged_user_defaults_to_every_channel():
    """Verify that users without preferences receive match notifications everywhere."""
    destinations = get_notification_destinations(PrivateUser(id="u1"), "tagged_user")
    assert destinations.send_to_browser
    assert destinations.send_to_mobile
    assert destinations.send_to_email
    assert destinations.notification_preference == "tagged_user"


def test_configured_preferences_are_respected():
    """Verify that an explicit preference list limits the channels."""
    private_user = PrivateUser(id="u1", notification_preferences={"tagged_user": ["browser"]})
    destinations = get_notification_destinations(private_user, "tagged_user")
    assert destinations.send_to_browser
    assert not destinations.send_to_mobile
    assert not destinations.send_to_email


def test_opt_out_all_removes_channels():
    """Verify that a global opt-out wins over the per-reason preference."""
    private_user = PrivateUser(id="u1", opt_out_all=["mobile", "email"])
    destinations = get_notification_destinations(private_user, "new_match")
    assert destinations.send_to_browser
    assert not destinations.send_to_mobile
    assert not destinations.send_to_email
    assert destinations.notification_preference == "tagged_user"


def test_unknown_reason_has_no_destinations():
    """Verify that reasons without defaults are not delivered."""
    destinations = get_notification_destinations(PrivateUser(id="u1"), "something_else")
    assert not (destinations.send_to_browser or destinations.send_to_mobile)
