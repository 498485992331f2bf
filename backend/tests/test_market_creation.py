from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lovemarket.errors import ForbiddenError, InvalidRequestError, NotFoundError
from lovemarket.services.market_creation import (
    CreateMarketOptions,
    MarketCreationService,
    slugify,
)

FUTURE = datetime(2100, 1, 1, tzinfo=timezone.utc)


def _options(**overrides) -> CreateMarketOptions:
    values = {
        "question": "Will @alice and @bob date for six months?",
        "outcome_type": "BINARY",
        "close_time": FUTURE,
        "initial_prob": 15,
        "extra_liquidity": 950,
    }
    values.update(overrides)
    return CreateMarketOptions(**values)


def test_slugify_strips_symbols_and_truncates():
    """Verify that slugs are lowercase ascii, hyphenated and capped at 35 characters."""
    slug = slugify("Will @alice and @bob date for six months?")
    assert slug == "will-alice-and-bob-date-for-six-mon"
    assert slugify("Café  Olé!") == "cafe-ole"
    assert slugify("???") == ""


def test_create_binary_market_debits_liquidity(db_session, seed, test_settings):
    """Verify that a binary market opens at its initial probability and charges the creator."""
    creator = seed.system_account()
    service = MarketCreationService(db_session, test_settings)

    contract = service.create_market(
        _options(group_ids=["group-1"], lover_user_id1="alice", lover_user_id2="bob"),
        creator.id,
    )

    assert contract.outcome_type == "BINARY"
    assert contract.mechanism == "cpmm-1"
    assert contract.initial_probability == 15
    assert contract.prob == pytest.approx(0.15)
    assert contract.total_liquidity == 1000
    assert contract.pool == {"YES": 1000.0, "NO": 1000.0}
    assert contract.group_ids == ["group-1"]
    assert contract.lover_user_id1 == "alice"
    assert contract.creator_username == "ManifoldLove"
    assert creator.balance == 1_000_000 - 1000


def test_duplicate_questions_get_distinct_slugs(db_session, seed, test_settings):
    """Verify that a second market with the same question gets a suffixed slug."""
    creator = seed.system_account()
    service = MarketCreationService(db_session, test_settings)

    first = service.create_market(_options(), creator.id)
    second = service.create_market(_options(), creator.id)

    assert first.slug == "will-alice-and-bob-date-for-six-mon"
    assert second.slug.startswith(first.slug + "-")
    assert second.slug != first.slug


def test_pseudo_numeric_market_stores_range(db_session, seed, test_settings):
    """Verify that pseudo-numeric markets map their initial value onto a probability."""
    creator = seed.system_account()
    service = MarketCreationService(db_session, test_settings)

    contract = service.create_market(
        _options(outcome_type="PSEUDO_NUMERIC", min=0, max=100, initial_value=25),
        creator.id,
    )

    assert contract.initial_probability == pytest.approx(25)
    assert contract.data == {"min": 0, "max": 100, "isLogScale": False}


def test_unsupported_outcome_type_is_rejected(db_session, seed, test_settings):
    """Verify that only binary and pseudo-numeric markets can be created."""
    creator = seed.system_account()
    service = MarketCreationService(db_session, test_settings)

    with pytest.raises(InvalidRequestError) as excinfo:
        service.create_market(_options(outcome_type="FREE_RESPONSE"), creator.id)
    assert excinfo.value.status_code == 400


def test_past_close_time_is_rejected(db_session, seed, test_settings):
    """Verify that markets cannot be created already closed."""
    creator = seed.system_account()
    service = MarketCreationService(db_session, test_settings)

    with pytest.raises(InvalidRequestError):
        service.create_market(
            _options(close_time=datetime.now(timezone.utc) - timedelta(days=1)), creator.id
        )


def test_insufficient_balance_is_forbidden(db_session, seed, test_settings):
    """Verify that a creator who cannot fund the liquidity is refused."""
    creator = seed.user("poor", balance=100)
    service = MarketCreationService(db_session, test_settings)

    with pytest.raises(ForbiddenError) as excinfo:
        service.create_market(_options(), creator.id)
    assert excinfo.value.status_code == 403
    assert creator.balance == 100


def test_unknown_creator_is_not_found(db_session, test_settings):
    """Verify that a missing creator yields a 404."""
    service = MarketCreationService(db_session, test_settings)

    with pytest.raises(NotFoundError):
        service.create_market(_options(), "ghost")
