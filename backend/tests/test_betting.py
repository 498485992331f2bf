from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lovemarket.errors import ForbiddenError, InvalidRequestError, NotFoundError
from lovemarket.services.betting import BetService
from lovemarket.services.market_creation import CreateMarketOptions, MarketCreationService


@pytest.fixture
def contract(db_session, seed, test_settings):
    creator = seed.system_account()
    return MarketCreationService(db_session, test_settings).create_market(
        CreateMarketOptions(
            question="Will the bets settle?",
            outcome_type="BINARY",
            close_time=datetime(2100, 1, 1, tzinfo=timezone.utc),
            initial_prob=50,
        ),
        creator.id,
    )


def test_place_bet_moves_pool_and_debits_user(db_session, seed, contract):
    """Verify that a YES wager raises the price and charges the bettor."""
    bettor = seed.user("alice", balance=100)

    bet = BetService(db_session).place_bet(
        contract_id=contract.id, amount=40, outcome="YES", user_id=bettor.id, is_api=True
    )

    assert bet.outcome == "YES"
    assert bet.is_api is True
    assert bet.prob_before == pytest.approx(0.5)
    assert bet.prob_after > 0.5
    assert contract.prob == pytest.approx(bet.prob_after)
    assert contract.volume == 40
    assert bettor.balance == 60


def test_place_bet_rejects_insufficient_balance(db_session, seed, contract):
    """Verify that bettors cannot spend more than their balance."""
    bettor = seed.user("alice", balance=10)

    with pytest.raises(ForbiddenError):
        BetService(db_session).place_bet(
            contract_id=contract.id, amount=40, outcome="YES", user_id=bettor.id
        )


def test_place_bet_rejects_resolved_market(db_session, seed, contract):
    """Verify that resolved markets no longer accept wagers."""
    bettor = seed.user("alice")
    contract.resolution = "NO"

    with pytest.raises(ForbiddenError, match="resolved"):
        BetService(db_session).place_bet(
            contract_id=contract.id, amount=10, outcome="YES", user_id=bettor.id
        )


def test_place_bet_rejects_closed_market(db_session, seed, contract):
    """Verify that markets past their close time refuse wagers."""
    bettor = seed.user("alice")
    contract.close_time = datetime.now(timezone.utc) - timedelta(hours=1)
    db_session.commit()

    with pytest.raises(ForbiddenError, match="closed"):
        BetService(db_session).place_bet(
            contract_id=contract.id, amount=10, outcome="NO", user_id=bettor.id
        )


def test_place_bet_validates_input(db_session, seed, contract):
    """Verify that bad amounts, outcomes and ids are reported."""
    bettor = seed.user("alice")
    service = BetService(db_session)

    with pytest.raises(InvalidRequestError):
        service.place_bet(contract_id=contract.id, amount=0, outcome="YES", user_id=bettor.id)
    with pytest.raises(InvalidRequestError):
        service.place_bet(contract_id=contract.id, amount=5, outcome="MAYBE", user_id=bettor.id)
    with pytest.raises(NotFoundError):
        service.place_bet(contract_id="missing", amount=5, outcome="YES", user_id=bettor.id)
    with pytest.raises(NotFoundError):
        service.place_bet(contract_id=contract.id, amount=5, outcome="YES", user_id="ghost")
