from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from lovemarket.schemas import Contract, CreateMatchRequest, PlaceBetRequest


def test_create_match_request_accepts_camel_case_keys():
    """Verify that the request body uses the camelCase wire names."""
    request = CreateMatchRequest.model_validate({"userId1": "a", "userId2": "b", "betAmount": 20})
    assert request.user_id1 == "a"
    assert request.user_id2 == "b"
    assert request.bet_amount == 20


def test_create_match_request_rejects_small_bets():
    """Verify that wagers below the minimum fail validation."""
    with pytest.raises(ValidationError):
        CreateMatchRequest.model_validate({"userId1": "a", "userId2": "b", "betAmount": 19.99})


def test_create_match_request_requires_user_ids():
    """Verify that empty user ids fail validation."""
    with pytest.raises(ValidationError):
        CreateMatchRequest.model_validate({"userId1": "", "userId2": "b", "betAmount": 50})


def test_place_bet_request_rejects_unknown_outcomes():
    """Verify that only YES and NO wagers are accepted."""
    with pytest.raises(ValidationError):
        PlaceBetRequest.model_validate({"contractId": "c1", "amount": 10, "outcome": "MAYBE"})


def test_contract_serializes_with_camel_case_aliases():
    """Verify that contracts dump with camelCase keys and default group ids."""
    contract = Contract(
        id="c1",
        slug="will-a-and-b-date",
        question="Will @a and @b date for six months?",
        creator_id="sys",
        creator_username="ManifoldLove",
        creator_name="Manifold Love",
        outcome_type="BINARY",
        mechanism="cpmm-1",
        visibility="public",
        created_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        initial_probability=15,
        group_ids=None,
    )
    payload = contract.model_dump(by_alias=True)
    assert payload["outcomeType"] == "BINARY"
    assert payload["initialProbability"] == 15
    assert payload["groupIds"] == []
