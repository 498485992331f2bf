"""Wager placement against cpmm-1 markets."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from loguru import logger
from sqlalchemy.orm import Session

from lovemarket.domain import CpmmState, calculate_cpmm_purchase
from lovemarket.errors import ForbiddenError, InvalidRequestError, NotFoundError
from lovemarket.models import Bet, Mechanism
from lovemarket.repositories import ContractRepository, UserRepository

VALID_OUTCOMES = ("YES", "NO")


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class BetService:
    """Validate a wager, move the pool and debit the bettor."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._contracts = ContractRepository(session)
        self._users = UserRepository(session)

    def place_bet(
        self,
        *,
        contract_id: str,
        amount: float,
        outcome: str,
        user_id: str,
        is_api: bool = False,
    ) -> Bet:
        if amount <= 0:
            raise InvalidRequestError("Bet amount must be positive.")
        if outcome not in VALID_OUTCOMES:
            raise InvalidRequestError(f"Invalid outcome {outcome}.")

        contract = self._contracts.get_contract_for_update(contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.")
        user = self._users.get_user_for_update(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} does not exist.")

        now = datetime.now(timezone.utc)
        if contract.resolution:
            raise ForbiddenError("Market is resolved.")
        if contract.close_time is not None and _as_utc(contract.close_time) < now:
            raise ForbiddenError("Trading is closed.")
        if contract.mechanism != Mechanism.CPMM.value:
            raise ForbiddenError("Betting is only supported on cpmm-1 markets.")
        if float(user.balance) < amount:
            raise ForbiddenError("Insufficient balance.")

        state = CpmmState.from_contract(contract.pool, contract.p)
        trade = calculate_cpmm_purchase(state, amount, outcome)

        contract.pool = trade.new_pool
        contract.prob = trade.prob_after
        contract.volume = float(contract.volume or 0) + amount
        contract.volume_24_hours = float(contract.volume_24_hours or 0) + amount
        user.balance = float(user.balance) - amount

        bet = Bet(
            id=uuid4().hex,
            contract_id=contract.id,
            user_id=user.id,
            outcome=outcome,
            amount=amount,
            shares=trade.shares,
            prob_before=trade.prob_before,
            prob_after=trade.prob_after,
            is_api=is_api,
            created_time=now,
        )
        self._contracts.add_bet(bet)
        logger.info(
            "{} bet {} {} on {} ({:.3f} -> {:.3f})",
            user.username,
            amount,
            outcome,
            contract.id,
            trade.prob_before,
            trade.prob_after,
        )
        return bet


__all__ = ["BetService", "VALID_OUTCOMES"]
