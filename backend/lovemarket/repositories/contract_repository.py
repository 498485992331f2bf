"""Contract and bet persistence helpers."""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from lovemarket.models import Bet, Contract


class ContractRepository:
    """Encapsulate contract persistence and match lookups."""

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Mutations

    def add_contract(self, contract: Contract) -> Contract:
        self._session.add(contract)
        self._session.flush()
        return contract

    def add_bet(self, bet: Bet) -> Bet:
        self._session.add(bet)
        self._session.flush()
        return bet

    # ------------------------------------------------------------------
    # Queries

    def get_contract(self, contract_id: str) -> Contract | None:
        return self._session.get(Contract, contract_id)

    def get_contract_for_update(self, contract_id: str) -> Contract | None:
        query = select(Contract).where(Contract.id == contract_id).with_for_update()
        return self._session.execute(query).scalar_one_or_none()

    def slug_exists(self, slug: str) -> bool:
        query = select(Contract.id).where(Contract.slug == slug).limit(1)
        return self._session.execute(query).first() is not None

    def find_match_contracts(
        self, user_id1: str, user_id2: str, *, either_order: bool = False
    ) -> list[Contract]:
        """Return match markets tagged with the given pair of users."""

        ordered = and_(
            Contract.lover_user_id1 == user_id1,
            Contract.lover_user_id2 == user_id2,
        )
        condition: Any = ordered
        if either_order:
            condition = or_(
                ordered,
                and_(
                    Contract.lover_user_id1 == user_id2,
                    Contract.lover_user_id2 == user_id1,
                ),
            )
        query = select(Contract).where(condition).order_by(Contract.created_time.asc())
        return list(self._session.execute(query).scalars().all())

    def list_bets(self, contract_id: str) -> list[Bet]:
        query = (
            select(Bet)
            .where(Bet.contract_id == contract_id)
            .order_by(Bet.created_time.asc(), Bet.id.asc())
        )
        return list(self._session.execute(query).scalars().all())


__all__ = ["ContractRepository"]
