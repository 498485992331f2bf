"""Create a wager-backed match market between two love profiles.

The flow validates the pair, creates a BINARY market owned by the love system
account, seeds it with a large NO wager, places the initiator's YES wager and
notifies every matched user other than the initiator. Market creation, both
wagers and stored notifications share the caller's database unit of work, so
a failed wager leaves no market behind. A notifier built with
``defer_push`` holds mobile sends until the caller commits and calls
``NotificationService.send_pending_pushes``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.orm import Session

from lovemarket.core.config import MatchConfig
from lovemarket.errors import InvalidRequestError, NotFoundError
from lovemarket.models import Contract, OutcomeType, User
from lovemarket.repositories import ContractRepository, UserRepository
from lovemarket.schemas import CreateMatchRequest

from .betting import BetService
from .market_creation import CreateMarketOptions, MarketCreationService
from .notifications import NotificationDelivery, NotificationService


@dataclass(slots=True)
class MatchResult:
    contract: Contract
    deliveries: list[NotificationDelivery] = field(default_factory=list)

    @property
    def notification_count(self) -> int:
        return sum(1 for delivery in self.deliveries if not delivery.skipped)


def match_question(user1: User, user2: User) -> str:
    return f"Will @{user1.username} and @{user2.username} date for six months?"


def match_description(user1: User, user2: User, site_base_url: str) -> str:
    return (
        "Check out the profiles of these two and bet on their long term compatibility!\n"
        "\n"
        f"[{user1.name}]({site_base_url}/{user1.username})\n"
        "\n"
        f"[{user2.name}]({site_base_url}/{user2.username})"
    )


class MatchService:
    def __init__(
        self,
        session: Session,
        config: MatchConfig,
        *,
        market_creator: MarketCreationService | None = None,
        bet_service: BetService | None = None,
        notifier: NotificationService | None = None,
    ) -> None:
        self._session = session
        self._config = config
        self._users = UserRepository(session)
        self._contracts = ContractRepository(session)
        self._market_creator = market_creator or MarketCreationService(session)
        self._bet_service = bet_service or BetService(session)
        self._notifier = notifier or NotificationService(session)

    def create_match(self, initiator_id: str, request: CreateMatchRequest) -> MatchResult:
        user_id1, user_id2 = request.user_id1, request.user_id2
        if request.bet_amount < self._config.min_bet_amount:
            raise InvalidRequestError(
                f"Bet amount must be at least {self._config.min_bet_amount}."
            )

        users = self._users.get_users([initiator_id, user_id1, user_id2])
        match_creator = users.get(initiator_id)
        user1 = users.get(user_id1)
        user2 = users.get(user_id2)
        if match_creator is None:
            raise NotFoundError(f"User {initiator_id} does not exist.")
        if user1 is None:
            raise NotFoundError(f"User {user_id1} does not exist.")
        if user2 is None:
            raise NotFoundError(f"User {user_id2} does not exist.")

        lovers = self._users.get_lovers_by_user_id([user_id1, user_id2])
        if user_id1 not in lovers:
            raise InvalidRequestError(f"User {user_id1} does not have a love profile.")
        if user_id2 not in lovers:
            raise InvalidRequestError(f"User {user_id2} does not have a love profile.")

        self._check_blocks(initiator_id, user_id1, user_id2)

        existing = self._contracts.find_match_contracts(
            user_id1, user_id2, either_order=self._config.check_both_orders
        )
        if existing:
            logger.info(
                "Match between {} and {} already exists: {}",
                user_id1,
                user_id2,
                [contract.id for contract in existing],
            )
            raise InvalidRequestError("Match already exists.")

        contract = self._market_creator.create_market(
            CreateMarketOptions(
                question=match_question(user1, user2),
                description_markdown=match_description(user1, user2, self._config.site_base_url),
                extra_liquidity=self._config.extra_liquidity,
                outcome_type=OutcomeType.BINARY.value,
                group_ids=[self._config.relationships_group_id],
                visibility="public",
                close_time=self._config.close_time,
                initial_prob=self._config.initial_probability,
                lover_user_id1=user_id1,
                lover_user_id2=user_id2,
            ),
            self._config.love_user_id,
        )

        try:
            self._bet_service.place_bet(
                contract_id=contract.id,
                amount=self._config.system_bet_amount,
                outcome="NO",
                user_id=self._config.love_user_id,
                is_api=True,
            )
            self._bet_service.place_bet(
                contract_id=contract.id,
                amount=request.bet_amount - self._config.creation_fee,
                outcome="YES",
                user_id=match_creator.id,
                is_api=True,
            )
        except Exception:
            logger.exception("Failed to seed wagers on match market {}", contract.id)
            raise

        result = MatchResult(contract=contract)
        if match_creator.id != user1.id:
            result.deliveries.append(
                self._notifier.create_new_match_notification(user1, match_creator, user2, contract)
            )
        if match_creator.id != user2.id:
            result.deliveries.append(
                self._notifier.create_new_match_notification(user2, match_creator, user1, contract)
            )

        for delivery in result.deliveries:
            for failure in delivery.failures:
                logger.warning(
                    "Match {} notification to {} failed on {}: {}",
                    contract.id,
                    delivery.recipient_id,
                    failure.channel,
                    failure.error,
                )

        logger.info(
            "{} matched {} and {} in market {}",
            match_creator.username,
            user1.username,
            user2.username,
            contract.id,
        )
        return result

    def _check_blocks(self, initiator_id: str, user_id1: str, user_id2: str) -> None:
        private_users = self._users.get_private_users([user_id1, user_id2])
        private_user1 = private_users.get(user_id1)
        private_user2 = private_users.get(user_id2)

        if private_user1 is None:
            raise InvalidRequestError(f"Private user {user_id1} not found.")
        blocked1 = set(private_user1.blocked_user_ids or [])
        if user_id2 in blocked1:
            raise InvalidRequestError(f"User {user_id2} is blocked by {user_id1}.")
        if private_user2 is None:
            raise InvalidRequestError(f"Private user {user_id2} not found.")
        blocked2 = set(private_user2.blocked_user_ids or [])
        if user_id1 in blocked2:
            raise InvalidRequestError(f"User {user_id1} is blocked by {user_id2}.")
        if initiator_id in blocked1 or initiator_id in blocked2:
            raise InvalidRequestError(
                f"User {initiator_id} is blocked by {user_id1} or {user_id2}."
            )


__all__ = ["MatchResult", "MatchService", "match_description", "match_question"]
