from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from loguru import logger
from sqlalchemy.orm import Session

from . import schemas
from .cards import (
    CardOptions,
    Viewer,
    market_from_record,
    preload_cache,
    render_contract_card,
    to_dict,
    to_html,
)
from .core.config import settings
from .db import get_db, init_db, transaction
from .errors import APIError, UnauthorizedError
from .repositories import ContractRepository, NotificationRepository, UserRepository
from .services.analytics import AnalyticsTracker
from .services.betting import BetService
from .services.match_service import MatchService
from .services.notifications import NotificationService
from .services.push import PushNotificationClient

app = FastAPI(title="Love Market API", version="0.1.0", debug=settings.debug)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database connections when the API boots."""

    init_db()


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "message": "Error validating request.",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def current_user_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user id set by the gateway")] = None,
) -> str:
    """Resolve the caller identity supplied by the hosting gateway."""

    if not x_user_id:
        raise UnauthorizedError("Authentication required.")
    return x_user_id


def optional_user_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user id set by the gateway")] = None,
) -> str | None:
    return x_user_id or None


@lru_cache
def get_push_client() -> PushNotificationClient:
    return PushNotificationClient()


def _notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db, push_client=get_push_client(), defer_push=True)


def _match_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(_notification_service),
) -> MatchService:
    """Provide the match service wired with a SQLAlchemy session and notifier."""

    return MatchService(db, settings.match_config(), notifier=notifier)


def _bet_service(db: Session = Depends(get_db)) -> BetService:
    return BetService(db)


@app.post("/create-match", response_model=schemas.CreateMatchResponse, tags=["matches"])
def create_match(
    request: schemas.CreateMatchRequest,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
    service: MatchService = Depends(_match_service),
    notifier: NotificationService = Depends(_notification_service),
):
    """Create a match market between two love profiles and seed its wagers."""

    with transaction(db):
        result = service.create_match(user_id, request)
        contract = schemas.Contract.model_validate(result.contract)
    preload_cache.invalidate(contract.id)
    for push in notifier.send_pending_pushes(result.deliveries):
        if not push.ok:
            logger.warning("Push for match {} failed: {}", contract.id, push.error)
    logger.info(
        "create-match by {} produced {} notification(s)", user_id, result.notification_count
    )
    return schemas.CreateMatchResponse(success=True, contract=contract)


@app.post("/bets", response_model=schemas.Bet, tags=["bets"])
def place_bet(
    request: schemas.PlaceBetRequest,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
    service: BetService = Depends(_bet_service),
):
    """Place a wager, as used by the quick-bet control on market cards."""

    with transaction(db):
        bet = service.place_bet(
            contract_id=request.contract_id,
            amount=request.amount,
            outcome=request.outcome,
            user_id=user_id,
        )
        payload = schemas.Bet.model_validate(bet)
    preload_cache.invalidate(payload.contract_id)
    return payload


@app.get("/contracts/{contract_id}", response_model=schemas.Contract, tags=["contracts"])
def get_contract(contract_id: str, db: Session = Depends(get_db)):
    contract = ContractRepository(db).get_contract(contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract


@app.get("/contracts/{contract_id}/bets", response_model=list[schemas.Bet], tags=["bets"])
def list_contract_bets(contract_id: str, db: Session = Depends(get_db)):
    repo = ContractRepository(db)
    if not repo.get_contract(contract_id):
        raise HTTPException(status_code=404, detail="Contract not found")
    return [schemas.Bet.model_validate(bet) for bet in repo.list_bets(contract_id)]


def _card_options(
    *,
    show_hot_volume: Annotated[bool, Query(description="Show 24h volume instead of totals")] = False,
    show_time: Annotated[
        str | None,
        Query(description="Date to show under the question", pattern="^(resolve-date|close-date)$"),
    ] = None,
    hide_quick_bet: Annotated[bool, Query(description="Never render the quick-bet control")] = False,
    hide_group_link: Annotated[bool, Query(description="Hide the group link")] = False,
    custom_click: Annotated[bool, Query(description="Card clicks are handled by the embedding page")] = False,
    class_name: Annotated[str | None, Query(max_length=200)] = None,
) -> CardOptions:
    """Normalize shared card display query parameters."""

    return CardOptions(
        show_hot_volume=show_hot_volume,
        show_time=show_time,
        class_name=class_name,
        has_custom_click=custom_click,
        hide_quick_bet=hide_quick_bet,
        hide_group_link=hide_group_link,
    )


def _render_card(
    contract_id: str,
    options: CardOptions,
    viewer_id: str | None,
    db: Session,
):
    market = preload_cache.get(contract_id)
    if market is None:
        generation = preload_cache.generation()
        contract = ContractRepository(db).get_contract(contract_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        market = market_from_record(contract)
        preload_cache.prime(market, generation=generation)

    viewer = None
    if viewer_id:
        user = UserRepository(db).get_user(viewer_id)
        if user is not None:
            viewer = Viewer(id=user.id, username=user.username)
    return render_contract_card(market, viewer=viewer, options=options)


@app.get("/contracts/{contract_id}/card", response_class=HTMLResponse, tags=["cards"])
def get_contract_card(
    contract_id: str,
    options: CardOptions = Depends(_card_options),
    viewer_id: str | None = Depends(optional_user_id),
    db: Session = Depends(get_db),
):
    """Render the compact market card as an HTML fragment."""

    return HTMLResponse(to_html(_render_card(contract_id, options, viewer_id, db)))


@app.get("/contracts/{contract_id}/card.json", response_model=schemas.RenderNode, tags=["cards"])
def get_contract_card_tree(
    contract_id: str,
    options: CardOptions = Depends(_card_options),
    viewer_id: str | None = Depends(optional_user_id),
    db: Session = Depends(get_db),
):
    """Return the market card render tree for client-side hydration."""

    return to_dict(_render_card(contract_id, options, viewer_id, db))


@app.get("/notifications", response_model=schemas.NotificationList, tags=["notifications"])
def list_notifications(
    *,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's stored notifications, newest first."""

    items, total = NotificationRepository(db).list_for_user(user_id, limit=limit, offset=offset)
    return schemas.NotificationList(
        total=total, items=[schemas.Notification.model_validate(item) for item in items]
    )


@app.post(
    "/notifications/{notification_id}/seen",
    response_model=schemas.Notification,
    tags=["notifications"],
)
def mark_notification_seen(
    notification_id: str,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with transaction(db):
        notification = NotificationRepository(db).mark_seen(user_id, notification_id)
        if notification is None:
            raise HTTPException(status_code=404, detail="Notification not found")
        payload = schemas.Notification.model_validate(notification)
    return payload


@app.post("/analytics/track", status_code=204, response_class=Response, tags=["analytics"])
def track_event(
    request: schemas.TrackEventRequest,
    user_id: str | None = Depends(optional_user_id),
    db: Session = Depends(get_db),
) -> Response:
    """Record a client analytics event such as a market card click."""

    with transaction(db):
        AnalyticsTracker(db).track(request.name, request.properties, user_id=user_id)
    return Response(status_code=204)
