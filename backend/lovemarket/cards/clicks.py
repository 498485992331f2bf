"""Click policy for the card background link."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .renderer import CARD_CLICK_EVENT, contract_path
from .variants import Market

TrackFn = Callable[[str, Mapping[str, Any]], Any]


@dataclass(frozen=True, slots=True)
class CardClick:
    ctrl_key: bool = False
    meta_key: bool = False

    @property
    def wants_new_tab(self) -> bool:
        return self.ctrl_key or self.meta_key


@dataclass(frozen=True, slots=True)
class ClickOutcome:
    browser_default: bool
    tracked: bool
    handler_called: bool
    navigate_to: str | None


def handle_card_click(
    market: Market,
    click: CardClick,
    *,
    track: TrackFn,
    on_click: Callable[[], Any] | None = None,
) -> ClickOutcome:
    """Decide what a click on the card background does.

    Without a custom handler the click is tracked and the browser follows the
    link (a modifier key opens it in a new tab). With a custom handler the
    default navigation is suppressed and the handler runs instead, unless a
    modifier key was held, in which case the browser handles the link untouched.
    """

    properties = {"slug": market.slug, "contractId": market.id}
    path = contract_path(market)

    if on_click is None:
        track(CARD_CLICK_EVENT, properties)
        return ClickOutcome(
            browser_default=True,
            tracked=True,
            handler_called=False,
            navigate_to=path,
        )

    if click.wants_new_tab:
        return ClickOutcome(
            browser_default=True,
            tracked=False,
            handler_called=False,
            navigate_to=path,
        )

    track(CARD_CLICK_EVENT, properties)
    on_click()
    return ClickOutcome(
        browser_default=False,
        tracked=True,
        handler_called=True,
        navigate_to=None,
    )


__all__ = ["CardClick", "ClickOutcome", "handle_card_click"]
