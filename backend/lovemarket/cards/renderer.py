"""Market card rendering.

``render_contract_card`` is a pure function of the market snapshot, the
optional viewer, display options and the reference time: the same inputs
always produce an equal render tree.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from .calculate import (
    get_expected_value,
    get_mapped_value,
    get_outcome_probability,
    get_probability,
    get_top_answer,
    get_value_from_bucket,
)
from .format import format_large_number, format_money, format_percent
from .nodes import Node, cx, el
from .variants import (
    Answer,
    AnswerMarket,
    BinaryMarket,
    BountyMarket,
    FreeResponseMarket,
    Market,
    MultipleChoiceMarket,
    NumericMarket,
    PseudoNumericMarket,
)

ShowTime = Literal["resolve-date", "close-date"]
Truncate = Literal["short", "long", "none"]

CARD_CLICK_EVENT = "click market card"
QUICK_BET_AMOUNT = 10
TRUNCATE_LENGTHS = {"short": 15, "long": 75}
OUTCOME_TO_COLOR = {
    "YES": "teal-500",
    "NO": "red-400",
    "CANCEL": "yellow-400",
    "MKT": "blue-400",
}
SUMMARY_CLASSES = "items-center self-center pr-5"


@dataclass(frozen=True, slots=True)
class Viewer:
    id: str
    username: str | None = None


@dataclass(frozen=True, slots=True)
class CardOptions:
    show_hot_volume: bool = False
    show_time: ShowTime | None = None
    class_name: str | None = None
    has_custom_click: bool = False
    hide_quick_bet: bool = False
    hide_group_link: bool = False


def contract_path(market: Market) -> str:
    return f"/{market.creator_username}/{market.slug}"


def is_closed(market: Market, now: datetime) -> bool:
    if market.resolution:
        return True
    return market.close_time is not None and market.close_time < now


def should_show_quick_bet(
    market: Market, viewer: Viewer | None, options: CardOptions, now: datetime
) -> bool:
    return (
        viewer is not None
        and not is_closed(market, now)
        and isinstance(market, (BinaryMarket, PseudoNumericMarket))
        and not options.hide_quick_bet
    )


def get_color(market: Market, now: datetime) -> str:
    if market.resolution:
        return OUTCOME_TO_COLOR.get(market.resolution, "blue-400")
    if market.close_time is not None and market.close_time < now:
        return "gray-400"
    return "primary"


def _truncate(text: str, truncate: Truncate) -> str:
    limit = TRUNCATE_LENGTHS.get(truncate)
    if limit is None or len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%b %d, %Y")


# ----------------------------------------------------------------------
# Outcome labels


def cancel_label() -> Node:
    return el("span", "N/A", classes="text-yellow-400")


def multi_label() -> Node:
    return el("span", "MULTI", classes="text-blue-400")


def answer_label(answer: Answer, truncate: Truncate, class_name: str | None = None) -> Node:
    return el(
        "span",
        _truncate(answer.text, truncate),
        classes=cx("answer-label", class_name),
        title=answer.text,
    )


def binary_outcome_label(market: BinaryMarket, resolution: str) -> Node:
    if resolution == "YES":
        return el("span", "YES", classes="text-teal-500")
    if resolution == "NO":
        return el("span", "NO", classes="text-red-400")
    if resolution == "CANCEL":
        return cancel_label()
    if resolution == "MKT":
        prob = market.resolution_probability
        if prob is None:
            prob = get_probability(market)
        return el("span", format_percent(prob), classes="text-blue-400")
    return el("span", resolution, classes="text-gray-500")


def free_response_outcome_label(
    market: AnswerMarket,
    resolution: str,
    truncate: Truncate,
    answer_class: str | None = None,
) -> Node:
    if resolution == "CANCEL":
        return cancel_label()
    if resolution == "MKT":
        return multi_label()
    for answer in market.answers:
        if answer.id == resolution:
            return answer_label(answer, truncate, answer_class)
    return el("span", resolution, classes=cx("answer-label", answer_class))


def _resolved_caption(large: bool = False) -> Node:
    return el("div", "Resolved", classes=cx("text-gray-500", "text-xl" if large else "text-base"))


# ----------------------------------------------------------------------
# Summary renderers, one per outcome type


def binary_resolution_or_chance(
    market: BinaryMarket, now: datetime, *, large: bool = False, class_name: str | None = None
) -> Node:
    classes = cx("summary", "text-4xl" if large else "text-3xl", class_name)
    if market.resolution:
        return el(
            "div",
            _resolved_caption(large),
            binary_outcome_label(market, market.resolution),
            classes=classes,
        )

    text_color = f"text-{get_color(market, now)}"
    return el(
        "div",
        el("div", format_percent(get_probability(market)), classes=text_color),
        el("div", "chance", classes=cx(text_color, "text-xl" if large else "text-base")),
        classes=classes,
    )


def pseudo_numeric_resolution_or_expectation(
    market: PseudoNumericMarket, class_name: str | None = None
) -> Node:
    text_color = "text-blue-400"
    if market.resolution:
        if market.resolution_value is not None:
            value = market.resolution_value
        else:
            value = get_mapped_value(market, market.resolution_probability or 0)
    else:
        value = get_mapped_value(market, get_probability(market))

    classes = cx("summary", "text-3xl" if market.resolution else "text-xl", class_name)
    if market.resolution:
        if market.resolution == "CANCEL":
            outcome = cancel_label()
        else:
            outcome = _tooltip(format_large_number(value), f"{value:.2f}", text_color)
        return el("div", _resolved_caption(), outcome, classes=classes)

    return el(
        "div",
        _tooltip(format_large_number(value), f"{value:.2f}", cx("text-3xl", text_color)),
        el("div", "expected", classes=cx("text-base", text_color)),
        classes=classes,
    )


def _tooltip(content: str, tip: str, class_name: str | tuple[str, ...]) -> Node:
    classes = class_name if isinstance(class_name, tuple) else cx(class_name)
    return el("span", content, classes=cx("tooltip", *classes), title=tip, data_tooltip=tip)


def numeric_resolution_or_expectation(
    market: NumericMarket, now: datetime, class_name: str | None = None
) -> Node:
    classes = cx("summary", "text-3xl" if market.resolution else "text-xl", class_name)
    if market.resolution:
        if market.resolution == "CANCEL":
            outcome = cancel_label()
        else:
            value = market.resolution_value
            if value is None:
                value = get_value_from_bucket(market.resolution, market)
            outcome = el("div", format_large_number(value), classes="text-blue-400")
        return el("div", _resolved_caption(), outcome, classes=classes)

    text_color = f"text-{get_color(market, now)}"
    return el(
        "div",
        el("div", format_large_number(get_expected_value(market)), classes=cx("text-3xl", text_color)),
        el("div", "expected", classes=cx("text-base", text_color)),
        classes=classes,
    )


def free_response_resolution_or_chance(
    market: AnswerMarket,
    now: datetime,
    truncate: Truncate,
    class_name: str | None = None,
) -> Node:
    classes = cx("summary", "text-3xl" if market.resolution else "text-xl", class_name)
    if market.resolution:
        children: list[Node] = [el("div", "Resolved", classes="text-base text-gray-500 sm:hidden")]
        if market.resolution in ("CANCEL", "MKT"):
            children.append(
                free_response_outcome_label(
                    market,
                    market.resolution,
                    truncate,
                    answer_class="text-3xl uppercase text-blue-500",
                )
            )
        return el("div", *children, classes=classes)

    top_answer = get_top_answer(market)
    if top_answer is None:
        return el("div", classes=classes)

    text_color = f"text-{get_color(market, now)}"
    return el(
        "div",
        el(
            "div",
            el(
                "div",
                el("div", format_percent(get_outcome_probability(market, top_answer.id))),
                el("div", "chance", classes="text-base"),
                classes=cx("text-3xl", text_color),
            ),
            classes="items-center gap-6",
        ),
        classes=classes,
    )


def bounty_value(
    market: BountyMarket, now: datetime, *, large: bool = False, class_name: str | None = None
) -> Node:
    text_color = f"text-{get_color(market, now)}"
    return el(
        "div",
        el("div", format_money(market.prize_total), classes=text_color),
        el("div", "bounty", classes=cx(text_color, "text-xl" if large else "text-base")),
        classes=cx("summary", "text-3xl" if large else "text-2xl", class_name),
    )


def unsupported_market(market: Market, class_name: str | None = None) -> Node:
    outcome_type = getattr(market, "outcome_type", type(market).__name__)
    return el(
        "div",
        "Unsupported market",
        classes=cx("summary", "text-base", "text-gray-500", class_name),
        data_outcome_type=outcome_type,
    )


def render_summary(market: Market, now: datetime) -> Node:
    match market:
        case BinaryMarket():
            return binary_resolution_or_chance(market, now, class_name=SUMMARY_CLASSES)
        case PseudoNumericMarket():
            return pseudo_numeric_resolution_or_expectation(market, class_name=SUMMARY_CLASSES)
        case NumericMarket():
            return numeric_resolution_or_expectation(market, now, class_name=SUMMARY_CLASSES)
        case FreeResponseMarket() | MultipleChoiceMarket():
            return free_response_resolution_or_chance(
                market, now, "long", class_name=f"{SUMMARY_CLASSES} text-gray-600"
            )
        case BountyMarket():
            return bounty_value(market, now, class_name=SUMMARY_CLASSES)
        case _:
            return unsupported_market(market, class_name=SUMMARY_CLASSES)


# ----------------------------------------------------------------------
# Card chrome


def _bar_probability(market: Market) -> float | None:
    match market:
        case BinaryMarket() | PseudoNumericMarket():
            return get_probability(market)
        case FreeResponseMarket() | MultipleChoiceMarket():
            top_answer = get_top_answer(market)
            return top_answer.prob if top_answer else None
        case _:
            return None


def prob_bar(market: Market, now: datetime) -> Node | None:
    prob = _bar_probability(market)
    if prob is None:
        return None
    width = f"{prob * 100:.1f}%"
    return el(
        "div",
        classes=cx("prob-bar", "absolute", "right-0", "top-0", "w-2", f"bg-{get_color(market, now)}"),
        style=f"height: {width}",
        data_prob=f"{prob:.4f}",
    )


def quick_bet(market: BinaryMarket | PseudoNumericMarket, viewer: Viewer, now: datetime) -> Node:
    if isinstance(market, PseudoNumericMarket):
        display = format_large_number(get_mapped_value(market, get_probability(market)))
    else:
        display = format_percent(get_probability(market))
    text_color = f"text-{get_color(market, now)}"

    def button(outcome: str, label: str) -> Node:
        return el(
            "button",
            label,
            classes=cx("quick-bet-button", f"quick-bet-{outcome.lower()}"),
            type="button",
            data_contract_id=market.id,
            data_outcome=outcome,
            data_amount=str(QUICK_BET_AMOUNT),
            data_user_id=viewer.id,
        )

    return el(
        "div",
        button("YES", f"{format_money(QUICK_BET_AMOUNT)} on YES"),
        el("div", display, classes=cx("quick-bet-value", "text-3xl", text_color)),
        button("NO", f"{format_money(QUICK_BET_AMOUNT)} on NO"),
        classes="quick-bet relative -my-4 -mr-5 flex min-w-[5.5rem] flex-col justify-between",
        data_bet_endpoint="/bets",
    )


def card_link(market: Market, options: CardOptions) -> Node:
    properties = json.dumps({"contractId": market.id, "slug": market.slug}, sort_keys=True)
    return el(
        "a",
        classes="card-link absolute top-0 left-0 right-0 bottom-0",
        href=contract_path(market),
        data_card_click="custom" if options.has_custom_click else "navigate",
        data_track_event=CARD_CLICK_EVENT,
        data_track_properties=properties,
    )


def avatar_details(market: Market) -> Node:
    return el(
        "div",
        el(
            "img",
            classes="avatar h-6 w-6 rounded-full",
            src=market.creator_avatar_url,
            alt=market.creator_name,
        )
        if market.creator_avatar_url
        else None,
        el("a", market.creator_name, classes="creator-link", href=f"/{market.creator_username}"),
        classes="avatar-details flex items-center gap-2 text-sm text-gray-500",
    )


def misc_details(market: Market, options: CardOptions, now: datetime) -> Node:
    items: list[Node] = []
    if options.show_hot_volume:
        items.append(el("span", f"{format_money(market.volume_24_hours)} 24h", classes="hot-volume"))
    elif options.show_time == "close-date" and market.close_time is not None:
        verb = "Closed" if market.close_time < now else "Closes"
        items.append(el("span", f"{verb} {_format_date(market.close_time)}", classes="close-date"))
    elif options.show_time == "resolve-date" and market.resolution_time is not None:
        items.append(
            el("span", f"Resolved {_format_date(market.resolution_time)}", classes="resolve-date")
        )
    elif market.volume > 0:
        items.append(el("span", f"{format_money(market.volume)} bet", classes="volume"))
    else:
        items.append(el("span", "New", classes="volume"))

    if not options.hide_group_link and market.group_ids:
        group_id = market.group_ids[0]
        items.append(el("a", "Group", classes="group-link", href=f"/group/{group_id}"))

    return el("div", *items, classes="misc-details flex items-center gap-3 text-sm text-gray-400")


def _answer_line(market: AnswerMarket) -> Node | None:
    if market.resolution:
        return free_response_outcome_label(market, market.resolution, "long")
    top_answer = get_top_answer(market)
    if top_answer is None:
        return None
    return answer_label(top_answer, "long", "!text-gray-600")


def render_contract_card(
    market: Market,
    *,
    viewer: Viewer | None = None,
    options: CardOptions | None = None,
    now: datetime | None = None,
) -> Node:
    options = options or CardOptions()
    now = now or datetime.now(timezone.utc)

    answer_line = None
    if isinstance(market, (FreeResponseMarket, MultipleChoiceMarket)):
        answer_line = _answer_line(market)

    body = el(
        "div",
        card_link(market, options),
        avatar_details(market),
        el(
            "p",
            market.question,
            classes="question break-words font-semibold text-indigo-700",
        ),
        answer_line,
        misc_details(market, options, now),
        classes="group relative flex-1 gap-3 py-4 pl-6",
    )

    if should_show_quick_bet(market, viewer, options, now):
        side: tuple[Node | None, ...] = (quick_bet(market, viewer, now),)
    else:
        side = (render_summary(market, now), prob_bar(market, now))

    return el(
        "div",
        body,
        *side,
        classes=cx(
            "contract-card relative gap-3 self-start rounded-lg bg-white shadow-md "
            "hover:cursor-pointer hover:bg-gray-100",
            options.class_name,
        ),
        data_contract_id=market.id,
    )


__all__ = [
    "CARD_CLICK_EVENT",
    "CardOptions",
    "Viewer",
    "binary_resolution_or_chance",
    "bounty_value",
    "contract_path",
    "free_response_resolution_or_chance",
    "get_color",
    "is_closed",
    "numeric_resolution_or_expectation",
    "pseudo_numeric_resolution_or_expectation",
    "render_contract_card",
    "render_summary",
    "should_show_quick_bet",
]
