"""Market card rendering."""

from .cache import ContractPreloadCache, preload_cache
from .clicks import CardClick, ClickOutcome, handle_card_click
from .nodes import Node, Text, to_dict, to_html
from .renderer import CardOptions, Viewer, render_contract_card
from .variants import Market, market_from_record

__all__ = [
    "CardClick",
    "CardOptions",
    "ClickOutcome",
    "ContractPreloadCache",
    "Market",
    "Node",
    "Text",
    "Viewer",
    "handle_card_click",
    "market_from_record",
    "preload_cache",
    "render_contract_card",
    "to_dict",
    "to_html",
]
