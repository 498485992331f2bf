"""Immutable render tree and its HTML serialisation."""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any, Iterator, Union

VOID_ELEMENTS = frozenset({"br", "hr", "img", "input"})


@dataclass(frozen=True, slots=True)
class Text:
    value: str


@dataclass(frozen=True, slots=True)
class Node:
    tag: str
    classes: tuple[str, ...] = ()
    attrs: tuple[tuple[str, str], ...] = ()
    children: tuple[Child, ...] = ()

    def attr(self, name: str) -> str | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return None


Child = Union[Node, Text]


def cx(*names: str | None) -> tuple[str, ...]:
    """Split and join class names, ignoring empty values (like ``clsx``)."""

    classes: list[str] = []
    for name in names:
        if name:
            classes.extend(name.split())
    return tuple(classes)


def el(
    tag: str,
    *children: Child | str | None,
    classes: tuple[str, ...] | str | None = None,
    **attrs: Any,
) -> Node:
    if isinstance(classes, str) or classes is None:
        classes = cx(classes)
    normalized: list[Child] = []
    for child in children:
        if child is None:
            continue
        normalized.append(Text(child) if isinstance(child, str) else child)
    rendered_attrs = tuple(
        sorted(
            (key.rstrip("_").replace("_", "-"), str(value))
            for key, value in attrs.items()
            if value is not None
        )
    )
    return Node(tag=tag, classes=classes, attrs=rendered_attrs, children=tuple(normalized))


def to_html(node: Child) -> str:
    if isinstance(node, Text):
        return html.escape(node.value)
    parts = [node.tag]
    if node.classes:
        parts.append(f'class="{html.escape(" ".join(node.classes))}"')
    for key, value in node.attrs:
        parts.append(f'{key}="{html.escape(value)}"')
    if node.tag in VOID_ELEMENTS:
        return f"<{' '.join(parts)}>"
    inner = "".join(to_html(child) for child in node.children)
    return f"<{' '.join(parts)}>{inner}</{node.tag}>"


def to_dict(node: Child) -> dict[str, Any]:
    if isinstance(node, Text):
        return {"tag": "#text", "text": node.value}
    return {
        "tag": node.tag,
        "classes": list(node.classes),
        "attrs": dict(node.attrs),
        "children": [to_dict(child) for child in node.children],
    }


def iter_nodes(node: Child) -> Iterator[Child]:
    yield node
    if isinstance(node, Node):
        for child in node.children:
            yield from iter_nodes(child)


def text_content(node: Child) -> str:
    return "".join(item.value for item in iter_nodes(node) if isinstance(item, Text))


def find_all(node: Child, *, class_name: str | None = None, tag: str | None = None) -> list[Node]:
    matches: list[Node] = []
    for item in iter_nodes(node):
        if not isinstance(item, Node):
            continue
        if class_name is not None and class_name not in item.classes:
            continue
        if tag is not None and item.tag != tag:
            continue
        matches.append(item)
    return matches


__all__ = [
    "Child",
    "Node",
    "Text",
    "cx",
    "el",
    "find_all",
    "iter_nodes",
    "text_content",
    "to_dict",
    "to_html",
]
