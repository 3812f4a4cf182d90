"""Sibling composition with list grouping.

Notion stores list items as independent siblings. HTML needs each run of
consecutive items of the same kind inside a single ``<ul>``/``<ol>``. The
composer walks rendered siblings in document order, opening a wrapper when a
run starts and closing it as soon as the run ends.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any


LIST_WRAPPERS: dict[str, tuple[str, str]] = {
    "bulleted_list_item": ("<ul>", "</ul>"),
    "numbered_list_item": ("<ol>", "</ol>"),
    "to_do": ('<ul class="notion-to-do-list">', "</ul>"),
}


def node_kind(node: Any) -> str | None:
    """Return the type tag of a raw node, when it has one."""
    if isinstance(node, Mapping):
        kind = node.get("type")
        return kind if isinstance(kind, str) else None
    return getattr(node, "type", None)


def compose_fragments(items: Sequence[tuple[str | None, str]]) -> str:
    """Concatenate ``(kind, fragment)`` pairs, wrapping runs of list items."""
    output: list[str] = []
    open_kind: str | None = None

    for index, (kind, fragment) in enumerate(items):
        if kind != open_kind:
            if open_kind is not None:
                output.append(LIST_WRAPPERS[open_kind][1])
                open_kind = None
            if kind in LIST_WRAPPERS:
                output.append(LIST_WRAPPERS[kind][0])
                open_kind = kind

        output.append(fragment)

        if open_kind is not None:
            next_kind = items[index + 1][0] if index + 1 < len(items) else None
            if next_kind != open_kind:
                output.append(LIST_WRAPPERS[open_kind][1])
                open_kind = None

    return "".join(output)


def compose(nodes: Sequence[Any], render: Callable[[Any], str]) -> str:
    """Render sibling nodes in order and merge adjacent list items."""
    if not nodes:
        return ""
    return compose_fragments([(node_kind(node), render(node)) for node in nodes])


__all__ = ["LIST_WRAPPERS", "compose", "compose_fragments", "node_kind"]
