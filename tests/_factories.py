"""Builders for raw Notion API payloads used across the tests."""

from __future__ import annotations

from typing import Any


_DEFAULT_ANNOTATIONS = {
    "bold": False,
    "italic": False,
    "strikethrough": False,
    "underline": False,
    "code": False,
    "color": "default",
}


def annotations(**flags: Any) -> dict[str, Any]:
    return {**_DEFAULT_ANNOTATIONS, **flags}


def text(content: str, *, link: str | None = None, **flags: Any) -> dict[str, Any]:
    return {
        "type": "text",
        "text": {"content": content, "link": {"url": link} if link else None},
        "annotations": annotations(**flags),
        "plain_text": content,
        "href": link,
    }


def equation(expression: str, **flags: Any) -> dict[str, Any]:
    return {
        "type": "equation",
        "equation": {"expression": expression},
        "annotations": annotations(**flags),
        "plain_text": expression,
        "href": None,
    }


def mention(kind: str, value: dict[str, Any], label: str, **flags: Any) -> dict[str, Any]:
    return {
        "type": "mention",
        "mention": {"type": kind, kind: value},
        "annotations": annotations(**flags),
        "plain_text": label,
        "href": None,
    }


def page_mention(page_id: str, label: str = "Linked page") -> dict[str, Any]:
    return mention("page", {"id": page_id}, label)


def _spans(items: tuple[Any, ...]) -> list[dict[str, Any]]:
    return [text(item) if isinstance(item, str) else item for item in items]


def block(
    kind: str,
    payload: dict[str, Any] | None = None,
    *,
    id: str | None = None,
    children: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    node: dict[str, Any] = {
        "object": "block",
        "id": id or f"{kind}-id",
        "type": kind,
        "has_children": bool(children),
        kind: payload if payload is not None else {},
    }
    if children is not None:
        node["children"] = children
    return node


def rich_block(kind: str, *spans: Any, color: str = "default", **extra: Any) -> dict[str, Any]:
    children = extra.pop("children", None)
    block_id = extra.pop("id", None)
    payload = {"rich_text": _spans(spans), "color": color, **extra}
    return block(kind, payload, id=block_id, children=children)


def paragraph(*spans: Any, **extra: Any) -> dict[str, Any]:
    return rich_block("paragraph", *spans, **extra)


def heading(level: int, *spans: Any, **extra: Any) -> dict[str, Any]:
    return rich_block(f"heading_{level}", *spans, **extra)


def bullet(*spans: Any, **extra: Any) -> dict[str, Any]:
    return rich_block("bulleted_list_item", *spans, **extra)


def numbered(*spans: Any, **extra: Any) -> dict[str, Any]:
    return rich_block("numbered_list_item", *spans, **extra)


def to_do(*spans: Any, checked: bool = False, **extra: Any) -> dict[str, Any]:
    return rich_block("to_do", *spans, checked=checked, **extra)


def image(url: str, caption: str | None = None, *, hosted: bool = False) -> dict[str, Any]:
    source = "file" if hosted else "external"
    payload: dict[str, Any] = {
        "type": source,
        source: {"url": url},
        "caption": [text(caption)] if caption else [],
    }
    return block("image", payload)


def table_row(*cells: str, id: str | None = None) -> dict[str, Any]:
    return block("table_row", {"cells": [[text(cell)] for cell in cells]}, id=id)


def table(
    width: int, *rows: dict[str, Any], header: bool = False, row_header: bool = False
) -> dict[str, Any]:
    return block(
        "table",
        {
            "table_width": width,
            "has_column_header": header,
            "has_row_header": row_header,
            "children": list(rows),
        },
    )


def title_property(value: str) -> dict[str, Any]:
    return {"id": "title", "type": "title", "title": [text(value)]}


def multi_select_property(*names: str) -> dict[str, Any]:
    return {
        "id": "tags",
        "type": "multi_select",
        "multi_select": [{"id": name, "name": name, "color": "default"} for name in names],
    }


def page(page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
    return {"object": "page", "id": page_id, "properties": properties}
