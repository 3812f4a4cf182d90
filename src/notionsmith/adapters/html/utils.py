"""Utility helpers specific to HTML output."""

from __future__ import annotations

from collections.abc import Mapping
import html


AttributeValue = str | bool | None


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>``, ``"`` and ``'`` for text and attribute values."""
    if not text:
        return ""
    return html.escape(text, quote=True)


def render_attributes(attributes: Mapping[str, AttributeValue] | None) -> str:
    """Serialise attributes, skipping empty values and rendering boolean flags bare."""
    if not attributes:
        return ""
    parts: list[str] = []
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {name}")
            continue
        if name == "class" and not value:
            continue
        parts.append(f' {name}="{escape_html(value)}"')
    return "".join(parts)


def wrap(tag: str, content: str, attributes: Mapping[str, AttributeValue] | None = None) -> str:
    """Return ``content`` enclosed in an element."""
    return f"<{tag}{render_attributes(attributes)}>{content}</{tag}>"


def void(tag: str, attributes: Mapping[str, AttributeValue] | None = None) -> str:
    """Return a self-closing element."""
    return f"<{tag}{render_attributes(attributes)} />"


def comment(text: str) -> str:
    """Return an HTML comment, neutralising sequences that would close it early."""
    safe = text.replace("--", "- -")
    return f"<!-- {safe} -->"


__all__ = ["comment", "escape_html", "render_attributes", "void", "wrap"]
