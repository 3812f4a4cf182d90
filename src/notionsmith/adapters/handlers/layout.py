"""Layout-only blocks: columns and synced blocks."""

from __future__ import annotations

from notionsmith.core.blocks import Block
from notionsmith.core.context import RenderContext
from notionsmith.core.rules import renders

from ..html.utils import wrap


@renders("column_list")
def render_column_list(block: Block, children: str, context: RenderContext) -> str:
    if not children:
        return ""
    return wrap("div", children, {"class": "notion-column-list"})


@renders("column")
def render_column(block: Block, children: str, context: RenderContext) -> str:
    if not children:
        return ""
    return wrap("div", children, {"class": "notion-column"})


@renders("synced_block")
def render_synced_block(block: Block, children: str, context: RenderContext) -> str:
    # The original content of a synced copy is fetched as its children.
    return children


__all__ = ["render_column", "render_column_list", "render_synced_block"]
