"""Link-like block handlers: bookmarks, link previews and child pages."""

from __future__ import annotations

from notionsmith.core.blocks import BookmarkBlock, ChildPageBlock, LinkPreviewBlock
from notionsmith.core.context import RenderContext
from notionsmith.core.rules import renders

from ..html.utils import escape_html, wrap
from .inline import render_rich_text


@renders("bookmark", nestable=False)
def render_bookmark(block: BookmarkBlock, children: str, context: RenderContext) -> str:
    """Link to the bookmarked URL, labelled by its caption when one exists."""
    payload = block.bookmark
    label = render_rich_text(payload.caption, context) or escape_html(payload.url)
    return wrap("a", label, {"href": payload.url, "class": "notion-bookmark"})


@renders("link_preview", nestable=False)
def render_link_preview(block: LinkPreviewBlock, children: str, context: RenderContext) -> str:
    url = block.link_preview.url
    return wrap("a", escape_html(url), {"href": url, "class": "notion-link-preview"})


@renders("child_page", nestable=False)
def render_child_page(block: ChildPageBlock, children: str, context: RenderContext) -> str:
    title = escape_html(block.child_page.title)
    href = context.resolve(block.id) if block.id else None
    if href is None:
        return wrap("span", title, {"class": "notion-child-page"})
    return wrap("a", title, {"href": href, "class": "notion-child-page"})


__all__ = ["render_bookmark", "render_child_page", "render_link_preview"]
