"""Media handlers (images, video, audio, files and embeds)."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from notionsmith.core.blocks import Block, ExternalSource, HostedSource, spans_plain_text
from notionsmith.core.context import RenderContext
from notionsmith.core.rules import renders

from ..html.utils import escape_html, void, wrap
from .inline import render_rich_text


def media_url(source: ExternalSource | HostedSource) -> str:
    """Return the URL of whichever source variant the payload carries."""
    if isinstance(source, ExternalSource):
        return source.external.url
    return source.file.url


def _figcaption(source: ExternalSource | HostedSource, context: RenderContext) -> str:
    if not source.caption:
        return ""
    return wrap("figcaption", render_rich_text(source.caption, context))


def _file_label(source: ExternalSource | HostedSource) -> str:
    if source.name:
        return source.name
    url = media_url(source)
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return name or url


@renders("image", nestable=False)
def render_image(block: Block, children: str, context: RenderContext) -> str:
    source = block.payload
    image = void(
        "img",
        {"src": media_url(source), "alt": spans_plain_text(source.caption)},
    )
    return wrap("figure", image + _figcaption(source, context))


@renders("video", nestable=False)
def render_video(block: Block, children: str, context: RenderContext) -> str:
    source = block.payload
    video = wrap("video", "", {"src": media_url(source), "controls": True})
    return wrap("figure", video + _figcaption(source, context))


@renders("audio", nestable=False)
def render_audio(block: Block, children: str, context: RenderContext) -> str:
    source = block.payload
    audio = wrap("audio", "", {"src": media_url(source), "controls": True})
    return wrap("figure", audio + _figcaption(source, context))


@renders("file", "pdf", nestable=False)
def render_file(block: Block, children: str, context: RenderContext) -> str:
    source = block.payload
    link = wrap(
        "a",
        escape_html(_file_label(source)),
        {"href": media_url(source), "class": f"notion-{block.type}"},
    )
    return wrap("figure", link + _figcaption(source, context))


@renders("embed", nestable=False)
def render_embed(block: Block, children: str, context: RenderContext) -> str:
    payload = block.payload
    frame = wrap("iframe", "", {"src": payload.url, "loading": "lazy"})
    caption = (
        wrap("figcaption", render_rich_text(payload.caption, context)) if payload.caption else ""
    )
    return wrap("figure", frame + caption, {"class": "notion-embed"})


__all__ = [
    "media_url",
    "render_audio",
    "render_embed",
    "render_file",
    "render_image",
    "render_video",
]
