"""Rich text handlers turning span sequences into inline HTML."""

from __future__ import annotations

from collections.abc import Iterable

from notionsmith.core.blocks import (
    Annotations,
    DatabaseMention,
    DateMention,
    EquationSpan,
    LinkPreviewMention,
    MentionSpan,
    PageMention,
    TextSpan,
    UserMention,
)
from notionsmith.core.context import RenderContext

from ..html.utils import escape_html, wrap


_STYLE_TAGS: tuple[tuple[str, str], ...] = (
    ("bold", "strong"),
    ("italic", "em"),
    ("strikethrough", "del"),
    ("underline", "u"),
    ("code", "code"),
)


def apply_annotations(fragment: str, annotations: Annotations, context: RenderContext) -> str:
    """Wrap a fragment in style elements, innermost first: bold to colour."""
    node = fragment
    for flag, tag in _STYLE_TAGS:
        if getattr(annotations, flag):
            node = wrap(tag, node)
    css_class = context.color_class(annotations.color)
    if css_class:
        node = wrap("span", node, {"class": css_class})
    return node


def render_text(span: TextSpan, context: RenderContext) -> str:
    node = apply_annotations(escape_html(span.text.content), span.annotations, context)
    link = span.text.link
    if link is not None and link.url:
        node = wrap("a", node, {"href": link.url})
    return node


def render_equation(span: EquationSpan, context: RenderContext) -> str:
    # Equation source is TeX handed to a client-side renderer; keep it verbatim.
    base = wrap("code", span.equation.expression, {"class": "language-math"})
    return apply_annotations(base, span.annotations, context)


def render_page_mention(page_id: str, text: str, context: RenderContext) -> str:
    """Link a page mention through the resolution table, or mark it unresolved."""
    label = escape_html(text)
    href = context.resolve(page_id)
    if href is not None:
        return wrap("a", label, {"href": href})

    context.state.record_unresolved(page_id)
    context.emitter.event("unresolved_mention", {"page_id": page_id, "text": text})
    return wrap(
        "span",
        label,
        {"class": "notion-mention-unresolved", "data-page-id": page_id},
    )


def render_mention(span: MentionSpan, context: RenderContext) -> str:
    mention = span.mention
    text = span.plain_text

    if isinstance(mention, PageMention):
        node = render_page_mention(mention.page.id, text, context)
    elif isinstance(mention, DatabaseMention):
        node = render_page_mention(mention.database.id, text, context)
    elif isinstance(mention, UserMention):
        label = text or f"@{mention.user.name or mention.user.id}"
        node = wrap(
            "span",
            escape_html(label),
            {"class": "notion-mention-user", "data-user-id": mention.user.id},
        )
    elif isinstance(mention, DateMention):
        value = mention.date
        node = wrap(
            "time",
            escape_html(text or value.start),
            {
                "datetime": value.start,
                "data-end": value.end,
                "data-time-zone": value.time_zone,
            },
        )
    elif isinstance(mention, LinkPreviewMention):
        url = mention.link_preview.url
        node = wrap("a", escape_html(text or url), {"href": url})
    else:
        node = escape_html(text)

    return apply_annotations(node, span.annotations, context)


def render_span(span: TextSpan | EquationSpan | MentionSpan, context: RenderContext) -> str:
    """Render a single span to HTML."""
    if isinstance(span, TextSpan):
        return render_text(span, context)
    if isinstance(span, EquationSpan):
        return render_equation(span, context)
    return render_mention(span, context)


def render_rich_text(
    spans: Iterable[TextSpan | EquationSpan | MentionSpan] | None, context: RenderContext
) -> str:
    """Render a span sequence to concatenated inline HTML."""
    if not spans:
        return ""
    return "".join(render_span(span, context) for span in spans)


__all__ = [
    "apply_annotations",
    "render_equation",
    "render_mention",
    "render_page_mention",
    "render_rich_text",
    "render_span",
    "render_text",
]
