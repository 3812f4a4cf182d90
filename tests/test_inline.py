from _factories import equation, mention, page_mention, paragraph, text

from notionsmith.adapters.handlers.inline import render_rich_text
from notionsmith.core.blocks import validate_block
from notionsmith.core.config import RenderConfig
from notionsmith.core.context import DocumentState, RenderContext


def _inline(renderer, *spans, **kwargs) -> str:
    html = renderer.render(paragraph(*spans), **kwargs)
    assert html.startswith("<p>") and html.endswith("</p>")
    return html[len("<p>") : -len("</p>")]


def test_plain_text_is_escaped(renderer) -> None:
    assert _inline(renderer, "a < b & \"c\" 'd'") == (
        "a &lt; b &amp; &quot;c&quot; &#x27;d&#x27;"
    )


def test_script_content_never_becomes_markup(renderer) -> None:
    html = _inline(renderer, "<script>alert(1)</script>")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_annotations_nest_in_fixed_order(renderer) -> None:
    span = text(
        "x",
        bold=True,
        italic=True,
        strikethrough=True,
        underline=True,
        code=True,
        color="red",
    )

    assert _inline(renderer, span) == (
        '<span class="notion-red"><code><u><del><em><strong>x</strong></em></del></u></code></span>'
    )


def test_link_wraps_outermost(renderer) -> None:
    span = text("site", link="https://example.com/?a=1&b=2", bold=True)

    assert _inline(renderer, span) == (
        '<a href="https://example.com/?a=1&amp;b=2"><strong>site</strong></a>'
    )


def test_background_colour_class(renderer) -> None:
    span = text("hi", color="blue_background")

    assert _inline(renderer, span) == '<span class="notion-blue-background">hi</span>'


def test_equation_span_is_not_escaped(renderer) -> None:
    assert _inline(renderer, equation("a<b")) == '<code class="language-math">a<b</code>'


def test_unresolved_page_mention_is_marked(renderer, emitter) -> None:
    state = DocumentState()

    html = _inline(renderer, page_mention("X", "Other"), state=state, emitter=emitter)

    assert html == '<span class="notion-mention-unresolved" data-page-id="X">Other</span>'
    assert state.unresolved_mentions == ["X"]
    assert emitter.events_named("unresolved_mention") == [{"page_id": "X", "text": "Other"}]


def test_resolved_page_mention_links_to_slug(renderer) -> None:
    html = _inline(renderer, page_mention("X", "Other"), resolution={"X": "my-slug"})

    assert html == '<a href="/posts/my-slug/">Other</a>'


def test_resolution_ignores_dashes_and_case(renderer) -> None:
    dashed = "1F6AA550-F576-4E3B-9B9C-0123456789AB"
    html = _inline(
        renderer,
        page_mention(dashed),
        resolution={"1f6aa550f5764e3b9b9c0123456789ab": "slug"},
    )

    assert 'href="/posts/slug/"' in html


def test_database_mention_uses_resolution(renderer) -> None:
    span = mention("database", {"id": "db"}, "Catalog")

    assert _inline(renderer, span, resolution={"db": "catalog"}) == (
        '<a href="/posts/catalog/">Catalog</a>'
    )


def test_custom_mention_href_template() -> None:
    from notionsmith.adapters.html.renderer import HtmlRenderer

    renderer = HtmlRenderer(RenderConfig(mention_href="/docs/{slug}.html"))

    assert _inline(renderer, page_mention("X", "Doc"), resolution={"X": "doc"}) == (
        '<a href="/docs/doc.html">Doc</a>'
    )


def test_user_mention_is_a_placeholder(renderer) -> None:
    span = mention("user", {"object": "user", "id": "u1", "name": "Ada"}, "@Ada")

    assert _inline(renderer, span) == (
        '<span class="notion-mention-user" data-user-id="u1">@Ada</span>'
    )


def test_date_mention_renders_time_element(renderer) -> None:
    span = mention("date", {"start": "2024-01-01", "end": "2024-01-03"}, "Jan 1 → 3")

    assert _inline(renderer, span) == (
        '<time datetime="2024-01-01" data-end="2024-01-03">Jan 1 → 3</time>'
    )


def test_link_preview_mention_links_to_url(renderer) -> None:
    span = mention("link_preview", {"url": "https://github.com/x"}, "x")

    assert _inline(renderer, span) == '<a href="https://github.com/x">x</a>'


def test_other_mentions_fall_back_to_text(renderer) -> None:
    span = mention("template_mention", {"type": "template_mention_date"}, "@Today")

    assert _inline(renderer, span) == "@Today"


def test_annotations_apply_to_mentions(renderer) -> None:
    span = page_mention("X", "Other")
    span["annotations"]["italic"] = True

    html = _inline(renderer, span, resolution={"X": "other"})

    assert html == '<em><a href="/posts/other/">Other</a></em>'


def test_empty_span_sequence_renders_nothing() -> None:
    context = RenderContext()
    block = validate_block(paragraph())

    assert render_rich_text(block.paragraph.rich_text, context) == ""
    assert render_rich_text(None, context) == ""
