"""Block-level handlers for text, list, code and table blocks."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from notionsmith.core.blocks import (
    Block,
    CalloutBlock,
    CodeBlock,
    EquationBlock,
    TableBlock,
    TableRowBlock,
    ToDoBlock,
    ToggleBlock,
    child_nodes,
    validate_block,
)
from notionsmith.core.context import RenderContext
from notionsmith.core.exceptions import InvalidBlockError
from notionsmith.core.rules import UNSUPPORTED_NODE, renders

from ..html.utils import comment, escape_html, void, wrap
from .inline import render_rich_text


logger = logging.getLogger(__name__)

_HEADING_TAGS = {"heading_1": "h1", "heading_2": "h2", "heading_3": "h3"}


@renders("heading_1", "heading_2", "heading_3", nestable=False)
def render_heading(block: Block, children: str, context: RenderContext) -> str:
    """Render headings; nested content of toggleable headings is not emitted."""
    payload = block.payload
    if block.has_children or block.children:
        logger.debug("Ignoring children of heading %s", block.id)
    return wrap(
        _HEADING_TAGS[block.type],
        render_rich_text(payload.rich_text, context),
        {"class": context.color_class(payload.color)},
    )


@renders("paragraph")
def render_paragraph(block: Block, children: str, context: RenderContext) -> str:
    payload = block.payload
    paragraph = wrap(
        "p",
        render_rich_text(payload.rich_text, context),
        {"class": context.color_class(payload.color)},
    )
    if children:
        paragraph += wrap("div", children, {"class": "notion-indent"})
    return paragraph


@renders("bulleted_list_item", "numbered_list_item")
def render_list_item(block: Block, children: str, context: RenderContext) -> str:
    """Render one list entry; the enclosing list comes from the composer."""
    payload = block.payload
    return wrap(
        "li",
        render_rich_text(payload.rich_text, context) + children,
        {"class": context.color_class(payload.color)},
    )


@renders("to_do")
def render_to_do(block: ToDoBlock, children: str, context: RenderContext) -> str:
    payload = block.to_do
    checkbox = void(
        "input",
        {"type": "checkbox", "disabled": True, "checked": payload.checked},
    )
    return wrap(
        "li",
        f"{checkbox} {render_rich_text(payload.rich_text, context)}{children}",
        {"class": context.color_class(payload.color)},
    )


@renders("quote")
def render_quote(block: Block, children: str, context: RenderContext) -> str:
    payload = block.payload
    return wrap(
        "blockquote",
        render_rich_text(payload.rich_text, context) + children,
        {"class": context.color_class(payload.color)},
    )


def _callout_icon(block: CalloutBlock) -> str:
    icon = block.callout.icon
    if icon is None:
        return ""
    if icon.emoji:
        content = escape_html(icon.emoji)
    elif icon.external is not None:
        content = void("img", {"src": icon.external.url, "alt": ""})
    elif icon.file is not None:
        content = void("img", {"src": icon.file.url, "alt": ""})
    else:
        return ""
    return wrap("span", content, {"class": "notion-callout-icon"})


@renders("callout")
def render_callout(block: CalloutBlock, children: str, context: RenderContext) -> str:
    payload = block.callout
    classes = " ".join(
        part for part in ("notion-callout", context.color_class(payload.color)) if part
    )
    body = wrap(
        "div",
        render_rich_text(payload.rich_text, context),
        {"class": "notion-callout-content"},
    )
    return wrap("aside", _callout_icon(block) + body + children, {"class": classes})


@renders("code", nestable=False)
def render_code(block: CodeBlock, children: str, context: RenderContext) -> str:
    payload = block.code
    code = wrap(
        "pre",
        wrap(
            "code",
            render_rich_text(payload.rich_text, context),
            {"class": f"language-{payload.language}"},
        ),
    )
    if not payload.caption:
        return code
    return wrap("figure", code + wrap("figcaption", render_rich_text(payload.caption, context)))


@renders("equation", nestable=False)
def render_equation_block(block: EquationBlock, children: str, context: RenderContext) -> str:
    return wrap("code", block.equation.expression, {"class": "language-math"})


def _render_cells(
    cells: Sequence[Sequence],
    context: RenderContext,
    *,
    header: bool = False,
    row_header: bool = False,
) -> str:
    parts = []
    for index, cell in enumerate(cells):
        tag = "th" if header or (row_header and index == 0) else "td"
        parts.append(wrap(tag, render_rich_text(cell, context)))
    return "".join(parts)


@renders("table_row", nestable=False)
def render_table_row(block: TableRowBlock, children: str, context: RenderContext) -> str:
    return wrap("tr", _render_cells(block.table_row.cells, context))


def _table_rows(block: TableBlock) -> list[TableRowBlock]:
    rows: list[TableRowBlock] = []
    for raw in child_nodes(block):
        row = validate_block(raw)
        if not isinstance(row, TableRowBlock):
            raise InvalidBlockError(
                f"Failed to parse block: {row.id} ({row.type})\n"
                f"table {block.id} only accepts table_row children",
                block_id=row.id,
                block_type=row.type,
            )
        rows.append(row)
    return rows


@renders("table", nestable=False)
def render_table(block: TableBlock, children: str, context: RenderContext) -> str:
    """Regroup the cells of the row children into rows of ``table_width`` cells."""
    payload = block.table
    width = payload.table_width
    cells = [cell for row in _table_rows(block) for cell in row.table_row.cells]

    rows: list[str] = []
    for start in range(0, len(cells), width):
        chunk = cells[start : start + width]
        header = payload.has_column_header and start == 0
        rows.append(
            wrap(
                "tr",
                _render_cells(
                    chunk, context, header=header, row_header=payload.has_row_header
                ),
                {"class": "notion-table-header" if header else None},
            )
        )
    return wrap("table", wrap("tbody", "".join(rows)))


@renders("toggle")
def render_toggle(block: ToggleBlock, children: str, context: RenderContext) -> str:
    payload = block.toggle
    summary = wrap(
        "summary",
        render_rich_text(payload.rich_text, context),
        {"class": context.color_class(payload.color)},
    )
    return wrap("details", summary + wrap("div", children))


@renders("divider", nestable=False)
def render_divider(block: Block, children: str, context: RenderContext) -> str:
    return void("hr")


@renders(UNSUPPORTED_NODE, nestable=False)
def render_unsupported(block: Block, children: str, context: RenderContext) -> str:
    """Emit a marker for well-formed blocks of an unknown type."""
    context.state.record_unsupported(block.type, block.id)
    context.emitter.event("unsupported_block", {"type": block.type, "id": block.id})
    if not context.config.unsupported_comments:
        return ""
    return comment(f"Unsupported block type: {block.type}")


__all__ = [
    "render_callout",
    "render_code",
    "render_divider",
    "render_equation_block",
    "render_heading",
    "render_list_item",
    "render_paragraph",
    "render_quote",
    "render_table",
    "render_table_row",
    "render_to_do",
    "render_toggle",
    "render_unsupported",
]
