import pytest

from _factories import block, heading, paragraph, text

from notionsmith.core.blocks import (
    Color,
    ParagraphBlock,
    TableBlock,
    TextSpan,
    UnsupportedBlock,
    child_nodes,
    spans_plain_text,
    validate_block,
)
from notionsmith.core.exceptions import InvalidBlockError


def test_validate_block_returns_typed_model() -> None:
    node = validate_block(paragraph("Hello", color="blue_background", id="p1"))

    assert isinstance(node, ParagraphBlock)
    assert node.id == "p1"
    assert node.paragraph.color is Color.BLUE_BACKGROUND
    span = node.paragraph.rich_text[0]
    assert isinstance(span, TextSpan)
    assert span.text.content == "Hello"


def test_validate_block_ignores_unknown_fields() -> None:
    raw = paragraph("Hi")
    raw["created_time"] = "2024-01-01T00:00:00.000Z"
    raw["paragraph"]["future_field"] = {"nested": True}

    node = validate_block(raw)

    assert node.payload.rich_text[0].plain_text == "Hi"


def test_unknown_type_is_a_soft_failure() -> None:
    node = validate_block({"id": "x1", "type": "unsupported_type", "unsupported_type": {}})

    assert isinstance(node, UnsupportedBlock)
    assert node.type == "unsupported_type"


@pytest.mark.parametrize("raw", [{"id": "a"}, {"id": "a", "type": 3}, ["not", "a", "mapping"]])
def test_missing_discriminant_is_rejected(raw) -> None:
    with pytest.raises(InvalidBlockError, match="Failed to parse block"):
        validate_block(raw)


def test_invalid_payload_names_block_and_field() -> None:
    raw = block("paragraph", {"rich_text": "should be a list"}, id="bad-1")

    with pytest.raises(InvalidBlockError) as excinfo:
        validate_block(raw)

    error = excinfo.value
    message = str(error)
    assert message.startswith("Failed to parse block: bad-1 (paragraph)")
    assert "obj[rich_text] = \"should be a list\"" in message
    assert error.block_id == "bad-1"
    assert error.block_type == "paragraph"
    assert error.issues[0]["path"] == "paragraph.rich_text"
    assert error.issues[0]["actual"] == "should be a list"


def test_invalid_span_reports_nested_path() -> None:
    span = text("Hello")
    del span["text"]["content"]
    raw = paragraph(span, id="p2")

    with pytest.raises(InvalidBlockError) as excinfo:
        validate_block(raw)

    issue = excinfo.value.issues[0]
    assert issue["missing"] is True
    assert issue["key"] == "content"
    assert "paragraph.rich_text.0" in issue["path"]
    assert "obj[content] = <missing>" in str(excinfo.value)


def test_missing_required_flag_is_reported() -> None:
    raw = block("to_do", {"rich_text": [text("Task")]}, id="todo-1")

    with pytest.raises(InvalidBlockError, match=r"todo-1 \(to_do\)") as excinfo:
        validate_block(raw)

    assert excinfo.value.issues[0]["key"] == "checked"


def test_children_stay_raw_until_visited() -> None:
    broken_child = block("paragraph", {"rich_text": None}, id="broken")
    node = validate_block(heading(1, "Title", children=[broken_child]))

    assert node.children == [broken_child]


def test_table_children_are_read_from_payload() -> None:
    row = block("table_row", {"cells": [[text("a")]]}, id="r1")
    node = validate_block(block("table", {"table_width": 1, "children": [row]}))

    assert isinstance(node, TableBlock)
    assert child_nodes(node) == [row]


def test_table_width_must_be_positive() -> None:
    with pytest.raises(InvalidBlockError):
        validate_block(block("table", {"table_width": 0}))


def test_spans_plain_text_concatenates_content() -> None:
    node = validate_block(paragraph("Hello ", text("World", bold=True)))

    assert spans_plain_text(node.paragraph.rich_text) == "Hello World"
    assert spans_plain_text(None) == ""
