"""Structural contracts for Notion blocks and rich text spans.

Every block type known to the renderer is described by a pydantic model whose
``type`` field is a literal discriminant. Models accept unknown extra keys so
that newer API responses keep validating, but every field the renderer reads
is declared with its expected type.

Validation is performed one node at a time through :func:`validate_block`.
Payload level ``children`` stay raw mappings: a malformed descendant is only
reported once the renderer actually visits it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError

from .exceptions import InvalidBlockError


RawNode = dict[str, Any]


class Color(str, Enum):
    """Colours Notion applies to text and blocks."""

    DEFAULT = "default"
    GRAY = "gray"
    BROWN = "brown"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    PINK = "pink"
    RED = "red"
    GRAY_BACKGROUND = "gray_background"
    BROWN_BACKGROUND = "brown_background"
    ORANGE_BACKGROUND = "orange_background"
    YELLOW_BACKGROUND = "yellow_background"
    GREEN_BACKGROUND = "green_background"
    BLUE_BACKGROUND = "blue_background"
    PURPLE_BACKGROUND = "purple_background"
    PINK_BACKGROUND = "pink_background"
    RED_BACKGROUND = "red_background"


class _Model(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)


# Rich text -------------------------------------------------------------------


class Annotations(_Model):
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: Color = Color.DEFAULT


class Link(_Model):
    url: str | None = None


class TextContent(_Model):
    content: str
    link: Link | None = None


class EquationContent(_Model):
    expression: str


class _SpanBase(_Model):
    annotations: Annotations = Field(default_factory=Annotations)
    plain_text: str = ""
    href: str | None = None


class TextSpan(_SpanBase):
    type: Literal["text"]
    text: TextContent


class EquationSpan(_SpanBase):
    type: Literal["equation"]
    equation: EquationContent


class PageReference(_Model):
    id: str


class UserReference(_Model):
    id: str
    name: str | None = None


class DateValue(_Model):
    start: str
    end: str | None = None
    time_zone: str | None = None


class UrlReference(_Model):
    url: str


class PageMention(_Model):
    type: Literal["page"]
    page: PageReference


class DatabaseMention(_Model):
    type: Literal["database"]
    database: PageReference


class UserMention(_Model):
    type: Literal["user"]
    user: UserReference


class DateMention(_Model):
    type: Literal["date"]
    date: DateValue


class LinkPreviewMention(_Model):
    type: Literal["link_preview"]
    link_preview: UrlReference


class OtherMention(_Model):
    """Mention kinds rendered as their plain text (templates, custom emoji...)."""

    type: str


_MENTION_KINDS = frozenset({"page", "database", "user", "date", "link_preview"})


def _mention_kind(value: Any) -> str | None:
    kind = value.get("type") if isinstance(value, Mapping) else getattr(value, "type", None)
    if not isinstance(kind, str):
        return None
    return kind if kind in _MENTION_KINDS else "other"


Mention = Annotated[
    Union[
        Annotated[PageMention, Tag("page")],
        Annotated[DatabaseMention, Tag("database")],
        Annotated[UserMention, Tag("user")],
        Annotated[DateMention, Tag("date")],
        Annotated[LinkPreviewMention, Tag("link_preview")],
        Annotated[OtherMention, Tag("other")],
    ],
    Discriminator(_mention_kind),
]


class MentionSpan(_SpanBase):
    type: Literal["mention"]
    mention: Mention


Span = Annotated[Union[TextSpan, EquationSpan, MentionSpan], Field(discriminator="type")]


# Block payloads ----------------------------------------------------------------


class RichTextPayload(_Model):
    rich_text: list[Span]
    color: Color = Color.DEFAULT


class HeadingPayload(RichTextPayload):
    is_toggleable: bool = False


class NestedRichTextPayload(RichTextPayload):
    children: list[RawNode] | None = None


class ToDoPayload(NestedRichTextPayload):
    checked: bool


class Icon(_Model):
    type: str
    emoji: str | None = None
    external: UrlReference | None = None
    file: UrlReference | None = None


class CalloutPayload(RichTextPayload):
    icon: Icon | None = None


class CodePayload(_Model):
    rich_text: list[Span]
    language: str
    caption: list[Span] = Field(default_factory=list)


class ExternalSource(_Model):
    type: Literal["external"]
    external: UrlReference
    caption: list[Span] | None = None
    name: str | None = None


class HostedSource(_Model):
    type: Literal["file"]
    file: UrlReference
    caption: list[Span] | None = None
    name: str | None = None


MediaPayload = Annotated[Union[ExternalSource, HostedSource], Field(discriminator="type")]


class LinkPayload(_Model):
    url: str
    caption: list[Span] = Field(default_factory=list)


class TablePayload(_Model):
    table_width: int = Field(ge=1)
    has_column_header: bool = False
    has_row_header: bool = False
    children: list[RawNode] = Field(default_factory=list)


class TableRowPayload(_Model):
    cells: list[list[Span]]


class EmptyPayload(_Model):
    pass


class ChildPagePayload(_Model):
    title: str


# Blocks ------------------------------------------------------------------------


class Block(_Model):
    """Fields shared by every block regardless of its type."""

    type: str
    id: str | None = None
    has_children: bool = False
    children: list[RawNode] | None = None

    @property
    def payload(self) -> Any:
        """Return the type specific payload stored under the ``type`` key."""
        return getattr(self, self.type, None)


class Heading1Block(Block):
    type: Literal["heading_1"]
    heading_1: HeadingPayload


class Heading2Block(Block):
    type: Literal["heading_2"]
    heading_2: HeadingPayload


class Heading3Block(Block):
    type: Literal["heading_3"]
    heading_3: HeadingPayload


class ParagraphBlock(Block):
    type: Literal["paragraph"]
    paragraph: RichTextPayload


class BulletedListItemBlock(Block):
    type: Literal["bulleted_list_item"]
    bulleted_list_item: NestedRichTextPayload


class NumberedListItemBlock(Block):
    type: Literal["numbered_list_item"]
    numbered_list_item: NestedRichTextPayload


class ToDoBlock(Block):
    type: Literal["to_do"]
    to_do: ToDoPayload


class QuoteBlock(Block):
    type: Literal["quote"]
    quote: RichTextPayload


class CalloutBlock(Block):
    type: Literal["callout"]
    callout: CalloutPayload


class CodeBlock(Block):
    type: Literal["code"]
    code: CodePayload


class EquationBlock(Block):
    type: Literal["equation"]
    equation: EquationContent


class ImageBlock(Block):
    type: Literal["image"]
    image: MediaPayload


class VideoBlock(Block):
    type: Literal["video"]
    video: MediaPayload


class AudioBlock(Block):
    type: Literal["audio"]
    audio: MediaPayload


class FileBlock(Block):
    type: Literal["file"]
    file: MediaPayload


class PdfBlock(Block):
    type: Literal["pdf"]
    pdf: MediaPayload


class EmbedBlock(Block):
    type: Literal["embed"]
    embed: LinkPayload


class BookmarkBlock(Block):
    type: Literal["bookmark"]
    bookmark: LinkPayload


class LinkPreviewBlock(Block):
    type: Literal["link_preview"]
    link_preview: UrlReference


class TableBlock(Block):
    type: Literal["table"]
    table: TablePayload


class TableRowBlock(Block):
    type: Literal["table_row"]
    table_row: TableRowPayload


class ToggleBlock(Block):
    type: Literal["toggle"]
    toggle: NestedRichTextPayload


class DividerBlock(Block):
    type: Literal["divider"]
    divider: EmptyPayload = Field(default_factory=EmptyPayload)


class ColumnListBlock(Block):
    type: Literal["column_list"]
    column_list: EmptyPayload = Field(default_factory=EmptyPayload)


class ColumnBlock(Block):
    type: Literal["column"]
    column: EmptyPayload = Field(default_factory=EmptyPayload)


class SyncedBlock(Block):
    type: Literal["synced_block"]
    synced_block: EmptyPayload = Field(default_factory=EmptyPayload)


class ChildPageBlock(Block):
    type: Literal["child_page"]
    child_page: ChildPagePayload


class UnsupportedBlock(Block):
    """Well-formed block whose type has no production rule."""


BLOCK_MODELS: dict[str, type[Block]] = {
    "heading_1": Heading1Block,
    "heading_2": Heading2Block,
    "heading_3": Heading3Block,
    "paragraph": ParagraphBlock,
    "bulleted_list_item": BulletedListItemBlock,
    "numbered_list_item": NumberedListItemBlock,
    "to_do": ToDoBlock,
    "quote": QuoteBlock,
    "callout": CalloutBlock,
    "code": CodeBlock,
    "equation": EquationBlock,
    "image": ImageBlock,
    "video": VideoBlock,
    "audio": AudioBlock,
    "file": FileBlock,
    "pdf": PdfBlock,
    "embed": EmbedBlock,
    "bookmark": BookmarkBlock,
    "link_preview": LinkPreviewBlock,
    "table": TableBlock,
    "table_row": TableRowBlock,
    "toggle": ToggleBlock,
    "divider": DividerBlock,
    "column_list": ColumnListBlock,
    "column": ColumnBlock,
    "synced_block": SyncedBlock,
    "child_page": ChildPageBlock,
}

KNOWN_BLOCK_TYPES = frozenset(BLOCK_MODELS)

# Block types whose fetched children live inside the payload.
PAYLOAD_CHILDREN_TYPES = frozenset({"table", "toggle"})


# Validation --------------------------------------------------------------------

_MISSING = object()


def _walk(
    current: Any, path: Sequence[int | str], parent: Any, key: int | str | None, depth: int
) -> tuple[Any, int | str | None, Any, int]:
    if not path:
        return parent, key, current, depth
    segment, rest = path[0], path[1:]
    candidates: list[tuple[Any, int | str | None, Any, int]] = []
    if isinstance(current, Mapping) and segment in current:
        candidates.append(_walk(current[segment], rest, current, segment, depth + 1))
    elif (
        isinstance(current, list)
        and isinstance(segment, int)
        and -len(current) <= segment < len(current)
    ):
        candidates.append(_walk(current[segment], rest, current, segment, depth + 1))
    if isinstance(current, Mapping) and (current.get("type") == segment or segment == "other"):
        candidates.append(_walk(current, rest, parent, key, depth + 1))
    if not candidates:
        return current, segment, _MISSING, depth
    return max(candidates, key=lambda candidate: candidate[3])


def _locate(data: Any, path: Sequence[int | str]) -> tuple[Any, int | str | None, Any]:
    """Walk ``path`` through raw data, returning (parent, final key, value).

    Discriminated unions add their tag to error locations. A tag can share its
    name with a payload key (``text`` spans store a ``text`` object), so both
    readings are tried and the one resolving the most segments wins.
    """
    parent, key, value, _ = _walk(data, tuple(path), None, None, 0)
    return parent, key, value


def _dump(value: Any, *, indent: int | None = None) -> str:
    if value is _MISSING:
        return "<missing>"
    return json.dumps(value, indent=indent, default=str, ensure_ascii=False)


def describe_validation_issues(error: ValidationError, data: Any) -> list[dict[str, Any]]:
    """Return structured issues (path, message, expected, actual) for an error."""
    issues: list[dict[str, Any]] = []
    for entry in error.errors(include_url=False):
        location = tuple(entry.get("loc", ()))
        parent, key, value = _locate(data, location)
        issues.append(
            {
                "path": ".".join(str(part) for part in location),
                "key": key,
                "message": entry.get("msg", ""),
                "expected": entry.get("type", ""),
                "actual": None if value is _MISSING else value,
                "missing": value is _MISSING,
                "context": parent,
            }
        )
    return issues


def explain_validation_error(error: ValidationError, data: Any) -> str:
    """Render a validation error as a numbered, human-readable diagnostic."""
    lines: list[str] = []
    for index, issue in enumerate(describe_validation_issues(error, data), start=1):
        actual = _MISSING if issue["missing"] else issue["actual"]
        lines.append(
            f"{index}: {issue['message']} (at {issue['path'] or '<root>'}, "
            f"expected {issue['expected']})\n\n"
            f"obj[{issue['key']}] = {_dump(actual)}\n"
            f"obj: {_dump(issue['context'], indent=2)}\n"
        )
    return "\n".join(lines)


def validate_block(raw: Any) -> Block:
    """Validate a raw node against the contract of its declared type."""
    if not isinstance(raw, Mapping):
        raise InvalidBlockError(
            f"Failed to parse block: <unknown> (<unknown>)\n"
            f"expected a mapping, got {type(raw).__name__}"
        )

    block_type = raw.get("type")
    block_id = raw.get("id")
    if not isinstance(block_type, str) or not block_type:
        raise InvalidBlockError(
            f"Failed to parse block: {block_id} ({block_type})\n"
            f"missing string discriminant 'type'\nobj: {_dump(dict(raw), indent=2)}",
            block_id=block_id if isinstance(block_id, str) else None,
        )

    model = BLOCK_MODELS.get(block_type, UnsupportedBlock)
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        issues = describe_validation_issues(exc, raw)
        message = (
            f"Failed to parse block: {block_id} ({block_type})\n"
            f"{explain_validation_error(exc, raw)}"
        )
        raise InvalidBlockError(
            message,
            block_id=block_id if isinstance(block_id, str) else None,
            block_type=block_type,
            issues=issues,
        ) from exc


def child_nodes(block: Block) -> list[RawNode]:
    """Return the raw children of a block, wherever the fetch stored them."""
    if block.type in PAYLOAD_CHILDREN_TYPES:
        nested = getattr(block.payload, "children", None)
        if nested:
            return list(nested)
    return list(block.children or ())


def spans_plain_text(spans: Sequence[TextSpan | EquationSpan | MentionSpan] | None) -> str:
    """Concatenate the unformatted text of a span sequence."""
    parts: list[str] = []
    for span in spans or ():
        if isinstance(span, TextSpan):
            parts.append(span.text.content)
        elif isinstance(span, EquationSpan):
            parts.append(span.equation.expression)
        else:
            parts.append(span.plain_text)
    return "".join(parts)


__all__ = [
    "BLOCK_MODELS",
    "KNOWN_BLOCK_TYPES",
    "PAYLOAD_CHILDREN_TYPES",
    "Annotations",
    "Block",
    "Color",
    "EquationSpan",
    "ExternalSource",
    "HostedSource",
    "MentionSpan",
    "RawNode",
    "Span",
    "TextSpan",
    "UnsupportedBlock",
    "child_nodes",
    "describe_validation_issues",
    "explain_validation_error",
    "spans_plain_text",
    "validate_block",
]
