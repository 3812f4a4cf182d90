"""Typed parsing of Notion database properties.

Each public name in this module is an annotated type usable as a field type
on a :class:`PropertySchema` subclass. The annotation validates the raw
property object returned by the API, then reduces it to a plain Python value:

    >>> class Post(PropertySchema):
    ...     name: Title = Field(alias="Name")
    ...     tags: MultiSelect = Field(alias="Tags")
    >>> post = parse_properties(Post, {
    ...     "Name": {"type": "title", "title": [{"plain_text": "Hello"}]},
    ...     "Tags": {"type": "multi_select", "multi_select": [{"name": "news"}]},
    ... }, page_id="abc")
    >>> post.name, post.tags
    ('Hello', ['news'])

Failures raise :class:`MetadataValidationError` naming the page, the
offending property path and the literal value.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
import re
from typing import Annotated, Any, Literal, TypeVar, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    StrictBool,
    StrictFloat,
    StrictInt,
    TypeAdapter,
    ValidationError,
    create_model,
    field_validator,
    model_validator,
)

from .blocks import describe_validation_issues, explain_validation_error
from .exceptions import MetadataValidationError


SchemaT = TypeVar("SchemaT", bound=BaseModel)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_ADAPTER = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class PropertyKind:
    """Marker attached to annotated property types."""

    name: str


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime; bare dates are midnight UTC."""
    parsed = datetime.fromisoformat(value)
    if len(value) == 10 and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class _Raw(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class _PlainText(_Raw):
    plain_text: str


class _Named(_Raw):
    name: str


class _Identified(_Raw):
    id: str


class _User(_Raw):
    object: Literal["user"]
    id: str
    name: str | None = None

    def label(self) -> str:
        return self.name or self.id


class _DateResponse(_Raw):
    start: str
    end: str | None = None
    time_zone: str | None = None


class _UrlObject(_Raw):
    url: str


class _FileObject(_Raw):
    name: str
    external: _UrlObject | None = None
    file: _UrlObject | None = None

    @model_validator(mode="after")
    def _require_source(self) -> _FileObject:
        if self.external is None and self.file is None:
            raise ValueError("file entries need an 'external' or 'file' url")
        return self


def _passthrough(value: Any) -> Any:
    return value


def _property(kind: str, raw: Any, transform: Callable[[Any], Any]) -> Any:
    return Annotated[
        raw,
        AfterValidator(transform),
        PlainSerializer(_passthrough, return_type=Any),
        PropertyKind(kind),
    ]


# Text-like properties ------------------------------------------------------------


class _TitleProperty(_Raw):
    title: list[_PlainText]


class _RichTextProperty(_Raw):
    rich_text: list[_PlainText]


class _PhoneProperty(_Raw):
    phone_number: str | None


class _EmailProperty(_Raw):
    email: str | None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value is not None and not _EMAIL_PATTERN.match(value):
            raise ValueError(f"invalid email address {value!r}")
        return value


class _UrlProperty(_Raw):
    url: str | None

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                _URL_ADAPTER.validate_python(value)
            except ValidationError as exc:
                raise ValueError(f"invalid URL {value!r}") from exc
        return value


Title = _property("title", _TitleProperty, lambda p: "".join(t.plain_text for t in p.title))
Text = _property(
    "rich_text", _RichTextProperty, lambda p: "".join(t.plain_text for t in p.rich_text)
)
PhoneNumber = _property("phone_number", _PhoneProperty, lambda p: p.phone_number)
Email = _property("email", _EmailProperty, lambda p: p.email)
Url = _property("url", _UrlProperty, lambda p: p.url)


# Scalar properties ---------------------------------------------------------------


class _CheckboxProperty(_Raw):
    checkbox: StrictBool


class _NumberProperty(_Raw):
    number: Union[StrictInt, StrictFloat, None]


class _DateProperty(_Raw):
    date: _DateResponse | None


class _CreatedTimeProperty(_Raw):
    created_time: str


class _LastEditedTimeProperty(_Raw):
    last_edited_time: str


Checkbox = _property("checkbox", _CheckboxProperty, lambda p: p.checkbox)
Number = _property("number", _NumberProperty, lambda p: p.number)
Date = _property(
    "date", _DateProperty, lambda p: parse_datetime(p.date.start) if p.date else None
)
CreatedTime = _property(
    "created_time", _CreatedTimeProperty, lambda p: parse_datetime(p.created_time)
)
LastEditedTime = _property(
    "last_edited_time", _LastEditedTimeProperty, lambda p: parse_datetime(p.last_edited_time)
)


# Option properties ---------------------------------------------------------------


class _SelectProperty(_Raw):
    select: _Named | None


class _MultiSelectProperty(_Raw):
    multi_select: list[_Named]


class _StatusProperty(_Raw):
    status: _Named | None


Select = _property("select", _SelectProperty, lambda p: p.select.name if p.select else None)
MultiSelect = _property(
    "multi_select", _MultiSelectProperty, lambda p: [item.name for item in p.multi_select]
)
Status = _property("status", _StatusProperty, lambda p: p.status.name if p.status else None)


def select(*options: str) -> Any:
    """Return a select property type restricted to ``options``."""
    if not options:
        raise ValueError("select() requires at least one option")
    option_model = create_model(
        "SelectOption",
        __base__=_Raw,
        name=(Literal[options], ...),  # type: ignore[valid-type]
    )
    property_model = create_model(
        "SelectProperty",
        __base__=_Raw,
        select=(option_model | None, ...),
    )
    return _property("select", property_model, lambda p: p.select.name if p.select else None)


# People and relations ------------------------------------------------------------


class _PeopleProperty(_Raw):
    people: list[_User]


class _CreatedByProperty(_Raw):
    created_by: _User


class _LastEditedByProperty(_Raw):
    last_edited_by: _User


class _RelationProperty(_Raw):
    relation: list[_Identified]


class _FilesProperty(_Raw):
    files: list[_FileObject]


def _file_entries(prop: _FilesProperty) -> list[dict[str, str]]:
    entries: list[dict[str, str]] = []
    for item in prop.files:
        source = item.external or item.file
        entries.append({"name": item.name, "url": source.url if source else ""})
    return entries


People = _property("people", _PeopleProperty, lambda p: [user.label() for user in p.people])
CreatedBy = _property("created_by", _CreatedByProperty, lambda p: p.created_by.label())
LastEditedBy = _property(
    "last_edited_by", _LastEditedByProperty, lambda p: p.last_edited_by.label()
)
Relation = _property("relation", _RelationProperty, lambda p: [item.id for item in p.relation])
Files = _property("files", _FilesProperty, _file_entries)


# Computed properties -------------------------------------------------------------


class _StringFormula(_Raw):
    type: Literal["string"]
    string: str | None


class _NumberFormula(_Raw):
    type: Literal["number"]
    number: Union[StrictInt, StrictFloat, None]


class _BooleanFormula(_Raw):
    type: Literal["boolean"]
    boolean: StrictBool | None


class _DateFormula(_Raw):
    type: Literal["date"]
    date: _DateResponse | None


class _FormulaProperty(_Raw):
    formula: Annotated[
        Union[_StringFormula, _NumberFormula, _BooleanFormula, _DateFormula],
        Field(discriminator="type"),
    ]


def _formula_value(prop: _FormulaProperty) -> Any:
    result = prop.formula
    if isinstance(result, _StringFormula):
        return result.string
    if isinstance(result, _NumberFormula):
        return result.number
    if isinstance(result, _BooleanFormula):
        return result.boolean
    return parse_datetime(result.date.start) if result.date else None


class _NumberRollup(_Raw):
    type: Literal["number"]
    number: Union[StrictInt, StrictFloat, None]
    function: str | None = None


class _DateRollup(_Raw):
    type: Literal["date"]
    date: _DateResponse | None
    function: str | None = None


class _ArrayRollup(_Raw):
    type: Literal["array"]
    array: list[Any]
    function: str | None = None


class _OpaqueRollup(_Raw):
    type: Literal["unsupported", "incomplete"]
    function: str | None = None


class _RollupProperty(_Raw):
    rollup: Annotated[
        Union[_NumberRollup, _DateRollup, _ArrayRollup, _OpaqueRollup],
        Field(discriminator="type"),
    ]


def _rollup_value(prop: _RollupProperty) -> Any:
    result = prop.rollup
    if isinstance(result, _NumberRollup):
        return result.number
    if isinstance(result, _DateRollup):
        return parse_datetime(result.date.start) if result.date else None
    if isinstance(result, _ArrayRollup):
        return list(result.array)
    return None


class _UniqueIdValue(_Raw):
    prefix: str | None
    number: StrictInt | None


class _UniqueIdProperty(_Raw):
    unique_id: _UniqueIdValue


class _VerificationProperty(_Raw):
    verification: Any = None


class _ButtonProperty(_Raw):
    button: dict[str, Any]


Formula = _property("formula", _FormulaProperty, _formula_value)
Rollup = _property("rollup", _RollupProperty, _rollup_value)
UniqueId = _property(
    "unique_id",
    _UniqueIdProperty,
    lambda p: {"prefix": p.unique_id.prefix, "number": p.unique_id.number},
)
Verification = _property("verification", _VerificationProperty, lambda p: p.verification)
Button = _property("button", _ButtonProperty, lambda p: None)


# Schema ------------------------------------------------------------------------


class PropertySchema(BaseModel):
    """Base class for user-defined database schemas.

    Fields map to property names through aliases; properties not declared on
    the schema are ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


def property_kind(schema: type[BaseModel], field_name: str) -> str | None:
    """Return the Notion property type a schema field expects."""
    info = schema.model_fields.get(field_name)
    if info is None:
        return None
    for item in info.metadata:
        if isinstance(item, PropertyKind):
            return item.name
    return None


def title_field(schema: type[BaseModel]) -> str | None:
    """Return the name of the first field declared as a title property."""
    for name in schema.model_fields:
        if property_kind(schema, name) == "title":
            return name
    return None


def parse_properties(
    schema: type[SchemaT], properties: Mapping[str, Any], *, page_id: str | None = None
) -> SchemaT:
    """Validate a raw property bag against ``schema``."""
    try:
        return schema.model_validate(dict(properties))
    except ValidationError as exc:
        raise MetadataValidationError(
            f"Failed to parse schema for page ID: {page_id}\n"
            f"{explain_validation_error(exc, properties)}",
            page_id=page_id,
            issues=describe_validation_issues(exc, properties),
        ) from exc


__all__ = [
    "Button",
    "Checkbox",
    "CreatedBy",
    "CreatedTime",
    "Date",
    "Email",
    "Files",
    "Formula",
    "LastEditedBy",
    "LastEditedTime",
    "MultiSelect",
    "Number",
    "People",
    "PhoneNumber",
    "PropertyKind",
    "PropertySchema",
    "Relation",
    "Rollup",
    "Select",
    "Status",
    "Text",
    "Title",
    "UniqueId",
    "Url",
    "Verification",
    "parse_datetime",
    "parse_properties",
    "property_kind",
    "select",
    "title_field",
]
