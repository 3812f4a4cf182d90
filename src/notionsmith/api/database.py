"""Batch processing of Notion databases into typed, rendered entries.

Architecture
: `DatabaseProcessor` queries a database, validates each page's properties
  against a pydantic schema, allocates slugs and renders every page body.
: `Entry` holds the outcome for one page: parsed properties, slug, HTML and
  the metadata or content failure recorded for it.
: `DatabaseResult` collects entries in query order together with the
  resolution table used while rendering.

Implementation Rationale
: Slugs are allocated for every valid entry before the first body is
  rendered, so mentions between entries of the same database resolve
  regardless of query order. The resolution table is frozen once built.
: Metadata failures abort the batch unless `strict_metadata` is disabled;
  content failures are always recorded on the entry and never abort the
  other entries.

Usage Example
:
    >>> from notionsmith.core.properties import PropertySchema, Title
    >>> class Post(PropertySchema):
    ...     title: Title
    >>> processor = DatabaseProcessor(client, Post, "database-id")  # doctest: +SKIP
    >>> result = processor.process()  # doctest: +SKIP
    >>> [entry.slug for entry in result.entries]  # doctest: +SKIP
    ['hello-world']
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from typing import Any, Generic, Protocol

from pydantic import BaseModel

from notionsmith.adapters.html.renderer import HtmlRenderer
from notionsmith.adapters.notion.fetcher import TreeFetcher
from notionsmith.core.config import NotionsmithConfig
from notionsmith.core.context import DocumentState, ResolutionTable
from notionsmith.core.diagnostics import DiagnosticEmitter, NullEmitter
from notionsmith.core.exceptions import (
    ContentProcessingError,
    MetadataValidationError,
    NotionsmithError,
)
from notionsmith.core.properties import SchemaT, parse_properties, title_field
from notionsmith.core.slugs import SlugAllocator


logger = logging.getLogger(__name__)

Slugger = Callable[[Any], str]


class DatabaseSource(Protocol):
    """Subset of :class:`NotionClient` used by the processor."""

    def query_database(
        self,
        database_id: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sorts: list[Mapping[str, Any]] | None = None,
    ) -> list[dict[str, Any]]: ...

    def retrieve_block(self, block_id: str) -> dict[str, Any]: ...

    def list_children(self, block_id: str) -> list[dict[str, Any]]: ...


@dataclass(slots=True)
class Entry(Generic[SchemaT]):
    """Processing outcome for a single database page."""

    id: str
    properties: SchemaT | None = None
    slug: str | None = None
    content: str | None = None
    metadata_error: MetadataValidationError | None = None
    content_error: ContentProcessingError | None = None
    unresolved_mentions: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.metadata_error is None and self.content_error is None

    @property
    def title(self) -> str | None:
        """Value of the schema's title property, ``None`` when it has none."""
        if self.properties is None:
            return None
        name = title_field(type(self.properties))
        if name is None:
            return None
        return str(getattr(self.properties, name) or "") or None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable summary of the entry."""
        data: dict[str, Any] = {
            "id": self.id,
            "slug": self.slug,
            "properties": (
                self.properties.model_dump(mode="json") if self.properties is not None else None
            ),
        }
        errors: dict[str, str] = {}
        if self.metadata_error is not None:
            errors["metadata"] = str(self.metadata_error)
        if self.content_error is not None:
            errors["content"] = str(self.content_error)
        if errors:
            data["errors"] = errors
        if self.unresolved_mentions:
            data["unresolved_mentions"] = list(self.unresolved_mentions)
        return data


@dataclass(slots=True)
class DatabaseResult(Generic[SchemaT]):
    """Entries of a processed database, in query order."""

    entries: list[Entry[SchemaT]]
    resolution: ResolutionTable

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, page_id: str) -> Entry[SchemaT] | None:
        for entry in self.entries:
            if entry.id == page_id:
                return entry
        return None

    @property
    def failures(self) -> list[Entry[SchemaT]]:
        return [entry for entry in self.entries if not entry.ok]


def default_slugger(record: BaseModel) -> str:
    """Derive a slug source from the schema's title property."""
    name = title_field(type(record))
    if name is None:
        raise ValueError(
            f"{type(record).__name__} declares no Title property; pass an explicit slugger"
        )
    return str(getattr(record, name) or "")


class DatabaseProcessor(Generic[SchemaT]):
    """Turn the pages of a Notion database into validated, rendered entries."""

    def __init__(
        self,
        client: DatabaseSource,
        schema: type[SchemaT],
        database_id: str,
        *,
        config: NotionsmithConfig | None = None,
        renderer: HtmlRenderer | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.client = client
        self.schema = schema
        self.database_id = database_id
        self.config = config or NotionsmithConfig()
        self.renderer = renderer or HtmlRenderer(self.config.render)
        self.emitter = emitter or NullEmitter()

    def process(
        self,
        *,
        filter: Mapping[str, Any] | None = None,
        sorts: Sequence[Mapping[str, Any]] | None = None,
        slugger: Slugger | None = None,
        slugs: SlugAllocator | None = None,
        strict_metadata: bool | None = None,
    ) -> DatabaseResult[SchemaT]:
        """Query, validate and render every page of the database."""
        strict = self.config.strict_metadata if strict_metadata is None else strict_metadata
        slugger = slugger or default_slugger
        slugs = slugs or SlugAllocator()

        pages = self.client.query_database(
            self.database_id, filter=filter, sorts=list(sorts) if sorts else None
        )
        logger.debug("Database %s returned %d pages", self.database_id, len(pages))

        entries = [self._parse_entry(page, strict=strict) for page in pages]
        for entry in entries:
            if entry.properties is not None:
                entry.slug = slugs.allocate(slugger(entry.properties))

        resolution = ResolutionTable(
            {entry.id: entry.slug for entry in entries if entry.slug is not None}
        )

        renderable = [entry for entry in entries if entry.properties is not None]
        if renderable:
            workers = max(1, min(self.config.client.max_workers, len(renderable)))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                # map() yields in submission order, keeping query order.
                list(pool.map(lambda item: self._render_entry(item, resolution), renderable))

        return DatabaseResult(entries=entries, resolution=resolution)

    def _parse_entry(self, page: Mapping[str, Any], *, strict: bool) -> Entry[SchemaT]:
        page_id = str(page.get("id") or "")
        entry: Entry[SchemaT] = Entry(id=page_id)
        try:
            entry.properties = parse_properties(
                self.schema, page.get("properties") or {}, page_id=page_id
            )
        except MetadataValidationError as exc:
            if strict:
                raise
            entry.metadata_error = exc
            self.emitter.error(str(exc).splitlines()[0], exc)
        return entry

    def _render_entry(self, entry: Entry[SchemaT], resolution: ResolutionTable) -> None:
        state = DocumentState()
        fetcher = TreeFetcher(
            self.client, max_workers=self.config.client.max_workers, emitter=self.emitter
        )
        try:
            children = fetcher.fetch_children(entry.id)
            entry.content = self.renderer.render(
                children, resolution=resolution, state=state, emitter=self.emitter
            )
        except NotionsmithError as exc:
            entry.content_error = ContentProcessingError(
                f"Failed to process content for entry ID {entry.id}. Original error: {exc}",
                page_id=entry.id,
            )
            entry.content_error.__cause__ = exc
            self.emitter.error(str(entry.content_error).splitlines()[0], exc)
            return
        entry.unresolved_mentions = list(state.unresolved_mentions)
        self.emitter.event("entry_rendered", {"id": entry.id, "slug": entry.slug})


__all__ = [
    "DatabaseProcessor",
    "DatabaseResult",
    "DatabaseSource",
    "Entry",
    "default_slugger",
]
