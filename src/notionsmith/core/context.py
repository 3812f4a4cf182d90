"""Rendering context primitives shared across the HTML pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .config import RenderConfig
from .diagnostics import DiagnosticEmitter, NullEmitter


def normalise_page_id(page_id: str) -> str:
    """Return the canonical form of a Notion id (no dashes, lower case)."""
    return page_id.replace("-", "").strip().lower()


class ResolutionTable(Mapping[str, str]):
    """Read-only mapping from page ids to slugs.

    Keys are compared in canonical form so dashed and undashed ids resolve to
    the same slug.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        canonical = {normalise_page_id(key): value for key, value in (entries or {}).items()}
        self._entries: Mapping[str, str] = MappingProxyType(canonical)

    def __getitem__(self, key: str) -> str:
        return self._entries[normalise_page_id(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalise_page_id(key) in self._entries

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ResolutionTable({dict(self._entries)!r})"


@dataclass(slots=True)
class DocumentState:
    """In-memory state accumulated while rendering one document."""

    unsupported_blocks: list[dict[str, Any]] = field(default_factory=list)
    unresolved_mentions: list[str] = field(default_factory=list)
    rendered_blocks: int = 0

    def record_unsupported(self, block_type: str, block_id: str | None) -> None:
        """Track a block rendered as an unsupported marker."""
        self.unsupported_blocks.append({"type": block_type, "id": block_id})

    def record_unresolved(self, page_id: str) -> None:
        """Track a mention whose target has no slug."""
        if page_id not in self.unresolved_mentions:
            self.unresolved_mentions.append(page_id)


@dataclass
class RenderContext:
    """Shared context passed to every handler during rendering."""

    config: RenderConfig = field(default_factory=RenderConfig)
    resolution: ResolutionTable = field(default_factory=ResolutionTable)
    emitter: DiagnosticEmitter = field(default_factory=NullEmitter)
    state: DocumentState = field(default_factory=DocumentState)
    runtime: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.resolution, ResolutionTable):
            self.resolution = ResolutionTable(self.resolution)

    def resolve(self, page_id: str) -> str | None:
        """Return the link target for a page id, or ``None`` when unknown."""
        slug = self.resolution.get(page_id)
        if slug is None:
            return None
        return self.config.href_for(slug)

    def color_class(self, color: Any) -> str:
        """Return the CSS class for a Notion colour, empty for the default."""
        value = getattr(color, "value", color)
        if not value or value == "default":
            return ""
        return f"{self.config.color_class_prefix}{str(value).replace('_', '-', 1)}"

    def attach_runtime(self, **runtime: Any) -> None:
        """Attach ad-hoc data visible to handlers."""
        self.runtime.update(runtime)


__all__ = [
    "DocumentState",
    "RenderContext",
    "ResolutionTable",
    "normalise_page_id",
]
