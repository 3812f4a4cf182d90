"""Custom exception hierarchy for the Notion to HTML pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class NotionsmithError(RuntimeError):
    """Base exception for rendering and retrieval failures."""


class InvalidBlockError(NotionsmithError):
    """Raised when a block payload does not match its declared type."""

    def __init__(
        self,
        message: str,
        *,
        block_id: str | None = None,
        block_type: str | None = None,
        issues: Sequence[dict[str, Any]] = (),
    ) -> None:
        super().__init__(message)
        self.block_id = block_id
        self.block_type = block_type
        self.issues = list(issues)


class RetrievalError(NotionsmithError):
    """Raised when the remote API cannot deliver a block, page or query result."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status
        self.code = code


class MetadataValidationError(NotionsmithError):
    """Raised when the properties of a database entry fail schema validation."""

    def __init__(
        self,
        message: str,
        *,
        page_id: str | None = None,
        issues: Sequence[dict[str, Any]] = (),
    ) -> None:
        super().__init__(message)
        self.page_id = page_id
        self.issues = list(issues)


class ContentProcessingError(NotionsmithError):
    """Raised when the body of a database entry cannot be fetched or rendered."""

    def __init__(self, message: str, *, page_id: str | None = None) -> None:
        super().__init__(message)
        self.page_id = page_id


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ContentProcessingError",
    "InvalidBlockError",
    "MetadataValidationError",
    "NotionsmithError",
    "RetrievalError",
    "exception_hint",
    "exception_messages",
]
