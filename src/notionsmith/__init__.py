"""Primary public API for notionsmith."""

from __future__ import annotations

from notionsmith.adapters.html.renderer import HtmlRenderer
from notionsmith.adapters.notion.client import NotionClient
from notionsmith.adapters.notion.fetcher import TreeFetcher, attach_children
from notionsmith.api import DatabaseProcessor, DatabaseResult, Entry
from notionsmith.core.blocks import Block, validate_block
from notionsmith.core.config import (
    ClientConfig,
    NotionsmithConfig,
    RenderConfig,
    load_config,
)
from notionsmith.core.context import DocumentState, RenderContext, ResolutionTable
from notionsmith.core.exceptions import (
    ContentProcessingError,
    InvalidBlockError,
    MetadataValidationError,
    NotionsmithError,
    RetrievalError,
)
from notionsmith.core.properties import PropertySchema, parse_properties
from notionsmith.core.rules import renders
from notionsmith.core.slugs import SlugAllocator
from notionsmith.version import get_version


__version__ = get_version()

__all__ = [
    "Block",
    "ClientConfig",
    "ContentProcessingError",
    "DatabaseProcessor",
    "DatabaseResult",
    "DocumentState",
    "Entry",
    "HtmlRenderer",
    "InvalidBlockError",
    "MetadataValidationError",
    "NotionClient",
    "NotionsmithConfig",
    "NotionsmithError",
    "PropertySchema",
    "RenderConfig",
    "RenderContext",
    "ResolutionTable",
    "RetrievalError",
    "SlugAllocator",
    "TreeFetcher",
    "__version__",
    "attach_children",
    "load_config",
    "parse_properties",
    "renders",
    "validate_block",
]
