"""Facade for processing whole Notion databases.

Architecture
: `DatabaseProcessor` drives a query, validates metadata, allocates slugs and
  renders page bodies through `HtmlRenderer`.
: `Entry` and `DatabaseResult` expose the per-page outcome, keeping metadata
  and content failures apart.
"""

from __future__ import annotations

from .database import DatabaseProcessor, DatabaseResult, DatabaseSource, Entry, default_slugger


__all__ = [
    "DatabaseProcessor",
    "DatabaseResult",
    "DatabaseSource",
    "Entry",
    "default_slugger",
]
