"""CLI command implementations exposed via `notionsmith.ui.cli`."""

from __future__ import annotations

from .export import export
from .render import render


__all__ = ["export", "render"]
