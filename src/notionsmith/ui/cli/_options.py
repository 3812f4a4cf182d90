"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML configuration file with render and client settings.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

TokenOption = Annotated[
    str | None,
    typer.Option(
        "--token",
        envvar="NOTION_TOKEN",
        help="Notion integration token (defaults to $NOTION_TOKEN).",
        show_envvar=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ResolutionOption = Annotated[
    Path | None,
    typer.Option(
        "--resolution",
        "-r",
        help="JSON object mapping page ids to slugs, used to resolve page mentions.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        rich_help_panel=RENDERING_PANEL,
    ),
]

NoCommentsOption = Annotated[
    bool,
    typer.Option(
        "--no-unsupported-comments",
        help="Render unsupported blocks as nothing instead of an HTML comment.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

StandaloneOption = Annotated[
    bool,
    typer.Option(
        "--standalone",
        "-s",
        help="Wrap the rendered fragment in a complete HTML page.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

TitleOption = Annotated[
    str | None,
    typer.Option(
        "--title",
        help="Page title used with --standalone.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]


__all__ = [
    "DIAGNOSTICS_PANEL",
    "INPUTS_PANEL",
    "OUTPUT_PANEL",
    "RENDERING_PANEL",
    "ConfigOption",
    "DebugOption",
    "NoCommentsOption",
    "ResolutionOption",
    "StandaloneOption",
    "TitleOption",
    "TokenOption",
    "VerboseOption",
]
