"""Export every entry of a Notion database to HTML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import click
import typer

from notionsmith.adapters.html.page import PageFormatter
from notionsmith.adapters.notion.client import NotionClient
from notionsmith.api.database import DatabaseProcessor
from notionsmith.core.exceptions import NotionsmithError

from .._options import (
    INPUTS_PANEL,
    OUTPUT_PANEL,
    ConfigOption,
    DebugOption,
    NoCommentsOption,
    StandaloneOption,
    TokenOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, emit_warning, set_cli_state
from ..utils import build_config, import_schema, read_json


def export(
    database_id: Annotated[
        str,
        typer.Argument(metavar="DATABASE_ID", help="Identifier of the Notion database."),
    ],
    schema: Annotated[
        str,
        typer.Option(
            "--schema",
            help="Pydantic model describing the properties, as 'module:Model'.",
            rich_help_panel=INPUTS_PANEL,
        ),
    ],
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory receiving entries.json and one HTML file per entry.",
            file_okay=False,
            rich_help_panel=OUTPUT_PANEL,
        ),
    ] = Path("build"),
    filter_path: Annotated[
        Path | None,
        typer.Option(
            "--filter",
            help="JSON file holding a Notion database query filter.",
            exists=True,
            dir_okay=False,
            readable=True,
            rich_help_panel=INPUTS_PANEL,
        ),
    ] = None,
    lenient: Annotated[
        bool,
        typer.Option(
            "--lenient",
            help="Record metadata failures per entry instead of aborting the export.",
            rich_help_panel=INPUTS_PANEL,
        ),
    ] = False,
    config_path: ConfigOption = None,
    token: TokenOption = None,
    no_comments: NoCommentsOption = False,
    standalone: StandaloneOption = False,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Validate, render and write every entry of a database."""
    ctx = click.get_current_context(silent=True)
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)

    config = build_config(
        config_path,
        token=token,
        unsupported_comments=False if no_comments else None,
        strict_metadata=False if lenient else None,
    )
    if not config.client.token:
        raise typer.BadParameter("A Notion token is required (--token or $NOTION_TOKEN).")
    model = import_schema(schema)
    query_filter = read_json(filter_path) if filter_path is not None else None

    processor = DatabaseProcessor(
        NotionClient(config.client),
        model,
        database_id,
        config=config,
        emitter=CliEmitter(state),
    )
    try:
        result = processor.process(filter=query_filter)
    except NotionsmithError as exc:
        emit_error(str(exc).splitlines()[0], exception=exc)
        raise typer.Exit(code=1) from exc

    output_dir.mkdir(parents=True, exist_ok=True)
    formatter = PageFormatter() if standalone else None
    for entry in result.entries:
        if entry.slug is None or entry.content is None:
            continue
        html = entry.content
        if formatter is not None:
            html = formatter.render(html, title=entry.title or entry.slug, page_id=entry.id)
        (output_dir / f"{entry.slug}.html").write_text(html, encoding="utf-8")

    manifest = [entry.to_dict() for entry in result.entries]
    (output_dir / "entries.json").write_text(
        json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8"
    )

    failures = result.failures
    for entry in failures:
        emit_warning(f"Entry {entry.id} was not fully processed.")
    message = f"Exported {len(result) - len(failures)}/{len(result)} entries to {output_dir}"
    summary = state.summary()
    state.console.print(f"{message} ({summary})" if summary else message)
    if failures:
        raise typer.Exit(code=1)


__all__ = ["export"]
