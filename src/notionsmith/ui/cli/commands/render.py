"""Render a Notion block tree to HTML."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import click
import typer

from notionsmith.adapters.html.page import PageFormatter
from notionsmith.adapters.html.renderer import HtmlRenderer
from notionsmith.adapters.notion.client import NotionClient
from notionsmith.adapters.notion.fetcher import TreeFetcher
from notionsmith.core.context import DocumentState
from notionsmith.core.exceptions import NotionsmithError

from .._options import (
    OUTPUT_PANEL,
    ConfigOption,
    DebugOption,
    NoCommentsOption,
    ResolutionOption,
    StandaloneOption,
    TitleOption,
    TokenOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, emit_warning, set_cli_state
from ..utils import blocks_from_document, build_config, load_resolution, read_json, write_output


def render(
    source: Annotated[
        str,
        typer.Argument(
            metavar="SOURCE",
            help="JSON file holding a block or a list of blocks, or a Notion page id to fetch.",
        ),
    ],
    resolution: ResolutionOption = None,
    config_path: ConfigOption = None,
    token: TokenOption = None,
    no_comments: NoCommentsOption = False,
    standalone: StandaloneOption = False,
    title: TitleOption = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the HTML to this file instead of stdout.",
            dir_okay=False,
            rich_help_panel=OUTPUT_PANEL,
        ),
    ] = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Convert Notion blocks into an HTML fragment or page."""
    ctx = click.get_current_context(silent=True)
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)

    config = build_config(
        config_path,
        token=token,
        unsupported_comments=False if no_comments else None,
    )
    mapping = load_resolution(resolution)
    renderer = HtmlRenderer(config.render)
    emitter = CliEmitter(state)
    document_state = DocumentState()

    source_path = Path(source)
    page_id: str | None = None
    try:
        if source_path.is_file():
            blocks = blocks_from_document(read_json(source_path))
            html = renderer.render(
                blocks, resolution=mapping, state=document_state, emitter=emitter
            )
        else:
            if not config.client.token:
                raise typer.BadParameter(
                    f"'{source}' is not a file; fetching a page requires a Notion token."
                )
            page_id = source
            fetcher = TreeFetcher(
                NotionClient(config.client),
                max_workers=config.client.max_workers,
                emitter=emitter,
            )
            html = renderer.render_page(
                page_id, fetcher, resolution=mapping, state=document_state, emitter=emitter
            )
    except NotionsmithError as exc:
        emit_error(str(exc).splitlines()[0], exception=exc)
        raise typer.Exit(code=1) from exc

    for mention in document_state.unresolved_mentions:
        emit_warning(f"Unresolved page mention: {mention}")

    if standalone:
        html = PageFormatter().render(html, title=title, page_id=page_id)
    write_output(html, output)


__all__ = ["render"]
