"""Helpers shared by CLI commands."""

from __future__ import annotations

from collections.abc import Mapping
import importlib
import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel
import typer

from notionsmith.core.config import ConfigError, NotionsmithConfig, load_config


def read_json(path: Path) -> Any:
    """Load a JSON document, turning decoding failures into CLI errors."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise typer.BadParameter(f"Cannot read '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"'{path}' is not valid JSON: {exc}") from exc


def load_resolution(path: Path | None) -> dict[str, str]:
    """Load a page id to slug mapping from a JSON file."""
    if path is None:
        return {}
    data = read_json(path)
    if not isinstance(data, Mapping) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in data.items()
    ):
        raise typer.BadParameter(f"'{path}' must contain a JSON object of string values.")
    return dict(data)


def blocks_from_document(data: Any) -> list[dict[str, Any]]:
    """Extract the block list held by a JSON document.

    Accepts a list of blocks, a single block, an API list response with a
    ``results`` array, or a page object with ``children``.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        results = data.get("results")
        if isinstance(results, list):
            return results
        if isinstance(data.get("type"), str) and data.get("object") != "page":
            return [dict(data)]
        children = data.get("children")
        if isinstance(children, list):
            return children
    raise typer.BadParameter("Expected a block, a list of blocks or a page with children.")


def build_config(
    config_path: Path | None,
    *,
    token: str | None = None,
    unsupported_comments: bool | None = None,
    strict_metadata: bool | None = None,
) -> NotionsmithConfig:
    """Load the configuration file and apply command-line overrides."""
    overrides: dict[str, Any] = {}
    if token:
        overrides["client"] = {"token": token}
    if unsupported_comments is not None:
        overrides["render"] = {"unsupported_comments": unsupported_comments}
    if strict_metadata is not None:
        overrides["strict_metadata"] = strict_metadata
    try:
        return load_config(config_path, **overrides)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


def import_schema(reference: str) -> type[BaseModel]:
    """Import a pydantic model given as ``module:Model``."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter(f"Schema '{reference}' must use the 'module:Model' form.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {exc}") from exc
    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise typer.BadParameter(
                f"Module '{module_name}' has no attribute '{attribute}'."
            ) from exc
    if not isinstance(target, type) or not issubclass(target, BaseModel):
        raise typer.BadParameter(f"'{reference}' is not a pydantic model.")
    return target


def write_output(text: str, output: Path | None) -> None:
    """Write ``text`` to ``output`` or stdout."""
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")


__all__ = [
    "blocks_from_document",
    "build_config",
    "import_schema",
    "load_resolution",
    "read_json",
    "write_output",
]
