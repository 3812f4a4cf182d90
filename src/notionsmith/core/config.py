"""Configuration models used by the renderer, the API client and the CLI.

RenderConfig

`mention_href` (`str`)
: Template used to build links for resolved page mentions and child pages.
  The `{slug}` placeholder receives the slug from the resolution table.

`color_class_prefix` (`str`)
: Prefix prepended to Notion colour names to build CSS classes, so that
  `blue_background` becomes `notion-blue-background` with the default value.

`unsupported_comments` (`bool`)
: Emit an HTML comment for block types the renderer does not know. When
  `False` unsupported blocks render to nothing.

ClientConfig

`token` (`str | None`)
: Integration token sent as a bearer credential. Falls back to the
  `NOTION_TOKEN` environment variable when omitted.

`base_url` (`str`)
: Root of the Notion REST API.

`api_version` (`str`)
: Value of the `Notion-Version` header.

`timeout` (`float`)
: Seconds to wait for each HTTP response.

`page_size` (`int`)
: Number of results requested per paginated call (Notion caps it at 100).

`retries` (`int`)
: Attempts granted to rate limited or failing requests before giving up.

`max_workers` (`int`)
: Size of the thread pool used to fetch sibling subtrees concurrently.

NotionsmithConfig

`render` (`RenderConfig`)
: Nested rendering options.

`client` (`ClientConfig`)
: Nested API client options.

`strict_metadata` (`bool`)
: Abort a whole database export when the properties of one entry fail to
  validate. When `False` the failure is recorded on the entry instead.
"""

from __future__ import annotations

from collections.abc import Mapping
import os
from pathlib import Path
from string import Formatter
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
import yaml

from .exceptions import NotionsmithError


TOKEN_ENV_VAR = "NOTION_TOKEN"


class ConfigError(NotionsmithError):
    """Raised when a configuration file cannot be read or validated."""


class RenderConfig(BaseModel):
    """Options controlling how blocks turn into HTML."""

    model_config = ConfigDict(extra="forbid")

    mention_href: str = Field(default="/posts/{slug}/", description="Resolved link template")
    color_class_prefix: str = Field(default="notion-", description="CSS colour class prefix")
    unsupported_comments: bool = True

    @model_validator(mode="after")
    def check_placeholder(self) -> RenderConfig:
        """Ensure the mention template takes a slug and nothing else."""
        try:
            fields = [
                (name, spec, conversion)
                for _, name, spec, conversion in Formatter().parse(self.mention_href)
                if name is not None
            ]
        except ValueError as exc:
            raise ValueError(f"mention_href is not a valid template: {exc}") from exc
        if not fields:
            raise ValueError("mention_href must contain the '{slug}' placeholder")
        unexpected = sorted({name or "<positional>" for name, _, _ in fields if name != "slug"})
        if unexpected:
            raise ValueError(
                "mention_href only accepts the '{slug}' placeholder, got: "
                + ", ".join(unexpected)
            )
        if any(spec or conversion for _, spec, conversion in fields):
            raise ValueError("mention_href placeholders cannot carry a format spec")
        return self

    def href_for(self, slug: str) -> str:
        """Return the link target for a resolved page slug."""
        return self.mention_href.format(slug=slug)


class ClientConfig(BaseModel):
    """Connection settings for the Notion REST API."""

    model_config = ConfigDict(extra="forbid")

    token: str | None = None
    base_url: str = "https://api.notion.com/v1"
    api_version: str = "2022-06-28"
    timeout: float = 30.0
    page_size: int = Field(default=100, ge=1, le=100)
    retries: int = Field(default=3, ge=0)
    max_workers: int = Field(default=8, ge=1)

    @model_validator(mode="after")
    def fill_token(self) -> ClientConfig:
        """Populate the token from the environment when missing."""
        if self.token is None:
            self.token = os.environ.get(TOKEN_ENV_VAR) or None
        return self


class NotionsmithConfig(BaseModel):
    """Top-level configuration combining rendering and client options."""

    model_config = ConfigDict(extra="forbid")

    render: RenderConfig = Field(default_factory=RenderConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    strict_metadata: bool = True


def load_config(path: Path | str | None = None, **overrides: Any) -> NotionsmithConfig:
    """Load configuration from a YAML file, applying keyword overrides last."""
    payload: dict[str, Any] = {}
    if path is not None:
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read configuration '{source}': {exc}") from exc
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in configuration '{source}': {exc}") from exc
        if loaded is not None and not isinstance(loaded, Mapping):
            raise ConfigError(f"Configuration '{source}' must contain a mapping.")
        payload = dict(loaded or {})

    for key, value in overrides.items():
        if value is None:
            continue
        current = payload.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            payload[key] = {**current, **value}
        else:
            payload[key] = value

    try:
        return NotionsmithConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


__all__ = [
    "TOKEN_ENV_VAR",
    "ClientConfig",
    "ConfigError",
    "NotionsmithConfig",
    "RenderConfig",
    "load_config",
]
