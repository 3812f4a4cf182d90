"""Wrap rendered fragments into standalone HTML documents."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class PageFormatter:
    """Render HTML fragments inside a Jinja2 page template."""

    def __init__(self, template_dir: Path = TEMPLATE_DIR, template_name: str = "page.html") -> None:
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )
        self.template_name = template_name
        self._template: Template | None = None

    @property
    def template(self) -> Template:
        if self._template is None:
            self._template = self.env.get_template(self.template_name)
        return self._template

    def render(
        self,
        body: str,
        *,
        title: str | None = None,
        page_id: str | None = None,
        language: str = "en",
        stylesheet: str | None = None,
        **extra: Any,
    ) -> str:
        """Return ``body`` wrapped in the page template; ``title`` is escaped."""
        return self.template.render(
            body=body,
            title=title or "",
            page_id=page_id,
            language=language,
            stylesheet=stylesheet,
            **extra,
        )


__all__ = ["PageFormatter", "TEMPLATE_DIR"]
