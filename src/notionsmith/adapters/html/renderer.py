"""High-level Notion block to HTML renderer based on the rule pipeline."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import cache
from importlib import metadata
import inspect
import logging
from typing import TYPE_CHECKING, Any

from notionsmith.core.blocks import KNOWN_BLOCK_TYPES
from notionsmith.core.config import RenderConfig
from notionsmith.core.context import DocumentState, RenderContext, ResolutionTable
from notionsmith.core.diagnostics import DiagnosticEmitter, NullEmitter
from notionsmith.core.rules import UNSUPPORTED_NODE, RenderEngine


if TYPE_CHECKING:  # pragma: no cover - typing only
    from notionsmith.adapters.notion.fetcher import TreeFetcher


logger = logging.getLogger(__name__)


@cache
def _load_plugins(group: str) -> tuple[Any, ...]:
    loaded: list[Any] = []
    for entry_point in sorted(metadata.entry_points(group=group), key=lambda ep: ep.name):
        try:
            loaded.append(entry_point.load())
        except Exception:  # pragma: no cover - broken third-party plugin
            logger.warning("Skipping renderer plugin %s", entry_point.name, exc_info=True)
    return tuple(loaded)


class HtmlRenderer:
    """Convert Notion block trees to HTML fragments using a modular pipeline.

    Third-party packages can contribute rules through the
    ``notionsmith.renderers`` entry point group. An entry point may resolve
    to a ``@renders`` callable, a module or class holding such callables, or
    a ``setup(renderer)`` style function receiving the renderer.
    """

    ENTRY_POINT_GROUP = "notionsmith.renderers"

    def __init__(self, config: RenderConfig | None = None, *, plugins: bool = True) -> None:
        self.config = config or RenderConfig()
        self.engine = RenderEngine()
        self._register_builtin_handlers()
        if plugins:
            for payload in _load_plugins(self.ENTRY_POINT_GROUP):
                self._apply_plugin(payload)
        self.engine.ensure_coverage(KNOWN_BLOCK_TYPES | {UNSUPPORTED_NODE})

    def _register_builtin_handlers(self) -> None:
        from ..handlers import (
            blocks as block_handlers,
            layout as layout_handlers,
            links as link_handlers,
            media as media_handlers,
        )

        for module in (block_handlers, media_handlers, link_handlers, layout_handlers):
            self.engine.collect_from(module)

    def register(self, handler: Any) -> None:
        """Register a ``@renders`` callable, or every rule found on a module or class."""
        if getattr(handler, "__render_rule__", None) is not None:
            self.engine.register(handler)
        else:
            self.engine.collect_from(handler)

    def _apply_plugin(self, payload: Any) -> None:
        if inspect.isfunction(payload) and getattr(payload, "__render_rule__", None) is None:
            payload(self)
        else:
            self.register(payload)

    def make_context(
        self,
        *,
        resolution: Mapping[str, str] | None = None,
        state: DocumentState | None = None,
        emitter: DiagnosticEmitter | None = None,
        runtime: Mapping[str, Any] | None = None,
    ) -> RenderContext:
        """Build a fresh rendering context."""
        context = RenderContext(
            config=self.config,
            resolution=ResolutionTable(resolution),
            emitter=emitter or NullEmitter(),
            state=state or DocumentState(),
        )
        if runtime:
            context.attach_runtime(**runtime)
        return context

    def render(
        self,
        blocks: Sequence[Mapping[str, Any]] | Mapping[str, Any],
        *,
        resolution: Mapping[str, str] | None = None,
        state: DocumentState | None = None,
        emitter: DiagnosticEmitter | None = None,
        runtime: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a block or a list of sibling blocks into an HTML fragment."""
        context = self.make_context(
            resolution=resolution, state=state, emitter=emitter, runtime=runtime
        )
        if isinstance(blocks, Mapping):
            return self.engine.render_sequence([blocks], context)
        return self.engine.render_sequence(list(blocks), context)

    def render_block(self, block: Mapping[str, Any], context: RenderContext) -> str:
        """Render a single block with an existing context."""
        return self.engine.render_block(block, context)

    def render_page(
        self,
        page_id: str,
        fetcher: TreeFetcher,
        *,
        resolution: Mapping[str, str] | None = None,
        state: DocumentState | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> str:
        """Fetch a page tree and render its body."""
        page = fetcher.fetch(page_id)
        return self.render(
            page.get("children") or [],
            resolution=resolution,
            state=state,
            emitter=emitter,
        )


__all__ = ["HtmlRenderer"]
