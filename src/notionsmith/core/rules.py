"""Rule declaration and execution engine for the HTML renderer.

This module implements the rule-based architecture that turns Notion blocks
into HTML. Handlers declare the block types they produce markup for through
the ``@renders`` decorator, which records structural metadata (targeted types,
priority, whether the engine renders children beforehand). At runtime the
:class:`RenderEngine` collects those declarations and renders one node at a
time, validating it right before its rule runs.

Architecture

`Declaration layer`
: ``@renders`` stores a lightweight :class:`RuleDefinition` on every handler.

`Registry layer`
: :class:`RenderRegistry` collates definitions into :class:`RenderRule`
  instances grouped by block type, ordered by priority.

`Execution layer`
: :class:`RenderEngine` validates a raw node, renders its children first
  (post-order) through the sequence composer, then hands the validated block
  and the children fragment to the winning rule.

Handlers therefore only map a validated block to markup; validation, ordering
and list grouping stay in the engine.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, cast

from .blocks import UnsupportedBlock, child_nodes, validate_block
from .composer import compose


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .blocks import Block
    from .context import RenderContext


logger = logging.getLogger(__name__)

RuleCallable = Callable[[Any, str, "RenderContext"], str]

UNSUPPORTED_NODE = "__unsupported__"
"""Pseudo block type receiving well-formed blocks without a dedicated rule."""


@dataclass
class RenderRule:
    """Concrete rendering rule registered in the engine."""

    priority: int
    tags: tuple[str, ...]
    name: str
    handler: RuleCallable
    nestable: bool = True
    order: int = 0


@dataclass(frozen=True)
class RuleDefinition:
    """Descriptor installed on handler callables by the decorator."""

    tags: tuple[str, ...]
    priority: int = 0
    name: str | None = None
    nestable: bool = True

    def bind(self, handler: RuleCallable, *, order: int = 0) -> RenderRule:
        """Create a concrete rule instance bound to the callable."""
        name = self.name or getattr(handler, "__name__", handler.__class__.__name__)
        return RenderRule(
            tags=self.tags,
            priority=self.priority,
            name=name,
            handler=handler,
            nestable=self.nestable,
            order=order,
        )


class RenderRegistry:
    """Container used to gather render rules before execution."""

    def __init__(self) -> None:
        self._rules: dict[str, list[RenderRule]] = {}
        self._counter = 0

    def register(self, rule: RenderRule) -> None:
        """Register a rule for every block type it targets."""
        self._counter += 1
        rule.order = self._counter
        for tag in rule.tags:
            bucket = self._rules.setdefault(tag, [])
            bucket.append(rule)
            # Highest priority first; later registrations win ties.
            bucket.sort(key=lambda item: (-item.priority, -item.order))

    def rule_for(self, tag: str) -> RenderRule | None:
        """Return the winning rule for a block type."""
        bucket = self._rules.get(tag)
        return bucket[0] if bucket else None

    def tags(self) -> set[str]:
        """Return every block type with at least one rule."""
        return {tag for tag, rules in self._rules.items() if rules}

    def describe(self) -> list[dict[str, object]]:
        """Return a serialisable snapshot of the registered rules."""
        entries: list[dict[str, object]] = []
        for tag, rules in sorted(self._rules.items(), key=lambda item: item[0]):
            for order, rule in enumerate(rules):
                entries.append(
                    {
                        "tag": tag,
                        "name": rule.name,
                        "priority": rule.priority,
                        "nestable": rule.nestable,
                        "order": order,
                    }
                )
        return entries


def renders(
    *tags: str,
    priority: int = 0,
    name: str | None = None,
    nestable: bool = True,
) -> Callable[[RuleCallable], RuleCallable]:
    """Decorator used to register block handlers.

    ``nestable=False`` tells the engine not to render the block's children
    beforehand; the handler consumes them itself (tables) or ignores them.
    """
    if not tags:
        raise ValueError("@renders requires at least one block type")
    definition = RuleDefinition(
        tags=tuple(tags),
        priority=priority,
        name=name,
        nestable=nestable,
    )

    def decorator(handler: RuleCallable) -> RuleCallable:
        cast(Any, handler).__render_rule__ = definition
        return handler

    return decorator


class RenderEngine:
    """Execution engine that validates and renders blocks on demand."""

    def __init__(self, registry: RenderRegistry | None = None) -> None:
        self.registry = registry or RenderRegistry()

    def collect_from(self, owner: Any) -> None:
        """Collect decorated callables from an object or module."""
        for attribute in dir(owner):
            handler = getattr(owner, attribute)
            definition = getattr(handler, "__render_rule__", None)
            if definition is None and hasattr(handler, "__func__"):
                definition = getattr(handler.__func__, "__render_rule__", None)
            if isinstance(definition, RuleDefinition):
                self.registry.register(definition.bind(handler))

    def register(self, handler: RuleCallable) -> None:
        """Register a standalone callable decorated with ``@renders``."""
        definition = getattr(handler, "__render_rule__", None)
        if not isinstance(definition, RuleDefinition):
            msg = "Handler must be decorated with @renders"
            raise TypeError(msg)
        self.registry.register(definition.bind(handler))

    def missing_rules(self, tags: Iterable[str]) -> set[str]:
        """Return the block types among ``tags`` that no rule covers."""
        return set(tags) - self.registry.tags()

    def ensure_coverage(self, tags: Iterable[str]) -> None:
        """Fail when a known block type has no production rule."""
        missing = self.missing_rules(tags)
        if missing:
            raise RuntimeError("No render rule registered for: " + ", ".join(sorted(missing)))

    def render_block(self, raw: Any, context: RenderContext) -> str:
        """Validate a raw node, render its children, then apply its rule."""
        block = validate_block(raw)
        rule = self.registry.rule_for(block.type)
        if rule is None:
            if not isinstance(block, UnsupportedBlock):  # pragma: no cover - guarded by coverage
                logger.debug("No rule for known block type %s", block.type)
            rule = self.registry.rule_for(UNSUPPORTED_NODE)
            if rule is None:
                return ""

        children = self.render_children(block, context) if rule.nestable else ""
        context.state.rendered_blocks += 1
        return rule.handler(block, children, context)

    def render_children(self, block: Block, context: RenderContext) -> str:
        """Render the children of a validated block into one fragment."""
        nodes = child_nodes(block)
        if not nodes:
            return ""
        return self.render_sequence(nodes, context)

    def render_sequence(self, nodes: Sequence[Any], context: RenderContext) -> str:
        """Render sibling nodes, grouping consecutive list items."""
        return compose(nodes, lambda node: self.render_block(node, context))


__all__ = [
    "UNSUPPORTED_NODE",
    "RenderEngine",
    "RenderRegistry",
    "RenderRule",
    "RuleDefinition",
    "renders",
]
