"""Materialise complete block trees from the Notion API.

The fetcher expands a tree level by level: every node of a level that has
children gets its child list fetched on a thread pool, then the next level is
processed. Results are keyed by parent id, so the final tree keeps the source
order of siblings regardless of completion order. The tree is assembled
afterwards with :func:`attach_children`, which never mutates API payloads.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Any, Protocol

from notionsmith.core.blocks import PAYLOAD_CHILDREN_TYPES
from notionsmith.core.diagnostics import DiagnosticEmitter, NullEmitter
from notionsmith.core.exceptions import RetrievalError


logger = logging.getLogger(__name__)

# Sub-pages render as links; their own content is never expanded.
_OPAQUE_TYPES = frozenset({"child_page", "child_database"})


class BlockSource(Protocol):
    """Subset of :class:`NotionClient` used by the fetcher."""

    def retrieve_block(self, block_id: str) -> dict[str, Any]: ...

    def list_children(self, block_id: str) -> list[dict[str, Any]]: ...


def attach_children(
    node: Mapping[str, Any], children: Sequence[Mapping[str, Any]]
) -> dict[str, Any]:
    """Return a copy of ``node`` holding ``children`` where its type expects them.

    Tables and toggles keep their children inside their payload; every other
    block exposes them under a top-level ``children`` key.
    """
    result = dict(node)
    block_type = node.get("type")
    items = [dict(child) for child in children]
    if block_type in PAYLOAD_CHILDREN_TYPES:
        payload = dict(node.get(block_type) or {})
        payload["children"] = items
        result[block_type] = payload
        result.pop("children", None)
    else:
        result["children"] = items
    return result


def _node_id(node: Mapping[str, Any]) -> str:
    node_id = node.get("id")
    if not isinstance(node_id, str) or not node_id:
        raise RetrievalError(f"Block without an id in API response: {dict(node)!r}")
    return node_id


def _needs_children(node: Mapping[str, Any], *, root: bool = False) -> bool:
    if root:
        return bool(
            node.get("has_children")
            or node.get("object") == "page"
            or node.get("type") in _OPAQUE_TYPES
        )
    if node.get("type") in _OPAQUE_TYPES:
        return False
    return bool(node.get("has_children"))


class TreeFetcher:
    """Recursively retrieve a block or page with its full subtree."""

    def __init__(
        self,
        client: BlockSource,
        *,
        max_workers: int = 8,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.client = client
        self.max_workers = max_workers
        self.emitter = emitter or NullEmitter()

    def fetch(self, node_id: str) -> dict[str, Any]:
        """Return the node ``node_id`` with every descendant attached."""
        root = self.client.retrieve_block(node_id)
        if not _needs_children(root, root=True):
            return dict(root)
        children_of = self._expand([_node_id(root)])
        return self._assemble(root, children_of)

    def fetch_children(self, node_id: str) -> list[dict[str, Any]]:
        """Return the fully materialised children of a block or page."""
        children_of = self._expand([node_id])
        return [self._assemble(child, children_of) for child in children_of[node_id]]

    def _expand(self, parent_ids: Sequence[str]) -> dict[str, list[dict[str, Any]]]:
        children_of: dict[str, list[dict[str, Any]]] = {}
        pending = list(parent_ids)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            try:
                while pending:
                    level = [node_id for node_id in pending if node_id not in children_of]
                    for node_id, children in zip(
                        level, pool.map(self.client.list_children, level), strict=True
                    ):
                        children_of[node_id] = children
                        self.emitter.event(
                            "block_fetch", {"id": node_id, "children": len(children)}
                        )
                    pending = [
                        _node_id(child)
                        for node_id in level
                        for child in children_of[node_id]
                        if _needs_children(child)
                    ]
            except BaseException:
                pool.shutdown(wait=True, cancel_futures=True)
                raise
        logger.debug("Fetched children for %d blocks", len(children_of))
        return children_of

    def _assemble(
        self, node: Mapping[str, Any], children_of: Mapping[str, list[dict[str, Any]]]
    ) -> dict[str, Any]:
        node_id = node.get("id")
        if node_id not in children_of:
            return dict(node)
        children = [self._assemble(child, children_of) for child in children_of[node_id]]
        return attach_children(node, children)


__all__ = ["BlockSource", "TreeFetcher", "attach_children"]
