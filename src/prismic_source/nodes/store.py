"""In-memory node store with at-most-once creation per node id."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Any, Callable, Iterable, Iterator


logger = logging.getLogger(__name__)

Node = dict[str, Any]


@dataclass(slots=True)
class NodeCollisionError(Exception):
    """A node id was created twice with different content."""

    node_id: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (id={self.node_id})"


def _content_digest(node: Node) -> str | None:
    internal = node.get("internal")
    if isinstance(internal, dict):
        return internal.get("contentDigest")
    return None


class NodeStore:
    """Addressable collection of emitted nodes.

    A node id is first *reserved* (a placeholder that guards recursion and
    duplicate fetches) and later *created*. ``reserve`` is an atomic
    check-then-set so concurrent normalizations agree on who does the work.
    """

    def __init__(self, on_create: Callable[[Node], None] | None = None) -> None:
        self._nodes: dict[str, Node] = {}
        self._reserved: set[str] = set()
        self._lock = threading.Lock()
        self._on_create = on_create

    def reserve(self, node_id: str) -> bool:
        """Reserve *node_id*; False when it is already reserved or created."""

        with self._lock:
            if node_id in self._nodes or node_id in self._reserved:
                return False
            self._reserved.add(node_id)
            return True

    def has_node(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._nodes or node_id in self._reserved

    def is_placeholder(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._reserved and node_id not in self._nodes

    def get_node(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        with self._lock:
            return self._nodes.get(node_id)

    def get_nodes(self, node_ids: Iterable[str]) -> list[Node]:
        found: list[Node] = []
        with self._lock:
            for node_id in node_ids:
                node = self._nodes.get(node_id)
                if node is None:
                    logger.debug("Node %s requested but not created", node_id)
                    continue
                found.append(node)
        return found

    def create_node(self, node: Node) -> None:
        node_id = node.get("id")
        if not isinstance(node_id, str) or not node_id:
            raise ValueError("node must carry a non-empty string 'id'")
        if _content_digest(node) is None:
            raise ValueError(f"node {node_id} is missing internal.contentDigest")

        with self._lock:
            existing = self._nodes.get(node_id)
            if existing is not None:
                if _content_digest(existing) == _content_digest(node):
                    logger.debug("Node %s already created with identical content", node_id)
                    return
                raise NodeCollisionError(node_id, "Node id created twice with different content")
            self._nodes[node_id] = node
            self._reserved.discard(node_id)

        logger.debug('creating node { id: "%s", type: "%s" }', node_id, node["internal"].get("type"))
        if self._on_create is not None:
            self._on_create(node)

    @property
    def placeholders(self) -> set[str]:
        with self._lock:
            return set(self._reserved)

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        with self._lock:
            nodes = list(self._nodes.values())
        return iter(nodes)

    def __contains__(self, node_id: object) -> bool:
        with self._lock:
            return node_id in self._nodes
