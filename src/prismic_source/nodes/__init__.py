"""Node identity and the shared node store."""

from .identity import create_content_digest, create_node_id, document_node_id
from .store import Node, NodeCollisionError, NodeStore

__all__ = [
    "Node",
    "NodeCollisionError",
    "NodeStore",
    "create_content_digest",
    "create_node_id",
    "document_node_id",
]
