"""Deterministic node identifiers and content digests."""

from __future__ import annotations

import hashlib
from typing import Any, Mapping
import uuid

from prismic_source.schema.type_paths import canonical_json


PLUGIN_NAME = "prismic-source"
NAMESPACE_SEED = uuid.UUID("638f7a53-c567-4eca-8fc1-b23efb1cfb2b")
NODE_NAMESPACE = uuid.uuid5(NAMESPACE_SEED, PLUGIN_NAME)


def create_node_id(key: str) -> str:
    """Return the node id for a semantic key such as ``"page x1"``.

    Identical keys map to identical ids in every process, so build and preview
    runs agree without sharing state.
    """

    return str(uuid.uuid5(NODE_NAMESPACE, key))


def create_content_digest(value: Any) -> str:
    return hashlib.md5(canonical_json(value).encode("utf-8"), usedforsecurity=False).hexdigest()


def document_node_key(custom_type_id: str, document_id: str) -> str:
    return f"{custom_type_id} {document_id}"


def slice_node_key(custom_type_id: str, document_id: str, field_id: str, index: int) -> str:
    return f"{custom_type_id} {document_id} {field_id} {index}"


def document_node_id(document: Mapping[str, Any]) -> str:
    return create_node_id(document_node_key(str(document.get("type")), str(document.get("id"))))
