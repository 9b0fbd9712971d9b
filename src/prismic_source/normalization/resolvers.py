"""Read-time resolvers for fields that store node references."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from prismic_source.nodes.store import Node, NodeStore
from prismic_source.schema.standard_types import IMAGE_FIELD_KEYS
from prismic_source.schema.typedefs import FieldDef, ResolveContract


def _with_file_node(view: Any, store: NodeStore) -> Any:
    if not isinstance(view, Mapping):
        return view
    return {**view, "localFile": store.get_node(view.get("localFile"))}


def resolve_image(value: Any, store: NodeStore) -> Any:
    """Swap ``localFile`` ids for file nodes on the base view and every alternate view."""

    if not isinstance(value, Mapping):
        return value
    base = _with_file_node({key: value[key] for key in IMAGE_FIELD_KEYS if key in value}, store)
    views = {key: _with_file_node(view, store) for key, view in value.items() if key not in IMAGE_FIELD_KEYS}
    return {**base, **views}


def resolve_link(value: Any, store: NodeStore) -> Any:
    if not isinstance(value, Mapping):
        return value
    return {**value, "document": store.get_node(value.get("document"))}


def resolve_slices(node_ids: Any, store: NodeStore) -> Any:
    if not isinstance(node_ids, list):
        return node_ids
    return [{**node, "__typename": node["internal"]["type"]} for node in store.get_nodes(node_ids)]


RESOLVERS: dict[ResolveContract, Callable[[Any, NodeStore], Any]] = {
    ResolveContract.IMAGE: resolve_image,
    ResolveContract.LINK: resolve_link,
    ResolveContract.SLICES: resolve_slices,
}


def resolve_field(field_def: FieldDef, value: Any, store: NodeStore) -> Any:
    if field_def.resolve is None:
        return value
    return RESOLVERS[field_def.resolve](value, store)


def linked_document(link_value: Any, store: NodeStore) -> Node | None:
    if not isinstance(link_value, Mapping):
        return None
    return store.get_node(link_value.get("document"))
