from __future__ import annotations

import pytest

from prismic_source.nodes.store import NodeCollisionError, NodeStore


def _node(node_id: str, digest: str = "d1", **extra: object) -> dict[str, object]:
    return {"id": node_id, "internal": {"type": "PrismicPage", "contentDigest": digest}, **extra}


def test_reserve_is_exclusive_until_created() -> None:
    store = NodeStore()

    assert store.reserve("n1") is True
    assert store.reserve("n1") is False
    assert store.has_node("n1")
    assert store.is_placeholder("n1")
    assert "n1" not in store

    store.create_node(_node("n1"))

    assert not store.is_placeholder("n1")
    assert "n1" in store
    assert store.reserve("n1") is False
    assert store.placeholders == set()


def test_create_node_collision_policy() -> None:
    store = NodeStore()
    store.create_node(_node("n1", "d1", title="first"))
    store.create_node(_node("n1", "d1", title="ignored"))

    assert store.get_node("n1")["title"] == "first"
    with pytest.raises(NodeCollisionError):
        store.create_node(_node("n1", "d2"))


def test_create_node_requires_id_and_digest() -> None:
    store = NodeStore()

    with pytest.raises(ValueError, match="id"):
        store.create_node({"internal": {"contentDigest": "d"}})
    with pytest.raises(ValueError, match="contentDigest"):
        store.create_node({"id": "n1", "internal": {}})


def test_on_create_callback_and_lookups() -> None:
    created: list[str] = []
    store = NodeStore(on_create=lambda node: created.append(node["id"]))
    store.create_node(_node("a"))
    store.create_node(_node("b"))
    store.create_node(_node("a"))

    assert created == ["a", "b"]
    assert [node["id"] for node in store.get_nodes(["b", "missing", "a"])] == ["b", "a"]
    assert store.get_node(None) is None
    assert len(store) == 2
    assert {node["id"] for node in store} == {"a", "b"}
