from __future__ import annotations

from prismic_source.nodes.store import NodeStore
from prismic_source.normalization.resolvers import resolve_field, resolve_image, resolve_slices
from prismic_source.schema.typedefs import FieldDef, ResolveContract


def _store() -> NodeStore:
    store = NodeStore()
    store.create_node({"id": "f1", "url": "https://img/a.png", "internal": {"type": "File", "contentDigest": "1"}})
    store.create_node({"id": "s1", "slice_type": "quote", "internal": {"type": "PrismicPageBodyQuote", "contentDigest": "2"}})
    store.create_node({"id": "s2", "slice_type": "text", "internal": {"type": "PrismicPageBodyText", "contentDigest": "3"}})
    return store


def test_resolve_field_dispatches_on_contract() -> None:
    store = _store()
    image = {"url": "https://img/a.png", "localFile": "f1"}

    assert resolve_field(FieldDef("String"), "plain", store) == "plain"
    assert resolve_field(FieldDef("PrismicImageType", resolve=ResolveContract.IMAGE), image, store)["localFile"]["id"] == "f1"
    resolved_link = resolve_field(FieldDef("PrismicLinkType", resolve=ResolveContract.LINK), {"document": "s1"}, store)
    assert resolved_link["document"]["slice_type"] == "quote"


def test_resolve_slices_keeps_stored_order_and_skips_missing() -> None:
    resolved = resolve_slices(["s2", "missing", "s1"], _store())

    assert [node["__typename"] for node in resolved] == ["PrismicPageBodyText", "PrismicPageBodyQuote"]


def test_resolve_image_without_local_file() -> None:
    assert resolve_image({"url": "https://img/a.png", "localFile": None}, _store())["localFile"] is None
    assert resolve_image(None, _store()) is None
