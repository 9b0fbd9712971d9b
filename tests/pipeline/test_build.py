from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from prismic_source.config import validate_plugin_options
from prismic_source.nodes.identity import create_node_id
from prismic_source.nodes.store import NodeCollisionError, NodeStore
from prismic_source.pipeline import build
from prismic_source.pipeline.build import source_nodes
from prismic_source.schema.sdl import SdlTypeSink
from prismic_source.schema.type_paths import schemas_digest


SCHEMAS = {
    "page": {
        "Main": {
            "uid": {"type": "UID"},
            "title": {"type": "StructuredText"},
            "hero": {"type": "Image"},
            "related": {"type": "Link"},
        }
    }
}

UIDS = {"p1": "home", "p2": "about", "p3": "team", "q1": "left", "q2": "right"}


def _page(doc_id: str, uid: str, related: str | None, hero: str | None = None) -> dict[str, Any]:
    return {
        "id": doc_id,
        "uid": uid,
        "type": "page",
        "lang": "en-us",
        "data": {
            "title": [{"type": "heading1", "text": uid.title(), "spans": []}],
            "hero": {"dimensions": {"width": 1, "height": 1}, "alt": None, "copyright": None, "url": hero} if hero else {},
            "related": {"link_type": "Document", "id": related, "type": "page", "uid": UIDS[related]} if related else None,
        },
    }


DOCUMENTS = [
    _page("p1", "home", "p2", hero="https://images.prismic.io/my-repo/hero.png"),
    _page("p2", "about", "p3"),
]
OUTSIDE = _page("p3", "team", None)


class _Api:
    def __init__(self, documents: list[dict[str, Any]] | None = None, outside: dict[str, Any] | None = OUTSIDE) -> None:
        self.requests: list[httpx.Request] = []
        self.documents = DOCUMENTS if documents is None else documents
        self.outside = outside

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "images.prismic.io":
            return httpx.Response(200, content=b"img", headers={"content-type": "image/png"})
        if request.url.path == "/api/v2":
            return httpx.Response(200, json={"refs": [{"ref": "master-ref", "isMasterRef": True}]})
        if "q" in request.url.params:
            found = [self.outside] if self.outside is not None else []
            return httpx.Response(200, json={"results": found, "total_results_size": len(found)})
        return httpx.Response(200, json={"results": self.documents, "total_results_size": len(self.documents)})


def _options(tmp_path: Path, **extra: Any):
    return validate_plugin_options(
        {
            "repository_name": "my-repo",
            "access_token": "secret",
            "schemas": SCHEMAS,
            "public_dir": tmp_path / "public",
            "cache_dir": tmp_path / "cache",
            "link_resolver": lambda ctx: (lambda doc: f"/{doc['uid']}"),
            **extra,
        }
    )


def test_source_nodes_registers_types_normalizes_documents_and_writes_type_paths(tmp_path: Path) -> None:
    async def _scenario() -> None:
        api = _Api()
        sink = SdlTypeSink()
        emitted: list[str] = []
        store = NodeStore(on_create=lambda node: emitted.append(node["internal"]["type"]))
        options = _options(tmp_path)

        async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as http:
            stats = await source_nodes(options, sink, http_client=http, store=store)

        assert stats.documents == 2
        assert stats.nodes == 4
        assert stats.files == 1
        assert stats.unresolved_links == 0
        assert sorted(emitted) == ["File", "PrismicPage", "PrismicPage", "PrismicPage"]
        assert set(stats.stage_ms) == {"compile", "register", "fetch", "normalize", "write"}

        assert "PrismicPage" in sink
        assert "PrismicAllDocumentTypes" in sink
        assert "PrismicImageType" in sink

        artifact = Path(stats.type_paths_file)
        assert artifact.parent == tmp_path / "public"
        assert artifact.name == f"prismic-typepaths---my-repo-{schemas_digest(SCHEMAS)}.json"
        assert {"path": ["page", "data", "hero"], "type": "PrismicImageType"} in json.loads(artifact.read_text())

        home = store.get_node(create_node_id("page p1"))
        assert home["href"] == "/home"
        assert home["data"]["related"]["url"] == "/about"
        assert store.get_node(home["data"]["hero"]["localFile"])["internal"]["type"] == "File"

        outside = store.get_node(create_node_id("page p3"))
        assert outside["prismicId"] == "p3"
        id_queries = [request for request in api.requests if "q" in request.url.params]
        assert [request.url.params["q"] for request in id_queries] == ['[[at(document.id,"p3")]]']

    asyncio.run(_scenario())


def test_build_stats_serialize(tmp_path: Path) -> None:
    async def _scenario() -> None:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_Api())) as http:
            stats = await source_nodes(_options(tmp_path), SdlTypeSink(), http_client=http)

        payload = stats.to_dict()
        assert payload["documents"] == 2
        assert payload["type_defs"] == 2
        assert isinstance(payload["stage_ms"], dict)
        json.dumps(payload)

    asyncio.run(_scenario())


def test_documents_linking_each_other_in_the_fetched_set_yield_one_node_each(tmp_path: Path) -> None:
    async def _scenario() -> None:
        api = _Api([_page("q1", "left", "q2"), _page("q2", "right", "q1")], outside=None)
        store = NodeStore()

        async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as http:
            stats = await source_nodes(_options(tmp_path), SdlTypeSink(), http_client=http, store=store)

        left = store.get_node(create_node_id("page q1"))
        right = store.get_node(create_node_id("page q2"))
        assert stats.nodes == 2
        assert stats.unresolved_links == 0
        assert left["data"]["related"]["document"] == right["id"]
        assert right["data"]["related"]["document"] == left["id"]
        assert not [request for request in api.requests if "q" in request.url.params]

    asyncio.run(_scenario())


def test_bulk_normalization_respects_the_concurrency_bound(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    counters = {"active": 0, "peak": 0, "calls": 0}

    async def _tracking_normalize(doc: dict[str, Any], ctx: Any) -> str:
        counters["active"] += 1
        counters["calls"] += 1
        counters["peak"] = max(counters["peak"], counters["active"])
        await asyncio.sleep(0.01)
        counters["active"] -= 1
        return doc["id"]

    monkeypatch.setattr(build, "normalize_document", _tracking_normalize)
    documents = [_page(f"p{index}", f"page-{index}", None) for index in range(6)]

    async def _scenario() -> None:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_Api(documents))) as http:
            await source_nodes(_options(tmp_path, concurrent_file_requests=2), SdlTypeSink(), http_client=http)

    asyncio.run(_scenario())

    assert counters["calls"] == 6
    assert counters["peak"] == 2


def test_failed_document_cancels_siblings_before_the_client_closes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(_Api([_page("p1", "home", None), _page("p2", "about", None)])))
    closed_when_cancelled: list[bool] = []

    async def _failing_normalize(doc: dict[str, Any], ctx: Any) -> str:
        if doc["id"] == "p1":
            await asyncio.sleep(0)
            raise NodeCollisionError("p1", "Node id created twice with different content")
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            closed_when_cancelled.append(http.is_closed)
            raise
        return doc["id"]

    monkeypatch.setattr(build, "normalize_document", _failing_normalize)
    monkeypatch.setattr(build, "create_http_client", lambda: http)

    async def _scenario() -> None:
        with pytest.raises(NodeCollisionError):
            await source_nodes(_options(tmp_path), SdlTypeSink())

    asyncio.run(_scenario())

    assert closed_when_cancelled == [False]
    assert http.is_closed
