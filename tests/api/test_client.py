from __future__ import annotations

import asyncio

import httpx
import pytest

from prismic_source.api.client import (
    DEFAULT_TIMEOUT_SECONDS,
    ContentApiError,
    PrismicClient,
    create_http_client,
    id_predicate,
)
from prismic_source.api.paging import fetch_all_documents


ENDPOINT = "https://my-repo.cdn.prismic.io/api/v2"


def _api_handler(total: int, seen: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/v2":
            return httpx.Response(200, json={"refs": [{"id": "master", "ref": "master-ref", "isMasterRef": True}]})
        page = int(request.url.params["page"])
        page_size = int(request.url.params["pageSize"])
        start = (page - 1) * page_size
        results = [{"id": f"d{i}", "type": "page"} for i in range(start, min(start + page_size, total))]
        return httpx.Response(200, json={"page": page, "results": results, "total_results_size": total})

    return handler


def test_fetch_all_documents_pages_until_total_is_reached() -> None:
    async def _scenario() -> None:
        seen: list[httpx.Request] = []
        async with httpx.AsyncClient(transport=httpx.MockTransport(_api_handler(250, seen))) as http:
            client = PrismicClient(ENDPOINT, "secret", http_client=http)
            documents = await fetch_all_documents(client, lang="en-us", fetch_links=["author.name"])

        assert [doc["id"] for doc in documents] == [f"d{i}" for i in range(250)]
        searches = [request for request in seen if request.url.path.endswith("/documents/search")]
        assert [request.url.params["page"] for request in searches] == ["1", "2", "3"]
        first = searches[0].url.params
        assert first["ref"] == "master-ref"
        assert first["pageSize"] == "100"
        assert first["lang"] == "en-us"
        assert first["fetchLinks"] == "author.name"
        assert first["access_token"] == "secret"
        assert sum(1 for request in seen if request.url.path == "/api/v2") == 1

    asyncio.run(_scenario())


def test_fetch_all_documents_single_page_for_empty_repository() -> None:
    async def _scenario() -> None:
        seen: list[httpx.Request] = []
        async with httpx.AsyncClient(transport=httpx.MockTransport(_api_handler(0, seen))) as http:
            documents = await fetch_all_documents(PrismicClient(ENDPOINT, http_client=http))

        assert documents == []
        assert "access_token" not in seen[-1].url.params

    asyncio.run(_scenario())


def test_get_by_id_uses_id_predicate_and_ref() -> None:
    async def _scenario() -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [{"id": "x1"}], "total_results_size": 1})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = PrismicClient(ENDPOINT, "secret", http_client=http)
            document = await client.get_by_id("x1", ref="preview-token")

        assert document == {"id": "x1"}
        assert seen[0].url.params["q"] == id_predicate("x1") == '[[at(document.id,"x1")]]'
        assert seen[0].url.params["ref"] == "preview-token"

    asyncio.run(_scenario())


def test_get_by_id_returns_none_when_missing() -> None:
    async def _scenario() -> None:
        handler = lambda request: httpx.Response(200, json={"results": [], "total_results_size": 0})
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            assert await PrismicClient(ENDPOINT, http_client=http).get_by_id("x1", ref="r") is None

    asyncio.run(_scenario())


def test_page_failure_aborts_fetch() -> None:
    async def _scenario() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/v2":
                return httpx.Response(200, json={"refs": [{"ref": "m", "isMasterRef": True}]})
            if request.url.params["page"] == "2":
                return httpx.Response(500, json={"error": "boom"})
            return httpx.Response(200, json={"results": [{"id": "a"}], "total_results_size": 150})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            with pytest.raises(ContentApiError) as excinfo:
                await fetch_all_documents(PrismicClient(ENDPOINT, http_client=http))

        assert excinfo.value.status_code == 500

    asyncio.run(_scenario())


def test_missing_master_ref_is_an_error() -> None:
    async def _scenario() -> None:
        handler = lambda request: httpx.Response(200, json={"refs": []})
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            with pytest.raises(ContentApiError, match="master ref"):
                await PrismicClient(ENDPOINT, http_client=http).master_ref()

    asyncio.run(_scenario())


def test_shared_http_client_uses_api_timeout() -> None:
    async def _scenario() -> None:
        http = create_http_client()
        try:
            assert http.timeout == httpx.Timeout(DEFAULT_TIMEOUT_SECONDS)
            assert http.follow_redirects is True
        finally:
            await http.aclose()

    asyncio.run(_scenario())
