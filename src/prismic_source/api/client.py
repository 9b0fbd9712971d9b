"""Asynchronous client for the Prismic content API."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping, Sequence

import httpx


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class ContentApiError(Exception):
    message: str
    url: str = ""
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return f"{self.message} ({self.url})" if self.url else self.message
        return f"{self.message} ({self.status_code} {self.url})"


def create_http_client(timeout: float = DEFAULT_TIMEOUT_SECONDS, **kwargs: Any) -> httpx.AsyncClient:
    """Build the HTTP client shared by API queries and media downloads."""

    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, **kwargs)


def id_predicate(document_id: str) -> str:
    return f'[[at(document.id,"{document_id}")]]'


class PrismicClient:
    """Thin wrapper over ``httpx.AsyncClient`` for ref discovery and search.

    The access token travels as a query parameter. A caller-supplied
    ``http_client`` is borrowed and never closed here.
    """

    def __init__(
        self,
        endpoint: str,
        access_token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.access_token = access_token
        self._owns_client = http_client is None
        self._http = http_client or create_http_client(timeout)
        self._master_ref: str | None = None

    async def __aenter__(self) -> "PrismicClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _get_json(self, url: str, params: Mapping[str, Any]) -> dict[str, Any]:
        query = {key: value for key, value in params.items() if value is not None}
        if self.access_token:
            query["access_token"] = self.access_token
        try:
            response = await self._http.get(url, params=query)
        except httpx.HTTPError as exc:
            raise ContentApiError(f"Content API request failed: {exc}", url=url) from exc

        if response.status_code >= 400:
            raise ContentApiError("Content API returned an error", url=url, status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ContentApiError("Content API returned invalid JSON", url=url, status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise ContentApiError("Content API returned an unexpected payload", url=url)
        return payload

    async def master_ref(self) -> str:
        if self._master_ref is None:
            payload = await self._get_json(self.endpoint, {})
            refs = payload.get("refs") or []
            master = next((ref for ref in refs if ref.get("isMasterRef")), None)
            if master is None or not master.get("ref"):
                raise ContentApiError("Content API did not report a master ref", url=self.endpoint)
            self._master_ref = str(master["ref"])
            logger.debug("Resolved master ref %s", self._master_ref)
        return self._master_ref

    async def query(
        self,
        *,
        ref: str | None = None,
        page: int = 1,
        page_size: int = MAX_PAGE_SIZE,
        lang: str = "*",
        fetch_links: Sequence[str] = (),
        q: str | None = None,
    ) -> dict[str, Any]:
        """Run one search request and return the raw response page."""

        params = {
            "ref": ref or await self.master_ref(),
            "page": page,
            "pageSize": min(page_size, MAX_PAGE_SIZE),
            "lang": lang,
            "fetchLinks": ",".join(fetch_links) or None,
            "q": q,
        }
        payload = await self._get_json(f"{self.endpoint}/documents/search", params)
        logger.debug(
            "Fetched page %s (%s results of %s)",
            page,
            len(payload.get("results") or []),
            payload.get("total_results_size"),
        )
        return payload

    async def get_by_id(
        self,
        document_id: str,
        *,
        ref: str | None = None,
        lang: str = "*",
        fetch_links: Sequence[str] = (),
    ) -> dict[str, Any] | None:
        payload = await self.query(
            ref=ref,
            page=1,
            page_size=1,
            lang=lang,
            fetch_links=fetch_links,
            q=id_predicate(document_id),
        )
        results = payload.get("results") or []
        return results[0] if results else None
