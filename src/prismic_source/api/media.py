"""Download remote images and emit File nodes for them."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path, PurePosixPath
from typing import Any, Callable
from urllib.parse import urlsplit

import httpx

from prismic_source.nodes.identity import create_node_id
from prismic_source.nodes.store import NodeStore


logger = logging.getLogger(__name__)


def file_node_key(url: str) -> str:
    return f"File {url}"


def _extension(url: str) -> str:
    return PurePosixPath(urlsplit(url).path).suffix.lower()


class RemoteFileMaterializer:
    """Fetch each URL at most once per run and cache it on disk.

    Concurrent callers for the same URL share one in-flight download.
    A failed download is not retried within the run.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache_dir: str | Path,
        store: NodeStore,
        *,
        concurrency: int = 20,
        create_node_id: Callable[[str], str] = create_node_id,
    ) -> None:
        self._http = http_client
        self.cache_dir = Path(cache_dir)
        self._store = store
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._create_node_id = create_node_id
        self._in_flight: dict[str, asyncio.Future[str]] = {}
        self.downloads = 0

    async def materialize(self, url: str, parent_node_id: str | None) -> str:
        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._download(url, parent_node_id))
            self._in_flight[url] = task
        return await asyncio.shield(task)

    async def aclose(self) -> None:
        """Cancel downloads still in flight and wait for them to settle."""

        pending = [task for task in self._in_flight.values() if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*self._in_flight.values(), return_exceptions=True)

    async def _download(self, url: str, parent_node_id: str | None) -> str:
        async with self._semaphore:
            response = await self._http.get(url)
        response.raise_for_status()
        self.downloads += 1

        content = response.content
        digest = hashlib.md5(content, usedforsecurity=False).hexdigest()
        ext = _extension(url)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        target = self.cache_dir / f"{digest}{ext}"
        if not target.exists():
            target.write_bytes(content)

        node: dict[str, Any] = {
            "id": self._create_node_id(file_node_key(url)),
            "parent": parent_node_id,
            "children": [],
            "url": url,
            "name": target.stem,
            "ext": ext,
            "absolutePath": str(target.resolve()),
            "mediaType": response.headers.get("content-type", "application/octet-stream"),
            "size": len(content),
            "internal": {"type": "File", "contentDigest": digest},
        }
        self._store.create_node(node)
        logger.debug("Materialized %s as %s", url, target.name)
        return node["id"]
