"""Full build run: compile schemas, register types, fetch and normalize documents."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping, Protocol

import httpx

from prismic_source.api.client import PrismicClient, create_http_client
from prismic_source.api.media import RemoteFileMaterializer
from prismic_source.api.paging import fetch_all_documents
from prismic_source.config import PluginOptions
from prismic_source.nodes.identity import document_node_id
from prismic_source.nodes.store import Node, NodeStore
from prismic_source.normalization.context import NormalizationContext
from prismic_source.normalization.document import normalize_document
from prismic_source.normalization.fields import BUILD_NORMALIZERS
from prismic_source.schema.compiler import compile_schemas
from prismic_source.schema.standard_types import STANDARD_TYPE_DEFS
from prismic_source.schema.type_paths import TypePathIndex, schemas_digest, write_type_paths
from prismic_source.schema.typedefs import TypeDef


logger = logging.getLogger(__name__)


class TypeSink(Protocol):
    def create_types(self, type_defs: TypeDef | Iterable[TypeDef]) -> None: ...


@dataclass(slots=True)
class BuildStats:
    documents: int = 0
    nodes: int = 0
    files: int = 0
    type_defs: int = 0
    type_paths: int = 0
    dropped_fields: int = 0
    unresolved_links: int = 0
    type_paths_file: str | None = None
    duration_ms: int = 0
    stage_ms: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "documents": self.documents,
            "nodes": self.nodes,
            "files": self.files,
            "type_defs": self.type_defs,
            "type_paths": self.type_paths,
            "dropped_fields": self.dropped_fields,
            "unresolved_links": self.unresolved_links,
            "type_paths_file": self.type_paths_file,
            "duration_ms": self.duration_ms,
            "stage_ms": dict(self.stage_ms),
        }


@contextmanager
def _stage(name: str, stats: BuildStats) -> Iterator[None]:
    started = time.perf_counter()
    logger.info("Stage %s started", name)
    yield
    elapsed = int((time.perf_counter() - started) * 1000)
    stats.stage_ms[name] = elapsed
    logger.info("Stage %s finished in %d ms", name, elapsed)


def _document_fetcher(
    known: Mapping[str, Mapping[str, Any]], client: PrismicClient, options: PluginOptions
) -> Callable[[str], Any]:
    async def fetch(document_id: str) -> Mapping[str, Any] | None:
        document = known.get(document_id)
        if document is not None:
            return document
        logger.debug("Linked document %s is outside the fetched set, querying the API", document_id)
        return await client.get_by_id(document_id, lang=options.lang, fetch_links=options.fetch_links)

    return fetch


async def _run_all(coros: list[Awaitable[None]]) -> None:
    """Await every coroutine; on the first failure cancel and reap the rest."""

    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def source_nodes(
    options: PluginOptions,
    sink: TypeSink,
    *,
    client: PrismicClient | None = None,
    http_client: httpx.AsyncClient | None = None,
    store: NodeStore | None = None,
    on_node: Callable[[Node], None] | None = None,
) -> BuildStats:
    """Run one build and return its statistics.

    Schema compilation and type registration happen before any document is
    fetched, so configuration problems surface without network traffic.
    """

    started = time.perf_counter()
    stats = BuildStats()
    store = store if store is not None else NodeStore(on_create=on_node)

    with _stage("compile", stats):
        compiled = compile_schemas(options.schemas)
        index = TypePathIndex(compiled.type_paths)
        digest = schemas_digest(options.schemas)
        stats.type_defs = len(compiled.type_defs)
        stats.type_paths = len(index)
        stats.dropped_fields = len(compiled.dropped_paths)

    with _stage("register", stats):
        sink.create_types(STANDARD_TYPE_DEFS)
        sink.create_types(compiled.link_type_def)
        sink.create_types(compiled.type_defs)

    owns_http = http_client is None
    http = http_client or create_http_client()
    api = client or PrismicClient(options.api_endpoint, options.access_token, http_client=http)
    materializer: RemoteFileMaterializer | None = None
    try:
        with _stage("fetch", stats):
            documents = await fetch_all_documents(api, lang=options.lang, fetch_links=options.fetch_links)
        stats.documents = len(documents)

        known = {str(doc.get("id")): doc for doc in documents}
        materializer = RemoteFileMaterializer(
            http,
            options.cache_dir,
            store,
            concurrency=options.concurrent_file_requests,
        )
        ctx = NormalizationContext(
            type_paths=index,
            store=store,
            normalizers=BUILD_NORMALIZERS,
            hooks=options.hooks,
            fetch_document=_document_fetcher(known, api, options),
            materializer=materializer,
        )
        pool = asyncio.Semaphore(options.concurrent_file_requests)

        async def _normalize(doc: Mapping[str, Any]) -> None:
            async with pool:
                # Skip documents already normalized as the target of a link.
                if store.reserve(document_node_id(doc)):
                    await normalize_document(doc, ctx)

        with _stage("normalize", stats):
            await _run_all([_normalize(doc) for doc in documents])
        stats.files = materializer.downloads
    finally:
        if materializer is not None:
            await materializer.aclose()
        if client is None:
            await api.aclose()
        if owns_http:
            await http.aclose()

    with _stage("write", stats):
        target = write_type_paths(options.public_dir, options.type_paths_filename_prefix, digest, index)
        stats.type_paths_file = str(target)

    unresolved = store.placeholders
    if unresolved:
        logger.warning("%d linked document(s) could not be resolved", len(unresolved))
    stats.unresolved_links = len(unresolved)
    stats.nodes = len(store)
    stats.duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info("Build finished: %d documents, %d nodes", stats.documents, stats.nodes)
    return stats
