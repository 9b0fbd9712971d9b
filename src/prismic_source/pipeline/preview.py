"""Preview one document against a ref token, outside any build run."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Mapping

import httpx

from prismic_source.api.client import ContentApiError, PrismicClient, create_http_client
from prismic_source.config import PluginOptions
from prismic_source.nodes.store import Node, NodeStore
from prismic_source.normalization.context import HookContext, LinkResolver, NormalizationContext
from prismic_source.normalization.document import normalize_document
from prismic_source.normalization.fields import PreviewLinkInliner
from prismic_source.schema.naming import camel_case
from prismic_source.schema.type_paths import TypePathIndex, type_paths_filename


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PreviewError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class TypePathsNotFoundError(PreviewError):
    location: str = ""

    def __str__(self) -> str:
        return f"{self.message} ({self.location})"


@dataclass(slots=True)
class PreviewResult:
    preview_data: dict[str, Node]
    path: str | None
    root_node_id: str
    store: NodeStore

    def to_dict(self) -> dict[str, Any]:
        return {"previewData": self.preview_data, "path": self.path}


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


class PreviewSession:
    """Everything one preview needs, built once and passed explicitly.

    ``type_paths_source`` is either the public base URL the build artifact is
    served from or a local directory holding it.
    """

    def __init__(
        self,
        options: PluginOptions,
        *,
        schemas_digest: str,
        token: str,
        document_id: str,
        type_paths_source: str | Path,
        path_resolver: LinkResolver | None = None,
        client: PrismicClient | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise PreviewError("Preview token is missing")
        if not document_id:
            raise PreviewError("Preview document id is missing")
        self.options = options
        self.schemas_digest = schemas_digest
        self.token = token
        self.document_id = document_id
        self.type_paths_source = type_paths_source
        self.path_resolver = path_resolver
        self._client = client
        self._http = http_client

    @classmethod
    def from_query(
        cls,
        options: PluginOptions,
        query: Mapping[str, str],
        *,
        schemas_digest: str,
        type_paths_source: str | Path,
        **kwargs: Any,
    ) -> "PreviewSession":
        """Build a session from preview URL parameters ``token`` and ``documentId``."""

        return cls(
            options,
            schemas_digest=schemas_digest,
            token=(query.get("token") or "").strip(),
            document_id=(query.get("documentId") or "").strip(),
            type_paths_source=type_paths_source,
            **kwargs,
        )

    @property
    def type_paths_filename(self) -> str:
        return type_paths_filename(self.options.type_paths_filename_prefix, self.schemas_digest)

    async def load_type_paths(self, http: httpx.AsyncClient) -> TypePathIndex:
        filename = self.type_paths_filename
        if _is_url(self.type_paths_source):
            url = f"{str(self.type_paths_source).rstrip('/')}/{filename}"
            try:
                response = await http.get(url)
            except httpx.HTTPError as exc:
                raise PreviewError(f"Type paths could not be fetched: {exc}") from exc
            if response.status_code == 404:
                raise TypePathsNotFoundError("Type paths artifact not found; rebuild the site", url)
            if response.status_code >= 400:
                raise PreviewError(f"Type paths request failed with status {response.status_code}")
            text = response.text
            location = url
        else:
            path = Path(self.type_paths_source) / filename
            if not path.is_file():
                raise TypePathsNotFoundError("Type paths artifact not found; rebuild the site", str(path))
            text = path.read_text(encoding="utf-8")
            location = str(path)

        try:
            index = TypePathIndex.from_json(text)
        except (ValueError, KeyError, TypeError) as exc:
            raise PreviewError(f"Type paths artifact is malformed: {exc}") from exc
        logger.debug("Loaded %d type paths from %s", len(index), location)
        return index

    def resolve_path(self, doc: Mapping[str, Any]) -> str | None:
        if self.path_resolver is not None:
            return self.path_resolver(doc)
        resolver = self.options.link_resolver(HookContext(key="path", value=doc, node=doc))
        return resolver(doc) if resolver is not None else None

    async def run(self) -> PreviewResult:
        owns_http = self._http is None
        http = self._http or create_http_client()
        api = self._client or PrismicClient(self.options.api_endpoint, self.options.access_token, http_client=http)
        try:
            index = await self.load_type_paths(http)

            async def fetch_document(document_id: str) -> Mapping[str, Any] | None:
                return await api.get_by_id(
                    document_id,
                    ref=self.token,
                    lang=self.options.lang,
                    fetch_links=self.options.fetch_links,
                )

            try:
                doc = await fetch_document(self.document_id)
            except ContentApiError as exc:
                raise PreviewError(f"Preview document could not be fetched: {exc}") from exc
            if doc is None:
                raise PreviewError(f"Preview document {self.document_id} was not found for this token")

            store = NodeStore()
            links = PreviewLinkInliner()
            ctx = NormalizationContext(
                type_paths=index,
                store=store,
                normalizers=links.normalizers(),
                hooks=self.options.hooks,
                fetch_document=fetch_document,
            )
            root_id = await normalize_document(doc, ctx)
        finally:
            if self._client is None:
                await api.aclose()
            if owns_http:
                await http.aclose()

        root = store.get_node(root_id)
        if root is None:
            raise PreviewError(f"Preview document {self.document_id} produced no node")
        links.inline(store, root_id)
        path = self.resolve_path(doc)
        logger.info("Previewed document %s (%s) at %s", self.document_id, doc.get("type"), path)
        return PreviewResult(
            preview_data={camel_case(root["internal"]["type"]): root},
            path=path,
            root_node_id=root_id,
            store=store,
        )


def load_preview_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise PreviewError(f"Preview data is not valid JSON: {exc}") from exc
