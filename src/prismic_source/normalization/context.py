"""Per-call collaborators for document normalization."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence

from prismic_source.nodes.identity import create_content_digest, create_node_id
from prismic_source.nodes.store import NodeStore
from prismic_source.schema.type_paths import TypePathIndex


@dataclass(frozen=True, slots=True)
class HookContext:
    """What a customization hook factory is told about the field at hand."""

    key: str
    value: Any
    node: Mapping[str, Any]


LinkResolver = Callable[[Mapping[str, Any]], "str | None"]
HtmlSerializer = Callable[[str, Mapping[str, Any], str, str], "str | None"]
LinkResolverFactory = Callable[[HookContext], "LinkResolver | None"]
HtmlSerializerFactory = Callable[[HookContext], "HtmlSerializer | None"]
ImagePredicate = Callable[[HookContext], "bool | Awaitable[bool]"]
DocumentFetcher = Callable[[str], Awaitable["Mapping[str, Any] | None"]]


def no_link_resolver(_ctx: HookContext) -> LinkResolver | None:
    return None


def no_html_serializer(_ctx: HookContext) -> HtmlSerializer | None:
    return None


def always_normalize_image(_ctx: HookContext) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class Hooks:
    link_resolver: LinkResolverFactory = no_link_resolver
    html_serializer: HtmlSerializerFactory = no_html_serializer
    should_normalize_image: ImagePredicate = always_normalize_image


class MediaMaterializer(Protocol):
    async def materialize(self, url: str, parent_node_id: str | None) -> str:
        """Make *url* locally addressable and return its file node id."""


FieldNormalizer = Callable[[str, Any, Sequence[str], "NormalizationContext"], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class FieldNormalizers:
    """Kind-specific sub-normalizers; the two run contexts plug in their own."""

    image: FieldNormalizer
    link: FieldNormalizer
    structured_text: FieldNormalizer
    slices: FieldNormalizer


@dataclass(frozen=True, slots=True)
class NormalizationContext:
    type_paths: TypePathIndex
    store: NodeStore
    normalizers: FieldNormalizers
    hooks: Hooks = field(default_factory=Hooks)
    create_node_id: Callable[[str], str] = create_node_id
    create_content_digest: Callable[[Any], str] = create_content_digest
    fetch_document: DocumentFetcher | None = None
    materializer: MediaMaterializer | None = None
    doc: Mapping[str, Any] | None = None
    doc_node_id: str | None = None

    def for_document(self, doc: Mapping[str, Any], doc_node_id: str) -> "NormalizationContext":
        return replace(self, doc=doc, doc_node_id=doc_node_id)

    def hook_context(self, key: str, value: Any) -> HookContext:
        return HookContext(key=key, value=value, node=self.doc or {})
