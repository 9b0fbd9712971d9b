"""Kind-specific sub-normalizers for the build and preview contexts."""

from __future__ import annotations

import copy
from dataclasses import replace
import inspect
import logging
from typing import Any, Mapping, Sequence

from prismic_source.nodes.identity import document_node_key
from prismic_source.nodes.store import NodeStore
from prismic_source.normalization.context import FieldNormalizers, NormalizationContext
from prismic_source.normalization.document import normalize_document
from prismic_source.normalization.rich_text import as_html, as_text, is_document_link, link_url


logger = logging.getLogger(__name__)


async def normalize_structured_text_field(
    field_id: str, value: Any, _path: Sequence[str], ctx: NormalizationContext
) -> dict[str, Any]:
    """Expose rich text as ``html`` and ``text`` next to the untouched ``raw`` value."""

    hook = ctx.hook_context(field_id, value)
    link_resolver = ctx.hooks.link_resolver(hook)
    html_serializer = ctx.hooks.html_serializer(hook)
    return {
        "html": as_html(value, link_resolver, html_serializer),
        "text": as_text(value),
        "raw": value,
    }


async def _ensure_linked_document(link: Mapping[str, Any], linked_node_id: str, ctx: NormalizationContext) -> None:
    if ctx.fetch_document is None or link.get("isBroken") is True:
        return
    # A placeholder or real node means another branch already owns the work.
    if not ctx.store.reserve(linked_node_id):
        return

    document_id = str(link["id"])
    try:
        linked = await ctx.fetch_document(document_id)
    except Exception as exc:
        logger.warning("Linked document %s could not be fetched, leaving link unresolved: %s", document_id, exc)
        return
    if linked is None:
        logger.warning("Linked document %s was not found, leaving link unresolved", document_id)
        return

    await normalize_document(linked, ctx)


async def normalize_link_field(field_id: str, value: Any, _path: Sequence[str], ctx: NormalizationContext) -> Any:
    """Resolve the link URL and, for document links, the linked node id.

    The linked document is normalized on first encounter when the context can
    fetch documents; ``document`` only stores the node id and is resolved at
    read time.
    """

    if not isinstance(value, Mapping):
        return value

    link_resolver = ctx.hooks.link_resolver(ctx.hook_context(field_id, value))
    linked_node_id: str | None = None
    if is_document_link(value) and value.get("id") and value.get("type"):
        linked_node_id = ctx.create_node_id(document_node_key(str(value["type"]), str(value["id"])))
        await _ensure_linked_document(value, linked_node_id, ctx)

    return {
        **value,
        "url": link_url(value, link_resolver),
        "document": linked_node_id,
        "raw": value,
    }


async def _should_materialize(field_id: str, value: Mapping[str, Any], ctx: NormalizationContext) -> bool:
    decision = ctx.hooks.should_normalize_image(ctx.hook_context(field_id, value))
    if inspect.isawaitable(decision):
        decision = await decision
    return bool(decision)


async def normalize_image_field(field_id: str, value: Any, _path: Sequence[str], ctx: NormalizationContext) -> Any:
    """Attach a local file reference to one image view.

    Materialization failures leave ``localFile`` as None.
    """

    if not isinstance(value, Mapping):
        return value

    local_file: str | None = None
    url = value.get("url")
    if ctx.materializer is not None and isinstance(url, str) and url:
        try:
            if await _should_materialize(field_id, value, ctx):
                local_file = await ctx.materializer.materialize(url, ctx.doc_node_id)
        except Exception as exc:
            logger.warning("Could not materialize image %s for field %s: %s", url, field_id, exc)
            local_file = None

    return {**value, "localFile": local_file}


async def normalize_preview_image_field(
    _field_id: str, value: Any, _path: Sequence[str], _ctx: NormalizationContext
) -> Any:
    if not isinstance(value, Mapping):
        return value
    return {**value, "localFile": None}


async def normalize_slices_field(
    _field_id: str, value: list[str], _path: Sequence[str], _ctx: NormalizationContext
) -> list[str]:
    """Keep slice node ids; the slice-zone resolver expands them when read."""

    return value


async def materialize_slices_field(
    _field_id: str, value: list[str], _path: Sequence[str], ctx: NormalizationContext
) -> list[dict[str, Any]]:
    """Replace slice node ids with their nodes, tagged with ``__typename``."""

    return [{**node, "__typename": node["internal"]["type"]} for node in ctx.store.get_nodes(value)]


BUILD_NORMALIZERS = FieldNormalizers(
    image=normalize_image_field,
    link=normalize_link_field,
    structured_text=normalize_structured_text_field,
    slices=normalize_slices_field,
)

PREVIEW_NORMALIZERS = FieldNormalizers(
    image=normalize_preview_image_field,
    link=normalize_link_field,
    structured_text=normalize_structured_text_field,
    slices=materialize_slices_field,
)


class PreviewLinkInliner:
    """Inline linked documents into a previewed document's link fields.

    Link targets may still be in flight when a link field is normalized, so
    ``document`` holds the node id until :meth:`inline` runs after the whole
    preview has settled. Only links owned by the previewed document are
    inlined; the inlined nodes keep node ids in their own links.
    """

    def __init__(self) -> None:
        self._links: list[tuple[str | None, dict[str, Any]]] = []

    async def normalize(self, field_id: str, value: Any, path: Sequence[str], ctx: NormalizationContext) -> Any:
        normalized = await normalize_link_field(field_id, value, path, ctx)
        if isinstance(normalized, dict) and normalized.get("document") is not None:
            self._links.append((ctx.doc_node_id, normalized))
        return normalized

    def normalizers(self, base: FieldNormalizers = PREVIEW_NORMALIZERS) -> FieldNormalizers:
        return replace(base, link=self.normalize)

    def inline(self, store: NodeStore, owner_node_id: str) -> int:
        """Replace node ids with node snapshots; returns the number of links touched."""

        owned = [link for owner, link in self._links if owner == owner_node_id]
        # Snapshots are taken before any link is rewritten so a document
        # linking to itself does not end up containing itself.
        snapshots: dict[str, dict[str, Any] | None] = {}
        for link in owned:
            node_id = link["document"]
            if node_id not in snapshots:
                node = store.get_node(node_id)
                snapshots[node_id] = copy.deepcopy(node) if node is not None else None
        for link in owned:
            link["document"] = snapshots[link["document"]]
        return len(owned)
