"""Recursive, type-path driven normalization of raw API documents."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence

from prismic_source.nodes.identity import document_node_key, slice_node_key
from prismic_source.normalization.context import NormalizationContext
from prismic_source.schema.naming import document_type_name, slice_type_name
from prismic_source.schema.standard_types import IMAGE_FIELD_KEYS
from prismic_source.schema.type_paths import PathKind


logger = logging.getLogger(__name__)

_FieldHandler = Callable[[str, Any, tuple[str, ...], NormalizationContext], Awaitable[Any]]


async def _normalize_image(field_id: str, value: Any, path: tuple[str, ...], ctx: NormalizationContext) -> Any:
    if not isinstance(value, Mapping):
        return value

    # Alternate views are siblings of the base view's keys.
    base = {key: value[key] for key in IMAGE_FIELD_KEYS if key in value}
    view_names = [key for key in value if key not in IMAGE_FIELD_KEYS]
    normalized_base, *normalized_views = await asyncio.gather(
        ctx.normalizers.image(field_id, base, path, ctx),
        *(ctx.normalizers.image(field_id, value[name], path, ctx) for name in view_names),
    )
    return {**normalized_base, **dict(zip(view_names, normalized_views))}


async def _normalize_structured_text(
    field_id: str, value: Any, path: tuple[str, ...], ctx: NormalizationContext
) -> Any:
    return await ctx.normalizers.structured_text(field_id, value, path, ctx)


async def _normalize_link(field_id: str, value: Any, path: tuple[str, ...], ctx: NormalizationContext) -> Any:
    return await ctx.normalizers.link(field_id, value, path, ctx)


async def _normalize_group(field_id: str, value: Any, path: tuple[str, ...], ctx: NormalizationContext) -> Any:
    if not isinstance(value, list):
        return value
    return await normalize_objects(value, (*path, field_id), ctx)


async def _normalize_slice_zone(field_id: str, value: Any, path: tuple[str, ...], ctx: NormalizationContext) -> Any:
    if not isinstance(value, list):
        return value
    doc = ctx.doc or {}
    doc_type = str(doc.get("type"))
    doc_id = str(doc.get("id"))

    async def _emit_slice(index: int, slice_value: Any) -> str:
        raw_slice = slice_value if isinstance(slice_value, Mapping) else {}
        slice_type = str(raw_slice.get("slice_type"))
        slice_path = (*path, field_id, slice_type)
        node_id = ctx.create_node_id(slice_node_key(doc_type, doc_id, field_id, index))

        primary, items = await asyncio.gather(
            normalize_object(raw_slice.get("primary") or {}, (*slice_path, "primary"), ctx),
            normalize_objects(raw_slice.get("items") or [], (*slice_path, "items"), ctx),
        )
        ctx.store.create_node(
            {
                **raw_slice,
                "id": node_id,
                "primary": primary,
                "items": items,
                "internal": {
                    "type": slice_type_name(doc_type, field_id, slice_type),
                    "contentDigest": ctx.create_content_digest(slice_value),
                },
            }
        )
        return node_id

    slice_node_ids = list(await asyncio.gather(*(_emit_slice(index, item) for index, item in enumerate(value))))
    return await ctx.normalizers.slices(field_id, slice_node_ids, (*path, field_id), ctx)


async def _pass_through(_field_id: str, value: Any, _path: tuple[str, ...], _ctx: NormalizationContext) -> Any:
    return value


_FIELD_HANDLERS: dict[PathKind, _FieldHandler] = {
    PathKind.IMAGE: _normalize_image,
    PathKind.STRUCTURED_TEXT: _normalize_structured_text,
    PathKind.LINK: _normalize_link,
    PathKind.GROUP: _normalize_group,
    PathKind.SLICES: _normalize_slice_zone,
    PathKind.SCALAR: _pass_through,
}


async def normalize_field(field_id: str, value: Any, path: Sequence[str], ctx: NormalizationContext) -> Any:
    parent = tuple(path)
    kind = ctx.type_paths.kind_for((*parent, field_id))
    return await _FIELD_HANDLERS[kind](field_id, value, parent, ctx)


async def normalize_object(obj: Any, path: Sequence[str], ctx: NormalizationContext) -> Any:
    """Normalize every field of *obj*; siblings run concurrently."""

    if not isinstance(obj, Mapping):
        return obj
    keys = list(obj.keys())
    values = await asyncio.gather(*(normalize_field(key, obj[key], path, ctx) for key in keys))
    return dict(zip(keys, values))


async def normalize_objects(objs: Any, path: Sequence[str], ctx: NormalizationContext) -> Any:
    if not isinstance(objs, list):
        return objs
    return list(await asyncio.gather(*(normalize_object(obj, path, ctx) for obj in objs)))


def document_href(doc: Mapping[str, Any], ctx: NormalizationContext) -> str | None:
    resolver = ctx.hooks.link_resolver(ctx.hook_context("href", doc))
    if resolver is None:
        return None
    return resolver(doc)


async def normalize_document(doc: Mapping[str, Any], ctx: NormalizationContext) -> str:
    """Normalize one raw document, emit its nodes and return the root node id."""

    doc_type = doc.get("type")
    doc_id = doc.get("id")
    if not isinstance(doc_type, str) or not doc_type or not isinstance(doc_id, str) or not doc_id:
        raise ValueError("document must carry string 'type' and 'id'")

    doc_node_id = ctx.create_node_id(document_node_key(doc_type, doc_id))
    # Guards links back to this document while it is being normalized.
    ctx.store.reserve(doc_node_id)
    doc_ctx = ctx.for_document(doc, doc_node_id)

    raw_data = doc.get("data")
    data = await normalize_object(raw_data if raw_data is not None else {}, (doc_type, "data"), doc_ctx)

    ctx.store.create_node(
        {
            **doc,
            "id": doc_node_id,
            "prismicId": doc_id,
            "href": document_href(doc, doc_ctx),
            "data": data,
            "dataString": json.dumps(raw_data, ensure_ascii=False, separators=(",", ":")),
            "dataRaw": raw_data,
            "internal": {
                "type": document_type_name(doc_type),
                "contentDigest": ctx.create_content_digest(doc),
            },
        }
    )
    logger.debug("Normalized document %s (%s) into node %s", doc_id, doc_type, doc_node_id)
    return doc_node_id
