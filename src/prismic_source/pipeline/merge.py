"""Combine statically built page data with preview data."""

from __future__ import annotations

from typing import Any, Mapping


def deep_merge(target: Any, source: Any) -> Any:
    """Recursively merge *source* into a copy of *target*.

    Mappings merge key by key and lists merge index by index; any other
    value from *source* replaces the one in *target*.
    """

    if isinstance(target, Mapping) and isinstance(source, Mapping):
        merged = dict(target)
        for key, value in source.items():
            merged[key] = deep_merge(merged[key], value) if key in merged else value
        return merged
    if isinstance(target, list) and isinstance(source, list):
        merged_list = list(target)
        for index, value in enumerate(source):
            if index < len(merged_list):
                merged_list[index] = deep_merge(merged_list[index], value)
            else:
                merged_list.append(value)
        return merged_list
    return source


def _replace_document_data(value: Any, preview_id: Any, preview_doc_data: Any) -> Any:
    if isinstance(value, Mapping):
        if "id" in value and value["id"] == preview_id:
            return deep_merge(value, {"data": preview_doc_data})
        return {key: _replace_document_data(item, preview_id, preview_doc_data) for key, item in value.items()}
    if isinstance(value, list):
        return [_replace_document_data(item, preview_id, preview_doc_data) for item in value]
    return value


def merge_preview_data(
    static_data: Mapping[str, Any] | None = None,
    preview_data: Mapping[str, Any] | None = None,
) -> Any:
    """Overlay a preview result on a page's static query data.

    When both share the preview's top-level key the two are deep-merged.
    Otherwise every object in *static_data* whose ``id`` equals the preview
    document's id gets the preview ``data``.
    """

    if not static_data and not preview_data:
        raise ValueError("Invalid data: provide static_data, preview_data or both")
    if not static_data:
        return dict(preview_data or {})
    if not preview_data:
        return dict(static_data)

    preview_key = next(iter(preview_data))
    if preview_key in static_data:
        return deep_merge(static_data, preview_data)

    preview_doc = preview_data[preview_key] or {}
    return _replace_document_data(static_data, preview_doc.get("id"), preview_doc.get("data"))
