"""Field kinds of the content API's custom type vocabulary."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class FieldKind(Enum):
    UID = "UID"
    COLOR = "Color"
    SELECT = "Select"
    TEXT = "Text"
    STRUCTURED_TEXT = "StructuredText"
    NUMBER = "Number"
    DATE = "Date"
    TIMESTAMP = "Timestamp"
    GEO_POINT = "GeoPoint"
    EMBED = "Embed"
    IMAGE = "Image"
    LINK = "Link"
    GROUP = "Group"
    SLICE = "Slice"
    SLICES = "Slices"
    UNRECOGNIZED = "__unrecognized__"

    @classmethod
    def of(cls, field_schema: Any) -> "FieldKind":
        """Return the kind declared by a raw field schema."""

        if not isinstance(field_schema, Mapping):
            return cls.UNRECOGNIZED
        raw_kind = field_schema.get("type")
        if not isinstance(raw_kind, str) or raw_kind == cls.UNRECOGNIZED.value:
            return cls.UNRECOGNIZED
        try:
            return cls(raw_kind)
        except ValueError:
            return cls.UNRECOGNIZED


def merge_tabs(custom_type_schema: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a tabbed custom type schema into one ordered field map.

    A later tab redefining a field id wins, the same way the editor treats it.
    """

    fields: dict[str, Any] = {}
    for tab in custom_type_schema.values():
        if isinstance(tab, Mapping):
            fields.update(tab)
    return fields


def group_fields(field_schema: Mapping[str, Any]) -> Mapping[str, Any]:
    config = field_schema.get("config") or {}
    return config.get("fields") or {}


def slice_zone_choices(field_schema: Mapping[str, Any]) -> Mapping[str, Any]:
    config = field_schema.get("config") or {}
    return config.get("choices") or {}


def slice_primary_fields(field_schema: Mapping[str, Any]) -> Mapping[str, Any]:
    return field_schema.get("non-repeat") or {}


def slice_item_fields(field_schema: Mapping[str, Any]) -> Mapping[str, Any]:
    return field_schema.get("repeat") or {}
