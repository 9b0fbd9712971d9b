"""Deterministic names for generated GraphQL types."""

from __future__ import annotations

import re
from typing import Iterable

TYPE_PREFIX = "Prismic"

_WORD_SPLIT_RE = re.compile(r"[^A-Za-z0-9]+")


def pascal_case(text: str) -> str:
    """Join the words of *text* with each first letter upper-cased.

    Non alphanumeric characters separate words and are dropped. Letters after
    the first one of each word keep their case, so ``blog_post`` and
    ``blogPost`` both become ``BlogPost``.
    """

    words = [word for word in _WORD_SPLIT_RE.split(text) if word]
    return "".join(word[0].upper() + word[1:] for word in words)


def camel_case(text: str) -> str:
    pascal = pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def composite_type_name(owner_id: str, path_segments: Iterable[str] = (), role_suffix: str = "") -> str:
    """Name a generated composite type from its owner, position and role.

    >>> composite_type_name("page", ["body"], "Group Type")
    'PrismicPageBodyGroupType'
    """

    parts = [TYPE_PREFIX, owner_id, *path_segments]
    if role_suffix:
        parts.append(role_suffix)
    return pascal_case(" ".join(parts))


def document_type_name(custom_type_id: str) -> str:
    return composite_type_name(custom_type_id)


def data_type_name(custom_type_id: str) -> str:
    return composite_type_name(custom_type_id, (), "Data Type")


def group_type_name(custom_type_id: str, field_id: str) -> str:
    return composite_type_name(custom_type_id, (field_id,), "Group Type")


def slice_type_name(custom_type_id: str, slice_zone_id: str, slice_id: str) -> str:
    return composite_type_name(custom_type_id, (slice_zone_id, slice_id))


def slice_primary_type_name(custom_type_id: str, slice_zone_id: str, slice_id: str) -> str:
    return composite_type_name(custom_type_id, (slice_zone_id, slice_id), "Primary Type")


def slice_item_type_name(custom_type_id: str, slice_zone_id: str, slice_id: str) -> str:
    return composite_type_name(custom_type_id, (slice_zone_id, slice_id), "Item Type")


def slices_type_name(custom_type_id: str, slice_zone_id: str) -> str:
    return composite_type_name(custom_type_id, (slice_zone_id,), "Slices Type")


def list_of(type_name: str) -> str:
    return f"[{type_name}]"


def unwrap_list(type_name: str) -> str | None:
    """Return the item type of a ``[X]`` marker, or None for non-list names."""

    if len(type_name) > 2 and type_name.startswith("[") and type_name.endswith("]"):
        return type_name[1:-1]
    return None
