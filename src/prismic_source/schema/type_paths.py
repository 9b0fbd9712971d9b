"""Persisted type-path index shared by the build and preview contexts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import hashlib
import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from prismic_source.schema.naming import unwrap_list
from prismic_source.schema.standard_types import IMAGE_TYPE, LINK_TYPE, STRUCTURED_TEXT_TYPE
from prismic_source.schema.typedefs import TypePathEntry


DEFAULT_TYPE_PATHS_PREFIX_TEMPLATE = "prismic-typepaths---{repository_name}-"


class PathKind(Enum):
    """How the normalizer treats the value found at a type path."""

    SCALAR = "scalar"
    STRUCTURED_TEXT = "structured_text"
    IMAGE = "image"
    LINK = "link"
    GROUP = "group"
    SLICES = "slices"


_FIXED_KINDS = {
    STRUCTURED_TEXT_TYPE: PathKind.STRUCTURED_TEXT,
    IMAGE_TYPE: PathKind.IMAGE,
    LINK_TYPE: PathKind.LINK,
}


def kind_for_type(type_name: str | None) -> PathKind:
    """Map a recorded type name back to the handling it requires."""

    if type_name is None:
        return PathKind.SCALAR
    fixed = _FIXED_KINDS.get(type_name)
    if fixed is not None:
        return fixed
    item_type = unwrap_list(type_name)
    if item_type is not None:
        if item_type.endswith("GroupType"):
            return PathKind.GROUP
        if item_type.endswith("SlicesType"):
            return PathKind.SLICES
    return PathKind.SCALAR


class TypePathIndex:
    """Immutable lookup from field path to recorded type name.

    Entries keep their insertion order so the serialized artifact stays
    diff-stable between rebuilds.
    """

    def __init__(self, entries: Iterable[TypePathEntry]) -> None:
        self._entries: tuple[TypePathEntry, ...] = tuple(entries)
        lookup: dict[tuple[str, ...], str] = {}
        for entry in self._entries:
            # First record wins, matching a linear scan over the artifact.
            lookup.setdefault(entry.path, entry.type)
        self._lookup = lookup

    @property
    def entries(self) -> tuple[TypePathEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TypePathEntry]:
        return iter(self._entries)

    def type_for(self, path: Sequence[str]) -> str | None:
        return self._lookup.get(tuple(path))

    def kind_for(self, path: Sequence[str]) -> PathKind:
        return kind_for_type(self.type_for(path))

    def to_json(self) -> str:
        return json.dumps([entry.to_dict() for entry in self._entries], ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_payload(cls, payload: Any) -> "TypePathIndex":
        if not isinstance(payload, list):
            raise ValueError("type paths payload must be a list")
        return cls(TypePathEntry.from_dict(item) for item in payload)

    @classmethod
    def from_json(cls, text: str) -> "TypePathIndex":
        return cls.from_payload(json.loads(text))


def canonical_json(value: Any) -> str:
    """Serialize *value* independently of mapping key order."""

    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)


def schemas_digest(schemas: Mapping[str, Any]) -> str:
    """Digest of a schema set, used as the cache key of its type-path index."""

    return hashlib.md5(canonical_json(schemas).encode("utf-8"), usedforsecurity=False).hexdigest()


def default_type_paths_prefix(repository_name: str) -> str:
    return DEFAULT_TYPE_PATHS_PREFIX_TEMPLATE.format(repository_name=repository_name)


def type_paths_filename(prefix: str, digest: str) -> str:
    return f"{prefix}{digest}.json"


def write_type_paths(directory: str | Path, prefix: str, digest: str, index: TypePathIndex) -> Path:
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / type_paths_filename(prefix, digest)
    tmp_path = target.with_suffix(target.suffix + ".tmp")
    tmp_path.write_text(index.to_json(), encoding="utf-8")
    tmp_path.replace(target)
    return target


def read_type_paths(path: str | Path) -> TypePathIndex:
    return TypePathIndex.from_json(Path(path).read_text(encoding="utf-8"))
