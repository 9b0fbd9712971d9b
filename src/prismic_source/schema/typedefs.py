"""Type descriptions produced by schema compilation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class ResolveContract(Enum):
    """Read-time resolvers a field may require instead of its stored value."""

    IMAGE = "image"
    LINK = "link"
    SLICES = "slices"


@dataclass(frozen=True, slots=True)
class FieldDef:
    type: str
    description: str | None = None
    deprecation_reason: str | None = None
    resolve: ResolveContract | None = None


@dataclass(frozen=True, slots=True)
class ObjectTypeDef:
    name: str
    fields: dict[str, FieldDef] = field(default_factory=dict)
    interfaces: tuple[str, ...] = ()
    description: str | None = None

    def implements(self, interface: str) -> bool:
        return interface in self.interfaces


@dataclass(frozen=True, slots=True)
class UnionTypeDef:
    name: str
    types: tuple[str, ...] = ()
    description: str | None = None


@dataclass(frozen=True, slots=True)
class EnumTypeDef:
    name: str
    values: dict[str, str | None] = field(default_factory=dict)
    description: str | None = None


@dataclass(frozen=True, slots=True)
class InterfaceTypeDef:
    name: str
    fields: dict[str, FieldDef] = field(default_factory=dict)
    description: str | None = None


CompositeTypeDef = Union[ObjectTypeDef, UnionTypeDef]
TypeDef = Union[ObjectTypeDef, UnionTypeDef, EnumTypeDef, InterfaceTypeDef]


@dataclass(frozen=True, slots=True)
class TypePathEntry:
    """One ``(path, type name)`` record of the persisted type-path index."""

    path: tuple[str, ...]
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": list(self.path), "type": self.type}

    @classmethod
    def from_dict(cls, payload: Any) -> "TypePathEntry":
        if not isinstance(payload, dict):
            raise ValueError("type path entry must be an object")
        path = payload.get("path")
        type_name = payload.get("type")
        if not isinstance(path, list) or not all(isinstance(segment, str) for segment in path):
            raise ValueError("type path entry 'path' must be a list of strings")
        if not isinstance(type_name, str) or not type_name:
            raise ValueError("type path entry 'type' must be a non-empty string")
        return cls(path=tuple(path), type=type_name)
