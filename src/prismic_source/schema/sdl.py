"""GraphQL SDL rendering and the schema-registration sink."""

from __future__ import annotations

import json
import logging
from typing import Iterable

from prismic_source.schema.typedefs import (
    EnumTypeDef,
    FieldDef,
    InterfaceTypeDef,
    ObjectTypeDef,
    TypeDef,
    UnionTypeDef,
)


logger = logging.getLogger(__name__)


def _description(text: str | None, indent: str = "") -> list[str]:
    if not text:
        return []
    return [f"{indent}{json.dumps(text, ensure_ascii=False)}"]


def _render_field(name: str, field_def: FieldDef) -> list[str]:
    lines = _description(field_def.description, "  ")
    line = f"  {name}: {field_def.type}"
    if field_def.deprecation_reason:
        line += f" @deprecated(reason: {json.dumps(field_def.deprecation_reason, ensure_ascii=False)})"
    lines.append(line)
    return lines


def _render_fields(fields: dict[str, FieldDef]) -> list[str]:
    lines: list[str] = []
    for name, field_def in fields.items():
        lines.extend(_render_field(name, field_def))
    return lines


def _with_body(header: str, body: list[str]) -> list[str]:
    if not body:
        return [header]
    return [header + " {", *body, "}"]


def render_type_def(type_def: TypeDef) -> str:
    lines = _description(type_def.description)

    # Empty definitions drop their body; "{}" and a bare "=" do not parse.
    if isinstance(type_def, ObjectTypeDef):
        header = f"type {type_def.name}"
        if type_def.interfaces:
            header += " implements " + " & ".join(type_def.interfaces)
        lines.extend(_with_body(header, _render_fields(type_def.fields)))
    elif isinstance(type_def, InterfaceTypeDef):
        lines.extend(_with_body(f"interface {type_def.name}", _render_fields(type_def.fields)))
    elif isinstance(type_def, UnionTypeDef):
        if type_def.types:
            lines.append(f"union {type_def.name} = " + " | ".join(type_def.types))
        else:
            logger.warning("Union %s has no member types", type_def.name)
            lines.append(f"union {type_def.name}")
    elif isinstance(type_def, EnumTypeDef):
        body: list[str] = []
        for value, value_description in type_def.values.items():
            body.extend(_description(value_description, "  "))
            body.append(f"  {value}")
        lines.extend(_with_body(f"enum {type_def.name}", body))
    else:
        raise TypeError(f"Unsupported type definition: {type(type_def).__name__}")

    return "\n".join(lines)


def render_sdl(type_defs: Iterable[TypeDef]) -> str:
    return "\n\n".join(render_type_def(type_def) for type_def in type_defs) + "\n"


class SdlTypeSink:
    """Schema sink that keeps registered definitions and renders them as SDL."""

    def __init__(self) -> None:
        self._defs: dict[str, TypeDef] = {}

    def create_types(self, type_defs: TypeDef | Iterable[TypeDef]) -> None:
        if isinstance(type_defs, (ObjectTypeDef, UnionTypeDef, EnumTypeDef, InterfaceTypeDef)):
            type_defs = [type_defs]
        for type_def in type_defs:
            existing = self._defs.get(type_def.name)
            if existing is not None and existing != type_def:
                raise ValueError(f"Type {type_def.name} is already registered with a different definition")
            if existing is None:
                logger.debug("Registering type %s", type_def.name)
            self._defs[type_def.name] = type_def

    @property
    def type_defs(self) -> list[TypeDef]:
        return list(self._defs.values())

    def __contains__(self, name: object) -> bool:
        return name in self._defs

    def to_sdl(self) -> str:
        return render_sdl(self._defs.values())
