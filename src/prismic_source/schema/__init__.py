"""Schema compilation: field classification, generated types and type paths."""

from .compiler import CompiledSchemas, TypeNameCollisionError, classify_field, compile_schemas
from .sdl import SdlTypeSink, render_sdl
from .type_paths import PathKind, TypePathIndex, schemas_digest
from .typedefs import FieldDef, ObjectTypeDef, ResolveContract, TypePathEntry, UnionTypeDef

__all__ = [
    "CompiledSchemas",
    "FieldDef",
    "ObjectTypeDef",
    "PathKind",
    "ResolveContract",
    "SdlTypeSink",
    "TypeNameCollisionError",
    "TypePathEntry",
    "TypePathIndex",
    "UnionTypeDef",
    "classify_field",
    "compile_schemas",
    "render_sdl",
    "schemas_digest",
]
