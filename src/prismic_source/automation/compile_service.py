"""Compile a directory of schema files into the type-path artifact and SDL."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Mapping

from prismic_source.config import load_schemas_dir
from prismic_source.schema.compiler import compile_schemas
from prismic_source.schema.sdl import SdlTypeSink
from prismic_source.schema.standard_types import STANDARD_TYPE_DEFS
from prismic_source.schema.type_paths import TypePathIndex, schemas_digest, write_type_paths


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SchemaCompileResult:
    custom_types: tuple[str, ...]
    digest: str
    type_defs: int
    type_paths: int
    dropped_fields: tuple[str, ...]
    type_paths_file: str
    sdl_file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "custom_types": list(self.custom_types),
            "digest": self.digest,
            "type_defs": self.type_defs,
            "type_paths": self.type_paths,
            "dropped_fields": list(self.dropped_fields),
            "type_paths_file": self.type_paths_file,
            "sdl_file": self.sdl_file,
        }


def compile_schema_set(
    schemas: Mapping[str, Any],
    *,
    public_dir: str | Path,
    prefix: str,
    sdl_path: str | Path | None = None,
) -> SchemaCompileResult:
    compiled = compile_schemas(schemas)
    index = TypePathIndex(compiled.type_paths)
    digest = schemas_digest(schemas)
    target = write_type_paths(public_dir, prefix, digest, index)

    sdl_file: str | None = None
    if sdl_path is not None:
        sink = SdlTypeSink()
        sink.create_types(STANDARD_TYPE_DEFS)
        sink.create_types(compiled.link_type_def)
        sink.create_types(compiled.type_defs)
        sdl_target = Path(sdl_path)
        sdl_target.parent.mkdir(parents=True, exist_ok=True)
        sdl_target.write_text(sink.to_sdl(), encoding="utf-8")
        sdl_file = str(sdl_target)

    LOGGER.info("Compiled %d custom type(s) into %s", len(schemas), target.name)
    return SchemaCompileResult(
        custom_types=tuple(schemas),
        digest=digest,
        type_defs=len(compiled.type_defs),
        type_paths=len(index),
        dropped_fields=tuple(".".join(path) for path in compiled.dropped_paths),
        type_paths_file=str(target),
        sdl_file=sdl_file,
    )


def compile_schema_dir(
    schemas_dir: str | Path,
    *,
    public_dir: str | Path,
    prefix: str,
    sdl_path: str | Path | None = None,
) -> SchemaCompileResult:
    return compile_schema_set(
        load_schemas_dir(schemas_dir),
        public_dir=public_dir,
        prefix=prefix,
        sdl_path=sdl_path,
    )
