"""Schema compilation services for command-line and watch workflows."""

from prismic_source.automation.compile_service import (
    SchemaCompileResult,
    compile_schema_dir,
    compile_schema_set,
)
from prismic_source.automation.watcher import DebouncedSchemaHandler, SchemaFolderWatcher

__all__ = [
    "DebouncedSchemaHandler",
    "SchemaCompileResult",
    "SchemaFolderWatcher",
    "compile_schema_dir",
    "compile_schema_set",
]
