"""Build and preview runs."""

from .build import BuildStats, source_nodes
from .merge import merge_preview_data
from .preview import PreviewError, PreviewResult, PreviewSession, TypePathsNotFoundError

__all__ = [
    "BuildStats",
    "PreviewError",
    "PreviewResult",
    "PreviewSession",
    "TypePathsNotFoundError",
    "merge_preview_data",
    "source_nodes",
]
