"""Document normalization into graph-linked nodes."""

from .context import FieldNormalizers, HookContext, Hooks, NormalizationContext
from .document import normalize_document, normalize_object
from .fields import BUILD_NORMALIZERS, PREVIEW_NORMALIZERS, PreviewLinkInliner
from .resolvers import resolve_field, resolve_image, resolve_link, resolve_slices

__all__ = [
    "BUILD_NORMALIZERS",
    "PREVIEW_NORMALIZERS",
    "FieldNormalizers",
    "HookContext",
    "Hooks",
    "NormalizationContext",
    "PreviewLinkInliner",
    "normalize_document",
    "normalize_object",
    "resolve_field",
    "resolve_image",
    "resolve_link",
    "resolve_slices",
]
