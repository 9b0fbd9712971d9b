"""Compile custom type schemas into type definitions and a type-path index."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Any, Callable, Iterable, Mapping

from prismic_source.schema.fields import (
    FieldKind,
    group_fields,
    merge_tabs,
    slice_item_fields,
    slice_primary_fields,
    slice_zone_choices,
)
from prismic_source.schema.naming import (
    data_type_name,
    document_type_name,
    group_type_name,
    list_of,
    slice_item_type_name,
    slice_primary_type_name,
    slice_type_name,
    slices_type_name,
)
from prismic_source.schema.standard_types import (
    ALL_DOCUMENT_TYPES_UNION,
    DOCUMENT_INTERFACE,
    EMBED_TYPE,
    GEO_POINT_TYPE,
    IMAGE_TYPE,
    LINK_TYPE,
    NODE_INTERFACE,
    STRUCTURED_TEXT_TYPE,
)
from prismic_source.schema.typedefs import (
    CompositeTypeDef,
    FieldDef,
    ObjectTypeDef,
    ResolveContract,
    TypePathEntry,
    UnionTypeDef,
)


logger = logging.getLogger(__name__)

Path = tuple[str, ...]


@dataclass(slots=True)
class TypeNameCollisionError(Exception):
    """Two different definitions were generated under one type name."""

    name: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (type={self.name})"


@dataclass(slots=True)
class CompiledSchemas:
    """Everything schema compilation produces for one schema set."""

    type_defs: list[CompositeTypeDef]
    type_paths: list[TypePathEntry]
    link_type_def: UnionTypeDef
    dropped_paths: list[Path] = field(default_factory=list)


class TypeRegistry:
    """Ordered, name-keyed collection of generated composite types."""

    def __init__(self) -> None:
        self._by_name: dict[str, CompositeTypeDef] = {}

    def enqueue(self, type_def: CompositeTypeDef) -> None:
        existing = self._by_name.get(type_def.name)
        if existing is None:
            self._by_name[type_def.name] = type_def
            return
        if existing == type_def:
            logger.debug("Type %s generated twice with an identical shape", type_def.name)
            return
        raise TypeNameCollisionError(
            type_def.name,
            "Distinct schema fields generate the same type name with different shapes",
        )

    @property
    def type_defs(self) -> list[CompositeTypeDef]:
        return list(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


@dataclass(slots=True)
class ClassifyContext:
    custom_type_id: str
    registry: TypeRegistry
    type_paths: list[TypePathEntry]
    dropped_paths: list[Path]
    slice_zone_id: str | None = None

    def enqueue_type_path(self, path: Iterable[str], type_name: str) -> None:
        self.type_paths.append(TypePathEntry(path=tuple(path), type=type_name))


_Classifier = Callable[[str, Mapping[str, Any], Path, ClassifyContext], "FieldDef | None"]


def _scalar(type_name: str) -> _Classifier:
    def classify(field_id: str, _schema: Mapping[str, Any], path: Path, ctx: ClassifyContext) -> FieldDef:
        ctx.enqueue_type_path((*path, field_id), type_name)
        return FieldDef(type_name)

    return classify


def _with_resolver(type_name: str, contract: ResolveContract) -> _Classifier:
    def classify(field_id: str, _schema: Mapping[str, Any], path: Path, ctx: ClassifyContext) -> FieldDef:
        ctx.enqueue_type_path((*path, field_id), type_name)
        return FieldDef(type_name, resolve=contract)

    return classify


def _classify_uid(field_id: str, _schema: Mapping[str, Any], path: Path, ctx: ClassifyContext) -> FieldDef:
    ctx.enqueue_type_path((*path, field_id), "String")
    return FieldDef(
        "String",
        description="The document's unique identifier. Unique among all instances of the document's type.",
    )


def _classify_group(field_id: str, schema: Mapping[str, Any], path: Path, ctx: ClassifyContext) -> FieldDef:
    field_path = (*path, field_id)
    name = group_type_name(ctx.custom_type_id, field_id)
    subfields = classify_fields(group_fields(schema), field_path, ctx)
    ctx.registry.enqueue(ObjectTypeDef(name=name, fields=subfields))
    ctx.enqueue_type_path(field_path, list_of(name))
    return FieldDef(list_of(name))


def _classify_slice(field_id: str, schema: Mapping[str, Any], path: Path, ctx: ClassifyContext) -> FieldDef | None:
    zone_id = ctx.slice_zone_id
    if zone_id is None:
        return _drop(field_id, schema, path, ctx, reason="slice outside of a slice zone")

    field_path = (*path, field_id)
    slice_fields: dict[str, FieldDef] = {"id": FieldDef("String"), "slice_type": FieldDef("String")}

    primary_schema = slice_primary_fields(schema)
    if primary_schema:
        primary_name = slice_primary_type_name(ctx.custom_type_id, zone_id, field_id)
        primary_path = (*field_path, "primary")
        ctx.registry.enqueue(ObjectTypeDef(name=primary_name, fields=classify_fields(primary_schema, primary_path, ctx)))
        ctx.enqueue_type_path(primary_path, primary_name)
        slice_fields["primary"] = FieldDef(primary_name)

    items_schema = slice_item_fields(schema)
    if items_schema:
        item_name = slice_item_type_name(ctx.custom_type_id, zone_id, field_id)
        items_path = (*field_path, "items")
        ctx.registry.enqueue(ObjectTypeDef(name=item_name, fields=classify_fields(items_schema, items_path, ctx)))
        ctx.enqueue_type_path(items_path, list_of(item_name))
        slice_fields["items"] = FieldDef(list_of(item_name))

    name = slice_type_name(ctx.custom_type_id, zone_id, field_id)
    ctx.registry.enqueue(ObjectTypeDef(name=name, fields=slice_fields, interfaces=(NODE_INTERFACE,)))
    ctx.enqueue_type_path(field_path, name)
    return FieldDef(name)


def _classify_slices(field_id: str, schema: Mapping[str, Any], path: Path, ctx: ClassifyContext) -> FieldDef | None:
    field_path = (*path, field_id)
    choice_ctx = replace(ctx, slice_zone_id=field_id)

    choice_types: list[str] = []
    for choice_id, choice_schema in slice_zone_choices(schema).items():
        if FieldKind.of(choice_schema) is not FieldKind.SLICE:
            _drop(choice_id, choice_schema, field_path, ctx, reason="slice zone choice is not a Slice")
            continue
        choice_def = classify_field(choice_id, choice_schema, field_path, choice_ctx)
        if choice_def is not None:
            choice_types.append(choice_def.type)

    if not choice_types:
        return _drop(field_id, schema, path, ctx, reason="slice zone has no usable choices")

    name = slices_type_name(ctx.custom_type_id, field_id)
    ctx.registry.enqueue(UnionTypeDef(name=name, types=tuple(choice_types)))
    ctx.enqueue_type_path(field_path, list_of(name))
    return FieldDef(list_of(name), resolve=ResolveContract.SLICES)


def _drop(
    field_id: str,
    schema: Any,
    path: Path,
    ctx: ClassifyContext,
    *,
    reason: str = "unrecognized field kind",
) -> None:
    raw_kind = schema.get("type") if isinstance(schema, Mapping) else None
    field_path = (*path, field_id)
    logger.warning("Dropping field %s of type %r: %s", "/".join(field_path), raw_kind, reason)
    ctx.dropped_paths.append(field_path)
    return None


_CLASSIFIERS: dict[FieldKind, _Classifier] = {
    FieldKind.UID: _classify_uid,
    FieldKind.COLOR: _scalar("String"),
    FieldKind.SELECT: _scalar("String"),
    FieldKind.TEXT: _scalar("String"),
    FieldKind.STRUCTURED_TEXT: _scalar(STRUCTURED_TEXT_TYPE),
    FieldKind.NUMBER: _scalar("Float"),
    FieldKind.DATE: _scalar("Date"),
    FieldKind.TIMESTAMP: _scalar("Date"),
    FieldKind.GEO_POINT: _scalar(GEO_POINT_TYPE),
    FieldKind.EMBED: _scalar(EMBED_TYPE),
    FieldKind.IMAGE: _with_resolver(IMAGE_TYPE, ResolveContract.IMAGE),
    FieldKind.LINK: _with_resolver(LINK_TYPE, ResolveContract.LINK),
    FieldKind.GROUP: _classify_group,
    FieldKind.SLICE: _classify_slice,
    FieldKind.SLICES: _classify_slices,
    FieldKind.UNRECOGNIZED: _drop,
}


def classify_field(field_id: str, field_schema: Any, path: Iterable[str], ctx: ClassifyContext) -> FieldDef | None:
    """Classify one raw field, recording its type path and any generated types.

    Returns None when the field is dropped.
    """

    kind = FieldKind.of(field_schema)
    return _CLASSIFIERS[kind](field_id, field_schema, tuple(path), ctx)


def classify_fields(fields: Mapping[str, Any], path: Iterable[str], ctx: ClassifyContext) -> dict[str, FieldDef]:
    parent = tuple(path)
    classified: dict[str, FieldDef] = {}
    for field_id, field_schema in fields.items():
        field_def = classify_field(field_id, field_schema, parent, ctx)
        if field_def is not None:
            classified[field_id] = field_def
    return classified


def _document_fields(data_name: str) -> dict[str, FieldDef]:
    return {
        "data": FieldDef(data_name, "The document's data fields."),
        "dataRaw": FieldDef(
            "JSON!",
            "The document's data object without transformations exactly as it comes from the Prismic API.",
        ),
        "dataString": FieldDef(
            "String!",
            "The document's data object without transformations, serialized as JSON.",
            deprecation_reason="Use `dataRaw` instead which returns JSON.",
        ),
        "first_publication_date": FieldDef("Date!", "The document's initial publication date."),
        "href": FieldDef("String", "The document's URL derived via the link resolver."),
        "id": FieldDef("ID!", "Globally unique identifier. Note that this differs from the `prismicId` field."),
        "lang": FieldDef("String!", "The document's language."),
        "last_publication_date": FieldDef("Date!", "The document's most recent publication date"),
        "tags": FieldDef("[String!]!", "The document's list of tags."),
        "type": FieldDef("String!", "The document's Prismic API ID type."),
        "prismicId": FieldDef("ID!", "The document's Prismic ID."),
    }


def _split_uid(fields: dict[str, Any]) -> tuple[str | None, Any]:
    for field_id, field_schema in fields.items():
        if FieldKind.of(field_schema) is FieldKind.UID:
            return field_id, fields.pop(field_id)
    return None, None


def compile_custom_type(
    custom_type_id: str,
    custom_type_schema: Mapping[str, Any],
    *,
    registry: TypeRegistry,
    type_paths: list[TypePathEntry],
    dropped_paths: list[Path] | None = None,
) -> None:
    """Compile one custom type, appending its output to the shared collectors."""

    if not isinstance(custom_type_schema, Mapping):
        raise ValueError(f"Schema for custom type {custom_type_id!r} must be an object")

    ctx = ClassifyContext(
        custom_type_id=custom_type_id,
        registry=registry,
        type_paths=type_paths,
        dropped_paths=dropped_paths if dropped_paths is not None else [],
    )

    # The UID sits next to data fields in the schema but one level above
    # `data` in API documents.
    fields = merge_tabs(custom_type_schema)
    uid_id, uid_schema = _split_uid(fields)
    uid_def = classify_field(uid_id, uid_schema, (custom_type_id,), ctx) if uid_id is not None else None

    data_path = (custom_type_id, "data")
    data_fields = classify_fields(fields, data_path, ctx)
    data_name = data_type_name(custom_type_id)
    ctx.enqueue_type_path(data_path, data_name)
    registry.enqueue(ObjectTypeDef(name=data_name, fields=data_fields))

    document_fields = _document_fields(data_name)
    if uid_def is not None and uid_id is not None:
        document_fields[uid_id] = uid_def

    name = document_type_name(custom_type_id)
    ctx.enqueue_type_path((custom_type_id,), name)
    registry.enqueue(
        ObjectTypeDef(name=name, fields=document_fields, interfaces=(DOCUMENT_INTERFACE, NODE_INTERFACE))
    )


def derive_link_type_def(type_defs: Iterable[CompositeTypeDef]) -> UnionTypeDef:
    """Build the union of every generated document type."""

    document_names = tuple(
        type_def.name
        for type_def in type_defs
        if isinstance(type_def, ObjectTypeDef) and type_def.implements(DOCUMENT_INTERFACE)
    )
    return UnionTypeDef(name=ALL_DOCUMENT_TYPES_UNION, types=document_names)


def compile_schemas(schemas: Mapping[str, Mapping[str, Any]]) -> CompiledSchemas:
    """Compile a full schema set keyed by custom type id."""

    registry = TypeRegistry()
    type_paths: list[TypePathEntry] = []
    dropped_paths: list[Path] = []

    for custom_type_id, custom_type_schema in schemas.items():
        compile_custom_type(
            custom_type_id,
            custom_type_schema,
            registry=registry,
            type_paths=type_paths,
            dropped_paths=dropped_paths,
        )

    type_defs = registry.type_defs
    return CompiledSchemas(
        type_defs=type_defs,
        type_paths=type_paths,
        link_type_def=derive_link_type_def(type_defs),
        dropped_paths=dropped_paths,
    )
