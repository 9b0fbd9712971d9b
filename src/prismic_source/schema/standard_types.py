"""Fixed type definitions shared by every schema set."""

from __future__ import annotations

from prismic_source.schema.typedefs import EnumTypeDef, FieldDef, InterfaceTypeDef, ObjectTypeDef, TypeDef


STRUCTURED_TEXT_TYPE = "PrismicStructuredTextType"
GEO_POINT_TYPE = "PrismicGeoPointType"
EMBED_TYPE = "PrismicEmbedType"
IMAGE_DIMENSIONS_TYPE = "PrismicImageDimensionsType"
IMAGE_TYPE = "PrismicImageType"
LINK_TYPES_ENUM = "PrismicLinkTypes"
LINK_TYPE = "PrismicLinkType"
DOCUMENT_INTERFACE = "PrismicDocument"
NODE_INTERFACE = "Node"
ALL_DOCUMENT_TYPES_UNION = "PrismicAllDocumentTypes"

# Keys of an image value that describe the base view. Every other key holds a
# named alternate view with the same shape.
IMAGE_FIELD_KEYS = ("dimensions", "alt", "copyright", "url", "localFile")

_RAW_DESCRIPTION = "The field's value without transformations exactly as it comes from the Prismic API."


STANDARD_TYPE_DEFS: tuple[TypeDef, ...] = (
    ObjectTypeDef(
        name=STRUCTURED_TEXT_TYPE,
        description="A text field with formatting options.",
        fields={
            "html": FieldDef("String", "The HTML value of the text using the link resolver and HTML serializer."),
            "text": FieldDef("String", "The plain text value of the text."),
            "raw": FieldDef("JSON", _RAW_DESCRIPTION),
        },
    ),
    ObjectTypeDef(
        name=GEO_POINT_TYPE,
        description="A field for storing geo-coordinates.",
        fields={
            "latitude": FieldDef("Float", "The latitude value of the geo-coordinate."),
            "longitude": FieldDef("Float", "The longitude value of the geo-coordinate."),
        },
    ),
    ObjectTypeDef(
        name=EMBED_TYPE,
        description="Embed videos, songs, tweets, slices, etc.",
        fields={
            "author_name": FieldDef("String", "The name of the author/owner of the resource."),
            "author_url": FieldDef("String", "A URL for the author/owner of the resource."),
            "cache_age": FieldDef("String", "The suggested cache lifetime for this resource, in seconds."),
            "embed_url": FieldDef("String", "The URL of the resource."),
            "html": FieldDef("String", "The HTML required to display the resource."),
            "name": FieldDef("String", "The name of the resource."),
            "provider_name": FieldDef("String", "The name of the resource provider."),
            "provider_url": FieldDef("String", "The URL of the resource provider."),
            "thumbnail_height": FieldDef("Int", "The height of the resource's thumbnail."),
            "thumbnail_url": FieldDef("String", "A URL to a thumbnail image representing the resource."),
            "thumbnail_width": FieldDef("Int", "The width of the resource's thumbnail."),
            "title": FieldDef("String", "A text title, describing the resource."),
            "type": FieldDef("String", "The resource type."),
            "version": FieldDef("String", "The oEmbed version number."),
        },
    ),
    ObjectTypeDef(
        name=IMAGE_DIMENSIONS_TYPE,
        description="Dimensions for images.",
        fields={
            "width": FieldDef("Int!", "Width of the image in pixels."),
            "height": FieldDef("Int!", "Height of the image in pixels."),
        },
    ),
    ObjectTypeDef(
        name=IMAGE_TYPE,
        description="A responsive image field with constraints.",
        fields={
            "alt": FieldDef("String", "The image's alternative text."),
            "copyright": FieldDef("String", "The image's copyright text."),
            "dimensions": FieldDef(f"{IMAGE_DIMENSIONS_TYPE}!", "The image's dimensions."),
            "url": FieldDef("String!", "The image's URL on Prismic's CDN."),
            "localFile": FieldDef("File", "The locally downloaded image if `should_normalize_image` allows it."),
        },
    ),
    EnumTypeDef(
        name=LINK_TYPES_ENUM,
        description="Types of links.",
        values={
            "Any": "Any of the other types",
            "Document": "Internal content",
            "Media": "Internal media content",
            "Web": "URL",
        },
    ),
    ObjectTypeDef(
        name=LINK_TYPE,
        description="Link to web, media, and internal content.",
        fields={
            "link_type": FieldDef(f"{LINK_TYPES_ENUM}!", "The type of link."),
            "isBroken": FieldDef("Boolean", "If a Document link, `true` if linked document does not exist."),
            "url": FieldDef("String", "The link URL using the link resolver."),
            "target": FieldDef("String", "The link's target."),
            "id": FieldDef("ID", "If a Document link, the linked document's Prismic ID."),
            "type": FieldDef("String", "If a Document link, the linked document's custom type API ID."),
            "tags": FieldDef("[String]", "If a Document link, the linked document's list of tags."),
            "lang": FieldDef("String", "If a Document link, the linked document's language."),
            "slug": FieldDef("String", "If a Document link, the linked document's slug."),
            "uid": FieldDef("String", "If a Document link, the linked document's UID."),
            "document": FieldDef(ALL_DOCUMENT_TYPES_UNION, "If a Document link, the linked document."),
            "raw": FieldDef("JSON", _RAW_DESCRIPTION),
        },
    ),
    InterfaceTypeDef(
        name=DOCUMENT_INTERFACE,
        fields={
            "dataString": FieldDef("String"),
            "first_publication_date": FieldDef("Date"),
            "href": FieldDef("String"),
            "id": FieldDef("ID!"),
            "lang": FieldDef("String"),
            "last_publication_date": FieldDef("Date"),
            "type": FieldDef("String"),
        },
    ),
)


def standard_type_names() -> tuple[str, ...]:
    return tuple(type_def.name for type_def in STANDARD_TYPE_DEFS)
