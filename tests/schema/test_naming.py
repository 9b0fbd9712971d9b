from __future__ import annotations

from prismic_source.schema.naming import (
    camel_case,
    composite_type_name,
    data_type_name,
    document_type_name,
    group_type_name,
    list_of,
    pascal_case,
    slice_item_type_name,
    slice_primary_type_name,
    slice_type_name,
    slices_type_name,
    unwrap_list,
)


def test_pascal_case_splits_on_non_alphanumerics_and_keeps_inner_case() -> None:
    assert pascal_case("blog_post") == "BlogPost"
    assert pascal_case("blogPost") == "BlogPost"
    assert pascal_case("hero-image 2") == "HeroImage2"
    assert camel_case("PrismicBlogPost") == "prismicBlogPost"


def test_generated_names_follow_owner_path_and_role() -> None:
    assert document_type_name("blog_post") == "PrismicBlogPost"
    assert data_type_name("page") == "PrismicPageDataType"
    assert group_type_name("page", "gallery") == "PrismicPageGalleryGroupType"
    assert slices_type_name("page", "body") == "PrismicPageBodySlicesType"
    assert slice_type_name("page", "body", "text_block") == "PrismicPageBodyTextBlock"
    assert slice_primary_type_name("page", "body", "quote") == "PrismicPageBodyQuotePrimaryType"
    assert slice_item_type_name("page", "body", "quote") == "PrismicPageBodyQuoteItemType"
    assert composite_type_name("page", ["a", "b"], "X Type") == "PrismicPageABXType"


def test_list_markers() -> None:
    assert list_of("PrismicPageGalleryGroupType") == "[PrismicPageGalleryGroupType]"
    assert unwrap_list("[PrismicPageGalleryGroupType]") == "PrismicPageGalleryGroupType"
    assert unwrap_list("PrismicPage") is None
    assert unwrap_list("[]") is None
