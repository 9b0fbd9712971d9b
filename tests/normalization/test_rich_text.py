from __future__ import annotations

from prismic_source.normalization.rich_text import as_html, as_text, is_document_link, link_url


def test_as_text_joins_block_texts() -> None:
    blocks = [
        {"type": "heading1", "text": "Title", "spans": []},
        {"type": "image", "url": "https://images.example/a.png"},
        {"type": "paragraph", "text": "Body", "spans": []},
    ]

    assert as_text(blocks) == "Title Body"
    assert as_text(None) == ""


def test_as_html_renders_blocks_and_spans() -> None:
    blocks = [
        {"type": "heading2", "text": "Hello", "spans": []},
        {
            "type": "paragraph",
            "text": "Hello bold world",
            "spans": [{"start": 6, "end": 10, "type": "strong"}],
        },
    ]

    assert as_html(blocks) == "<h2>Hello</h2><p>Hello <strong>bold</strong> world</p>"


def test_as_html_nests_overlapping_spans_and_escapes_text() -> None:
    blocks = [
        {
            "type": "paragraph",
            "text": "a<b c\nd",
            "spans": [
                {"start": 0, "end": 5, "type": "em"},
                {"start": 2, "end": 7, "type": "strong"},
            ],
        }
    ]

    assert as_html(blocks) == "<p><em>a&lt;<strong>b c</strong></em><strong><br />d</strong></p>"


def test_as_html_groups_list_items() -> None:
    blocks = [
        {"type": "list-item", "text": "one", "spans": []},
        {"type": "list-item", "text": "two", "spans": []},
        {"type": "o-list-item", "text": "first", "spans": []},
        {"type": "paragraph", "text": "after", "spans": []},
    ]

    assert as_html(blocks) == "<ul><li>one</li><li>two</li></ul><ol><li>first</li></ol><p>after</p>"


def test_hyperlinks_use_link_resolver_for_document_links() -> None:
    blocks = [
        {
            "type": "paragraph",
            "text": "see docs and web",
            "spans": [
                {"start": 4, "end": 8, "type": "hyperlink", "data": {"link_type": "Document", "id": "x1", "uid": "docs"}},
                {
                    "start": 13,
                    "end": 16,
                    "type": "hyperlink",
                    "data": {"link_type": "Web", "url": "https://example.com", "target": "_blank"},
                },
            ],
        }
    ]

    html = as_html(blocks, link_resolver=lambda doc: f"/{doc['uid']}")

    assert html == (
        '<p>see <a href="/docs">docs</a> and '
        '<a href="https://example.com" target="_blank" rel="noopener">web</a></p>'
    )


def test_custom_serializer_overrides_elements() -> None:
    def serializer(element_type, element, content, children):
        if element_type == "heading1":
            return f"<h1 class=\"title\">{children}</h1>"
        return None

    blocks = [{"type": "heading1", "text": "Hi", "spans": []}, {"type": "paragraph", "text": "x", "spans": []}]

    assert as_html(blocks, html_serializer=serializer) == '<h1 class="title">Hi</h1><p>x</p>'


def test_image_and_embed_blocks() -> None:
    blocks = [
        {"type": "image", "url": "https://images.example/a.png", "alt": "A", "copyright": None},
        {
            "type": "embed",
            "oembed": {"embed_url": "https://youtu.be/x", "type": "video", "provider_name": "YouTube", "html": "<iframe></iframe>"},
        },
    ]

    assert as_html(blocks) == (
        '<p class="block-img"><img src="https://images.example/a.png" alt="A" /></p>'
        '<div data-oembed="https://youtu.be/x" data-oembed-type="video" data-oembed-provider="YouTube">'
        "<iframe></iframe></div>"
    )


def test_link_url_variants() -> None:
    assert link_url({"link_type": "Web", "url": "https://example.com"}) == "https://example.com"
    assert link_url({"link_type": "Document", "id": "x", "url": "/fallback"}) == "/fallback"
    assert link_url({"link_type": "Document", "id": "x"}, lambda doc: "/resolved") == "/resolved"
    assert link_url({"link_type": "Any"}) == ""
    assert link_url(None) is None
    assert is_document_link({"link_type": "Document"})
    assert not is_document_link({"link_type": "Media"})
