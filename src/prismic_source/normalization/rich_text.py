"""Plain-text and HTML serialization of rich-text field values."""

from __future__ import annotations

from html import escape
from typing import Any, Iterable, Mapping

from prismic_source.normalization.context import HtmlSerializer, LinkResolver


DOCUMENT_LINK_TYPES = frozenset({"Document", "Link.Document", "Link.document"})

_TEXT_BLOCK_TAGS = {
    "heading1": "h1",
    "heading2": "h2",
    "heading3": "h3",
    "heading4": "h4",
    "heading5": "h5",
    "heading6": "h6",
    "paragraph": "p",
    "preformatted": "pre",
    "list-item": "li",
    "o-list-item": "li",
}
_LIST_GROUPS = {"list-item": ("group-list-item", "ul"), "o-list-item": ("group-o-list-item", "ol")}
_INLINE_TAGS = {"strong": "strong", "em": "em"}

_Span = tuple[int, int, Mapping[str, Any]]


def is_document_link(link: Mapping[str, Any]) -> bool:
    return any(link.get(key) in DOCUMENT_LINK_TYPES for key in ("link_type", "_linkType", "linkType"))


def link_url(link: Any, link_resolver: LinkResolver | None = None) -> str | None:
    """Resolve the URL a link points to.

    Document links go through *link_resolver* when one is given; every other
    link uses its own ``url``. A link with neither resolves to ``""``.
    """

    if not isinstance(link, Mapping):
        return None
    if is_document_link(link) and link_resolver is not None:
        return link_resolver(link)
    url = link.get("url")
    return url if isinstance(url, str) and url else ""


def as_text(blocks: Any, join: str = " ") -> str:
    if not isinstance(blocks, list):
        return ""
    return join.join(
        block["text"] for block in blocks if isinstance(block, Mapping) and isinstance(block.get("text"), str)
    )


def as_html(
    blocks: Any,
    link_resolver: LinkResolver | None = None,
    html_serializer: HtmlSerializer | None = None,
) -> str:
    if not isinstance(blocks, list):
        return ""
    serializer = _Serializer(link_resolver, html_serializer)
    return "".join(serializer.serialize_group(group) for group in _group_list_items(blocks))


def _group_list_items(blocks: Iterable[Any]) -> list[list[Mapping[str, Any]]]:
    groups: list[list[Mapping[str, Any]]] = []
    for block in blocks:
        if not isinstance(block, Mapping):
            continue
        block_type = block.get("type")
        if block_type in _LIST_GROUPS and groups and groups[-1][0].get("type") == block_type:
            groups[-1].append(block)
        else:
            groups.append([block])
    return groups


def _label_attr(element: Mapping[str, Any]) -> str:
    label = element.get("label")
    return f' class="{escape(str(label))}"' if label else ""


def _attr(name: str, value: Any) -> str:
    if value is None:
        return ""
    return f' {name}="{escape(str(value))}"'


class _Serializer:
    def __init__(self, link_resolver: LinkResolver | None, html_serializer: HtmlSerializer | None) -> None:
        self._link_resolver = link_resolver
        self._html_serializer = html_serializer

    def _custom(self, element_type: str, element: Mapping[str, Any], content: str, children: str) -> str | None:
        if self._html_serializer is None:
            return None
        return self._html_serializer(element_type, element, content, children)

    def serialize_group(self, group: list[Mapping[str, Any]]) -> str:
        block_type = group[0].get("type")
        if block_type not in _LIST_GROUPS:
            return self.serialize_block(group[0])

        group_type, tag = _LIST_GROUPS[block_type]
        children = "".join(self.serialize_block(block) for block in group)
        element = {"type": group_type, "items": group}
        custom = self._custom(group_type, element, "", children)
        return custom if custom is not None else f"<{tag}>{children}</{tag}>"

    def serialize_block(self, block: Mapping[str, Any]) -> str:
        block_type = str(block.get("type") or "")
        text = block.get("text") if isinstance(block.get("text"), str) else ""

        if block_type in _TEXT_BLOCK_TAGS:
            children = self._serialize_text(text, block.get("spans") or [])
            custom = self._custom(block_type, block, text, children)
            if custom is not None:
                return custom
            tag = _TEXT_BLOCK_TAGS[block_type]
            return f"<{tag}{_label_attr(block)}>{children}</{tag}>"

        custom = self._custom(block_type, block, text, "")
        if custom is not None:
            return custom
        if block_type == "image":
            return self._image(block)
        if block_type == "embed":
            return self._embed(block)
        return ""

    def _image(self, block: Mapping[str, Any]) -> str:
        label = block.get("label")
        css_class = "block-img" + (f" {label}" if label else "")
        img = f'<img{_attr("src", block.get("url"))}{_attr("alt", block.get("alt") or "")}'
        if block.get("copyright"):
            img += _attr("copyright", block.get("copyright"))
        img += " />"
        link_to = block.get("linkTo")
        if isinstance(link_to, Mapping):
            target = link_to.get("target")
            rel = ' rel="noopener"' if target else ""
            img = f'<a{_attr("href", link_url(link_to, self._link_resolver))}{_attr("target", target)}{rel}>{img}</a>'
        return f'<p class="{escape(css_class)}">{img}</p>'

    def _embed(self, block: Mapping[str, Any]) -> str:
        oembed = block.get("oembed") if isinstance(block.get("oembed"), Mapping) else {}
        return (
            f'<div{_attr("data-oembed", oembed.get("embed_url"))}'
            f'{_attr("data-oembed-type", oembed.get("type"))}'
            f'{_attr("data-oembed-provider", oembed.get("provider_name"))}'
            f"{_label_attr(block)}>{oembed.get('html') or ''}</div>"
        )

    def _serialize_text(self, text: str, raw_spans: Any) -> str:
        spans: list[_Span] = []
        for span in raw_spans if isinstance(raw_spans, list) else []:
            if not isinstance(span, Mapping):
                continue
            start, end = span.get("start"), span.get("end")
            if isinstance(start, int) and isinstance(end, int) and 0 <= start < end:
                spans.append((start, min(end, len(text)), span))
        return self._serialize_range(text, spans, 0, len(text))

    def _serialize_range(self, text: str, spans: list[_Span], start: int, end: int) -> str:
        parts: list[str] = []
        cursor = start
        pending = sorted(spans, key=lambda item: (item[0], -item[1]))

        while pending:
            span_start, span_end, span = pending.pop(0)
            span_start = max(span_start, cursor)
            span_end = min(span_end, end)
            if span_start >= span_end:
                continue
            if span_start > cursor:
                parts.append(self._text_leaf(text[cursor:span_start]))

            # Spans starting inside this one nest under it; their tails
            # past its end continue at the outer level.
            inner = [(max(s, span_start), min(e, span_end), sp) for s, e, sp in pending if s < span_end]
            pending = sorted(
                ((max(s, span_end), e, sp) for s, e, sp in pending if e > span_end),
                key=lambda item: (item[0], -item[1]),
            )
            children = self._serialize_range(text, inner, span_start, span_end)
            parts.append(self._span(span, text[span_start:span_end], children))
            cursor = span_end

        if cursor < end:
            parts.append(self._text_leaf(text[cursor:end]))
        return "".join(parts)

    def _text_leaf(self, content: str) -> str:
        children = escape(content, quote=False).replace("\n", "<br />")
        custom = self._custom("span", {"type": "span", "text": content}, content, children)
        return custom if custom is not None else children

    def _span(self, span: Mapping[str, Any], content: str, children: str) -> str:
        span_type = str(span.get("type") or "")
        custom = self._custom(span_type, span, content, children)
        if custom is not None:
            return custom

        if span_type in _INLINE_TAGS:
            tag = _INLINE_TAGS[span_type]
            return f"<{tag}>{children}</{tag}>"
        data = span.get("data") if isinstance(span.get("data"), Mapping) else {}
        if span_type == "hyperlink":
            target = data.get("target")
            rel = ' rel="noopener"' if target else ""
            return f'<a{_attr("href", link_url(data, self._link_resolver))}{_attr("target", target)}{rel}>{children}</a>'
        if span_type == "label":
            return f'<span{_attr("class", data.get("label"))}>{children}</span>'
        return children
