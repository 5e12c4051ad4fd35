from __future__ import annotations

import html
import logging
from typing import Callable, Dict, Iterable, List

from .errors import MissingChildError, UnknownNodeKindError
from .model import (
    Block,
    Bold,
    CodeBlock,
    Document,
    EmptyLine,
    Escaped,
    Heading,
    HorizontalRule,
    Inline,
    InlineImage,
    InlineLink,
    Italic,
    Paragraph,
    ParagraphLine,
    PlainText,
    Quote,
    Span,
    Strikethrough,
    Underline,
)

logger = logging.getLogger(__name__)

LINE_SEPARATOR = "<br>"

STYLE_TAGS = {
    Bold: "strong",
    Italic: "em",
    Underline: "u",
    Strikethrough: "del",
}


def escape_html(text: str) -> str:
    """Replace ``& < > " '`` with entities."""
    return html.escape(text, quote=True)


def render_document(doc: Document) -> List[str]:
    """Render every top-level block into its own HTML fragment."""
    fragments = [render_block(block) for block in doc.blocks]
    logger.debug("Rendered %d fragments", len(fragments))
    return fragments


def render_block(block: Block) -> str:
    renderer = _BLOCK_RENDERERS.get(type(block))
    if renderer is None:
        raise UnknownNodeKindError(block)
    return renderer(block)


def render_inline(spans: Iterable[Inline]) -> str:
    parts = []
    for span in spans:
        renderer = _INLINE_RENDERERS.get(type(span))
        if renderer is None:
            raise UnknownNodeKindError(span)
        parts.append(renderer(span))
    return "".join(parts)


def _require(span: Span | None, parent: str, expected: str) -> str:
    if span is None:
        raise MissingChildError(parent, expected)
    return span.text


def _render_empty_line(block: EmptyLine) -> str:
    return "<br/>"


def _render_heading(block: Heading) -> str:
    text = _require(block.text, "heading", "text")
    return f"<h{block.level}>{escape_html(text)}</h{block.level}>"


def _render_horizontal_rule(block: HorizontalRule) -> str:
    return "<hr>"


def _render_code_block(block: CodeBlock) -> str:
    lang = _require(block.lang, "code_block", "code_lang")
    content = _require(block.content, "code_block", "code_content")
    return f'<pre><code class="language-{escape_html(lang)}">{escape_html(content)}</code></pre>'


def _render_quote(block: Quote) -> str:
    if block.body is None:
        raise MissingChildError("quote", "paragraph")
    return f"<blockquote>{_render_paragraph(block.body)}</blockquote>"


def _render_paragraph(block: Paragraph) -> str:
    return f"<p>{LINE_SEPARATOR.join(_render_line(line) for line in block.lines)}</p>"


def _render_line(line: ParagraphLine) -> str:
    return render_inline(line.spans)


def _render_plain_text(span: PlainText) -> str:
    return escape_html(span.span.text)


def _render_escaped(span: Escaped) -> str:
    return escape_html(span.char)


def _render_styled(span: Bold | Italic | Underline | Strikethrough) -> str:
    tag = STYLE_TAGS[type(span)]
    return f"<{tag}>{render_inline(span.content)}</{tag}>"


def _render_link(span: InlineLink) -> str:
    text = _require(span.text, "inline_link", "link_text")
    url = _require(span.url, "inline_link", "url")
    return f'<a href="{url}">{escape_html(text)}</a>'


def _render_image(span: InlineImage) -> str:
    alt = _require(span.alt, "inline_image", "alt_text")
    url = _require(span.url, "inline_image", "url")
    return f'<img src="{url}" alt="{escape_html(alt)}">'


_BLOCK_RENDERERS: Dict[type, Callable[..., str]] = {
    EmptyLine: _render_empty_line,
    Heading: _render_heading,
    HorizontalRule: _render_horizontal_rule,
    CodeBlock: _render_code_block,
    Quote: _render_quote,
    Paragraph: _render_paragraph,
}

_INLINE_RENDERERS: Dict[type, Callable[..., str]] = {
    PlainText: _render_plain_text,
    Escaped: _render_escaped,
    Bold: _render_styled,
    Italic: _render_styled,
    Underline: _render_styled,
    Strikethrough: _render_styled,
    InlineLink: _render_link,
    InlineImage: _render_image,
}
