from __future__ import annotations

import logging
import unicodedata
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from markdown_it.common.utils import isWhiteSpace

from .errors import (
    InvalidCharacterError,
    MalformedEscapeError,
    MalformedHeadingError,
    RuleMismatchError,
    UnterminatedCodeFenceError,
)
from .model import (
    Block,
    Bold,
    CodeBlock,
    Document,
    EmptyLine,
    EndOfInput,
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

FENCE = "```"
QUOTE_MARKER = ">"
HEADING_MARKER = "#"
MAX_HEADING_LEVEL = 3
HR_CHARS = frozenset("-*–—")
HR_MIN_LENGTH = 3
SPECIAL_CHARS = frozenset("\\*_~[!")
MAX_NESTING = 64

# Longest delimiter first: "**" must win over "*", "__" over "_".
STYLE_DELIMITERS: Dict[str, Tuple[Tuple[str, type], ...]] = {
    "*": (("**", Bold), ("*", Italic)),
    "_": (("__", Underline), ("_", Italic)),
    "~": (("~~", Strikethrough),),
}


class Rule(Enum):
    MARKDOWN = "markdown"
    EMPTY_LINE = "empty_line"
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HORIZONTAL_RULE = "horizontal_rule"
    CODE_BLOCK = "code_block"
    QUOTE = "quote"
    PARAGRAPH = "paragraph"
    PARAGRAPH_LINE = "paragraph_line"
    STYLED_TEXT = "styled_text"
    PLAIN_TEXT = "plain_text"
    ESCAPED = "escaped"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    INLINE_LINK = "inline_link"
    INLINE_IMAGE = "inline_image"


HEADING_RULES = {Rule.HEADING1: 1, Rule.HEADING2: 2, Rule.HEADING3: 3}
INLINE_RULE_TYPES = {
    Rule.BOLD: Bold,
    Rule.ITALIC: Italic,
    Rule.UNDERLINE: Underline,
    Rule.STRIKETHROUGH: Strikethrough,
    Rule.INLINE_LINK: InlineLink,
    Rule.INLINE_IMAGE: InlineImage,
    Rule.ESCAPED: Escaped,
}


class Line(NamedTuple):
    start: int
    end: int


def parse_markdown(text: str) -> Document:
    lines = _split_lines(text)
    blocks, _ = _parse_blocks(text, lines, 0)
    logger.debug("Parsed %d lines into %d blocks", len(lines), len(blocks))
    return Document(blocks=tuple(blocks), end=EndOfInput(len(text)))


def parse_by_rule(rule: Rule, text: str):
    """Run a single grammar rule anchored at the start of ``text``.

    Mirrors PEG semantics: the rule has to match a prefix of the input, the
    remainder is ignored. Returns the node the rule produced.
    """
    if rule is Rule.MARKDOWN:
        return parse_markdown(text)
    lines = _split_lines(text)
    if not lines:
        raise RuleMismatchError(f"{rule.value} does not match empty input", 0, text)
    first = lines[0]

    if rule is Rule.PLAIN_TEXT:
        run_end = _InlineParser(text, first.end).plain_end(0)
        if run_end == 0:
            raise RuleMismatchError("plain_text does not match", 0, text)
        return PlainText(Span(text, 0, run_end))
    if rule is Rule.PARAGRAPH_LINE:
        return _parse_paragraph_line(text, first.start, first.end)
    if rule is Rule.STYLED_TEXT or rule in INLINE_RULE_TYPES:
        _check_characters(text, first.start, first.end)
        matched = _InlineParser(text, first.end).element(0)
        expected = INLINE_RULE_TYPES.get(rule)
        if matched is None or (expected is not None and not isinstance(matched[0], expected)):
            raise RuleMismatchError(f"{rule.value} does not match", 0, text)
        if rule is Rule.STYLED_TEXT and isinstance(matched[0], Escaped):
            raise RuleMismatchError("styled_text does not match an escape", 0, text)
        return matched[0]

    found = _classify(text, first)
    if rule in HEADING_RULES:
        if found not in HEADING_RULES or HEADING_RULES[found] != HEADING_RULES[rule]:
            raise RuleMismatchError(f"{rule.value} does not match", 0, text)
    elif found is not rule:
        raise RuleMismatchError(f"{rule.value} does not match, line looks like {found.value}", 0, text)
    block, _ = _parse_block(text, lines, 0, found)
    return block


def _split_lines(text: str) -> List[Line]:
    lines: List[Line] = []
    start = 0
    while start < len(text):
        newline = text.find("\n", start)
        if newline == -1:
            lines.append(Line(start, len(text)))
            break
        end = newline - 1 if newline > start and text[newline - 1] == "\r" else newline
        lines.append(Line(start, end))
        start = newline + 1
    return lines


def _is_blank(text: str, start: int, end: int) -> bool:
    return all(isWhiteSpace(ord(ch)) for ch in text[start:end])


def _rstrip_end(text: str, start: int, end: int) -> int:
    while end > start and isWhiteSpace(ord(text[end - 1])):
        end -= 1
    return end


def _heading_level(text: str, line: Line) -> int:
    count = 0
    while line.start + count < line.end and text[line.start + count] == HEADING_MARKER:
        count += 1
    if not 1 <= count <= MAX_HEADING_LEVEL:
        return 0
    marker_end = line.start + count
    if marker_end == line.end or text[marker_end] == " ":
        return count
    return 0


def _is_horizontal_rule(text: str, line: Line) -> bool:
    end = _rstrip_end(text, line.start, line.end)
    if end - line.start < HR_MIN_LENGTH:
        return False
    first = text[line.start]
    return first in HR_CHARS and all(ch == first for ch in text[line.start : end])


def _is_fence_close(text: str, line: Line) -> bool:
    return text[line.start : _rstrip_end(text, line.start, line.end)] == FENCE


def _classify(text: str, line: Line) -> Rule:
    if _is_blank(text, line.start, line.end):
        return Rule.EMPTY_LINE
    if text.startswith(FENCE, line.start, line.end):
        return Rule.CODE_BLOCK
    level = _heading_level(text, line)
    if level:
        return (Rule.HEADING1, Rule.HEADING2, Rule.HEADING3)[level - 1]
    if _is_horizontal_rule(text, line):
        return Rule.HORIZONTAL_RULE
    if text.startswith(QUOTE_MARKER, line.start, line.end):
        return Rule.QUOTE
    return Rule.PARAGRAPH


def _parse_blocks(text: str, lines: List[Line], index: int) -> Tuple[List[Block], int]:
    blocks: List[Block] = []
    i = index
    while i < len(lines):
        block, i = _parse_block(text, lines, i, _classify(text, lines[i]))
        blocks.append(block)
    return blocks, i


def _parse_block(text: str, lines: List[Line], index: int, rule: Rule) -> Tuple[Block, int]:
    if rule is Rule.EMPTY_LINE:
        return EmptyLine(), index + 1
    if rule in HEADING_RULES:
        return _parse_heading(text, lines[index], HEADING_RULES[rule]), index + 1
    if rule is Rule.HORIZONTAL_RULE:
        return HorizontalRule(), index + 1
    if rule is Rule.CODE_BLOCK:
        return _parse_code_block(text, lines, index)
    if rule is Rule.QUOTE:
        return _parse_quote(text, lines, index)
    return _parse_paragraph(text, lines, index)


def _parse_heading(text: str, line: Line, level: int) -> Heading:
    text_start = line.start + level + 1
    if text_start > line.end or _is_blank(text, text_start, line.end):
        raise MalformedHeadingError(f"heading level {level} has no text", line.start, text)
    return Heading(level=level, text=Span(text, text_start, line.end - text_start))


def _parse_code_block(text: str, lines: List[Line], index: int) -> Tuple[CodeBlock, int]:
    opener = lines[index]
    lang_start = opener.start + len(FENCE)
    lang = Span(text, lang_start, _rstrip_end(text, lang_start, opener.end) - lang_start)

    close_index = index + 1
    while close_index < len(lines) and not _is_fence_close(text, lines[close_index]):
        close_index += 1
    if close_index >= len(lines):
        raise UnterminatedCodeFenceError("code block has no closing fence", opener.start, text)

    content_start = lines[index + 1].start
    content_end = lines[close_index - 1].end if close_index > index + 1 else content_start
    logger.debug("Code block %r spans lines %d-%d", lang.text, index, close_index)
    return CodeBlock(lang=lang, content=Span(text, content_start, content_end - content_start)), close_index + 1


def _parse_quote(text: str, lines: List[Line], index: int) -> Tuple[Quote, int]:
    body: List[ParagraphLine] = []
    i = index
    while i < len(lines):
        line = lines[i]
        if i > index and _classify(text, line) not in (Rule.QUOTE, Rule.PARAGRAPH):
            break
        start = line.start
        if text.startswith(QUOTE_MARKER, start, line.end):
            start += len(QUOTE_MARKER)
            if text.startswith(" ", start, line.end):
                start += 1
        body.append(_parse_paragraph_line(text, start, line.end))
        i += 1
    return Quote(body=Paragraph(lines=tuple(body))), i


def _parse_paragraph(text: str, lines: List[Line], index: int) -> Tuple[Paragraph, int]:
    parsed: List[ParagraphLine] = []
    i = index
    while i < len(lines) and (i == index or _classify(text, lines[i]) is Rule.PARAGRAPH):
        parsed.append(_parse_paragraph_line(text, lines[i].start, lines[i].end))
        i += 1
    return Paragraph(lines=tuple(parsed)), i


def _parse_paragraph_line(text: str, start: int, end: int) -> ParagraphLine:
    _check_characters(text, start, end)
    spans, _ = _InlineParser(text, end).sequence(start, None)
    return ParagraphLine(spans=spans)


def _check_characters(text: str, start: int, end: int) -> None:
    for offset in range(start, end):
        ch = text[offset]
        if ch != "\t" and unicodedata.category(ch) == "Cc":
            raise InvalidCharacterError(f"control character {ch!r} in text", offset, text)


_Match = Optional[Tuple[Inline, int]]


class _InlineParser:
    """Packrat parser over one line of inline text.

    ``sequence(pos, closer, depth)`` and ``element(pos, depth)`` depend only on
    their arguments, so both are memoised. A delimiter run no longer than the
    enclosing closer closes the span before it is tried as an opener, which
    keeps flat text such as ``*a* *b*`` or ``x_1 x_2`` at depth one. Openers
    nested deeper than ``MAX_NESTING`` degrade to plain text.
    """

    def __init__(self, source: str, end: int) -> None:
        self.source = source
        self.end = end
        self._sequences: Dict[Tuple[int, Optional[str], int], Tuple[Tuple[Inline, ...], int]] = {}
        self._elements: Dict[Tuple[int, int], _Match] = {}

    def sequence(self, pos: int, closer: Optional[str], depth: int = 0) -> Tuple[Tuple[Inline, ...], int]:
        key = (pos, closer, depth)
        if key in self._sequences:
            return self._sequences[key]
        nodes: List[Inline] = []
        while pos < self.end:
            at_closer = closer is not None and self.source.startswith(closer, pos, self.end)
            if at_closer and self._run_length(pos) <= len(closer):
                break
            matched = self.element(pos, depth)
            if matched is not None:
                node, pos = matched
                _append(nodes, node)
                continue
            if at_closer:
                break
            # An opening delimiter with no partner degrades to plain text.
            run_end = max(self.plain_end(pos), pos + 1)
            _append(nodes, PlainText(Span(self.source, pos, run_end - pos)))
            pos = run_end
        result = (tuple(nodes), pos)
        self._sequences[key] = result
        return result

    def element(self, pos: int, depth: int = 0) -> _Match:
        key = (pos, depth)
        if key in self._elements:
            return self._elements[key]
        handler = self._HANDLERS.get(self.source[pos]) if pos < self.end else None
        matched = handler(self, pos, depth) if handler is not None else None
        self._elements[key] = matched
        return matched

    def plain_end(self, pos: int) -> int:
        while pos < self.end and self.source[pos] not in SPECIAL_CHARS:
            pos += 1
        return pos

    def _run_length(self, pos: int) -> int:
        ch = self.source[pos]
        end = pos
        while end < self.end and self.source[end] == ch:
            end += 1
        return end - pos

    def _escaped(self, pos: int, depth: int) -> _Match:
        target = pos + 1
        if target >= self.end or isWhiteSpace(ord(self.source[target])):
            raise MalformedEscapeError("backslash must be followed by a visible character", pos, self.source)
        return Escaped(Span(self.source, target, 1)), target + 1

    def _styled(self, pos: int, depth: int) -> _Match:
        if depth >= MAX_NESTING:
            return None
        for delimiter, node_type in STYLE_DELIMITERS[self.source[pos]]:
            inner = pos + len(delimiter)
            if not self.source.startswith(delimiter, pos, self.end):
                continue
            if self.source.find(delimiter, inner, self.end) == -1:
                continue
            content, close = self.sequence(inner, delimiter, depth + 1)
            if content and self.source.startswith(delimiter, close, self.end):
                return node_type(content=content), close + len(delimiter)
        return None

    def _link(self, pos: int, depth: int) -> _Match:
        parts = self._bracketed(pos)
        if parts is None:
            return None
        text, url, after = parts
        return InlineLink(text=text, url=url), after

    def _image(self, pos: int, depth: int) -> _Match:
        if not self.source.startswith("[", pos + 1, self.end):
            return None
        parts = self._bracketed(pos + 1)
        if parts is None:
            return None
        alt, url, after = parts
        return InlineImage(alt=alt, url=url), after

    def _bracketed(self, pos: int) -> Optional[Tuple[Span, Span, int]]:
        """Match ``[label](target)`` starting at ``pos``."""
        label_end = self.source.find("]", pos + 1, self.end)
        if label_end == -1 or not self.source.startswith("(", label_end + 1, self.end):
            return None
        url_start = label_end + 2
        url_end = self.source.find(")", url_start, self.end)
        if url_end <= url_start:
            return None
        label = Span(self.source, pos + 1, label_end - pos - 1)
        return label, Span(self.source, url_start, url_end - url_start), url_end + 1

    _HANDLERS: Dict[str, Callable[["_InlineParser", int, int], _Match]] = {
        "\\": _escaped,
        "*": _styled,
        "_": _styled,
        "~": _styled,
        "[": _link,
        "!": _image,
    }


def _append(nodes: List[Inline], node: Inline) -> None:
    """Append ``node``, folding it into a directly preceding plain-text run."""
    if nodes and isinstance(node, PlainText) and isinstance(nodes[-1], PlainText):
        previous = nodes[-1].span
        if previous.end == node.span.start:
            nodes[-1] = PlainText(Span(previous.source, previous.start, previous.length + node.span.length))
            return
    nodes.append(node)
