from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Span:
    """View over ``source[start:start + length]``; the slice is taken on demand."""

    source: str
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def text(self) -> str:
        return self.source[self.start : self.end]

    def __len__(self) -> int:
        return self.length

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Span({self.start}, {self.length}, {self.text!r})"


@dataclass(frozen=True)
class Block:
    """Base class for block-level nodes."""


@dataclass(frozen=True)
class Inline:
    """Base class for inline nodes."""


@dataclass(frozen=True)
class EndOfInput:
    offset: int


@dataclass(frozen=True)
class Document:
    blocks: Tuple[Block, ...]
    end: EndOfInput


@dataclass(frozen=True)
class EmptyLine(Block):
    """Blank source line."""


@dataclass(frozen=True)
class Heading(Block):
    level: int
    text: Span | None


@dataclass(frozen=True)
class HorizontalRule(Block):
    """Horizontal rule / thematic break."""


@dataclass(frozen=True)
class CodeBlock(Block):
    lang: Span | None
    content: Span | None


@dataclass(frozen=True)
class ParagraphLine:
    spans: Tuple[Inline, ...]


@dataclass(frozen=True)
class Paragraph(Block):
    lines: Tuple[ParagraphLine, ...]


@dataclass(frozen=True)
class Quote(Block):
    body: Paragraph | None


@dataclass(frozen=True)
class PlainText(Inline):
    span: Span


@dataclass(frozen=True)
class Escaped(Inline):
    span: Span

    @property
    def char(self) -> str:
        return self.span.text


@dataclass(frozen=True)
class Bold(Inline):
    content: Tuple[Inline, ...]


@dataclass(frozen=True)
class Italic(Inline):
    content: Tuple[Inline, ...]


@dataclass(frozen=True)
class Underline(Inline):
    content: Tuple[Inline, ...]


@dataclass(frozen=True)
class Strikethrough(Inline):
    content: Tuple[Inline, ...]


@dataclass(frozen=True)
class InlineLink(Inline):
    text: Span | None
    url: Span | None


@dataclass(frozen=True)
class InlineImage(Inline):
    alt: Span | None
    url: Span | None
