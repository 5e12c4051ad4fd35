"""RinsMarkdown exception hierarchy.

Core errors (``ParseError``, ``RenderError``) carry enough context to point at
the offending input; boundary errors (``ParsingError``, ``DocumentIOError``)
are what the converter and CLI hand to callers.
"""

from __future__ import annotations


class RinsMarkdownError(Exception):
    """Base exception for all RinsMarkdown errors."""


class ParseError(RinsMarkdownError):
    """Raised when the grammar cannot segment the input."""

    kind = "parse error"

    def __init__(self, message: str, offset: int, source: str = "") -> None:
        self.message = message
        self.offset = offset
        self.source = source
        super().__init__(f"{self.kind} at line {self.line}, column {self.column}: {message}")

    @property
    def line(self) -> int:
        return self.source.count("\n", 0, self.offset) + 1

    @property
    def column(self) -> int:
        return self.offset - (self.source.rfind("\n", 0, self.offset) + 1) + 1


class MalformedHeadingError(ParseError):
    kind = "malformed heading"


class UnterminatedCodeFenceError(ParseError):
    kind = "unterminated code fence"


class MalformedEscapeError(ParseError):
    kind = "malformed escape"


class InvalidCharacterError(ParseError):
    kind = "invalid character"


class RuleMismatchError(ParseError):
    """Raised by ``parse_by_rule`` when the rule does not match at offset 0."""

    kind = "rule mismatch"


class RenderError(RinsMarkdownError):
    """Raised when the tree handed to the renderer breaks the grammar contract."""


class MissingChildError(RenderError):
    def __init__(self, parent: str, expected: str) -> None:
        self.parent = parent
        self.expected = expected
        super().__init__(f"{parent} node is missing its {expected}")


class UnknownNodeKindError(RenderError):
    def __init__(self, node: object) -> None:
        self.node = node
        super().__init__(f"no rendering rule for node kind {type(node).__name__}")


class ParsingError(RinsMarkdownError):
    """Raised at the boundary when a document cannot be converted."""


class DocumentIOError(RinsMarkdownError):
    """Raised at the boundary when reading input or writing output fails."""
