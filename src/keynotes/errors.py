"""Error types for markdown note parsing and keyword indexing.

Two severities are kept apart:

- ``ParseError`` is raised for input the parser does not support (unknown
  markdown constructs, skipped header levels, multiline emphasis...). It
  carries a source offset so the caller can report a line number.
- ``TokenStreamError`` is raised when the event stream breaks the tokenizer
  contract (unclosed constructs, mismatched end events). It is not meant to
  be caught: it means the tokenizer or the parser itself is wrong.
"""
from __future__ import annotations


def line_number_of_offset(text: str, offset: int) -> int:
    """Return the 0-based line number containing ``offset`` in ``text``."""
    return text.count("\n", 0, max(0, offset))


class ParseError(ValueError):
    """Unsupported markdown input, reported with its source position."""

    def __init__(self, message: str, offset: int, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.source = source

    @property
    def line(self) -> int | None:
        """1-based line of the offending offset, once the source is attached."""
        if self.source is None:
            return None
        return line_number_of_offset(self.source, self.offset) + 1

    def __str__(self) -> str:
        line = self.line
        if line is None:
            return f"{self.message} (offset {self.offset})"
        return f"At line {line}: {self.message}"


class TokenStreamError(RuntimeError):
    """The structural event stream violates the tokenizer contract."""


class KeywordOverlapError(ParseError):
    """A keyword match partially overlaps an explicit keyword occurrence.

    ``offset`` is the source offset of the inline element, so the error can
    be reported with a line number like any other ``ParseError``.
    """

    def __init__(
        self,
        inline_index: int,
        explicit_range: tuple[int, int],
        match_range: tuple[int, int],
        offset: int = 0,
        source: str | None = None,
    ) -> None:
        super().__init__(
            f"Inline {inline_index}: keyword match {match_range[0]}..{match_range[1]} "
            f"partially overlaps explicit keyword {explicit_range[0]}..{explicit_range[1]}",
            offset,
            source,
        )
        self.inline_index = inline_index
        self.explicit_range = explicit_range
        self.match_range = match_range
