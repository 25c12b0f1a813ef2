"""Structural event stream consumed by the parser, and its markdown source.

The parser never sees markdown text. It folds a flat sequence of ``Event``
records (start/end markers, text chunks, breaks) into a tree. This module
defines that contract and adapts the markdown-it-py CommonMark token stream
to it.

Mapping from markdown-it tokens:
    heading_open/close          -> start/end "heading" (level 1..6)
    paragraph_open/close        -> start/end "paragraph" (hidden ones dropped)
    hr                          -> start "rule" + end "rule"
    bullet/ordered_list_open    -> start/end "list" (list_start for ordered)
    list_item_open/close        -> start/end "item"
    inline children             -> text, soft/hard breaks, emphasis, strong
    anything else               -> events tagged with the construct name
"""
from __future__ import annotations

import bisect
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal, TypeAlias

from markdown_it import MarkdownIt
from markdown_it.token import Token


EventKind: TypeAlias = Literal["start", "end", "text", "soft_break", "hard_break", "other"]

BREAK_KINDS: frozenset[str] = frozenset({"soft_break", "hard_break"})

_BLOCK_TAGS: dict[str, str] = {
    "heading": "heading",
    "paragraph": "paragraph",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "item",
}

_INLINE_TAGS: dict[str, str] = {
    "em": "emphasis",
    "strong": "strong",
    "link": "link",
}

_INLINE_LEAVES: dict[str, str] = {
    "code_inline": "code",
    "image": "image",
    "html_inline": "html",
}


@dataclass(frozen=True, slots=True)
class Event:
    """One structural event with its character offset in the source text."""

    kind: EventKind
    offset: int
    tag: str = ""
    level: int = 0
    list_start: int | None = None
    text: str = ""

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        if self.kind in ("start", "end", "other") and not self.tag:
            raise ValueError(f"{self.kind} event requires a tag")

    @classmethod
    def start(
        cls,
        tag: str,
        offset: int = 0,
        *,
        level: int = 0,
        list_start: int | None = None,
    ) -> Event:
        return cls("start", offset, tag, level=level, list_start=list_start)

    @classmethod
    def end(cls, tag: str, offset: int = 0, *, level: int = 0) -> Event:
        return cls("end", offset, tag, level=level)

    @classmethod
    def text_chunk(cls, text: str, offset: int = 0) -> Event:
        return cls("text", offset, text=text)

    @classmethod
    def soft_break(cls, offset: int = 0) -> Event:
        return cls("soft_break", offset)

    @classmethod
    def hard_break(cls, offset: int = 0) -> Event:
        return cls("hard_break", offset)

    @classmethod
    def other(cls, tag: str, offset: int = 0) -> Event:
        return cls("other", offset, tag)

    def is_start(self, tag: str) -> bool:
        return self.kind == "start" and self.tag == tag

    def is_end(self, tag: str) -> bool:
        return self.kind == "end" and self.tag == tag

    @property
    def is_break(self) -> bool:
        return self.kind in BREAK_KINDS

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if self.kind == "text":
            return f"text {self.text!r}"
        if self.kind in BREAK_KINDS:
            return self.kind.replace("_", " ")
        detail = self.tag
        if self.tag == "heading" and self.level:
            detail = f"heading {self.level}"
        elif self.tag == "list" and self.list_start is not None:
            detail = f"ordered list from {self.list_start}"
        if self.kind == "other":
            return detail
        return f"{self.kind} {detail}"


# ---------------------------------------------------------------------------
# markdown-it adapter
# ---------------------------------------------------------------------------


def compute_line_starts(text: str) -> list[int]:
    """Character offsets at which each line of ``text`` starts."""
    starts = [0]
    pos = text.find("\n")
    while pos >= 0:
        starts.append(pos + 1)
        pos = text.find("\n", pos + 1)
    return starts


def _line_offset(line_starts: list[int], line: int) -> int:
    return line_starts[min(max(line, 0), len(line_starts) - 1)]


def _block_name(token: Token) -> str:
    for suffix in ("_open", "_close"):
        if token.type.endswith(suffix):
            return token.type[: -len(suffix)]
    return token.type


def _inline_events(token: Token, line_starts: list[int]) -> Iterator[Event]:
    first_line = token.map[0] if token.map else 0
    line = first_line
    for child in token.children or ():
        offset = _line_offset(line_starts, line)
        kind = child.type
        if kind in ("text", "text_special"):
            # markdown-it leaves empty text tokens next to emphasis delimiters
            if not child.content:
                continue
            yield Event.text_chunk(child.content, offset)
        elif kind == "softbreak":
            line += 1
            yield Event.soft_break(offset)
        elif kind == "hardbreak":
            line += 1
            yield Event.hard_break(offset)
        elif kind in _INLINE_LEAVES:
            yield Event.other(_INLINE_LEAVES[kind], offset)
        else:
            name = _block_name(child)
            tag = _INLINE_TAGS.get(name, name)
            if child.nesting == 1:
                yield Event.start(tag, offset)
            elif child.nesting == -1:
                yield Event.end(tag, offset)
            else:
                yield Event.other(tag, offset)


def token_events(tokens: Sequence[Token], text: str) -> Iterator[Event]:
    """Convert a markdown-it block token stream into structural events."""
    line_starts = compute_line_starts(text)
    # Source map of each open block, to place close events on the last line
    open_maps: list[list[int] | None] = []
    for token in tokens:
        if token.type == "inline":
            yield from _inline_events(token, line_starts)
            continue

        if token.nesting == 1:
            open_maps.append(token.map)
            line = token.map[0] if token.map else 0
        elif token.nesting == -1:
            source_map = open_maps.pop() if open_maps else None
            line = max(source_map[0], source_map[1] - 1) if source_map else 0
        else:
            line = token.map[0] if token.map else 0
        offset = _line_offset(line_starts, line)

        if token.type in ("paragraph_open", "paragraph_close") and token.hidden:
            continue

        if token.type == "hr":
            yield Event.start("rule", offset)
            yield Event.end("rule", offset)
            continue

        name = _block_name(token)
        tag = _BLOCK_TAGS.get(name, name)
        level = int(token.tag[1:]) if name == "heading" else 0
        if token.nesting == 1:
            list_start = None
            if name == "ordered_list":
                list_start = int(token.attrGet("start") or 1)
            yield Event.start(tag, offset, level=level, list_start=list_start)
        elif token.nesting == -1:
            yield Event.end(tag, offset, level=level)
        else:
            yield Event.other(tag, offset)


def markdown_events(text: str) -> Iterator[Event]:
    """Tokenize CommonMark ``text`` into the parser's structural events."""
    tokens = MarkdownIt("commonmark").parse(text)
    return token_events(tokens, text)


def offset_to_line(line_starts: list[int], offset: int) -> int:
    """0-based line index of ``offset`` given precomputed line starts."""
    return max(0, bisect.bisect_right(line_starts, offset) - 1)
