"""Keyword occurrence index over a parsed document.

Every inline element is scanned with the keyword matcher. Ranges already
tagged as explicit keywords are recorded as explicit occurrences; new
matches become implicit keyword tags and implicit occurrences.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from keynotes.document_types import (
    Block,
    Document,
    InlineElement,
    InlineTag,
    MarkdownList,
    Paragraph,
    Section,
    SectionContent,
    document_to_dict,
)
from keynotes.errors import KeywordOverlapError, TokenStreamError
from keynotes.keywords import KeywordMatcher, KeywordSet, build_keyword_matcher

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document-order traversal
# ---------------------------------------------------------------------------


def iter_sections(content: SectionContent) -> Iterator[Section]:
    """Depth-first pre-order walk of all sections below ``content``."""
    for section in content.sub_sections:
        yield section
        yield from iter_sections(section.content)


def _iter_list_inlines(markdown_list: MarkdownList) -> Iterator[InlineElement]:
    for item in markdown_list.items:
        yield from item.text_content
        if item.sub_list is not None:
            yield from _iter_list_inlines(item.sub_list)


def iter_block_inlines(blocks: Iterable[Block]) -> Iterator[InlineElement]:
    for block in blocks:
        if isinstance(block, Paragraph):
            yield from block.inlines
        elif isinstance(block, MarkdownList):
            yield from _iter_list_inlines(block)


def iter_inlines(content: SectionContent) -> Iterator[InlineElement]:
    """All inline elements in document order (ascending inline index)."""
    yield from iter_block_inlines(content.blocks)
    for section in content.sub_sections:
        yield section.title
        yield from iter_inlines(section.content)


# ---------------------------------------------------------------------------
# Indexed document
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class IndexedDocument:
    """Document tree plus, per keyword, the inline elements it occurs in."""

    document: Document
    keywords: KeywordSet
    explicit: list[list[int]]
    implicit: list[list[int]]
    inlines: dict[int, InlineElement] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if len(self.explicit) != len(self.keywords) or len(self.implicit) != len(self.keywords):
            raise ValueError("occurrence lists must have one entry per keyword")

    def explicit_occurrences(self, keyword_index: int) -> tuple[int, ...]:
        return tuple(self.explicit[keyword_index])

    def implicit_occurrences(self, keyword_index: int) -> tuple[int, ...]:
        return tuple(self.implicit[keyword_index])

    def inline(self, index: int) -> InlineElement:
        return self.inlines[index]

    def occurrences(self) -> dict[str, tuple[tuple[int, ...], tuple[int, ...]]]:
        """Keyword -> (explicit, implicit) inline indexes, in vocabulary order."""
        return {
            keyword: (tuple(self.explicit[i]), tuple(self.implicit[i]))
            for i, keyword in enumerate(self.keywords)
        }


def _record(occurrences: list[int], inline_index: int) -> None:
    if not occurrences or occurrences[-1] != inline_index:
        occurrences.append(inline_index)


def _scan_inline(
    inline: InlineElement,
    matcher: KeywordMatcher | None,
    explicit: list[list[int]],
    implicit: list[list[int]],
) -> list[InlineTag]:
    """Find implicit keywords of one inline element without modifying it."""
    explicit_ranges: list[tuple[int, int]] = []
    for tag in inline.tags:
        if tag.kind == "implicit_keyword":
            raise TokenStreamError(f"Inline {inline.index} is already indexed")
        if tag.kind == "explicit_keyword":
            assert tag.keyword_index is not None
            explicit_ranges.append((tag.start, tag.end))
            _record(explicit[tag.keyword_index], inline.index)

    if matcher is None:
        return []
    found: list[InlineTag] = []
    for match in matcher.finditer(inline.string):
        match_range = (match.start, match.end)
        if match_range in explicit_ranges:
            continue
        for start, end in explicit_ranges:
            if start < match.end and match.start < end:
                raise KeywordOverlapError(
                    inline.index, (start, end), match_range, offset=inline.offset,
                )
        found.append(InlineTag.implicit_keyword(match.keyword_index, match.start, match.end))
        _record(implicit[match.keyword_index], inline.index)
    return found


def index_document(document: Document, keywords: KeywordSet) -> IndexedDocument:
    """Scan all inline elements of a parsed document for keyword occurrences.

    Adds implicit keyword tags to the tree in place. Existing explicit and
    highlight tags and the text itself are left untouched. The whole tree
    is scanned before any tag is added, so a failed scan leaves it unchanged.
    """
    matcher = build_keyword_matcher(keywords)
    explicit: list[list[int]] = [[] for _ in range(len(keywords))]
    implicit: list[list[int]] = [[] for _ in range(len(keywords))]
    inlines: dict[int, InlineElement] = {}
    pending: list[tuple[InlineElement, list[InlineTag]]] = []
    for inline in iter_inlines(document):
        inlines[inline.index] = inline
        found = _scan_inline(inline, matcher, explicit, implicit)
        if found:
            pending.append((inline, found))

    implicit_count = 0
    for inline, found in pending:
        for tag in found:
            inline.add_tag(tag)
        implicit_count += len(found)
    log.debug(
        "indexed %d inline elements: %d implicit keyword occurrences",
        len(inlines),
        implicit_count,
    )
    return IndexedDocument(
        document=document,
        keywords=keywords,
        explicit=explicit,
        implicit=implicit,
        inlines=inlines,
    )


def indexed_document_to_dict(indexed: IndexedDocument) -> dict[str, object]:
    """Serialize tree, keywords and occurrence lists to a JSON-safe dict."""

    return {
        "document": document_to_dict(indexed.document),
        "keywords": [
            {
                "index": i,
                "keyword": keyword,
                "explicit": list(indexed.explicit[i]),
                "implicit": list(indexed.implicit[i]),
            }
            for i, keyword in enumerate(indexed.keywords)
        ],
    }
