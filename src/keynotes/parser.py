"""Fold a flat structural event stream into a section tree.

Sections nest by header level: the content of a level-L section is every
block up to the first header, then every level-(L+1) sub-section, until a
header of level <= L (a sibling or an ancestor's sibling) or the end of the
stream. Each parsing function returns the event it stopped on but did not
consume, and callers thread it back up so that one terminating event
unwinds the whole recursion exactly once.

Emphasis spans are explicit keywords: their text is added to the keyword
set as a side effect of parsing. Strong spans are kept as highlights.

Error behavior:
- ``ParseError`` for unsupported markdown (returned to the user with a line).
- ``TokenStreamError`` for events the tokenizer should never produce
  (unclosed tags, mismatched ends).
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from keynotes.document_types import (
    MAX_HEADER_LEVEL,
    Block,
    Document,
    InlineElement,
    InlineTag,
    ListItem,
    MarkdownList,
    Paragraph,
    Rule,
    Section,
    SectionContent,
)
from keynotes.errors import ParseError, TokenStreamError
from keynotes.events import Event, markdown_events
from keynotes.keywords import KeywordSet

log = logging.getLogger(__name__)


class _ParsingState:
    """Single event cursor, keyword set and inline counter for one parse."""

    __slots__ = ("_events", "keywords", "inline_count")

    def __init__(self, events: Iterable[Event], keywords: KeywordSet) -> None:
        self._events: Iterator[Event] = iter(events)
        self.keywords = keywords
        self.inline_count = 0

    def _consume(self) -> Event | None:
        return next(self._events, None)

    # -- sections ----------------------------------------------------------

    def parse_document(self) -> Document:
        """Parse the whole stream. The stream is exhausted afterwards."""
        root, pending = self._parse_section_content(0)
        if pending is not None:
            raise ParseError(f"Unexpected element: {pending.describe()}", pending.offset)
        return root

    def _parse_section(self, level: int) -> tuple[Section, Event | None]:
        """Parse title and content of a section whose start event was consumed."""
        title, pending = self._parse_inline()
        if pending is None:
            raise TokenStreamError(f"Unclosed header of level {level}")
        if not pending.is_end("heading"):
            raise ParseError(
                f"Expected header title for level {level}: {pending.describe()}",
                pending.offset,
            )
        if pending.level and pending.level != level:
            raise TokenStreamError(f"Header {level} closed by {pending.describe()}")
        if title is None:
            raise ParseError("Header without title", pending.offset)
        content, pending = self._parse_section_content(level)
        return Section(title=title, level=level, content=content), pending

    def _parse_section_content(self, level: int) -> tuple[SectionContent, Event | None]:
        """Parse blocks, then sub-sections, until a header of level <= ``level``.

        Assumes the header of the current section has just been consumed.
        """
        blocks: list[Block] = []
        while True:
            block, pending = self._try_parse_block()
            if block is None:
                break
            blocks.append(block)

        sub_sections: list[Section] = []
        while pending is not None and pending.is_start("heading"):
            new_level = pending.level
            if not 1 <= new_level <= MAX_HEADER_LEVEL:
                raise TokenStreamError(f"Invalid header level: {pending.describe()}")
            if new_level <= level:
                # Sibling or ancestor section: the caller handles it
                break
            if new_level != level + 1:
                raise ParseError(
                    f"Header {new_level} is too deep for current level {level}",
                    pending.offset,
                )
            log.debug("entering level %d section at offset %d", new_level, pending.offset)
            sub_section, pending = self._parse_section(new_level)
            sub_sections.append(sub_section)

        return SectionContent(blocks=blocks, sub_sections=sub_sections), pending

    # -- blocks ------------------------------------------------------------

    def _try_parse_block(self) -> tuple[Block | None, Event | None]:
        """Parse one block, or return the unconsumed event that is not one."""
        event = self._consume()
        if event is None:
            return None, None
        if event.is_start("paragraph"):
            return self._parse_paragraph(event), None
        if event.is_start("rule"):
            end = self._consume()
            if end is None:
                raise TokenStreamError("Unclosed rule")
            if not end.is_end("rule"):
                raise TokenStreamError(f"Expected rule end: {end.describe()}")
            return Rule(), None
        if event.is_start("list"):
            return self._parse_list(ordered=event.list_start is not None), None
        return None, event

    def _parse_paragraph(self, start: Event) -> Paragraph:
        inlines, pending = self._parse_inline_sequence()
        if pending is None:
            raise TokenStreamError("Unclosed paragraph")
        if not pending.is_end("paragraph"):
            raise ParseError(f"Parsing paragraph: unexpected {pending.describe()}", pending.offset)
        if not inlines:
            raise ParseError("Empty paragraph", start.offset)
        return Paragraph(inlines)

    def _parse_list(self, ordered: bool) -> MarkdownList:
        """Parse list items up to the list end event (consumed)."""
        items: list[ListItem] = []
        while True:
            event = self._consume()
            if event is None:
                raise TokenStreamError("Unclosed list")
            if event.is_start("item"):
                items.append(self._parse_list_item())
            elif event.is_end("list"):
                return MarkdownList(ordered=ordered, items=items)
            else:
                raise TokenStreamError(f"Expected list items: {event.describe()}")

    def _parse_list_item(self) -> ListItem:
        text_content, pending = self._parse_inline_sequence()
        if pending is None:
            raise TokenStreamError("Unclosed list item")
        if not text_content:
            raise ParseError("List item with empty text", pending.offset)
        if pending.is_end("item"):
            return ListItem(text_content)
        if not pending.is_start("list"):
            raise ParseError(f"Expected list item: {pending.describe()}", pending.offset)
        sub_list = self._parse_list(ordered=pending.list_start is not None)
        end = self._consume()
        if end is None:
            raise TokenStreamError("Unclosed list item")
        if not end.is_end("item"):
            raise ParseError(f"Expected list item end: {end.describe()}", end.offset)
        return ListItem(text_content, sub_list)

    # -- inlines -----------------------------------------------------------

    def _parse_inline_sequence(self) -> tuple[list[InlineElement], Event | None]:
        """Parse inline elements separated by breaks. The sequence may be empty."""
        inlines: list[InlineElement] = []
        while True:
            inline, pending = self._parse_inline()
            if inline is not None:
                inlines.append(inline)
            if pending is None or not pending.is_break:
                return inlines, pending

    def _parse_inline(self) -> tuple[InlineElement | None, Event | None]:
        """Parse one inline text unit with its emphasis/strong tags.

        Returns no element when no text was seen before the stopping event.
        """
        string: str | None = None
        offset = 0
        tags: list[InlineTag] = []
        strong_start: int | None = None
        emphasis_start: int | None = None
        while True:
            event = self._consume()
            if event is None:
                pending = None
                break
            length = len(string) if string is not None else 0
            if event.kind == "text":
                if string is None:
                    string = event.text
                    offset = event.offset
                else:
                    string += event.text
            elif event.is_start("emphasis"):
                if emphasis_start is not None:
                    raise ParseError("Nested emphasis not supported", event.offset)
                emphasis_start = length
            elif event.is_end("emphasis"):
                if emphasis_start is None:
                    # The start tag belongs to a previous inline element
                    raise ParseError("Multiline emphasis not supported", event.offset)
                keyword = (string or "")[emphasis_start:]
                if not keyword:
                    raise ParseError("Empty keyword", event.offset)
                index = self.keywords.add(keyword)
                tags.append(InlineTag.explicit_keyword(index, emphasis_start, length))
                emphasis_start = None
            elif event.is_start("strong"):
                if strong_start is not None:
                    raise ParseError("Nested strong not supported", event.offset)
                strong_start = length
            elif event.is_end("strong"):
                if strong_start is None:
                    raise ParseError("Multiline strong not supported", event.offset)
                if string is None:
                    raise TokenStreamError("Empty strong block")
                tags.append(InlineTag.highlight(strong_start, length))
                strong_start = None
            else:
                pending = event
                break

        if string is None:
            return None, pending
        inline = InlineElement(index=self.inline_count, string=string, tags=tags, offset=offset)
        self.inline_count += 1
        return inline, pending


def parse_events(events: Iterable[Event]) -> tuple[Document, KeywordSet]:
    """Parse a structural event stream. Also returns the set of keywords.

    The returned tree only contains explicit keyword occurrences.
    """
    keywords = KeywordSet()
    state = _ParsingState(events, keywords)
    document = state.parse_document()
    log.debug(
        "parsed %d inline elements, %d keywords",
        state.inline_count,
        len(keywords),
    )
    return document, keywords


def parse_markdown(text: str) -> tuple[Document, KeywordSet]:
    """Parse a markdown document. ``ParseError`` carries the source for line numbers."""
    try:
        return parse_events(markdown_events(text))
    except ParseError as exc:
        exc.source = text
        raise
