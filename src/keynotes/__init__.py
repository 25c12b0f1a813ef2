"""Markdown notes to section trees annotated with keyword occurrences."""

from keynotes.document_types import (
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
    TagKind,
    document_to_dict,
)
from keynotes.errors import KeywordOverlapError, ParseError, TokenStreamError
from keynotes.events import Event, EventKind, markdown_events
from keynotes.indexer import (
    IndexedDocument,
    index_document,
    indexed_document_to_dict,
    iter_inlines,
    iter_sections,
)
from keynotes.keywords import KeywordMatch, KeywordMatcher, KeywordSet, build_keyword_matcher
from keynotes.parser import parse_events, parse_markdown

__all__ = [
    "Block",
    "Document",
    "Event",
    "EventKind",
    "IndexedDocument",
    "InlineElement",
    "InlineTag",
    "KeywordMatch",
    "KeywordMatcher",
    "KeywordOverlapError",
    "KeywordSet",
    "ListItem",
    "MarkdownList",
    "Paragraph",
    "ParseError",
    "Rule",
    "Section",
    "SectionContent",
    "TagKind",
    "TokenStreamError",
    "build_keyword_matcher",
    "document_to_dict",
    "index_document",
    "indexed_document_to_dict",
    "iter_inlines",
    "iter_sections",
    "markdown_events",
    "parse_events",
    "parse_markdown",
]
