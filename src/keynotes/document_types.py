"""Document tree for the supported markdown subset.

All elements are kept in order of appearance in the source. Keywords live
in a ``KeywordSet`` next to the tree; tags reference them by index.

Supported subset:
- headers (section titles), cutting the text into a tree of sections
- paragraphs
- horizontal rules
- lists (ordered or not, nested)
- strong spans in any inline: non-semantic highlight
- emphasis spans in any inline: explicit keyword occurrence
Strong/emphasis spans cannot cross a line break.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias


TagKind: TypeAlias = Literal["highlight", "explicit_keyword", "implicit_keyword"]

KEYWORD_TAG_KINDS: frozenset[str] = frozenset({"explicit_keyword", "implicit_keyword"})

MAX_HEADER_LEVEL = 6


@dataclass(frozen=True, slots=True)
class InlineTag:
    """Tagged half-open character range of an inline element's string."""

    kind: TagKind
    start: int
    end: int
    keyword_index: int | None = None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end must be >= start, got {self.end} < {self.start}")
        if self.kind == "highlight":
            if self.keyword_index is not None:
                raise ValueError("highlight tag cannot carry a keyword index")
        elif self.keyword_index is None or self.keyword_index < 0:
            raise ValueError(f"{self.kind} tag requires a keyword index")

    @classmethod
    def highlight(cls, start: int, end: int) -> InlineTag:
        return cls("highlight", start, end)

    @classmethod
    def explicit_keyword(cls, keyword_index: int, start: int, end: int) -> InlineTag:
        return cls("explicit_keyword", start, end, keyword_index)

    @classmethod
    def implicit_keyword(cls, keyword_index: int, start: int, end: int) -> InlineTag:
        return cls("implicit_keyword", start, end, keyword_index)

    @property
    def is_keyword(self) -> bool:
        return self.kind in KEYWORD_TAG_KINDS

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and start < self.end


@dataclass(slots=True)
class InlineElement:
    """One contiguous run of text with its formatting and keyword tags."""

    index: int  # order of appearance across the whole document
    string: str  # raw text, formatting markers stripped
    tags: list[InlineTag] = field(default_factory=list)
    offset: int = 0  # source offset of the first text chunk

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"index must be >= 0, got {self.index}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        tags, self.tags = self.tags, []
        for tag in tags:
            self.add_tag(tag)

    def add_tag(self, tag: InlineTag) -> None:
        """Append a tag, enforcing bounds and the non-overlap rules.

        Highlight ranges may overlap keyword ranges, but not each other.
        Keyword ranges (explicit or implicit) never overlap each other.
        """
        if tag.end > len(self.string):
            raise ValueError(
                f"tag range {tag.start}..{tag.end} exceeds string length {len(self.string)}",
            )
        for other in self.tags:
            same_family = other.is_keyword == tag.is_keyword
            if same_family and other.overlaps(tag.start, tag.end):
                raise ValueError(
                    f"{tag.kind} {tag.start}..{tag.end} overlaps "
                    f"{other.kind} {other.start}..{other.end}",
                )
        self.tags.append(tag)

    def tags_of(self, kind: TagKind) -> list[InlineTag]:
        return [tag for tag in self.tags if tag.kind == kind]

    def tagged_text(self, tag: InlineTag) -> str:
        return self.string[tag.start:tag.end]


@dataclass(slots=True)
class Paragraph:
    inlines: list[InlineElement]

    def __post_init__(self) -> None:
        if not self.inlines:
            raise ValueError("paragraph must contain at least one inline element")


@dataclass(slots=True)
class Rule:
    pass


@dataclass(slots=True)
class ListItem:
    text_content: list[InlineElement]  # possibly multiline, never empty
    sub_list: MarkdownList | None = None

    def __post_init__(self) -> None:
        if not self.text_content:
            raise ValueError("list item must contain at least one inline element")


@dataclass(slots=True)
class MarkdownList:
    ordered: bool
    items: list[ListItem] = field(default_factory=list)


Block: TypeAlias = Paragraph | Rule | MarkdownList


@dataclass(slots=True)
class SectionContent:
    """Blocks preceding the first sub-section, then the sub-sections."""

    blocks: list[Block] = field(default_factory=list)
    sub_sections: list[Section] = field(default_factory=list)


@dataclass(slots=True)
class Section:
    title: InlineElement
    level: int
    content: SectionContent = field(default_factory=SectionContent)

    def __post_init__(self) -> None:
        if not 1 <= self.level <= MAX_HEADER_LEVEL:
            raise ValueError(f"section level must be in 1..{MAX_HEADER_LEVEL}, got {self.level}")


# Root of a markdown document: a level-0 section without a title.
Document = SectionContent


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def inline_to_dict(inline: InlineElement) -> dict[str, object]:
    return {
        "index": inline.index,
        "string": inline.string,
        "tags": [
            {
                "kind": tag.kind,
                "start": tag.start,
                "end": tag.end,
                **({"keyword": tag.keyword_index} if tag.keyword_index is not None else {}),
            }
            for tag in inline.tags
        ],
    }


def list_to_dict(markdown_list: MarkdownList) -> dict[str, object]:
    return {
        "type": "list",
        "ordered": markdown_list.ordered,
        "items": [
            {
                "text": [inline_to_dict(inline) for inline in item.text_content],
                "sub_list": list_to_dict(item.sub_list) if item.sub_list is not None else None,
            }
            for item in markdown_list.items
        ],
    }


def block_to_dict(block: Block) -> dict[str, object]:
    if isinstance(block, Paragraph):
        return {"type": "paragraph", "inlines": [inline_to_dict(i) for i in block.inlines]}
    if isinstance(block, Rule):
        return {"type": "rule"}
    return list_to_dict(block)


def section_content_to_dict(content: SectionContent) -> dict[str, object]:
    """Serialize a document (or section body) to a JSON-safe dict."""

    return {
        "blocks": [block_to_dict(block) for block in content.blocks],
        "sub_sections": [
            {
                "level": section.level,
                "title": inline_to_dict(section.title),
                **section_content_to_dict(section.content),
            }
            for section in content.sub_sections
        ],
    }


document_to_dict = section_content_to_dict
