"""Tests for keynotes.events module."""
import pytest

from keynotes.events import Event, compute_line_starts, markdown_events, offset_to_line


def _shapes(text: str) -> list[tuple[str, str]]:
    rows = []
    for event in markdown_events(text):
        detail = event.text if event.kind == "text" else event.tag
        rows.append((event.kind, detail))
    return rows


def _joined(events: list[Event]) -> list[tuple[str, str]]:
    """Merge adjacent text events, which markdown-it may split."""
    rows: list[tuple[str, str]] = []
    for event in events:
        if event.kind == "text" and rows and rows[-1][0] == "text":
            rows[-1] = ("text", rows[-1][1] + event.text)
        else:
            rows.append((event.kind, event.text if event.kind == "text" else event.tag))
    return rows


class TestEvent:
    def test_requires_tag(self) -> None:
        with pytest.raises(ValueError):
            Event("start", 0)

    def test_negative_offset(self) -> None:
        with pytest.raises(ValueError):
            Event.text_chunk("x", -1)

    def test_predicates(self) -> None:
        assert Event.start("heading", level=2).is_start("heading")
        assert not Event.start("heading", level=2).is_end("heading")
        assert Event.soft_break().is_break
        assert Event.hard_break().is_break
        assert not Event.text_chunk("a").is_break

    def test_describe(self) -> None:
        assert Event.start("heading", level=3).describe() == "start heading 3"
        assert Event.start("list", list_start=4).describe() == "start ordered list from 4"
        assert Event.other("code").describe() == "code"
        assert Event.soft_break().describe() == "soft break"
        assert Event.text_chunk("hi").describe() == "text 'hi'"


class TestLineStarts:
    def test_line_starts(self) -> None:
        assert compute_line_starts("") == [0]
        assert compute_line_starts("a\nbc\n") == [0, 2, 5]

    def test_offset_to_line(self) -> None:
        starts = compute_line_starts("\nBlah\n")
        assert offset_to_line(starts, 0) == 0
        assert offset_to_line(starts, 1) == 1
        assert offset_to_line(starts, 5) == 1
        assert offset_to_line(starts, 6) == 2


class TestMarkdownEvents:
    def test_heading_and_paragraph(self) -> None:
        events = list(markdown_events("## Title\n\nHello *world*.\n"))
        assert events[0].is_start("heading")
        assert events[0].level == 2
        assert _joined(events) == [
            ("start", "heading"),
            ("text", "Title"),
            ("end", "heading"),
            ("start", "paragraph"),
            ("text", "Hello "),
            ("start", "emphasis"),
            ("text", "world"),
            ("end", "emphasis"),
            ("text", "."),
            ("end", "paragraph"),
        ]

    def test_rule(self) -> None:
        assert _shapes("---\n") == [("start", "rule"), ("end", "rule")]

    def test_tight_list_has_no_paragraphs(self) -> None:
        events = list(markdown_events("3. one\n4. two\n"))
        assert events[0].is_start("list")
        assert events[0].list_start == 3
        assert _joined(events) == [
            ("start", "list"),
            ("start", "item"),
            ("text", "one"),
            ("end", "item"),
            ("start", "item"),
            ("text", "two"),
            ("end", "item"),
            ("end", "list"),
        ]

    def test_ordered_list_default_start(self) -> None:
        events = list(markdown_events("1. one\n"))
        assert events[0].list_start == 1

    def test_bullet_list_is_unordered(self) -> None:
        events = list(markdown_events("- one\n"))
        assert events[0].is_start("list")
        assert events[0].list_start is None

    def test_breaks_and_strong(self) -> None:
        assert _joined(list(markdown_events("**a**  \nb\nc\n"))) == [
            ("start", "paragraph"),
            ("start", "strong"),
            ("text", "a"),
            ("end", "strong"),
            ("hard_break", ""),
            ("text", "b"),
            ("soft_break", ""),
            ("text", "c"),
            ("end", "paragraph"),
        ]

    def test_no_empty_text_chunks(self) -> None:
        events = list(markdown_events("**a** b *c*\n\n# **T**\n"))
        texts = [e.text for e in events if e.kind == "text"]
        assert texts
        assert all(texts)

    def test_unsupported_constructs_keep_their_names(self) -> None:
        assert _shapes("> quote\n")[0] == ("start", "blockquote")
        assert ("other", "fence") in _shapes("```\ncode\n```\n")
        assert ("other", "code") in _shapes("a `b` c\n")

    def test_offsets_point_to_source_lines(self) -> None:
        text = "# A\n\npara\nline two\n"
        starts = compute_line_starts(text)
        events = list(markdown_events(text))
        lines = [offset_to_line(starts, e.offset) for e in events]
        kinds = [e.kind for e in events]
        # heading on line 0, paragraph opens on line 2, soft break moves to line 3
        assert lines[0] == 0
        paragraph_start = kinds.index("start", 1 + kinds.index("end"))
        assert lines[paragraph_start] == 2
        assert lines[-2] == 3  # "line two" text
        assert lines[-1] == 3  # paragraph end
