#!/usr/bin/env python3
"""Parse markdown notes and dump the keyword-indexed document tree.

Usage:
    python3 scripts/keynotes_dump.py notes.md
    python3 scripts/keynotes_dump.py --keywords < notes.md
    python3 scripts/keynotes_dump.py notes.md --occurrences --output index.json

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from keynotes.errors import KeywordOverlapError, ParseError
from keynotes.events import compute_line_starts, markdown_events, offset_to_line
from keynotes.indexer import index_document, indexed_document_to_dict
from keynotes.io_utils import dump_json, read_text, save_json
from keynotes.parser import parse_markdown

log = logging.getLogger("keynotes_dump")


def _event_rows(text: str) -> list[dict[str, object]]:
    line_starts = compute_line_starts(text)
    rows: list[dict[str, object]] = []
    for event in markdown_events(text):
        row: dict[str, object] = {
            "kind": event.kind,
            "line": offset_to_line(line_starts, event.offset) + 1,
        }
        if event.tag:
            row["tag"] = event.tag
        if event.level:
            row["level"] = event.level
        if event.list_start is not None:
            row["list_start"] = event.list_start
        if event.kind == "text":
            row["text"] = event.text
        rows.append(row)
    return rows


def run(args: argparse.Namespace) -> int:
    text = read_text(args.input)
    log.debug("read %d characters from %s", len(text), args.input or "stdin")

    if args.tokens:
        dump_json(_event_rows(text))
        return 0

    try:
        document, keywords = parse_markdown(text)
    except ParseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.keywords:
        for keyword in keywords.sorted():
            print(keyword)
        return 0

    try:
        indexed = index_document(document, keywords)
    except KeywordOverlapError as exc:
        exc.source = text
        print(f"error: {exc}", file=sys.stderr)
        return 1
    log.info("%d keywords, %d inline elements", len(keywords), len(indexed.inlines))

    if args.occurrences:
        payload: object = {
            keyword: {"explicit": list(explicit), "implicit": list(implicit)}
            for keyword, (explicit, implicit) in indexed.occurrences().items()
        }
    else:
        payload = indexed_document_to_dict(indexed)

    if args.output is not None:
        save_json(payload, args.output)
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        dump_json(payload)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Parse markdown notes into a section tree indexed by keyword.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Markdown file to read (default: stdin)",
    )
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="Print the structural event stream and stop",
    )
    parser.add_argument(
        "--keywords", "-k",
        action="store_true",
        help="Print the extracted keyword list (sorted) and stop",
    )
    parser.add_argument(
        "--occurrences",
        action="store_true",
        help="Print explicit/implicit inline indexes per keyword instead of the tree",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write JSON to this file instead of stdout",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("markdown_it").setLevel(logging.WARNING)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
