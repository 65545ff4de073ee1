"""
Span classification for jj commit descriptions.

The first line of a description is its summary; lines starting with ``JJ: ``
are comments jj adds below the text (section headers such as
``JJ: Conflicts:`` and change entries such as ``JJ: M src/lib.rs``).
Classification is a pure function of the text: nothing is cached between
calls, and a rule that does not apply returns ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .width import column_offset, string_width

DEFAULT_SUMMARY_MAX_LENGTH = 50
COMMENT_PREFIX = "JJ: "

COMMENT_LINE_RE = re.compile(r"^JJ: .*$", re.MULTILINE)
HEADER_RE = re.compile(r"JJ: +((?=[^ ]).*:)")
CHANGE_RE = re.compile(r"JJ: +([CRMAD]) +(.*)")


class Category(str, Enum):
    SUMMARY = "summary"
    OVERFLOW = "overflow"
    COMMENT_BASE = "comment"
    COMMENT_HEADER = "comment-header"
    COMMENT_TYPE = "comment-type"
    COMMENT_FILE = "comment-file"


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    category: Category

    def text(self, source: str) -> str:
        return source[self.start:self.end]


@dataclass(frozen=True)
class Match:
    """Spans produced by one rule application.

    ``end`` is the offset the rule consumed up to; scanning for the next
    comment line resumes from there.
    """
    spans: Tuple[Span, ...]
    end: int


def line_end(text: str, offset: int) -> int:
    nl = text.find("\n", offset)
    return len(text) if nl == -1 else nl


def classify_summary(
    text: str,
    threshold: int = DEFAULT_SUMMARY_MAX_LENGTH,
    start: int = 0,
) -> Optional[Match]:
    """Classify the first line as summary, splitting off any overflow.

    Only applies at the very start of the text and only when the first line
    has content. A non-positive ``threshold`` disables overflow marking.
    The overflow boundary is measured in display columns, so wide
    characters count double, tabs run to the next tab stop and combining
    marks count zero. The character that reaches the limit stays in the
    summary; when it is the last one the overflow span is empty.
    """
    if start != 0:
        return None
    end = line_end(text, 0)
    if end == 0:
        return None

    line = text[:end]
    if threshold <= 0 or string_width(line) <= threshold:
        return Match(spans=(Span(0, end, Category.SUMMARY),), end=end)

    boundary = column_offset(line, threshold)
    return Match(
        spans=(
            Span(0, boundary, Category.SUMMARY),
            Span(boundary, end, Category.OVERFLOW),
        ),
        end=end,
    )


def _comment_sub_spans(text: str, start: int, end: int) -> List[Span]:
    # Header wins over a change entry: "JJ: M foo:" is a header
    m = HEADER_RE.fullmatch(text, start, end)
    if m:
        return [Span(m.start(1), m.end(1), Category.COMMENT_HEADER)]

    m = CHANGE_RE.fullmatch(text, start, end)
    if m:
        spans = [Span(m.start(1), m.end(1), Category.COMMENT_TYPE)]
        if m.end(2) > m.start(2):
            spans.append(Span(m.start(2), m.end(2), Category.COMMENT_FILE))
        return spans

    return []


def classify_next_comment_line(
    text: str,
    start: int = 0,
    limit: Optional[int] = None,
) -> Optional[Match]:
    """Find and classify the next ``JJ: `` line at or after ``start``.

    Only lines that begin at or after ``start`` and end at or before
    ``limit`` are considered. Every matched line gets a base comment span;
    header or change-type/file sub-spans are added when the line has that
    shape. Returns ``None`` once no comment line is left in range.
    """
    size = len(text)
    limit = size if limit is None else max(0, min(limit, size))
    start = max(0, start)
    if start > limit:
        return None

    m = COMMENT_LINE_RE.search(text, start, limit)
    if not m:
        return None
    # $ also matches at endpos, which may cut a line short
    if m.end() == limit and limit < size and text[limit] != "\n":
        return None

    spans = [Span(m.start(), m.end(), Category.COMMENT_BASE)]
    spans.extend(_comment_sub_spans(text, m.start(), m.end()))
    return Match(spans=tuple(spans), end=m.end())


def iter_matches(
    text: str,
    threshold: int = DEFAULT_SUMMARY_MAX_LENGTH,
    start: int = 0,
    limit: Optional[int] = None,
) -> Iterator[Match]:
    """Yield every rule match in ``[start, limit)``, summary first."""
    pos = start
    summary = classify_summary(text, threshold, start)
    if summary is not None:
        if limit is not None and summary.end > limit:
            return
        yield summary
        pos = summary.end

    while True:
        match = classify_next_comment_line(text, pos, limit)
        if match is None:
            return
        yield match
        # an empty line can't be a comment line, so this always advances
        pos = match.end


def classify(
    text: str,
    threshold: int = DEFAULT_SUMMARY_MAX_LENGTH,
    start: int = 0,
    limit: Optional[int] = None,
) -> List[Span]:
    spans: List[Span] = []
    for match in iter_matches(text, threshold, start, limit):
        spans.extend(match.spans)
    return spans
