from __future__ import annotations

import unicodedata

ZERO_WIDTH_CATEGORIES = {"Mn", "Me", "Cf", "Cc"}
WIDE = {"W", "F"}
TAB_WIDTH = 8


def char_width(ch: str) -> int:
    # marks, format and control characters take no column
    if unicodedata.category(ch) in ZERO_WIDTH_CATEGORIES:
        return 0
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in WIDE:
        return 2
    return 1


def advance(col: int, ch: str) -> int:
    """Column after drawing ``ch`` at ``col``; a tab moves to the next stop."""
    if ch == "\t":
        return col + TAB_WIDTH - col % TAB_WIDTH
    return col + char_width(ch)


def string_width(text: str) -> int:
    col = 0
    for ch in text:
        col = advance(col, ch)
    return col


def column_offset(text: str, column: int) -> int:
    """Return the first offset in ``text`` at which ``column`` columns are used.

    A character that crosses ``column`` (a wide character or a tab) ends up
    before the offset. Zero-width characters following the offset are left
    after it. Returns ``len(text)`` when the string never reaches ``column``.
    """
    col = 0
    for i, ch in enumerate(text):
        if col >= column:
            return i
        col = advance(col, ch)
    return len(text)
