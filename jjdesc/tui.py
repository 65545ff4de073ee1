"""
TUI Layer - Read-only description viewer.

Provides a curses-based pager that highlights only the lines on screen,
re-classifying the visible window each time it scrolls.
"""

from __future__ import annotations

import curses
from typing import Dict, List, Optional, Sequence, Tuple

from rich.color import Color, ColorSystem, ColorType
from rich.style import Style

from .core.config import Settings
from .core.spans import Category, Span, classify
from .core.width import advance
from .display import category_styles

STATUS = "q: quit  j/k: scroll  PgUp/PgDn: page"


def line_starts(text: str) -> List[int]:
    starts = [0]
    for i, ch in enumerate(text):
        if ch == "\n":
            starts.append(i + 1)
    return starts


def visible_window(text: str, starts: List[int], top: int, height: int) -> Tuple[int, int]:
    """Offsets ``(start, limit)`` covering lines ``top`` .. ``top + height``."""
    first = starts[top]
    last = top + height
    if last >= len(starts):
        return first, len(text)
    # stop at the newline ending the last visible line
    return first, starts[last] - 1


def category_map(size: int, spans: Sequence[Span], offset: int = 0) -> List[Optional[Category]]:
    """Category of every character; later spans win where spans nest."""
    cats: List[Optional[Category]] = [None] * size
    for span in spans:
        for i in range(max(0, span.start - offset), min(span.end - offset, size)):
            cats[i] = span.category
    return cats


def color_number(color: Optional[Color]) -> int:
    """Curses colour number for a rich colour, -1 for the terminal default."""
    if color is None or color.type == ColorType.DEFAULT:
        return -1
    standard = color.downgrade(ColorSystem.STANDARD)
    return standard.number if standard.number is not None else -1


class CursesStyles:
    """Translates rich styles into curses attributes, allocating colour pairs."""

    def __init__(self, has_colors: bool, max_colors: int = 8):
        self.has_colors = has_colors
        self.max_colors = max_colors
        self.pairs: Dict[Tuple[int, int], int] = {}

    def _pair(self, fg: int, bg: int) -> int:
        key = (fg, bg)
        if key not in self.pairs:
            number = len(self.pairs) + 1
            curses.init_pair(number, fg, bg)
            self.pairs[key] = number
        return curses.color_pair(self.pairs[key])

    def attr(self, style: Style) -> int:
        attr = 0
        if style.bold:
            attr |= curses.A_BOLD
        if style.dim:
            attr |= curses.A_DIM
        if style.italic:
            attr |= getattr(curses, "A_ITALIC", 0)
        if style.underline:
            attr |= curses.A_UNDERLINE
        if style.reverse:
            attr |= curses.A_REVERSE
        if not self.has_colors:
            return attr

        fg = color_number(style.color)
        bg = color_number(style.bgcolor)
        if fg >= self.max_colors:
            # bright colours on an 8 colour terminal
            fg -= 8
            attr |= curses.A_BOLD
        if bg >= self.max_colors:
            bg -= 8
        if fg != -1 or bg != -1:
            attr |= self._pair(fg, bg)
        return attr


def _init_styles() -> CursesStyles:
    if not curses.has_colors():
        return CursesStyles(False)
    curses.start_color()
    try:
        curses.use_default_colors()
    except curses.error:
        pass
    return CursesStyles(True, min(curses.COLORS, 16))


def _draw_line(stdscr, row: int, line: str, cats, attrs: Dict[Category, int], width: int) -> None:
    col = 0
    for ch, cat in zip(line, cats):
        attr = attrs.get(cat, 0) if cat is not None else 0
        nxt = advance(col, ch)
        if nxt >= width:
            return
        try:
            # tabs are drawn as the blanks they expand to
            stdscr.addstr(row, col, " " * (nxt - col) if ch == "\t" else ch, attr)
        except curses.error:
            return
        col = nxt


def run_tui(text: str, settings: Settings, title: str = "") -> None:
    """Run the viewer until the user quits."""
    styles = category_styles(settings)

    def _main(stdscr) -> None:
        curses.curs_set(0)
        stdscr.keypad(True)
        converter = _init_styles()
        attrs = {cat: converter.attr(style) for cat, style in styles.items()}

        lines = text.split("\n")
        starts = line_starts(text)
        top = 0

        while True:
            stdscr.erase()
            height, width = stdscr.getmaxyx()
            body = max(1, height - 1)

            start, limit = visible_window(text, starts, top, body)
            spans = classify(text, settings.summary_max_length, start, limit)
            cats = category_map(limit - start, spans, offset=start)

            for row, line_no in enumerate(range(top, min(top + body, len(lines)))):
                first = starts[line_no] - start
                line = lines[line_no]
                _draw_line(stdscr, row, line, cats[first:first + len(line)], attrs, width)

            status = f"{title}  {STATUS}" if title else STATUS
            stdscr.addnstr(height - 1, 0, status, width - 1, curses.A_REVERSE)
            stdscr.refresh()

            max_top = max(0, len(lines) - body)
            ch = stdscr.getch()
            if ch in (ord("q"), 27):
                return
            if ch in (curses.KEY_UP, ord("k")):
                top = max(0, top - 1)
            elif ch in (curses.KEY_DOWN, ord("j")):
                top = min(max_top, top + 1)
            elif ch == curses.KEY_NPAGE:
                top = min(max_top, top + body)
            elif ch == curses.KEY_PPAGE:
                top = max(0, top - body)
            elif ch == curses.KEY_HOME:
                top = 0
            elif ch == curses.KEY_END:
                top = max_top

    curses.wrapper(_main)
