"""
Terminal output for classified descriptions.
Maps span categories to rich styles and formats span listings.
"""

import json
from typing import Dict, Optional, Sequence, TextIO

from rich import box
from rich.console import Console
from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .core.config import Settings
from .core.spans import Category, Span

CATEGORY_COLUMN_STYLE: Dict[Category, str] = {
    Category.SUMMARY: "bold",
    Category.OVERFLOW: "red",
    Category.COMMENT_HEADER: "blue",
    Category.COMMENT_TYPE: "yellow",
    Category.COMMENT_FILE: "green",
}


def parse_style(spec: str) -> Style:
    """Parse a style definition such as ``"bold bright_red on black"``.

    Raises:
        ValueError: If rich cannot parse the definition
    """
    try:
        return Style.parse(spec)
    except StyleSyntaxError as e:
        raise ValueError(f"invalid style {spec!r}: {e}")


def category_styles(settings: Settings) -> Dict[Category, Style]:
    return {cat: parse_style(settings.style_for(cat)) for cat in Category}


def make_console(color: str = "auto", file: Optional[TextIO] = None) -> Console:
    """Console honouring ``--color``; ``auto`` leaves detection to rich."""
    if color == "always":
        console = Console(file=file, force_terminal=True, highlight=False)
        if console.color_system is None:
            # TERM=dumb turns colour off even on a forced terminal
            console = Console(file=file, force_terminal=True, color_system="standard", highlight=False)
        return console
    if color == "never":
        return Console(file=file, color_system=None, highlight=False)
    return Console(file=file, highlight=False)


def build_text(text: str, spans: Sequence[Span], settings: Settings) -> Text:
    """Wrap ``text`` in a rich ``Text`` styled by ``spans``.

    Spans are applied in order, so a comment line's sub-spans are layered
    on top of its base style. rich drops control characters such as ``\\r``,
    so the text is cut at span edges and each piece is styled on its own.
    """
    styles = category_styles(settings)
    edges = sorted({0, len(text)} | {s.start for s in spans} | {s.end for s in spans})
    rendered = Text(end="")
    for start, end in zip(edges, edges[1:]):
        piece = Text(text[start:end])
        for span in spans:
            style = styles[span.category]
            if style and span.start <= start and end <= span.end:
                piece.stylize(style)
        rendered.append_text(piece)
    return rendered


def render(console: Console, text: str, spans: Sequence[Span], settings: Settings) -> None:
    """Print the styled description, ending with exactly one newline."""
    end = "" if text.endswith("\n") else "\n"
    console.print(build_text(text, spans, settings), end=end, soft_wrap=True)


def spans_table(text: str, spans: Sequence[Span]) -> Table:
    table = Table(box=box.SIMPLE_HEAD, show_edge=False)
    table.add_column("Category", no_wrap=True)
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Text", overflow="fold")
    for span in spans:
        table.add_row(
            Text(span.category.value, style=CATEGORY_COLUMN_STYLE.get(span.category, "")),
            str(span.start),
            str(span.end),
            Text(repr(span.text(text))),
        )
    return table


def spans_to_json(text: str, spans: Sequence[Span]) -> str:
    data = [
        {
            "category": span.category.value,
            "start": span.start,
            "end": span.end,
            "text": span.text(text),
        }
        for span in spans
    ]
    return json.dumps(data, indent=2, ensure_ascii=False)
