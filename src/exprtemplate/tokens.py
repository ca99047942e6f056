"""Source positions, spans, and bracket classification helpers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


# Opening bracket → closing partner
OPEN_TO_CLOSE: dict[str, str] = {"{": "}", "[": "]", "(": ")"}
CLOSE_TO_OPEN: dict[str, str] = {close: open_ for open_, close in OPEN_TO_CLOSE.items()}

QUOTES = frozenset("'\"")


@dataclass(frozen=True, slots=True)
class Bracket:
    """An open bracket on the scanner stack: its character and offset."""

    char: str
    pos: int

    def closes_with(self, closer: str) -> bool:
        """Return True if *closer* is the partner of this bracket."""
        return OPEN_TO_CLOSE[self.char] == closer

    @property
    def expected_closer(self) -> str:
        return OPEN_TO_CLOSE[self.char]


def is_open_bracket(ch: str) -> bool:
    return ch in OPEN_TO_CLOSE


def is_close_bracket(ch: str) -> bool:
    return ch in CLOSE_TO_OPEN


def position_at(source: str, offset: int) -> Position:
    """Convert a 0-based offset into a line/column Position.

    Offsets past the end of *source* are clamped to its length, so an error
    reported at end of input still points at the last line.
    """
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start + 1, offset)


def span_between(source: str, start: int, end: int) -> Span:
    """Build a Span covering source[start:end]."""
    return Span(position_at(source, start), position_at(source, end))
