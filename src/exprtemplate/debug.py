"""--debug segment dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from exprtemplate.segments import ExpressionSpan, Literal, Segment


def dump_segments(segments: list[Segment], *, file: TextIO | None = None) -> None:
    """Print one line per segment to *file* (default: stderr)."""
    if file is None:
        file = sys.stderr
    file.write(f"Template ({len(segments)} segments)\n")
    for seg in segments:
        _dump_segment(seg, file)


def _location(seg: Segment) -> str:
    start = seg.span.start
    return f"{start.line}:{start.column}"


def _dump_segment(seg: Segment, f: TextIO) -> None:
    if isinstance(seg, Literal):
        f.write(f"  Literal({seg.text!r}) @ {_location(seg)}\n")
    elif isinstance(seg, ExpressionSpan):
        kind = type(seg.expression).__name__
        f.write(f"  Expression({seg.text!r}) -> {kind} @ {_location(seg)}\n")
