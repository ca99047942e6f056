"""Error types with structured fields and formatted source context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from exprtemplate.tokens import Position, Span, position_at, span_between


class ErrorKind(Enum):
    UNTERMINATED_SPAN = auto()  # prefix with no matching suffix
    EMPTY_SPAN = auto()  # prefix immediately followed by suffix, or blank text
    UNBALANCED_CLOSER = auto()  # closing bracket with nothing open
    MISMATCHED_CLOSER = auto()  # closing bracket of the wrong type
    UNBALANCED_OPENER = auto()  # bracket still open at end of input
    UNTERMINATED_LITERAL = auto()  # quote with no closing quote
    SUB_PARSER = auto()  # failure reported by the expression sub-parser


# Message templates: {offset} is the error offset, {0}.. are the inserts
_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.UNTERMINATED_SPAN: (
        "no ending suffix '{0}' for expression starting at character {offset}: {1}"
    ),
    ErrorKind.EMPTY_SPAN: "no expression defined within delimiter '{0}' at character {offset}",
    ErrorKind.UNBALANCED_CLOSER: (
        "found closing '{0}' at position {offset} without an opening '{1}'"
    ),
    ErrorKind.MISMATCHED_CLOSER: (
        "found closing '{0}' at position {offset} "
        "but most recent opening is '{1}' at position {2}"
    ),
    ErrorKind.UNBALANCED_OPENER: "missing closing '{0}' for '{1}' at position {2}",
    ErrorKind.UNTERMINATED_LITERAL: (
        "found non terminating string literal starting at position {offset}"
    ),
    ErrorKind.SUB_PARSER: "invalid expression at position {offset}: {0}",
}


# Short label printed after each underline
_LABELS: dict[ErrorKind, str] = {
    ErrorKind.UNTERMINATED_SPAN: "no matching '{0}' after this",
    ErrorKind.EMPTY_SPAN: "nothing between the delimiters",
    ErrorKind.UNBALANCED_CLOSER: "no '{1}' is open here",
    ErrorKind.MISMATCHED_CLOSER: "does not close '{1}'",
    ErrorKind.UNBALANCED_OPENER: "never closed",
    ErrorKind.UNTERMINATED_LITERAL: "string starts here",
    ErrorKind.SUB_PARSER: "{0}",
}


@dataclass(frozen=True, slots=True)
class Mark:
    """An underlined region of the template with a short label."""

    span: Span
    label: str
    primary: bool = True


def _render(
    message: str,
    marks: list[Mark],
    notes: list[str],
    source: str,
    filename: str,
) -> str:
    """Render *message* with every marked line, labelled underlines, and notes.

    The primary mark is drawn with ``^`` and gives the ``-->`` location;
    secondary marks (such as the opener of a mismatched bracket) use ``-``.
    Marks are shown in source order, one underline row each, and a ``...``
    row stands in for skipped lines.
    """
    lines = source.splitlines()
    primary = next(m for m in marks if m.primary).span.start
    width = len(str(max(m.span.start.line for m in marks))) + 1
    gutter = " " * width + "|"

    out = [
        f"error: {message}",
        f"{' ' * width}--> {filename}:{primary.line}:{primary.column}",
        gutter,
    ]
    shown = 0
    text = ""
    for mark in sorted(marks, key=lambda m: m.span.start.offset):
        start, end = mark.span.start, mark.span.end
        if start.line != shown:
            if shown and start.line > shown + 1:
                out.append("...")
            text = lines[start.line - 1] if start.line <= len(lines) else ""
            out.append(f"{start.line:>{width - 1}} | {text}")
            shown = start.line
        if end.line == start.line:
            length = max(1, end.column - start.column)
        else:
            length = max(1, len(text) - start.column + 1)
        underline = ("^" if mark.primary else "-") * length
        out.append(f"{gutter} {' ' * (start.column - 1)}{underline} {mark.label}".rstrip())

    out.extend(f"{' ' * width}= note: {note}" for note in notes)
    return "\n".join(out)


class TemplateParseError(Exception):
    """Raised on the first template parse error.

    Carries the error ``kind``, the character ``offset`` into the original
    template, and the ordered ``inserts`` (bracket characters, delimiter
    tokens, offsets) that the message is built from, so callers can assert on
    structured fields rather than on prose.
    """

    def __init__(
        self,
        kind: ErrorKind,
        offset: int,
        source: str,
        inserts: tuple[object, ...] = (),
        length: int = 1,
    ) -> None:
        self.kind = kind
        self.offset = offset
        self.source = source
        self.inserts = inserts
        self.length = length
        self.cause: Exception | None = None
        self.message = _MESSAGES[kind].format(*inserts, offset=offset)
        super().__init__(self.format())

    @property
    def position(self) -> Position:
        return position_at(self.source, self.offset)

    @property
    def span(self) -> Span:
        return span_between(self.source, self.offset, self.offset + self.length)

    @property
    def marks(self) -> list[Mark]:
        """The primary mark first, then any related locations."""
        label = _LABELS[self.kind].format(*self.inserts, offset=self.offset)
        marks = [Mark(self.span, label)]
        if self.kind is ErrorKind.MISMATCHED_CLOSER:
            opener, opener_pos = self.inserts[1], self.inserts[2]
            marks.append(
                Mark(
                    span_between(self.source, opener_pos, opener_pos + 1),
                    f"'{opener}' opened here",
                    primary=False,
                )
            )
        return marks

    @property
    def notes(self) -> list[str]:
        if self.kind is ErrorKind.UNBALANCED_OPENER:
            return [f"expected '{self.inserts[0]}' before the end of the template"]
        if self.kind is ErrorKind.UNTERMINATED_LITERAL:
            quote = self.inserts[0]
            return [f"quotes have no escapes; a literal ends at the next {quote!r}"]
        if self.kind is ErrorKind.SUB_PARSER:
            return [f"in expression: {self.inserts[1]}"]
        return []

    def format(self, filename: str = "<template>") -> str:
        return _render(self.message, self.marks, self.notes, self.source, filename)


class ExpressionSyntaxError(Exception):
    """Raised by a sub-parser on malformed expression text.

    ``offset`` is relative to the expression text handed to the sub-parser,
    not to the enclosing template.
    """

    def __init__(self, message: str, offset: int = 0) -> None:
        self.message = message
        self.offset = offset
        super().__init__(f"{message} (at position {offset})")


class EvaluationError(Exception):
    """Raised when an evaluable cannot produce or accept a value."""

    def __init__(self, message: str, expression_string: str = "") -> None:
        self.message = message
        self.expression_string = expression_string
        if expression_string:
            super().__init__(f"{message}: {expression_string}")
        else:
            super().__init__(message)
