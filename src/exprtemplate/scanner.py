"""Delimiter-aware scanning: suffix probing and balanced span matching."""

from __future__ import annotations

import logging

from exprtemplate.errors import ErrorKind, TemplateParseError
from exprtemplate.tokens import (
    CLOSE_TO_OPEN,
    QUOTES,
    Bracket,
    is_close_bracket,
    is_open_bracket,
)

logger = logging.getLogger(__name__)


def is_suffix_here(source: str, pos: int, suffix: str) -> bool:
    """Return True if *suffix* occurs in *source* starting exactly at *pos*.

    Running out of input before the whole suffix is matched is a miss, not an
    error.
    """
    if pos + len(suffix) > len(source):
        return False
    return source.startswith(suffix, pos)


def skip_to_end_suffix(source: str, after_prefix: int, suffix: str) -> int | None:
    """Return the offset of the suffix that terminates the span at *after_prefix*.

    Brackets ``{}``, ``[]`` and ``()`` must pair up inside the span, and
    ``'...'`` or ``"..."`` literals may hold anything, so a suffix seen while a
    bracket is open or inside a literal is skipped. Nested ``${...${...}}``
    therefore needs no special handling: the inner ``{`` keeps the stack
    non-empty until its partner is found.

    Returns None when no live suffix exists. Raises TemplateParseError for
    unbalanced or mismatched brackets and unterminated literals.
    """
    if source.find(suffix, after_prefix) == -1:
        return None

    stack: list[Bracket] = []
    pos = after_prefix
    maxlen = len(source)

    while pos < maxlen:
        if not stack and is_suffix_here(source, pos, suffix):
            break
        ch = source[pos]
        if is_open_bracket(ch):
            stack.append(Bracket(ch, pos))
        elif is_close_bracket(ch):
            if not stack:
                raise TemplateParseError(
                    ErrorKind.UNBALANCED_CLOSER, pos, source, (ch, CLOSE_TO_OPEN[ch])
                )
            opener = stack.pop()
            if not opener.closes_with(ch):
                raise TemplateParseError(
                    ErrorKind.MISMATCHED_CLOSER,
                    pos,
                    source,
                    (ch, opener.char, opener.pos),
                )
        elif ch in QUOTES:
            end_literal = source.find(ch, pos + 1)
            if end_literal == -1:
                raise TemplateParseError(ErrorKind.UNTERMINATED_LITERAL, pos, source, (ch,))
            pos = end_literal
        pos += 1

    if stack:
        top = stack[-1]
        raise TemplateParseError(
            ErrorKind.UNBALANCED_OPENER,
            top.pos,
            source,
            (top.expected_closer, top.char, top.pos),
        )

    if not is_suffix_here(source, pos, suffix):
        logger.debug("no live suffix %r after offset %d", suffix, after_prefix)
        return None
    return pos
