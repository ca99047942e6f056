"""Template segmentation — splits a template into literal and expression segments."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from exprtemplate.context import ParserContext
from exprtemplate.errors import ErrorKind, ExpressionSyntaxError, TemplateParseError
from exprtemplate.expressions import Evaluable, LiteralExpression, SubParser
from exprtemplate.scanner import skip_to_end_suffix
from exprtemplate.tokens import Span, span_between

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Literal:
    """Static text between expressions."""

    text: str
    span: Span

    @property
    def evaluable(self) -> Evaluable:
        return LiteralExpression(self.text)


@dataclass(frozen=True, slots=True)
class ExpressionSpan:
    """Trimmed expression text, its offset in the template, and its evaluable."""

    text: str
    offset: int
    expression: Evaluable
    span: Span

    @property
    def evaluable(self) -> Evaluable:
        return self.expression


Segment = Literal | ExpressionSpan


class Segmenter:
    """Walks a template once, left to right, producing its segments."""

    def __init__(
        self,
        source: str,
        prefix: str,
        suffix: str,
        sub_parser: SubParser,
        context: ParserContext | None = None,
    ) -> None:
        if not prefix or not suffix:
            raise ValueError("expression prefix and suffix must be non-empty")
        self._source = source
        self._prefix = prefix
        self._suffix = suffix
        self._sub_parser = sub_parser
        self._context = context

    def segment(self) -> list[Segment]:
        """Return a fresh segment list; nothing is kept between calls."""
        source = self._source
        segments: list[Segment] = []
        cursor = 0

        while cursor < len(source):
            prefix_idx = source.find(self._prefix, cursor)
            if prefix_idx == -1:
                self._emit_literal(segments, cursor, len(source))
                break

            if prefix_idx > cursor:
                self._emit_literal(segments, cursor, prefix_idx)

            after_prefix = prefix_idx + len(self._prefix)
            suffix_idx = skip_to_end_suffix(source, after_prefix, self._suffix)
            if suffix_idx is None:
                raise TemplateParseError(
                    ErrorKind.UNTERMINATED_SPAN,
                    prefix_idx,
                    source,
                    (self._suffix, source[prefix_idx:]),
                    length=len(self._prefix),
                )

            self._emit_expression(segments, prefix_idx, after_prefix, suffix_idx)
            cursor = suffix_idx + len(self._suffix)

        if not segments:
            # Only reachable for empty input
            self._emit_literal(segments, 0, 0)
        return segments

    def _emit_literal(self, segments: list[Segment], start: int, end: int) -> None:
        text = self._source[start:end]
        segments.append(Literal(text, span_between(self._source, start, end)))

    def _emit_expression(
        self, segments: list[Segment], prefix_idx: int, after_prefix: int, suffix_idx: int
    ) -> None:
        raw = self._source[after_prefix:suffix_idx]
        text = raw.strip()
        if not text:
            raise TemplateParseError(
                ErrorKind.EMPTY_SPAN,
                prefix_idx,
                self._source,
                (self._prefix + self._suffix,),
                length=suffix_idx + len(self._suffix) - prefix_idx,
            )

        text_start = after_prefix + (len(raw) - len(raw.lstrip()))
        try:
            expression = self._sub_parser(text, self._context)
        except ExpressionSyntaxError as exc:
            err = TemplateParseError(
                ErrorKind.SUB_PARSER,
                text_start + exc.offset,
                self._source,
                (exc.message, text),
            )
            err.cause = exc
            raise err from exc

        logger.debug("expression %r at offset %d", text, text_start)
        span = span_between(self._source, prefix_idx, suffix_idx + len(self._suffix))
        segments.append(ExpressionSpan(text, text_start, expression, span))


def segment(
    source: str,
    prefix: str,
    suffix: str,
    sub_parser: SubParser,
    context: ParserContext | None = None,
) -> list[Segment]:
    """Convenience function: split *source* into an ordered segment list."""
    return Segmenter(source, prefix, suffix, sub_parser, context).segment()
