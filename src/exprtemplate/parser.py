"""Template parser — segments a template and assembles the result evaluable."""

from __future__ import annotations

import logging

from exprtemplate.context import DOLLAR_TEMPLATE, ParserContext
from exprtemplate.expressions import (
    CompositeExpression,
    Evaluable,
    LiteralExpression,
    SubParser,
    raw_sub_parser,
)
from exprtemplate.segments import Segment, segment

logger = logging.getLogger(__name__)


def assemble(source: str, segments: list[Segment]) -> Evaluable:
    """Combine segments into one evaluable, choosing the shape by segment count.

    A single segment is returned as-is so that a template made of exactly one
    expression behaves like that expression (it stays writable).
    """
    if not segments:
        return LiteralExpression("")
    if len(segments) == 1:
        return segments[0].evaluable
    logger.debug("composite of %d segments", len(segments))
    return CompositeExpression(source, tuple(seg.evaluable for seg in segments))


class TemplateParser:
    """Parses templates and plain expressions with an injected sub-parser.

    Holds nothing but the sub-parser, so one instance can be shared freely
    between threads.
    """

    def __init__(self, sub_parser: SubParser = raw_sub_parser) -> None:
        self._sub_parser = sub_parser

    def parse_expression(self, source: str, context: ParserContext | None = None) -> Evaluable:
        """Parse *source* as a template if *context* says so, else as one expression."""
        if context is not None and context.template:
            return self.parse_template(source, context)
        return self.parse_raw(source, context)

    def parse_raw(self, source: str, context: ParserContext | None = None) -> Evaluable:
        if not source.strip():
            raise ValueError("expression string must not be blank")
        return self._sub_parser(source, context)

    def parse_template(self, source: str, context: ParserContext = DOLLAR_TEMPLATE) -> Evaluable:
        if not source:
            return LiteralExpression("")
        segments = self.segment(source, context)
        return assemble(source, segments)

    def segment(self, source: str, context: ParserContext = DOLLAR_TEMPLATE) -> list[Segment]:
        return segment(source, context.prefix, context.suffix, self._sub_parser, context)


def parse(
    source: str,
    context: ParserContext = DOLLAR_TEMPLATE,
    sub_parser: SubParser = raw_sub_parser,
) -> Evaluable:
    """Convenience function: parse a template and return its evaluable."""
    return TemplateParser(sub_parser).parse_expression(source, context)
