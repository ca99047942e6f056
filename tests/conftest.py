"""Shared test fixtures and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from exprtemplate.context import DOLLAR_TEMPLATE, ParserContext
from exprtemplate.errors import EvaluationError
from exprtemplate.segments import ExpressionSpan, Literal, Segment, segment


@dataclass(frozen=True)
class StubExpression:
    """Canned evaluable: returns a fixed value and accepts assignment."""

    text: str
    value: Any = None

    @property
    def expression_string(self) -> str:
        return self.text

    def get_value(self, context: Any = None) -> Any:
        return self.value

    def get_value_string(self, context: Any = None) -> str:
        return "" if self.value is None else str(self.value)

    def is_writable(self, context: Any = None) -> bool:
        return True

    def set_value(self, context: Any, value: Any) -> None:
        if context is None:
            raise EvaluationError("no context to assign into", self.text)
        context[self.text] = value


def stub_parser(values: dict[str, Any] | None = None):
    """Return a sub-parser producing StubExpression with values looked up in *values*."""
    values = values or {}

    def _parse(text: str, context: ParserContext | None = None) -> StubExpression:
        return StubExpression(text, values.get(text))

    return _parse


@pytest.fixture
def split():
    """Return a helper that segments source with ${...} and the stub sub-parser."""

    def _split(source: str, context: ParserContext = DOLLAR_TEMPLATE) -> list[Segment]:
        return segment(source, context.prefix, context.suffix, stub_parser(), context)

    return _split


def describe(segments: list[Segment]) -> list[tuple[str, str]]:
    """Reduce segments to (kind, text) pairs for compact assertions."""
    result = []
    for seg in segments:
        if isinstance(seg, Literal):
            result.append(("lit", seg.text))
        elif isinstance(seg, ExpressionSpan):
            result.append(("expr", seg.text))
    return result
