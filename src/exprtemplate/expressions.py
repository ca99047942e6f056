"""Evaluable types produced by template parsing, and the sub-parser capability."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from exprtemplate.context import ParserContext
from exprtemplate.errors import EvaluationError


@runtime_checkable
class Evaluable(Protocol):
    """Anything a sub-parser or the assembler hands back to the caller."""

    @property
    def expression_string(self) -> str: ...

    def get_value(self, context: Any = None) -> Any: ...

    def get_value_string(self, context: Any = None) -> str: ...

    def is_writable(self, context: Any = None) -> bool: ...

    def set_value(self, context: Any, value: Any) -> None: ...


SubParser = Callable[[str, ParserContext | None], Evaluable]
"""Turns one trimmed expression text into an Evaluable.

Reports malformed grammar by raising ExpressionSyntaxError with an offset
relative to the text it was given.
"""


def value_to_string(value: Any) -> str:
    """String contribution of a child value; None contributes nothing."""
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True, slots=True)
class LiteralExpression:
    """Static text. Evaluates to itself and can never be assigned."""

    literal: str

    @property
    def expression_string(self) -> str:
        return self.literal

    def get_value(self, context: Any = None) -> str:
        return self.literal

    def get_value_string(self, context: Any = None) -> str:
        return self.literal

    def is_writable(self, context: Any = None) -> bool:
        return False

    def set_value(self, context: Any, value: Any) -> None:
        raise EvaluationError("cannot set the value of a literal expression", self.literal)


@dataclass(frozen=True, slots=True)
class CompositeExpression:
    """Template with two or more parts, evaluated by concatenation."""

    source: str
    children: tuple[Evaluable, ...]

    @property
    def expression_string(self) -> str:
        return self.source

    def get_value(self, context: Any = None) -> str:
        return "".join(value_to_string(child.get_value(context)) for child in self.children)

    def get_value_string(self, context: Any = None) -> str:
        return self.get_value(context)

    def is_writable(self, context: Any = None) -> bool:
        return False

    def set_value(self, context: Any, value: Any) -> None:
        raise EvaluationError("cannot set the value of a composite template", self.source)


@dataclass(frozen=True, slots=True)
class RawExpression:
    """Unparsed expression text; its value is its own canonical rendering."""

    text: str

    @property
    def expression_string(self) -> str:
        return self.text

    def get_value(self, context: Any = None) -> str:
        return self.text

    def get_value_string(self, context: Any = None) -> str:
        return self.text

    def is_writable(self, context: Any = None) -> bool:
        return False

    def set_value(self, context: Any, value: Any) -> None:
        raise EvaluationError("cannot set the value of a raw expression", self.text)


def raw_sub_parser(text: str, context: ParserContext | None = None) -> RawExpression:
    """Identity sub-parser: accepts any text as an expression."""
    return RawExpression(text)
