"""Sub-parser for Python expression syntax."""

from __future__ import annotations

import ast
import builtins
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from types import CodeType
from typing import Any

from exprtemplate.context import ParserContext
from exprtemplate.errors import EvaluationError, ExpressionSyntaxError

# Builtins visible to expressions; everything else must come from variables
_SAFE_BUILTINS: dict[str, Any] = {
    name: getattr(builtins, name)
    for name in (
        "abs",
        "all",
        "any",
        "bool",
        "dict",
        "float",
        "int",
        "len",
        "list",
        "max",
        "min",
        "round",
        "sorted",
        "str",
        "sum",
        "tuple",
    )
}


@dataclass(frozen=True, slots=True)
class PythonExpression:
    """A compiled Python expression evaluated against a variables mapping."""

    text: str
    tree: ast.Expression = field(compare=False, repr=False)
    code: CodeType = field(compare=False, repr=False)

    @property
    def expression_string(self) -> str:
        return self.text

    def get_value(self, context: Any = None) -> Any:
        variables = context if isinstance(context, Mapping) else {}
        # Variables are globals so nested scopes (generators, lambdas) see them
        namespace = {**variables, "__builtins__": _SAFE_BUILTINS}
        try:
            return eval(self.code, namespace)
        except Exception as exc:
            raise EvaluationError(f"{type(exc).__name__}: {exc}", self.text) from exc

    def get_value_string(self, context: Any = None) -> str:
        value = self.get_value(context)
        return "" if value is None else str(value)

    def is_writable(self, context: Any = None) -> bool:
        return isinstance(self.tree.body, ast.Name) and isinstance(context, MutableMapping)

    def set_value(self, context: Any, value: Any) -> None:
        if not self.is_writable(context):
            raise EvaluationError("expression is not assignable", self.text)
        context[self.tree.body.id] = value


def _syntax_error_offset(text: str, exc: SyntaxError) -> int:
    """Translate a SyntaxError's 1-based line/column into a 0-based offset."""
    lineno = exc.lineno or 1
    column = exc.offset or 1
    lines = text.splitlines(keepends=True)
    offset = sum(len(line) for line in lines[: lineno - 1]) + column - 1
    return max(0, min(offset, len(text)))


def python_sub_parser(text: str, context: ParserContext | None = None) -> PythonExpression:
    """Compile *text* as a Python expression."""
    try:
        tree = ast.parse(text, mode="eval")
        code = compile(tree, "<expression>", "eval")
    except SyntaxError as exc:
        raise ExpressionSyntaxError(exc.msg, _syntax_error_offset(text, exc)) from exc
    return PythonExpression(text, tree, code)
