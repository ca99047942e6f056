"""Expression templates: static text with delimited embedded expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from exprtemplate.context import ParserContext

__version__ = "0.1.0"


def render(
    source: str,
    variables: dict[str, Any] | None = None,
    context: ParserContext | None = None,
) -> str:
    """Parse a template of Python expressions and render it with *variables*."""
    from exprtemplate.context import DOLLAR_TEMPLATE
    from exprtemplate.parser import parse
    from exprtemplate.pyexpr import python_sub_parser

    expression = parse(source, context or DOLLAR_TEMPLATE, python_sub_parser)
    return expression.get_value_string(variables or {})
