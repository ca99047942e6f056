"""Parser context: the delimiter configuration for a parse call."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ParserContext:
    """Delimiter pair and template flag supplied with each parse.

    When ``template`` is False the whole input is a single expression and the
    delimiters are ignored.
    """

    prefix: str = "#{"
    suffix: str = "}"
    template: bool = True

    def __post_init__(self) -> None:
        if self.template and (not self.prefix or not self.suffix):
            raise ValueError("expression prefix and suffix must be non-empty")


TEMPLATE_EXPRESSION = ParserContext("#{", "}")
DOLLAR_TEMPLATE = ParserContext("${", "}")
NON_TEMPLATE = ParserContext(template=False)
