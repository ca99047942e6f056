"""Tests for result assembly and the template parser entry points."""

from __future__ import annotations

import threading

import pytest

from exprtemplate.context import DOLLAR_TEMPLATE, NON_TEMPLATE, TEMPLATE_EXPRESSION, ParserContext
from exprtemplate.errors import ErrorKind, EvaluationError, TemplateParseError
from exprtemplate.expressions import (
    CompositeExpression,
    Evaluable,
    LiteralExpression,
    RawExpression,
)
from exprtemplate.parser import TemplateParser, assemble, parse
from exprtemplate.segments import Literal
from exprtemplate.tokens import span_between

from tests.conftest import StubExpression, stub_parser


class TestResultShapes:
    def test_empty_input_is_empty_literal(self) -> None:
        result = parse("")
        assert result == LiteralExpression("")
        assert result.get_value() == ""

    def test_text_without_prefix(self) -> None:
        result = parse("plain text } here")
        assert isinstance(result, LiteralExpression)
        assert result.get_value() == "plain text } here"

    def test_single_expression_not_wrapped(self) -> None:
        result = parse("${abc}")
        assert result == RawExpression("abc")

    def test_composite(self) -> None:
        result = parse("hello ${abc}")
        assert isinstance(result, CompositeExpression)
        assert result.expression_string == "hello ${abc}"
        assert result.children == (LiteralExpression("hello "), RawExpression("abc"))

    def test_outer_delimiters_only(self) -> None:
        result = parse("hello ${foo${abc}}")
        assert isinstance(result, CompositeExpression)
        assert result.children[1] == RawExpression("foo${abc}")

    def test_surrounding_literals_kept(self) -> None:
        result = parse("A${E}B")
        assert result.children == (
            LiteralExpression("A"),
            RawExpression("E"),
            LiteralExpression("B"),
        )

    def test_assemble_by_count_only(self) -> None:
        lit = Literal("x", span_between("x", 0, 1))
        assert assemble("x", [lit]) == LiteralExpression("x")
        assert assemble("", []) == LiteralExpression("")

    def test_results_satisfy_protocol(self) -> None:
        for source in ("", "text", "${a}", "a ${b}"):
            assert isinstance(parse(source), Evaluable)


class TestCompositeEvaluation:
    def test_concatenates_values(self) -> None:
        parser = TemplateParser(stub_parser({"name": "World", "n": 3}))
        result = parser.parse_template("Hello ${name} x${n}!")
        assert result.get_value() == "Hello World x3!"

    def test_none_contributes_empty_string(self) -> None:
        parser = TemplateParser(stub_parser({}))
        result = parser.parse_template("[${missing}]")
        assert result.get_value() == "[]"

    def test_composite_not_writable(self) -> None:
        result = parse("a ${b}")
        assert not result.is_writable()
        with pytest.raises(EvaluationError):
            result.set_value({}, "x")

    def test_literal_not_writable(self) -> None:
        result = parse("just text")
        assert not result.is_writable()
        with pytest.raises(EvaluationError):
            result.set_value({}, "x")

    def test_single_expression_stays_writable(self) -> None:
        parser = TemplateParser(stub_parser())
        result = parser.parse_template("${target}")
        assert isinstance(result, StubExpression)
        variables: dict[str, str] = {}
        result.set_value(variables, "v")
        assert variables == {"target": "v"}

    def test_round_trip_with_canonical_rendering(self) -> None:
        source = "a ${x} b ${ y } c"
        result = parse(source)
        rebuilt = "".join(
            child.literal if isinstance(child, LiteralExpression) else "${" + child.text + "}"
            for child in result.children
        )
        assert parse(rebuilt) == CompositeExpression(rebuilt, result.children)


class TestParseExpression:
    def test_template_context(self) -> None:
        parser = TemplateParser()
        result = parser.parse_expression("x #{y}", TEMPLATE_EXPRESSION)
        assert isinstance(result, CompositeExpression)

    def test_no_context_parses_directly(self) -> None:
        parser = TemplateParser()
        assert parser.parse_expression("a ${b}") == RawExpression("a ${b}")

    def test_non_template_context(self) -> None:
        parser = TemplateParser()
        assert parser.parse_expression("x #{y}", NON_TEMPLATE) == RawExpression("x #{y}")

    def test_blank_direct_expression_rejected(self) -> None:
        with pytest.raises(ValueError):
            TemplateParser().parse_raw("   ")

    def test_empty_template_allowed(self) -> None:
        assert TemplateParser().parse_expression("", DOLLAR_TEMPLATE) == LiteralExpression("")


class TestParserContext:
    def test_defaults(self) -> None:
        ctx = ParserContext()
        assert (ctx.prefix, ctx.suffix, ctx.template) == ("#{", "}", True)

    def test_empty_prefix_rejected(self) -> None:
        with pytest.raises(ValueError):
            ParserContext("", "}")

    def test_empty_suffix_rejected(self) -> None:
        with pytest.raises(ValueError):
            ParserContext("${", "")

    def test_non_template_needs_no_delimiters(self) -> None:
        assert ParserContext("", "", template=False).template is False


class TestErrorScenarios:
    def test_empty_span(self) -> None:
        with pytest.raises(TemplateParseError) as exc_info:
            parse("a ${ }b")
        assert exc_info.value.kind == ErrorKind.EMPTY_SPAN
        assert exc_info.value.offset == 2

    def test_unterminated_span(self) -> None:
        with pytest.raises(TemplateParseError) as exc_info:
            parse("a ${abc")
        assert exc_info.value.kind == ErrorKind.UNTERMINATED_SPAN
        assert exc_info.value.offset == 2

    def test_parenthesised_expression(self) -> None:
        assert parse("${ (a,b) }") == RawExpression("(a,b)")

    def test_missing_close_paren(self) -> None:
        with pytest.raises(TemplateParseError) as exc_info:
            parse("${ (a,b }")
        err = exc_info.value
        assert err.kind == ErrorKind.MISMATCHED_CLOSER
        assert err.inserts[1:] == ("(", 3)

    def test_unclosed_paren_with_plain_delimiters(self) -> None:
        with pytest.raises(TemplateParseError) as exc_info:
            parse("<% (a,b %>", ParserContext("<%", "%>"))
        err = exc_info.value
        assert err.kind == ErrorKind.UNBALANCED_OPENER
        assert err.inserts == (")", "(", 3)


class TestStatelessness:
    def test_parser_reusable(self) -> None:
        parser = TemplateParser()
        first = parser.parse_template("a ${b} c")
        with pytest.raises(TemplateParseError):
            parser.parse_template("${")
        assert parser.parse_template("a ${b} c") == first

    def test_concurrent_use(self) -> None:
        parser = TemplateParser()
        results: dict[int, object] = {}

        def work(i: int) -> None:
            results[i] = parser.parse_template(f"n=${{v{i}}} ({i})")

        threads = [threading.Thread(target=work, args=(i,)) for i in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in range(16):
            assert results[i].children[1] == RawExpression(f"v{i}")
