"""Tests for the Dart widget expression parser.

Covers:
- Constructor calls, named constructors and method chains
- Literals, lists, groups and dropped modifiers
- Argument classification and ordering
- Error recovery: bad arguments, missing commas, mismatched and unclosed
  delimiters, stray closers
- Nesting limit
- Rendering back to source
"""

from __future__ import annotations

import pytest

from dartwidgets.core.errors import ErrorCategory
from dartwidgets.core.ir.ast import (
    ArrayLiteral,
    ConstructorCall,
    Identifier,
    Literal,
    MethodCall,
    NamedArgument,
    PositionalArgument,
    PropertyAccess,
    iter_constructor_calls,
    node_to_dict,
    unparse,
    walk,
)
from dartwidgets.core.lexer import tokenize
from dartwidgets.core.parser import parse, parse_source


def parse_one(source: str):
    result = parse_source(source)
    assert result.diagnostics == [], result.diagnostics
    assert len(result.program.body) == 1
    return result.program.body[0]


def codes(result) -> list[str]:
    return [d.code for d in result.diagnostics]


# =============================================================================
# Well-formed input
# =============================================================================


class TestCalls:
    """Constructor and method calls."""

    def test_constructor_call_with_named_argument(self) -> None:
        expr = parse_one('Container(color: "red")')
        assert isinstance(expr, ConstructorCall)
        assert expr.name == "Container"
        (arg,) = expr.arguments.arguments
        assert isinstance(arg, NamedArgument)
        assert arg.name == "color"
        assert isinstance(arg.value, Literal)
        assert arg.value.value == "red"

    def test_nested_calls(self) -> None:
        expr = parse_one("Center(child: Text('hi'))")
        child = expr.arguments.named[0].value
        assert isinstance(child, ConstructorCall)
        assert child.name == "Text"
        assert isinstance(child.arguments.positional[0], PositionalArgument)

    def test_named_constructor_is_method_call(self) -> None:
        expr = parse_one("EdgeInsets.all(8)")
        assert isinstance(expr, MethodCall)
        assert isinstance(expr.target, Identifier)
        assert expr.target.name == "EdgeInsets"
        assert expr.method == "all"
        assert expr.qualified_name == "EdgeInsets.all"

    def test_property_chain_with_call(self) -> None:
        expr = parse_one("Theme.of(context).textTheme.bodyLarge")
        assert isinstance(expr, PropertyAccess)
        assert expr.property == "bodyLarge"
        assert isinstance(expr.target, PropertyAccess)
        call = expr.target.target
        assert isinstance(call, MethodCall)
        assert call.method == "of"
        assert call.qualified_name == "Theme.of"

    def test_method_call_on_expression_has_no_qualified_name(self) -> None:
        expr = parse_one("Colors.red.withOpacity(0.5)")
        assert isinstance(expr, MethodCall)
        assert isinstance(expr.target, PropertyAccess)
        assert expr.qualified_name is None

    def test_mixed_arguments_keep_source_order(self) -> None:
        expr = parse_one("Padding(EdgeInsets.all(8), child: Text('a'), key)")
        kinds = [type(a).__name__ for a in expr.arguments.arguments]
        assert kinds == ["PositionalArgument", "NamedArgument", "PositionalArgument"]
        assert len(expr.arguments.named) == 1
        assert len(expr.arguments.positional) == 2

    def test_trailing_commas(self) -> None:
        expr = parse_one("Row(children: [Text('a'), Text('b'),],)")
        array = expr.arguments.named[0].value
        assert isinstance(array, ArrayLiteral)
        assert len(array.elements) == 2

    def test_empty_arguments_and_list(self) -> None:
        expr = parse_one("Column(children: [])")
        assert expr.arguments.named[0].value.elements == []
        assert parse_one("Spacer()").arguments.arguments == []

    def test_dropped_modifiers(self) -> None:
        expr = parse_one("const Text('a')")
        assert isinstance(expr, ConstructorCall)
        assert parse_one("new Text('a')").name == "Text"
        assert parse_one("return const Center()").name == "Center"

    def test_group_yields_inner_expression(self) -> None:
        expr = parse_one("(Text('a'))")
        assert isinstance(expr, ConstructorCall)

    def test_multiple_top_level_expressions(self) -> None:
        result = parse_source("Text('a');\nText('b');")
        assert result.diagnostics == []
        assert [e.name for e in result.program.body] == ["Text", "Text"]


class TestLiterals:
    @pytest.mark.parametrize(
        "source,expected",
        [
            ("42", 42),
            ("1.5", 1.5),
            ("1e3", 1000.0),
            ("0xFF", 255),
            ("-4", -4),
            ("-2.5", -2.5),
            ("true", True),
            ("false", False),
            ("null", None),
            ("'a' 'b'", "ab"),
        ],
    )
    def test_literal_values(self, source: str, expected: object) -> None:
        expr = parse_one(source)
        assert isinstance(expr, Literal)
        assert expr.value == expected

    def test_raw_text_is_kept(self) -> None:
        assert parse_one("0xFF2196F3").raw == "0xFF2196F3"

    def test_this_is_an_identifier(self) -> None:
        expr = parse_one("this.title")
        assert isinstance(expr, PropertyAccess)
        assert expr.target == Identifier(name="this", span=expr.target.span)


class TestSpans:
    def test_call_span_covers_arguments(self) -> None:
        source = "  Center(child: Text('hi'))"
        expr = parse_one(source)
        assert expr.span.text(source) == "Center(child: Text('hi'))"
        assert (expr.span.line, expr.span.column) == (1, 3)

    def test_nested_span(self) -> None:
        source = "Center(\n  child: Text('hi'),\n)"
        text = parse_one(source).arguments.named[0].value
        assert (text.span.line, text.span.column) == (2, 10)
        assert (text.span.end_line, text.span.end_column) == (2, 20)

    def test_parse_accepts_lex_result(self) -> None:
        lexed = tokenize("Text(`'a')")
        result = parse(lexed)
        assert codes(result) == ["UNEXPECTED_CHARACTER"]

    def test_parse_accepts_token_list(self) -> None:
        lexed = tokenize("Text(`'a')")
        result = parse(lexed.tokens)
        assert result.diagnostics == []
        assert result.program.body[0].arguments.positional[0].value.value == "a"


# =============================================================================
# Error recovery
# =============================================================================


class TestRecovery:
    """Malformed input yields a partial program plus diagnostics."""

    def test_missing_argument_value(self) -> None:
        result = parse_source("Container(color: )")
        assert codes(result) == ["EXPECTED_EXPRESSION"]
        diagnostic = result.diagnostics[0]
        assert diagnostic.category == ErrorCategory.SYNTAX
        assert (diagnostic.line, diagnostic.column) == (1, 18)
        assert diagnostic.lexeme == ")"
        (expr,) = result.program.body
        assert isinstance(expr, ConstructorCall)
        assert expr.name == "Container"
        assert expr.arguments.arguments == []
        assert not result.success

    def test_bad_argument_keeps_the_others(self) -> None:
        result = parse_source("Container(width: 10, color: , height: 20)")
        assert codes(result) == ["EXPECTED_EXPRESSION"]
        names = [a.name for a in result.program.body[0].arguments.named]
        assert names == ["width", "height"]

    def test_missing_comma_between_list_items(self) -> None:
        result = parse_source("Column(children: [Text('a') Text('b')])")
        assert codes(result) == ["UNEXPECTED_TOKEN"]
        assert result.diagnostics[0].column == 29
        array = result.program.body[0].arguments.named[0].value
        assert [e.name for e in array.elements] == ["Text"]

    def test_mismatched_closer_closes_inner_list(self) -> None:
        result = parse_source("Row(children: [Text('a'))")
        assert codes(result) == ["MISMATCHED_DELIMITER"]
        assert result.diagnostics[0].lexeme == ")"
        (row,) = result.program.body
        assert row.name == "Row"
        assert len(row.arguments.named[0].value.elements) == 1

    def test_unclosed_delimiter_yields_empty_program(self) -> None:
        result = parse_source("Center(child: Text('hi')")
        assert codes(result) == ["UNCLOSED_DELIMITER"]
        assert result.program.is_empty
        assert result.diagnostics[0].context["opener"] == "("
        assert result.diagnostics[0].context["opened_column"] == 7

    def test_unclosed_inside_skipped_argument(self) -> None:
        result = parse_source("Row(children: , [Text('a')")
        assert codes(result) == ["EXPECTED_EXPRESSION", "UNCLOSED_DELIMITER"]
        assert result.program.is_empty

    def test_stray_closer_at_top_level(self) -> None:
        result = parse_source("Text('a'))")
        assert codes(result) == ["UNEXPECTED_TOKEN"]
        assert len(result.program.body) == 1

    def test_missing_property_name(self) -> None:
        result = parse_source("Colors.)")
        assert codes(result) == ["EXPECTED_PROPERTY_NAME"]
        assert result.program.is_empty

    def test_lexer_error_tokens_are_skipped(self) -> None:
        result = parse_source("SizedBox(width: 12px, height: 4)")
        assert codes(result) == ["MALFORMED_NUMBER", "EXPECTED_EXPRESSION"]
        names = [a.name for a in result.program.body[0].arguments.named]
        assert names == ["width", "height"]

    def test_top_level_garbage_is_skipped(self) -> None:
        result = parse_source("} Text('a')")
        assert codes(result) == ["EXPECTED_EXPRESSION"]
        assert result.program.body[0].name == "Text"

    def test_empty_source(self) -> None:
        result = parse_source("")
        assert result.program.is_empty
        assert result.diagnostics == []
        assert result.success


class TestNestingLimit:
    def test_deep_nesting_is_cut(self) -> None:
        result = parse_source("A(child: B(child: C(child: D())))", max_depth=3)
        assert codes(result) == ["NESTING_TOO_DEEP"]
        assert result.diagnostics[0].category == ErrorCategory.VALIDATION
        assert result.diagnostics[0].column == 28
        names = [call.name for call in iter_constructor_calls(result.program)]
        assert names == ["A", "B", "C"]

    def test_member_chain_counts_toward_depth(self) -> None:
        result = parse_source("Text(style: a" + ".b" * 3000 + ")")
        assert codes(result) == ["NESTING_TOO_DEEP"]
        assert result.diagnostics[0].column == 138
        (call,) = result.program.body
        assert call.arguments.arguments == []
        assert unparse(result.program) == "Text()"
        assert node_to_dict(result.program)["body"][0]["arguments"] == []

    def test_method_chain_counts_toward_depth(self) -> None:
        result = parse_source("Container(color: x" + ".b()" * 3000 + ")")
        assert codes(result) == ["NESTING_TOO_DEEP"]
        assert unparse(result.program) == "Container()"

    def test_realistic_chain_is_accepted(self) -> None:
        call = parse_one("Text('a', style: Theme.of(context).textTheme.titleLarge.copyWith(color: c))")
        assert isinstance(call, ConstructorCall)

    def test_default_limit_accepts_realistic_depth(self) -> None:
        source = "Center(child: " * 40 + "Text('x')" + ")" * 40
        result = parse_source(source)
        assert result.diagnostics == []
        assert len(list(iter_constructor_calls(result.program))) == 41


# =============================================================================
# Rendering
# =============================================================================


class TestUnparse:
    def test_unparse_round_trips_structure(self) -> None:
        source = "const Padding(padding: EdgeInsets.all(8), child: Text('it\\'s', style: null))"
        program = parse_source(source).program
        rendered = unparse(program)
        assert rendered == 'Padding(padding: EdgeInsets.all(8), child: Text("it\'s", style: null))'
        assert unparse(parse_source(rendered).program) == rendered

    def test_unparse_program_joins_statements(self) -> None:
        assert unparse(parse_source("Text('a'); Icon(Icons.add)").program) == (
            'Text("a");\nIcon(Icons.add)'
        )

    def test_node_to_dict(self) -> None:
        data = node_to_dict(parse_one("Text('a', maxLines: 2)"))
        assert data["type"] == "ConstructorCall"
        assert data["name"] == "Text"
        assert (data["line"], data["column"]) == (1, 1)
        assert [a["type"] for a in data["arguments"]] == ["PositionalArgument", "NamedArgument"]
        assert data["arguments"][1]["value"]["value"] == 2

    def test_walk_is_pre_order(self) -> None:
        program = parse_source("Row(children: [Text('a'), Icon(Icons.add)])").program
        names = [n.name for n in walk(program) if isinstance(n, ConstructorCall)]
        assert names == ["Row", "Text", "Icon"]
