"""Tests for the Dart lexer.

Covers:
- Token types for literals, identifiers, keywords and punctuation
- Line/column tracking across whitespace, comments and strings
- String escapes, raw strings and unterminated strings
- Number forms and malformed numbers
- Error tokens and totality of the token stream
"""

from __future__ import annotations

import pytest

from dartwidgets.core.lexer import Lexer, TokenType, tokenize


def types(source: str) -> list[TokenType]:
    return [t.type for t in tokenize(source).tokens]


class TestTokenTypes:
    """Lexer produces correct token sequences."""

    def test_constructor_call(self) -> None:
        assert types('Container(color: "red")') == [
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.STRING,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    def test_punctuation(self) -> None:
        assert types("()[],:.;{}") == [
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACKET,
            TokenType.RBRACKET,
            TokenType.COMMA,
            TokenType.COLON,
            TokenType.DOT,
            TokenType.SEMICOLON,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.EOF,
        ]

    def test_keywords(self) -> None:
        tokens = tokenize("const new null this return").tokens
        assert [t.type for t in tokens[:-1]] == [TokenType.KEYWORD] * 5
        assert [t.value for t in tokens[:-1]] == ["const", "new", "null", "this", "return"]

    def test_booleans(self) -> None:
        assert types("true false") == [TokenType.BOOLEAN, TokenType.BOOLEAN, TokenType.EOF]

    def test_identifiers_with_underscore_and_dollar(self) -> None:
        tokens = tokenize("_private $ref kPadding2").tokens
        assert [t.value for t in tokens[:-1]] == ["_private", "$ref", "kPadding2"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:-1])

    def test_operators_are_single_characters(self) -> None:
        tokens = tokenize("=> @override").tokens
        assert [(t.type, t.value) for t in tokens[:3]] == [
            (TokenType.OPERATOR, "="),
            (TokenType.OPERATOR, ">"),
            (TokenType.OPERATOR, "@"),
        ]
        assert tokens[3].value == "override"

    def test_empty_source(self) -> None:
        result = tokenize("")
        assert types("") == [TokenType.EOF]
        assert result.success

    def test_token_repr(self) -> None:
        token = tokenize("Text").tokens[0]
        assert repr(token) == "Token(IDENTIFIER, 'Text', 1:1)"


class TestPositions:
    """Line and column tracking."""

    def test_columns_on_one_line(self) -> None:
        tokens = tokenize("Text('hi')").tokens
        assert [(t.line, t.column) for t in tokens[:4]] == [(1, 1), (1, 5), (1, 6), (1, 10)]

    def test_lines_advance_over_newlines(self) -> None:
        tokens = tokenize("a\n  b").tokens
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    def test_block_comment_spanning_lines(self) -> None:
        tokens = tokenize("/* a\nb */Text").tokens
        assert tokens[0].value == "Text"
        assert (tokens[0].line, tokens[0].column) == (2, 5)

    def test_line_comment(self) -> None:
        tokens = tokenize("// heading\nText").tokens
        assert tokens[0].value == "Text"
        assert tokens[0].line == 2

    def test_offsets_and_end_positions(self) -> None:
        source = "Row(children: [])"
        token = tokenize(source).tokens[2]
        assert source[token.start : token.end] == "children"
        assert (token.end_line, token.end_column) == (1, 13)

    def test_multiline_string_escape_keeps_columns(self) -> None:
        tokens = tokenize("'a\\nb' x").tokens
        assert tokens[0].value == "a\nb"
        assert (tokens[1].line, tokens[1].column) == (1, 8)


class TestComments:
    def test_nested_block_comments(self) -> None:
        assert [t.value for t in tokenize("/* a /* b */ c */ X").tokens[:-1]] == ["X"]

    def test_unterminated_block_comment(self) -> None:
        result = tokenize("Text /* never closed")
        assert types("Text /* never closed") == [TokenType.IDENTIFIER, TokenType.EOF]
        assert [d.code for d in result.diagnostics] == ["UNTERMINATED_COMMENT"]
        assert (result.diagnostics[0].line, result.diagnostics[0].column) == (1, 6)


class TestStrings:
    @pytest.mark.parametrize(
        "source,expected",
        [
            ('"he\\"llo"', 'he"llo'),
            ("'it\\'s'", "it's"),
            ("'tab\\tend'", "tab\tend"),
            ("'\\$price'", "$price"),
            ("'\\x41'", "A"),
            ("'\\u0041'", "A"),
            ("'\\u{1F600}'", "\U0001f600"),
            ("'\\q'", "q"),
        ],
    )
    def test_escapes(self, source: str, expected: str) -> None:
        token = tokenize(source).tokens[0]
        assert token.type == TokenType.STRING
        assert token.value == expected

    def test_raw_string_keeps_backslashes(self) -> None:
        token = tokenize("r'a\\nb'").tokens[0]
        assert token.type == TokenType.STRING
        assert token.value == "a\\nb"
        assert token.raw == "r'a\\nb'"

    def test_unterminated_string_recovers_to_end_of_line(self) -> None:
        result = tokenize("'abc\nText")
        tokens = result.tokens
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "abc"
        assert tokens[1].value == "Text"
        assert tokens[1].line == 2
        assert [d.code for d in result.diagnostics] == ["UNTERMINATED_STRING"]
        assert not result.success

    def test_unterminated_string_at_end_of_input(self) -> None:
        result = tokenize('Text("hi')
        assert result.tokens[2].type == TokenType.STRING
        assert result.tokens[2].value == "hi"
        assert result.diagnostics[0].code == "UNTERMINATED_STRING"
        assert result.diagnostics[0].column == 6


class TestNumbers:
    @pytest.mark.parametrize("source", ["42", "3.14", "1e3", "2.5E-2", "0xFF2196F3"])
    def test_number_forms(self, source: str) -> None:
        result = tokenize(source)
        assert result.tokens[0].type == TokenType.NUMBER
        assert result.tokens[0].raw == source
        assert result.diagnostics == []

    def test_method_call_on_integer(self) -> None:
        assert types("1.toString") == [
            TokenType.NUMBER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    @pytest.mark.parametrize("source", ["12px", "1e", "0x", "0xZZ", "3.5em", "1²", "1e²"])
    def test_malformed_number_is_one_error_token(self, source: str) -> None:
        result = tokenize(source)
        assert [t.type for t in result.tokens] == [TokenType.ERROR, TokenType.EOF]
        assert result.tokens[0].raw == source
        assert result.diagnostics[0].code == "MALFORMED_NUMBER"
        assert result.diagnostics[0].lexeme == source

    @pytest.mark.parametrize("source", ["²", "٣"])
    def test_non_ascii_digit_is_not_a_number(self, source: str) -> None:
        result = tokenize(source)
        assert [t.type for t in result.tokens] == [TokenType.ERROR, TokenType.EOF]
        assert result.diagnostics[0].code == "UNEXPECTED_CHARACTER"

    def test_decimal_part_needs_ascii_digits(self) -> None:
        assert types("1.٣") == [TokenType.NUMBER, TokenType.DOT, TokenType.ERROR, TokenType.EOF]


class TestErrorTokens:
    def test_unexpected_character_continues_scanning(self) -> None:
        result = tokenize("Text(`)")
        assert [t.type for t in result.tokens] == [
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.ERROR,
            TokenType.RPAREN,
            TokenType.EOF,
        ]
        diagnostic = result.diagnostics[0]
        assert diagnostic.code == "UNEXPECTED_CHARACTER"
        assert diagnostic.lexeme == "`"
        assert (diagnostic.line, diagnostic.column) == (1, 6)

    @pytest.mark.parametrize(
        "source",
        [
            "Container(child: Text('x'))",
            "\\\\`~'unterminated",
            "/* /* */",
            "0x 12px 'a\n\"b",
            "éè ☃ \t\r\n",
            "",
        ],
    )
    def test_token_stream_is_total(self, source: str) -> None:
        tokens = Lexer(source).tokenize().tokens
        assert tokens[-1].type == TokenType.EOF
        assert tokens[-1].start == len(source)
        offsets = [(t.start, t.end) for t in tokens]
        assert offsets == sorted(offsets)
        for (_, end), (start, _) in zip(offsets, offsets[1:]):
            assert end <= start
