"""
Lexer for Dart widget source.

Converts raw source text into a stream of tokens with source location
tracking. Scanning never stops early: characters that cannot start a token
become ERROR tokens with a diagnostic, and scanning resumes at the next
character.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .diagnostics import DiagnosticsMixin
from .errors import Diagnostic, ErrorCategory, make_diagnostic

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types for Dart widget source."""

    # Literals
    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    COLON = ":"
    DOT = "."

    # Statement-level punctuation outside the expression subset
    SEMICOLON = ";"
    LBRACE = "{"
    RBRACE = "}"
    OPERATOR = "OPERATOR"

    # Special
    ERROR = "ERROR"
    EOF = "EOF"


# Dart reserved words the lexer recognizes. true/false lex as BOOLEAN.
KEYWORDS = {
    "class",
    "const",
    "final",
    "var",
    "new",
    "this",
    "super",
    "null",
    "if",
    "else",
    "for",
    "while",
    "do",
    "switch",
    "case",
    "default",
    "break",
    "continue",
    "return",
    "void",
    "dynamic",
}

PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ".": TokenType.DOT,
    ";": TokenType.SEMICOLON,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}

OPERATOR_CHARS = set("=+-*/?!<>&|%~^@#")

SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

DIGITS = set("0123456789")
HEX_DIGITS = DIGITS | set("abcdefABCDEF")


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in ("_", "$")


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch in ("_", "$")


@dataclass
class Token:
    """
    A single token.

    Attributes:
        type: Type of token
        value: Decoded value (string contents for STRING, source text otherwise)
        raw: Exact source slice the token covers
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        end_line: Line of the last character
        end_column: Column just past the last character
        start: Offset of the first character
        end: Offset just past the last character
    """

    type: TokenType
    value: str
    raw: str
    line: int
    column: int
    end_line: int
    end_column: int
    start: int
    end: int

    def is_type(self, *types: TokenType) -> bool:
        return self.type in types

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


@dataclass
class LexResult(DiagnosticsMixin):
    """Tokens (always ending in EOF) and the diagnostics found while scanning."""

    tokens: list[Token]
    diagnostics: list[Diagnostic] = field(default_factory=list)


class Lexer:
    """
    Lexer for Dart widget source.

    Whitespace and comments are discarded, but line and column tracking
    advances across them, including multi-line comments and strings.
    """

    def __init__(self, text: str):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
        """
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []
        # Start of the token being scanned
        self._start = 0
        self._start_line = 1
        self._start_column = 1

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < len(self.text):
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def mark(self) -> None:
        """Remember the current position as the start of a token."""
        self._start = self.pos
        self._start_line = self.line
        self._start_column = self.column

    def emit(self, token_type: TokenType, value: str | None = None) -> Token:
        """Append a token spanning from the last mark to the current position."""
        raw = self.text[self._start : self.pos]
        token = Token(
            type=token_type,
            value=raw if value is None else value,
            raw=raw,
            line=self._start_line,
            column=self._start_column,
            end_line=self.line,
            end_column=self.column,
            start=self._start,
            end=self.pos,
        )
        self.tokens.append(token)
        return token

    def error(self, code: str, lexeme: str | None = None) -> None:
        """Record a lexer diagnostic at the last mark."""
        self.diagnostics.append(
            make_diagnostic(
                ErrorCategory.SYNTAX,
                code,
                line=self._start_line,
                column=self._start_column,
                lexeme=lexeme,
                offset=self._start,
            )
        )

    # -- Skipping --

    def skip_line_comment(self) -> None:
        """Skip a // comment up to (not including) the newline."""
        while self.current_char() is not None and self.current_char() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        """Skip a /* */ comment. Dart block comments nest."""
        self.advance()  # /
        self.advance()  # *
        depth = 1
        while depth > 0:
            ch = self.current_char()
            if ch is None:
                self.error("UNTERMINATED_COMMENT", self.text[self._start : self._start + 2])
                return
            if ch == "/" and self.peek_char() == "*":
                self.advance()
                self.advance()
                depth += 1
            elif ch == "*" and self.peek_char() == "/":
                self.advance()
                self.advance()
                depth -= 1
            else:
                self.advance()

    # -- Scanners --

    def read_string(self, raw_string: bool = False) -> None:
        """Read a quoted string literal, decoding escapes unless raw."""
        if raw_string:
            self.advance()  # r prefix
        quote = self.current_char()
        self.advance()  # opening quote

        chars: list[str] = []
        while True:
            ch = self.current_char()
            if ch is None or ch == "\n":
                # Recover with what was read up to end of line / input
                self.error("UNTERMINATED_STRING", self.text[self._start : self.pos])
                self.emit(TokenType.STRING, "".join(chars))
                return
            if ch == quote:
                self.advance()
                self.emit(TokenType.STRING, "".join(chars))
                return
            if ch == "\\" and not raw_string:
                self.advance()
                chars.append(self.read_escape())
                continue
            chars.append(ch)
            self.advance()

    def read_escape(self) -> str:
        """Decode the escape sequence after a backslash."""
        ch = self.current_char()
        if ch is None or ch == "\n":
            # Leave the newline for read_string to report
            return ""
        self.advance()
        if ch in SIMPLE_ESCAPES:
            return SIMPLE_ESCAPES[ch]
        if ch == "x":
            return self._read_hex_escape(2) or "x"
        if ch == "u":
            if self.current_char() == "{":
                self.advance()
                digits = []
                while self.current_char() in HEX_DIGITS:
                    digits.append(self.current_char())
                    self.advance()
                if self.current_char() == "}":
                    self.advance()
                if digits:
                    return _code_point("".join(digits))
                return "u"
            return self._read_hex_escape(4) or "u"
        # \\, \', \", \$ and any unknown escape yield the character itself
        return ch

    def _read_hex_escape(self, count: int) -> str:
        digits = []
        for _ in range(count):
            ch = self.current_char()
            if ch is None or ch not in HEX_DIGITS:
                break
            digits.append(ch)
            self.advance()
        if len(digits) != count:
            return "".join(digits)
        return _code_point("".join(digits))

    def read_number(self) -> None:
        """
        Read an integer, decimal, exponent or hex literal.

        Anything glued to the end of the number (``12px``, ``1e``, ``0x``)
        turns the whole run into a single ERROR token.
        """
        malformed = False

        if self.current_char() == "0" and self.peek_char() in ("x", "X"):
            self.advance()
            self.advance()
            if self.current_char() not in HEX_DIGITS:
                malformed = True
            while self.current_char() is not None and self.current_char() in HEX_DIGITS:
                self.advance()
        else:
            while self.current_char() in DIGITS:
                self.advance()
            # Decimal part only when a digit follows the dot (1.toString() is a call)
            if self.current_char() == "." and self.peek_char() in DIGITS:
                self.advance()
                while self.current_char() in DIGITS:
                    self.advance()
            if self.current_char() in ("e", "E"):
                offset = 2 if self.peek_char() in ("+", "-") else 1
                if self.peek_char(offset) in DIGITS:
                    for _ in range(offset):
                        self.advance()
                    while self.current_char() in DIGITS:
                        self.advance()
                else:
                    malformed = True

        ch = self.current_char()
        if malformed or (ch is not None and _is_ident_char(ch)):
            while self.current_char() is not None and _is_ident_char(self.current_char() or ""):
                self.advance()
            lexeme = self.text[self._start : self.pos]
            self.error("MALFORMED_NUMBER", lexeme)
            self.emit(TokenType.ERROR)
            return

        self.emit(TokenType.NUMBER)

    def read_identifier(self) -> None:
        """Read an identifier, keyword or boolean."""
        while self.current_char() is not None and _is_ident_char(self.current_char() or ""):
            self.advance()
        word = self.text[self._start : self.pos]
        if word in ("true", "false"):
            self.emit(TokenType.BOOLEAN)
        elif word in KEYWORDS:
            self.emit(TokenType.KEYWORD)
        else:
            self.emit(TokenType.IDENTIFIER)

    def tokenize(self) -> LexResult:
        """
        Tokenize the entire source text.

        Returns:
            LexResult with tokens ending in EOF, plus lexer diagnostics
        """
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            self.mark()

            if ch in (" ", "\t", "\r", "\n", "\f", "\v", "﻿"):
                self.advance()
            elif ch == "/" and self.peek_char() == "/":
                self.skip_line_comment()
            elif ch == "/" and self.peek_char() == "*":
                self.skip_block_comment()
            elif ch in ('"', "'"):
                self.read_string()
            elif ch == "r" and self.peek_char() in ('"', "'"):
                self.read_string(raw_string=True)
            elif ch in DIGITS:
                self.read_number()
            elif _is_ident_start(ch):
                self.read_identifier()
            elif ch in PUNCTUATION:
                self.advance()
                self.emit(PUNCTUATION[ch])
            elif ch in OPERATOR_CHARS:
                self.advance()
                self.emit(TokenType.OPERATOR)
            else:
                self.advance()
                self.error("UNEXPECTED_CHARACTER", ch)
                self.emit(TokenType.ERROR)

        self.mark()
        self.emit(TokenType.EOF, "")

        logger.debug(
            "Tokenized %d characters into %d tokens (%d diagnostics)",
            len(self.text),
            len(self.tokens),
            len(self.diagnostics),
        )
        return LexResult(tokens=self.tokens, diagnostics=self.diagnostics)


def _code_point(digits: str) -> str:
    value = int(digits, 16)
    if value > 0x10FFFF:
        return "�"
    return chr(value)


def tokenize(source: str) -> LexResult:
    """
    Convenience function to tokenize source text.

    Args:
        source: Source text

    Returns:
        LexResult with tokens and diagnostics
    """
    return Lexer(source).tokenize()
