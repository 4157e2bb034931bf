"""
Recursive descent parser for Dart widget expressions.

Grammar (highest binding first):
    program     → (expr (";" | ",")*)* EOF
    expr        → ("const" | "new" | "return")* postfix
    postfix     → primary ("." IDENT | "(" arguments ")")*
    primary     → IDENT | literal | "-" NUMBER | list | "(" expr ")"
    literal     → STRING+ | NUMBER | BOOLEAN | "null"
    list        → "[" (expr ("," expr)* ","?)? "]"
    arguments   → (argument ("," argument)* ","?)?
    argument    → IDENT ":" expr | expr

A ``(`` after a bare identifier makes a ConstructorCall; after a property
access it makes a MethodCall on the access target.

The parser never raises for bad input. Problems become diagnostics and the
parser resynchronizes at the next comma or closing delimiter, so one bad
argument costs only that argument. The only unrecoverable case is reaching
end of input with delimiters still open, which yields an empty Program.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_MAX_DEPTH
from .diagnostics import DiagnosticsMixin
from .errors import Diagnostic, ErrorCategory, make_diagnostic
from .ir.ast import (
    ArgumentList,
    ArrayLiteral,
    ConstructorCall,
    Expr,
    Identifier,
    Literal,
    MethodCall,
    NamedArgument,
    PositionalArgument,
    Program,
    PropertyAccess,
    SourceSpan,
)
from .lexer import LexResult, Token, TokenType, tokenize

logger = logging.getLogger(__name__)

OPENERS = {TokenType.LPAREN: TokenType.RPAREN, TokenType.LBRACKET: TokenType.RBRACKET}
CLOSERS = {TokenType.RPAREN, TokenType.RBRACKET}

# Modifiers accepted in front of an expression and dropped
DROPPED_KEYWORDS = {"const", "new", "return"}


class _SyntaxBreak(Exception):
    """Unwinds to the nearest recovery point. The diagnostic is already recorded."""


class _StructuralBreak(Exception):
    """End of input with delimiters still open. Unwinds to the program level."""


@dataclass
class ParseResult(DiagnosticsMixin):
    """
    Program plus diagnostics.

    When the input came from ``tokenize``, lexer diagnostics come first.
    """

    program: Program
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _span(start: Token | SourceSpan, end: Token | SourceSpan) -> SourceSpan:
    first = start if isinstance(start, SourceSpan) else SourceSpan.from_token(start)
    last = end if isinstance(end, SourceSpan) else SourceSpan.from_token(end)
    return first.to(last)


def _number_value(raw: str) -> int | float:
    if raw[:2] in ("0x", "0X"):
        return int(raw, 16)
    if any(ch in raw for ch in ".eE"):
        return float(raw)
    try:
        return int(raw)
    except ValueError:
        # Past the interpreter's int string-conversion digit limit
        return float(raw)


class Parser:
    """Recursive descent parser with delimiter-aware error recovery."""

    def __init__(self, tokens: list[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        # ERROR tokens already carry a lexer diagnostic
        self.tokens = [t for t in tokens if t.type != TokenType.ERROR]
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(
                Token(
                    type=TokenType.EOF,
                    value="",
                    raw="",
                    line=last.end_line if last else 1,
                    column=last.end_column if last else 1,
                    end_line=last.end_line if last else 1,
                    end_column=last.end_column if last else 1,
                    start=last.end if last else 0,
                    end=last.end if last else 0,
                )
            )
        self.pos = 0
        self.max_depth = max_depth
        self.depth = 0
        self.open_stack: list[Token] = []
        self.diagnostics: list[Diagnostic] = []

    # -- Token access --

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    @property
    def previous(self) -> Token:
        return self.tokens[max(self.pos - 1, 0)]

    def peek(self, offset: int = 1) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def check(self, *types: TokenType) -> bool:
        return self.current.type in types

    def match(self, *types: TokenType) -> Token | None:
        if self.current.type in types:
            return self.advance()
        return None

    # -- Diagnostics --

    def report(
        self,
        code: str,
        token: Token,
        category: ErrorCategory = ErrorCategory.SYNTAX,
        **context: Any,
    ) -> None:
        self.diagnostics.append(
            make_diagnostic(
                category,
                code,
                line=token.line,
                column=token.column,
                lexeme=token.raw or "end of input",
                **context,
            )
        )

    def error(self, code: str, token: Token, **context: Any) -> _SyntaxBreak:
        """Record a SYNTAX diagnostic and return the exception to raise."""
        self.report(code, token, **context)
        return _SyntaxBreak()

    # -- Delimiters --

    def matches_open(self, token: Token) -> bool:
        """True if ``token`` closes any currently open delimiter."""
        return any(OPENERS[opener.type] == token.type for opener in self.open_stack)

    def at_list_end(self, close_type: TokenType) -> bool:
        tok = self.current
        if tok.type in (TokenType.EOF, close_type):
            return True
        return tok.type in CLOSERS and self.matches_open(tok)

    def unclosed(self, opener: Token) -> _StructuralBreak:
        self.report(
            "UNCLOSED_DELIMITER",
            self.current,
            opener=opener.raw,
            opened_line=opener.line,
            opened_column=opener.column,
        )
        return _StructuralBreak()

    def close(self, opener: Token, close_type: TokenType) -> Token | None:
        """
        Consume the closer for ``opener``.

        Returns None when a closer belonging to an enclosing delimiter shows
        up first; the construct is then closed implicitly and that closer is
        left for its owner.
        """
        tok = self.current
        if tok.type == close_type:
            return self.advance()
        if tok.type == TokenType.EOF:
            raise self.unclosed(opener)
        self.report(
            "MISMATCHED_DELIMITER",
            tok,
            expected=close_type.value,
            opener=opener.raw,
            opened_line=opener.line,
        )
        return None

    def synchronize(self) -> None:
        """
        Skip tokens until a recovery point.

        Stops at a comma at the current nesting level, at a closer that
        matches an open delimiter, at ``;`` when nothing is open, or at end
        of input. Bracketed groups met on the way are skipped whole; closers
        that match nothing are dropped.
        """
        local: list[Token] = []
        while True:
            tok = self.current
            if tok.type == TokenType.EOF:
                if local:
                    raise self.unclosed(local[-1])
                return
            if tok.type in OPENERS:
                local.append(tok)
            elif tok.type in CLOSERS:
                if any(OPENERS[o.type] == tok.type for o in local):
                    while OPENERS[local[-1].type] != tok.type:
                        local.pop()
                    local.pop()
                elif self.matches_open(tok):
                    return
            elif not local:
                if tok.type == TokenType.COMMA:
                    return
                if tok.type == TokenType.SEMICOLON and not self.open_stack:
                    return
            self.advance()

    def parse_delimited(
        self, close_type: TokenType, parse_item: Callable[[], Any]
    ) -> tuple[list[Any], Token, Token | None]:
        """
        Parse ``opener item ("," item)* ","? closer``.

        Items that fail are dropped after resynchronizing; the rest are kept
        in source order.
        """
        opener = self.advance()
        self.open_stack.append(opener)
        mark = len(self.open_stack) - 1
        items: list[Any] = []
        try:
            while not self.at_list_end(close_type):
                try:
                    items.append(parse_item())
                except _SyntaxBreak:
                    self.synchronize()
                if self.match(TokenType.COMMA):
                    continue
                if self.at_list_end(close_type):
                    break
                # Missing comma between items
                self.report("UNEXPECTED_TOKEN", self.current)
                self.synchronize()
                self.match(TokenType.COMMA)
            closer = self.close(opener, close_type)
        finally:
            del self.open_stack[mark:]
        return items, opener, closer

    # -- Grammar rules --

    def parse_program(self) -> Program:
        body: list[Expr] = []
        try:
            while not self.check(TokenType.EOF):
                if self.match(TokenType.SEMICOLON, TokenType.COMMA):
                    continue
                if self.check(*CLOSERS):
                    # Nothing is open at the top level
                    self.report("UNEXPECTED_TOKEN", self.advance())
                    continue
                start = self.pos
                try:
                    body.append(self.parse_expression())
                except _SyntaxBreak:
                    if self.pos == start:
                        self.advance()
                    else:
                        self.synchronize()
        except _StructuralBreak:
            logger.debug("Unclosed delimiter at end of input; returning empty program")
            body = []

        return Program(body=body, span=_span(self.tokens[0], self.tokens[-1]))

    def deepen(self) -> None:
        """Enter one nesting level; past ``max_depth`` the expression is cut."""
        self.depth += 1
        if self.depth > self.max_depth:
            self.report(
                "NESTING_TOO_DEEP",
                self.current,
                category=ErrorCategory.VALIDATION,
                max_depth=self.max_depth,
            )
            raise _SyntaxBreak()

    def parse_expression(self) -> Expr:
        depth = self.depth
        try:
            self.deepen()
            while self.check(TokenType.KEYWORD) and self.current.value in DROPPED_KEYWORDS:
                self.advance()
            return self.parse_postfix()
        finally:
            self.depth = depth

    def parse_postfix(self) -> Expr:
        expr = self.parse_primary()

        while True:
            if self.check(TokenType.LPAREN):
                if isinstance(expr, Identifier):
                    arguments = self.parse_arguments()
                    expr = ConstructorCall(
                        name=expr.name,
                        arguments=arguments,
                        span=expr.span.to(arguments.span),
                    )
                elif isinstance(expr, PropertyAccess):
                    arguments = self.parse_arguments()
                    expr = MethodCall(
                        target=expr.target,
                        method=expr.property,
                        arguments=arguments,
                        span=expr.span.to(arguments.span),
                    )
                else:
                    break
            elif self.check(TokenType.DOT):
                # Each member link nests the chain one level deeper
                self.deepen()
                self.advance()
                if not self.check(TokenType.IDENTIFIER):
                    raise self.error("EXPECTED_PROPERTY_NAME", self.current)
                name = self.advance()
                expr = PropertyAccess(target=expr, property=name.value, span=_span(expr.span, name))
            else:
                break

        return expr

    def parse_primary(self) -> Expr:
        tok = self.current

        if tok.type == TokenType.IDENTIFIER:
            self.advance()
            return Identifier(name=tok.value, span=SourceSpan.from_token(tok))

        if tok.type == TokenType.STRING:
            parts = [self.advance()]
            # Adjacent string literals concatenate
            while self.check(TokenType.STRING):
                parts.append(self.advance())
            return Literal(
                value="".join(p.value for p in parts),
                raw=" ".join(p.raw for p in parts),
                span=_span(parts[0], parts[-1]),
            )

        if tok.type == TokenType.NUMBER:
            self.advance()
            return Literal(value=_number_value(tok.raw), raw=tok.raw, span=SourceSpan.from_token(tok))

        if tok.type == TokenType.OPERATOR and tok.value == "-" and self.peek().type == TokenType.NUMBER:
            self.advance()
            num = self.advance()
            return Literal(value=-_number_value(num.raw), raw="-" + num.raw, span=_span(tok, num))

        if tok.type == TokenType.BOOLEAN:
            self.advance()
            return Literal(value=tok.value == "true", raw=tok.raw, span=SourceSpan.from_token(tok))

        if tok.type == TokenType.KEYWORD:
            if tok.value == "null":
                self.advance()
                return Literal(value=None, raw=tok.raw, span=SourceSpan.from_token(tok))
            if tok.value in ("this", "super"):
                self.advance()
                return Identifier(name=tok.value, span=SourceSpan.from_token(tok))

        if tok.type == TokenType.LBRACKET:
            return self.parse_list()

        if tok.type == TokenType.LPAREN:
            return self.parse_group()

        raise self.error("EXPECTED_EXPRESSION", tok)

    def parse_list(self) -> ArrayLiteral:
        elements, opener, closer = self.parse_delimited(TokenType.RBRACKET, self.parse_expression)
        return ArrayLiteral(elements=elements, span=_span(opener, closer or self.previous))

    def parse_group(self) -> Expr:
        """``( expr )``: yields the inner expression itself."""
        items, opener, _ = self.parse_delimited(TokenType.RPAREN, self.parse_expression)
        if not items:
            raise self.error("EXPECTED_EXPRESSION", self.previous)
        if len(items) > 1:
            raise self.error("UNEXPECTED_TOKEN", opener)
        return items[0]

    def parse_arguments(self) -> ArgumentList:
        arguments, opener, closer = self.parse_delimited(TokenType.RPAREN, self.parse_argument)
        return ArgumentList(arguments=arguments, span=_span(opener, closer or self.previous))

    def parse_argument(self) -> NamedArgument | PositionalArgument:
        if self.check(TokenType.IDENTIFIER) and self.peek().type == TokenType.COLON:
            name = self.advance()
            self.advance()  # :
            value = self.parse_expression()
            return NamedArgument(name=name.value, value=value, span=_span(name, value.span))

        value = self.parse_expression()
        return PositionalArgument(value=value, span=value.span)


def parse(tokens: LexResult | list[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> ParseResult:
    """
    Parse tokens into a Program.

    Args:
        tokens: A LexResult (its diagnostics are carried forward) or a plain
            token list
        max_depth: Maximum expression nesting before the inner expression is
            skipped with a VALIDATION diagnostic

    Returns:
        ParseResult with the (possibly partial or empty) program
    """
    diagnostics: list[Diagnostic] = []
    if isinstance(tokens, LexResult):
        diagnostics.extend(tokens.diagnostics)
        token_list = tokens.tokens
    else:
        token_list = list(tokens)

    parser = Parser(token_list, max_depth=max_depth)
    program = parser.parse_program()
    diagnostics.extend(parser.diagnostics)

    logger.debug(
        "Parsed %d tokens into %d top-level expressions (%d diagnostics)",
        len(token_list),
        len(program.body),
        len(parser.diagnostics),
    )
    return ParseResult(program=program, diagnostics=diagnostics)


def parse_source(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> ParseResult:
    """Tokenize and parse source text in one step."""
    return parse(tokenize(source), max_depth=max_depth)
