"""
AST node types for the Dart widget expression subset.

The parser produces a closed set of immutable nodes:

- Program: ordered top-level expressions
- ConstructorCall: ``Name(args)``
- MethodCall: ``target.method(args)`` (also named constructors such as
  ``EdgeInsets.all(8)``)
- PropertyAccess: ``target.property``
- Identifier, Literal, ArrayLiteral
- ArgumentList of NamedArgument / PositionalArgument

Every node carries a ``SourceSpan``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Source positions
# ---------------------------------------------------------------------------


class SourceSpan(BaseModel):
    """
    Position range of a node in the source.

    Lines and columns are 1-indexed; ``start``/``end`` are 0-indexed offsets
    with ``end`` exclusive, so ``source[span.start:span.end]`` is the node's
    text.
    """

    line: int
    column: int
    end_line: int
    end_column: int
    start: int
    end: int

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_token(cls, token: Any) -> SourceSpan:
        return cls(
            line=token.line,
            column=token.column,
            end_line=token.end_line,
            end_column=token.end_column,
            start=token.start,
            end=token.end,
        )

    def to(self, other: SourceSpan) -> SourceSpan:
        """Span from the start of this span to the end of ``other``."""
        return SourceSpan(
            line=self.line,
            column=self.column,
            end_line=other.end_line,
            end_column=other.end_column,
            start=self.start,
            end=other.end,
        )

    def text(self, source: str) -> str:
        return source[self.start : self.end]

    def __str__(self) -> str:
        return f"{self.line}:{self.column}-{self.end_line}:{self.end_column}"


# ---------------------------------------------------------------------------
# Expression nodes
# ---------------------------------------------------------------------------


class Identifier(BaseModel):
    """A bare name: ``context``, ``Colors``, ``myPadding``."""

    name: str
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class Literal(BaseModel):
    """
    A literal value: string, number, boolean or null.

    ``raw`` keeps the source text (``0xFF2196F3``, ``'hi'``) so downstream
    consumers can tell hex colours from plain integers.
    """

    value: bool | int | float | str | None = Field(description="The literal value")
    raw: str = Field(description="Source text of the literal")
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class PropertyAccess(BaseModel):
    """
    ``target.property``.

    Examples:
        - Colors.blue
        - MainAxisAlignment.center
        - Theme.of(context).colorScheme.primary
    """

    target: Expr
    property: str
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class ArrayLiteral(BaseModel):
    """``[a, b, c]`` with elements in source order."""

    elements: list[Expr] = Field(default_factory=list)
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class NamedArgument(BaseModel):
    """``name: value``."""

    name: str
    value: Expr
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class PositionalArgument(BaseModel):
    value: Expr
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


Argument = NamedArgument | PositionalArgument


class ArgumentList(BaseModel):
    """
    Arguments of a call, in source order.

    Named and positional arguments interleave freely; the parser classifies
    them but never reorders or deduplicates.
    """

    arguments: list[Argument] = Field(default_factory=list)
    span: SourceSpan

    model_config = ConfigDict(frozen=True)

    @property
    def named(self) -> list[NamedArgument]:
        return [a for a in self.arguments if isinstance(a, NamedArgument)]

    @property
    def positional(self) -> list[PositionalArgument]:
        return [a for a in self.arguments if isinstance(a, PositionalArgument)]


class ConstructorCall(BaseModel):
    """``Name(args)``: a bare identifier immediately followed by ``(``."""

    name: str
    arguments: ArgumentList
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class MethodCall(BaseModel):
    """
    ``target.method(args)``.

    Named constructors (``Image.network(url)``, ``EdgeInsets.all(8)``) parse
    as method calls on an Identifier target; the extractor decides whether
    they build a widget.
    """

    target: Expr
    method: str
    arguments: ArgumentList
    span: SourceSpan

    model_config = ConfigDict(frozen=True)

    @property
    def qualified_name(self) -> str | None:
        """``Type.method`` when the target is a bare identifier."""
        if isinstance(self.target, Identifier):
            return f"{self.target.name}.{self.method}"
        return None


class Program(BaseModel):
    """Root node: top-level expressions in source order."""

    body: list[Expr] = Field(default_factory=list)
    span: SourceSpan

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.body


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = ConstructorCall | MethodCall | PropertyAccess | ArrayLiteral | Identifier | Literal

Node = Program | Expr | ArgumentList | NamedArgument | PositionalArgument

# Rebuild models for recursive forward references
PropertyAccess.model_rebuild()
ArrayLiteral.model_rebuild()
NamedArgument.model_rebuild()
PositionalArgument.model_rebuild()
ArgumentList.model_rebuild()
ConstructorCall.model_rebuild()
MethodCall.model_rebuild()
Program.model_rebuild()


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def child_nodes(node: Node) -> list[Node]:
    """Direct children of a node, in source order."""
    if isinstance(node, Program):
        return list(node.body)
    if isinstance(node, ConstructorCall):
        return [node.arguments]
    if isinstance(node, MethodCall):
        return [node.target, node.arguments]
    if isinstance(node, PropertyAccess):
        return [node.target]
    if isinstance(node, ArrayLiteral):
        return list(node.elements)
    if isinstance(node, ArgumentList):
        return list(node.arguments)
    if isinstance(node, (NamedArgument, PositionalArgument)):
        return [node.value]
    return []


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all its descendants in pre-order (iterative)."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(child_nodes(current)))


def iter_constructor_calls(node: Node) -> Iterator[ConstructorCall]:
    """All ConstructorCall nodes reachable from ``node``, in source order."""
    for current in walk(node):
        if isinstance(current, ConstructorCall):
            yield current


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def quote_string(value: str) -> str:
    """Render a string as a double-quoted Dart literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def unparse(node: Node) -> str:
    """
    Render a node back to Dart source.

    The output re-parses to an equivalent tree (same callees, same argument
    counts), but comments, ``const`` modifiers and layout are not preserved.
    """
    if isinstance(node, Program):
        return ";\n".join(unparse(expr) for expr in node.body)
    if isinstance(node, Literal):
        if isinstance(node.value, str):
            return quote_string(node.value)
        if node.value is None:
            return "null"
        if isinstance(node.value, bool):
            return "true" if node.value else "false"
        return node.raw
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, PropertyAccess):
        return f"{unparse(node.target)}.{node.property}"
    if isinstance(node, ArrayLiteral):
        return "[" + ", ".join(unparse(e) for e in node.elements) + "]"
    if isinstance(node, NamedArgument):
        return f"{node.name}: {unparse(node.value)}"
    if isinstance(node, PositionalArgument):
        return unparse(node.value)
    if isinstance(node, ArgumentList):
        return "(" + ", ".join(unparse(a) for a in node.arguments) + ")"
    if isinstance(node, ConstructorCall):
        return node.name + unparse(node.arguments)
    if isinstance(node, MethodCall):
        return f"{unparse(node.target)}.{node.method}{unparse(node.arguments)}"
    raise TypeError(f"Not an AST node: {type(node).__name__}")


def node_to_dict(node: Node) -> dict[str, Any]:
    """
    JSON-ready dict for a node, tagged with its node type.

    Spans are flattened to ``line``/``column`` to keep dumps readable.
    """
    data: dict[str, Any] = {
        "type": type(node).__name__,
        "line": node.span.line,
        "column": node.span.column,
    }
    if isinstance(node, Program):
        data["body"] = [node_to_dict(e) for e in node.body]
    elif isinstance(node, Literal):
        data["value"] = node.value
        data["raw"] = node.raw
    elif isinstance(node, Identifier):
        data["name"] = node.name
    elif isinstance(node, PropertyAccess):
        data["target"] = node_to_dict(node.target)
        data["property"] = node.property
    elif isinstance(node, ArrayLiteral):
        data["elements"] = [node_to_dict(e) for e in node.elements]
    elif isinstance(node, NamedArgument):
        data["name"] = node.name
        data["value"] = node_to_dict(node.value)
    elif isinstance(node, PositionalArgument):
        data["value"] = node_to_dict(node.value)
    elif isinstance(node, ArgumentList):
        data["arguments"] = [node_to_dict(a) for a in node.arguments]
    elif isinstance(node, ConstructorCall):
        data["name"] = node.name
        data["arguments"] = [node_to_dict(a) for a in node.arguments.arguments]
    elif isinstance(node, MethodCall):
        data["target"] = node_to_dict(node.target)
        data["method"] = node.method
        data["arguments"] = [node_to_dict(a) for a in node.arguments.arguments]
    return data
