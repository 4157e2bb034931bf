"""
dartwidgets intermediate representation.

``ast`` holds the parser's node types, ``widgets`` the extracted widget tree
and ``theme`` the ThemeData models.
"""

from .ast import (
    Argument,
    ArgumentList,
    ArrayLiteral,
    ConstructorCall,
    Expr,
    Identifier,
    Literal,
    MethodCall,
    NamedArgument,
    Node,
    PositionalArgument,
    Program,
    PropertyAccess,
    SourceSpan,
    iter_constructor_calls,
    node_to_dict,
    unparse,
    walk,
)
from .theme import (
    Brightness,
    ColorSchemeSpec,
    TextStyleSpec,
    ThemeModeKind,
    ThemeModeSpec,
    ThemeReference,
    ThemeResolution,
    ThemeSpec,
)
from .widgets import (
    UNKNOWN_TYPE,
    ExpressionRef,
    LayoutInfo,
    RefKind,
    ValueObject,
    Widget,
    WidgetKind,
)

__all__ = [
    "Argument",
    "ArgumentList",
    "ArrayLiteral",
    "Brightness",
    "ColorSchemeSpec",
    "ConstructorCall",
    "Expr",
    "ExpressionRef",
    "Identifier",
    "LayoutInfo",
    "Literal",
    "MethodCall",
    "NamedArgument",
    "Node",
    "PositionalArgument",
    "Program",
    "PropertyAccess",
    "RefKind",
    "SourceSpan",
    "TextStyleSpec",
    "ThemeModeKind",
    "ThemeModeSpec",
    "ThemeReference",
    "ThemeResolution",
    "ThemeSpec",
    "UNKNOWN_TYPE",
    "ValueObject",
    "Widget",
    "WidgetKind",
    "iter_constructor_calls",
    "node_to_dict",
    "unparse",
    "walk",
]
