"""
Widget extraction.

Walks a Program (or a single call) and turns widget constructor calls into
``Widget`` trees:

- Calls to known widget types become widgets of that type. Any other
  constructor call that is not a value type becomes an "Unknown" widget with
  a WIDGET diagnostic; its arguments are still walked.
- Named arguments become properties. Positional arguments fill the slots
  listed for the widget in the catalog; extra ones are kept under
  ``positional<N>`` with a VALIDATION diagnostic.
- Widget-valued arguments (directly, or as elements of a list) are moved
  from ``properties`` into ``children``, remembering the property as the
  child's ``slot``. Widgets buried in other values are still extracted as
  children and referenced from the value by id.
- Value-type constructors resolve to ``ValueObject``; enums, colours, theme
  lookups and other opaque expressions resolve to ``ExpressionRef``.

The walk over widgets uses an explicit stack, so widget nesting depth does
not consume Python frames. Widgets are assembled bottom-up once every frame
has been filled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .catalog import CROSS_AXIS_VALUES, LAYOUT_DIRECTIONS, MAIN_AXIS_VALUES, WidgetCatalog, WidgetSpec
from .config import DartWidgetsConfig
from .diagnostics import DiagnosticsMixin
from .errors import Diagnostic, ErrorCategory, make_diagnostic
from .ir.ast import (
    ArrayLiteral,
    ConstructorCall,
    Expr,
    Identifier,
    Literal,
    MethodCall,
    NamedArgument,
    Node,
    Program,
    PropertyAccess,
    SourceSpan,
    child_nodes,
    unparse,
    walk,
)
from .ir.widgets import UNKNOWN_TYPE, ExpressionRef, LayoutInfo, RefKind, ValueObject, Widget, WidgetKind
from .widget_tree import iter_widgets

logger = logging.getLogger(__name__)

WidgetCall = ConstructorCall | MethodCall


@dataclass
class ExtractionResult(DiagnosticsMixin):
    """Root widgets in source order, plus extraction diagnostics."""

    widgets: list[Widget]
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def tree(self) -> Widget | None:
        """The first root widget, if any."""
        return self.widgets[0] if self.widgets else None

    @property
    def widget_count(self) -> int:
        return sum(1 for _ in iter_widgets(self.widgets))


@dataclass
class _Frame:
    """A widget under construction."""

    node: WidgetCall
    widget_id: str
    name: str
    constructor: str | None
    spec: WidgetSpec | None
    slot: str | None
    properties: dict[str, Any] = field(default_factory=dict)
    children: list[_Frame] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        if self.constructor:
            return f"{self.name}.{self.constructor}"
        return self.name


class WidgetExtractor:
    """Extracts widget trees from AST nodes."""

    def __init__(self, catalog: WidgetCatalog | None = None, config: DartWidgetsConfig | None = None):
        self.catalog = catalog or WidgetCatalog.from_config(config)
        self.diagnostics: list[Diagnostic] = []
        self._ids: dict[int, str] = {}

    # -- Classification --

    def is_widget_call(self, node: Node) -> bool:
        """
        True for calls that build a widget.

        ``Name(...)`` builds a widget unless ``Name`` is a value type;
        ``Name.ctor(...)`` builds one only when ``Name`` is a known widget.
        """
        if isinstance(node, ConstructorCall):
            return not self.catalog.is_value_type(node.name)
        if isinstance(node, MethodCall) and isinstance(node.target, Identifier):
            return self.catalog.is_widget(node.target.name)
        return False

    def value_type(self, node: Node) -> tuple[str, str | None] | None:
        """``(type, constructor)`` for value-type constructor calls."""
        if isinstance(node, ConstructorCall) and self.catalog.is_value_type(node.name):
            return node.name, None
        if (
            isinstance(node, MethodCall)
            and isinstance(node.target, Identifier)
            and self.catalog.is_value_type(node.target.name)
        ):
            return node.target.name, node.method
        return None

    def reference(self, expr: Expr) -> ExpressionRef:
        """Classify an expression that does not reduce to a literal."""
        text = unparse(expr)
        if isinstance(expr, Identifier):
            return ExpressionRef(kind=RefKind.CONSTANT, expression=text)

        root: Node = expr
        has_call = False
        is_theme = False
        while isinstance(root, (PropertyAccess, MethodCall)):
            if isinstance(root, MethodCall):
                has_call = True
                if isinstance(root.target, Identifier) and root.target.name == "Theme" and root.method == "of":
                    is_theme = True
            root = root.target

        if is_theme:
            return ExpressionRef(kind=RefKind.THEME, expression=text, theme_path=text)
        if isinstance(root, Identifier):
            if self.catalog.is_color_namespace(root.name):
                return ExpressionRef(kind=RefKind.COLOR, expression=text)
            if (
                isinstance(expr, PropertyAccess)
                and isinstance(expr.target, Identifier)
                and self.catalog.is_enum_type(expr.target.name)
            ):
                return ExpressionRef(kind=RefKind.ENUM, expression=text)
            if not has_call:
                return ExpressionRef(kind=RefKind.CONSTANT, expression=text)
        return ExpressionRef(kind=RefKind.EXPRESSION, expression=text)

    # -- Diagnostics --

    def report(self, category: ErrorCategory, code: str, span: SourceSpan, lexeme: str, **context: Any) -> None:
        self.diagnostics.append(
            make_diagnostic(category, code, line=span.line, column=span.column, lexeme=lexeme, **context)
        )

    # -- Frames --

    def _number_widgets(self, node: Node) -> None:
        """Assign ``widget_N`` ids in pre-order (AST pre-order is source order)."""
        self._ids = {}
        for current in walk(node):
            if self.is_widget_call(current):
                self._ids[id(current)] = f"widget_{len(self._ids) + 1}"

    def _new_frame(self, node: WidgetCall, slot: str | None) -> _Frame:
        if isinstance(node, ConstructorCall):
            name, constructor = node.name, None
        else:
            assert isinstance(node.target, Identifier)
            name, constructor = node.target.name, node.method
        return _Frame(
            node=node,
            widget_id=self._ids[id(node)],
            name=name,
            constructor=constructor,
            spec=self.catalog.lookup(name),
            slot=slot,
        )

    def _find_widgets(self, expr: Node, slot: str | None) -> list[_Frame]:
        """Frames for the outermost widget calls inside ``expr``, in source order."""
        found: list[_Frame] = []
        stack: list[Node] = [expr]
        while stack:
            current = stack.pop()
            if self.is_widget_call(current):
                assert isinstance(current, (ConstructorCall, MethodCall))
                found.append(self._new_frame(current, slot))
                continue
            stack.extend(reversed(child_nodes(current)))
        return found

    def _fill(self, frame: _Frame) -> None:
        """Resolve a frame's arguments into properties and child frames."""
        if frame.spec is None:
            self.report(
                ErrorCategory.WIDGET,
                "UNKNOWN_WIDGET",
                frame.node.span,
                frame.name,
                widget_type=frame.name,
            )

        slots = frame.spec.positional_for(frame.constructor) if frame.spec else ()
        seen: set[str] = set()
        index = 0
        for arg in frame.node.arguments.arguments:
            if isinstance(arg, NamedArgument):
                key = arg.name
            elif index < len(slots):
                key = slots[index]
                index += 1
            else:
                key = f"positional{index}"
                self.report(
                    ErrorCategory.VALIDATION,
                    "UNMAPPED_POSITIONAL",
                    arg.span,
                    unparse(arg.value),
                    widget_type=frame.qualified_name,
                    index=index,
                    field=key,
                )
                index += 1

            if key in seen:
                self.report(
                    ErrorCategory.VALIDATION,
                    "DUPLICATE_PROPERTY",
                    arg.span,
                    key,
                    widget_type=frame.qualified_name,
                    field=key,
                )
                # Last value wins, including widgets bound to the slot
                frame.properties.pop(key, None)
                frame.children = [child for child in frame.children if child.slot != key]
            seen.add(key)
            self._bind(frame, key, arg.value)

    def _bind(self, frame: _Frame, key: str, value: Expr) -> None:
        if self.is_widget_call(value):
            assert isinstance(value, (ConstructorCall, MethodCall))
            frame.properties.pop(key, None)
            frame.children.append(self._new_frame(value, key))
            return

        if isinstance(value, ArrayLiteral):
            kept = []
            has_widgets = False
            for element in value.elements:
                if self.is_widget_call(element):
                    assert isinstance(element, (ConstructorCall, MethodCall))
                    frame.children.append(self._new_frame(element, key))
                    has_widgets = True
                else:
                    kept.append(self._resolve(element, frame, key))
            if kept or not has_widgets:
                frame.properties[key] = kept
            else:
                frame.properties.pop(key, None)
            return

        if key in ("child", "children") and isinstance(value, Literal) and value.value is not None:
            self.report(
                ErrorCategory.WIDGET,
                "MALFORMED_ARGUMENTS",
                value.span,
                value.raw,
                widget_type=frame.qualified_name,
                field=key,
            )
        frame.properties[key] = self._resolve(value, frame, key)

    def _resolve(self, expr: Expr, frame: _Frame, slot: str) -> Any:
        """Resolve a value. Widgets found inside become children of ``frame``."""
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, ArrayLiteral):
            return [self._resolve(element, frame, slot) for element in expr.elements]

        if self.is_widget_call(expr):
            assert isinstance(expr, (ConstructorCall, MethodCall))
            child = self._new_frame(expr, slot)
            frame.children.append(child)
            return ExpressionRef(
                kind=RefKind.WIDGET,
                expression=child.qualified_name,
                widget_id=child.widget_id,
            )

        value_type = self.value_type(expr)
        if value_type is not None:
            assert isinstance(expr, (ConstructorCall, MethodCall))
            positional = []
            properties = {}
            for arg in expr.arguments.arguments:
                if isinstance(arg, NamedArgument):
                    properties[arg.name] = self._resolve(arg.value, frame, slot)
                else:
                    positional.append(self._resolve(arg.value, frame, slot))
            type_name, constructor = value_type
            return ValueObject(
                type_name=type_name,
                constructor=constructor,
                positional=positional,
                properties=properties,
            )

        frame.children.extend(self._find_widgets(expr, slot))
        return self.reference(expr)

    # -- Assembly --

    def _layout(self, frame: _Frame) -> LayoutInfo | None:
        layout_type = frame.spec.layout if frame.spec else None
        if layout_type is None:
            return None

        props = frame.properties
        direction = LAYOUT_DIRECTIONS.get(layout_type)
        axis = props.get("direction")
        if layout_type == "flex" and isinstance(axis, ExpressionRef) and axis.expression.startswith("Axis."):
            direction = axis.member

        return LayoutInfo(
            type=layout_type,
            direction=direction,
            main_axis=_alignment(props.get("mainAxisAlignment"), "MainAxisAlignment", MAIN_AXIS_VALUES),
            cross_axis=_alignment(props.get("crossAxisAlignment"), "CrossAxisAlignment", CROSS_AXIS_VALUES),
        )

    def _build(self, frame: _Frame, children: list[Widget]) -> Widget:
        style = {k: v for k, v in frame.properties.items() if self.catalog.is_style_property(k)}
        return Widget(
            id=frame.widget_id,
            type=frame.name if frame.spec else UNKNOWN_TYPE,
            name=frame.name,
            constructor=frame.constructor,
            kind=frame.spec.kind if frame.spec else WidgetKind.UNKNOWN,
            slot=frame.slot,
            properties=frame.properties,
            style=style,
            children=children,
            layout=self._layout(frame),
            source_span=frame.node.span,
        )

    # -- Entry point --

    def extract(self, node: Program | ConstructorCall | MethodCall) -> ExtractionResult:
        """
        Extract widgets from a Program or a single call.

        Args:
            node: Program root, or one constructor/method call subtree

        Returns:
            ExtractionResult with root widgets in source order
        """
        self.diagnostics = []
        self._number_widgets(node)

        roots: list[_Frame] = []
        for expr in node.body if isinstance(node, Program) else [node]:
            if self.is_widget_call(expr):
                assert isinstance(expr, (ConstructorCall, MethodCall))
                roots.append(self._new_frame(expr, None))
            else:
                roots.extend(self._find_widgets(expr, None))

        # Fill frames in pre-order
        order: list[_Frame] = []
        stack = list(reversed(roots))
        while stack:
            frame = stack.pop()
            order.append(frame)
            self._fill(frame)
            stack.extend(reversed(frame.children))

        # Build bottom-up: every child comes after its parent in ``order``
        built: dict[int, Widget] = {}
        for frame in reversed(order):
            built[id(frame)] = self._build(frame, [built[id(c)] for c in frame.children])
        widgets = [built[id(root)] for root in roots]

        logger.debug(
            "Extracted %d widgets (%d roots, %d diagnostics)",
            len(order),
            len(widgets),
            len(self.diagnostics),
        )
        return ExtractionResult(widgets=widgets, diagnostics=self.diagnostics)


def _alignment(value: Any, enum_name: str, allowed: tuple[str, ...]) -> str | None:
    """Map ``MainAxisAlignment.center`` to ``center``; unrecognised values read as ``start``."""
    if value is None:
        return None
    if isinstance(value, ExpressionRef) and value.expression.startswith(f"{enum_name}."):
        member = value.member
        if member in allowed:
            return member
    return "start"


def extract_widgets(
    node: Program | ConstructorCall | MethodCall,
    catalog: WidgetCatalog | None = None,
    config: DartWidgetsConfig | None = None,
) -> ExtractionResult:
    """
    Convenience function to extract widgets.

    Args:
        node: Program root, or one call subtree
        catalog: Lookup tables (defaults to the built-in catalog plus ``config``)
        config: Project configuration

    Returns:
        ExtractionResult with widgets and diagnostics
    """
    return WidgetExtractor(catalog=catalog, config=config).extract(node)
