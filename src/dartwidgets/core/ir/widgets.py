"""
Widget tree types.

A ``Widget`` is the semantic view of one widget constructor call: its
classified type, resolved properties, the style projection of those
properties, and its child widgets in source order.

Property values are plain Python values (str, int, float, bool, None,
lists), ``ValueObject`` for value-type constructors such as ``EdgeInsets``
or ``TextStyle``, and ``ExpressionRef`` for anything that cannot be reduced
to a literal.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ast import SourceSpan

UNKNOWN_TYPE = "Unknown"


class WidgetKind(StrEnum):
    """Structural role of a widget type."""

    LEAF = "leaf"
    SINGLE_CHILD = "single_child"
    MULTI_CHILD = "multi_child"
    SLOTTED = "slotted"  # named widget slots: Scaffold(appBar:, body:), ListTile(title:)
    UNKNOWN = "unknown"


class RefKind(StrEnum):
    """What an opaque expression reference points at."""

    ENUM = "enum"  # MainAxisAlignment.center, TextAlign.left
    COLOR = "color"  # Colors.blue, Colors.red.shade200
    THEME = "theme"  # Theme.of(context).colorScheme.primary
    CONSTANT = "constant"  # kPadding, widget.title
    WIDGET = "widget"  # widget built inside a non-widget value
    EXPRESSION = "expression"


class ExpressionRef(BaseModel):
    """
    A value kept as source text for best-effort interpretation downstream.

    Examples:
        - ExpressionRef(kind=ENUM, expression="MainAxisAlignment.center")
        - ExpressionRef(kind=THEME, expression="Theme.of(context).primaryColor",
          theme_path="Theme.of(context).primaryColor")
        - ExpressionRef(kind=WIDGET, expression="Icon", widget_id="widget_4")
    """

    kind: RefKind
    expression: str = Field(description="Source rendering of the expression")
    theme_path: str | None = None
    widget_id: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def member(self) -> str:
        """Last segment of a dotted reference (``center`` for ``MainAxisAlignment.center``)."""
        return self.expression.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.expression


class ValueObject(BaseModel):
    """
    A value-type constructor: ``EdgeInsets.all(8)``, ``TextStyle(fontSize: 18)``.

    Arguments are resolved the same way widget properties are.
    """

    type_name: str
    constructor: str | None = None
    positional: list[Any] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def qualified_name(self) -> str:
        if self.constructor:
            return f"{self.type_name}.{self.constructor}"
        return self.type_name


class LayoutInfo(BaseModel):
    """Flex/stack layout derived from Row, Column, Stack, Wrap and Flex."""

    type: str = Field(description="row, column, stack, wrap or flex")
    direction: str | None = Field(default=None, description="horizontal or vertical")
    main_axis: str | None = None
    cross_axis: str | None = None

    model_config = ConfigDict(frozen=True)


class Widget(BaseModel):
    """
    One extracted widget.

    Attributes:
        id: ``widget_N``, numbered in pre-order from 1
        type: Widget type, or "Unknown" for unclassified constructors
        name: Callee as written (differs from ``type`` for Unknown widgets)
        constructor: Named constructor (``network`` for ``Image.network``)
        kind: Structural role
        slot: Property of the parent this widget was attached from
        properties: Resolved arguments (widget-valued arguments move to children)
        style: Projection of the visual/layout properties
        children: Child widgets in source order
        layout: Flex/stack layout, for layout widgets
        source_span: Span of the constructor call
    """

    id: str
    type: str
    name: str
    constructor: str | None = None
    kind: WidgetKind = WidgetKind.UNKNOWN
    slot: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    style: dict[str, Any] = Field(default_factory=dict)
    children: list[Widget] = Field(default_factory=list)
    layout: LayoutInfo | None = None
    source_span: SourceSpan

    model_config = ConfigDict(frozen=True)

    @property
    def is_unknown(self) -> bool:
        return self.type == UNKNOWN_TYPE

    @property
    def qualified_name(self) -> str:
        if self.constructor:
            return f"{self.name}.{self.constructor}"
        return self.name

    def children_in(self, slot: str) -> list[Widget]:
        """Children attached from one property (``appBar``, ``children``...)."""
        return [child for child in self.children if child.slot == slot]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


Widget.model_rebuild()
