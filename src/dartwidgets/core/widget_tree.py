"""
Widget tree queries and analysis.

All traversals are iterative and pre-order, so results come back in source
order and deep trees do not grow the Python stack.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .ir.widgets import Widget

_MISSING = object()


@dataclass
class WidgetHierarchy:
    """Position of one widget within its tree."""

    widget: Widget
    parent: Widget | None
    depth: int  # roots are depth 0
    path: list[str]  # ids from the root down to this widget
    index: int  # index among the parent's children (or among roots)


@dataclass
class TreeAnalysis:
    """Summary of a forest of extracted widgets."""

    roots: list[Widget]
    hierarchies: dict[str, WidgetHierarchy] = field(default_factory=dict)
    total_nodes: int = 0
    max_depth: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    container_widgets: list[Widget] = field(default_factory=list)
    leaf_widgets: list[Widget] = field(default_factory=list)
    unknown_widgets: list[Widget] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roots": len(self.roots),
            "total_nodes": self.total_nodes,
            "max_depth": self.max_depth,
            "containers": len(self.container_widgets),
            "leaves": len(self.leaf_widgets),
            "unknown": len(self.unknown_widgets),
            "types": self.type_counts,
        }


def _as_roots(widgets: Widget | Iterable[Widget]) -> list[Widget]:
    if isinstance(widgets, Widget):
        return [widgets]
    return list(widgets)


def iter_with_depth(widgets: Widget | Iterable[Widget]) -> Iterator[tuple[Widget, int]]:
    """Yield ``(widget, depth)`` in pre-order; roots have depth 0."""
    stack = [(root, 0) for root in reversed(_as_roots(widgets))]
    while stack:
        widget, depth = stack.pop()
        yield widget, depth
        stack.extend((child, depth + 1) for child in reversed(widget.children))


def iter_widgets(widgets: Widget | Iterable[Widget]) -> Iterator[Widget]:
    """Yield every widget in pre-order."""
    for widget, _ in iter_with_depth(widgets):
        yield widget


def build_hierarchy(widgets: Widget | Iterable[Widget]) -> dict[str, WidgetHierarchy]:
    """Map each widget id to its parent, depth and root path."""
    hierarchies: dict[str, WidgetHierarchy] = {}
    stack: list[tuple[Widget, Widget | None, int, list[str], int]] = [
        (root, None, 0, [], i) for i, root in reversed(list(enumerate(_as_roots(widgets))))
    ]
    while stack:
        widget, parent, depth, parent_path, index = stack.pop()
        path = [*parent_path, widget.id]
        hierarchies[widget.id] = WidgetHierarchy(
            widget=widget, parent=parent, depth=depth, path=path, index=index
        )
        for i in reversed(range(len(widget.children))):
            stack.append((widget.children[i], widget, depth + 1, path, i))
    return hierarchies


def analyze_tree(widgets: Widget | Iterable[Widget]) -> TreeAnalysis:
    """Count nodes, depth, types, and the leaf/container split."""
    roots = _as_roots(widgets)
    analysis = TreeAnalysis(roots=roots, hierarchies=build_hierarchy(roots))
    counts: Counter[str] = Counter()

    for widget, depth in iter_with_depth(roots):
        analysis.total_nodes += 1
        analysis.max_depth = max(analysis.max_depth, depth + 1)
        counts[widget.type] += 1
        if widget.children:
            analysis.container_widgets.append(widget)
        else:
            analysis.leaf_widgets.append(widget)
        if widget.is_unknown:
            analysis.unknown_widgets.append(widget)

    analysis.type_counts = dict(counts)
    return analysis


def find_by_type(widgets: Widget | Iterable[Widget], widget_type: str) -> list[Widget]:
    return [w for w in iter_widgets(widgets) if w.type == widget_type]


def find_by_property(
    widgets: Widget | Iterable[Widget], name: str, value: Any = _MISSING
) -> list[Widget]:
    """Widgets that have property ``name`` (equal to ``value`` when given)."""
    return [
        w
        for w in iter_widgets(widgets)
        if name in w.properties and (value is _MISSING or w.properties[name] == value)
    ]


def find_by_id(widgets: Widget | Iterable[Widget], widget_id: str) -> Widget | None:
    for widget in iter_widgets(widgets):
        if widget.id == widget_id:
            return widget
    return None


def get_widget_path(widgets: Widget | Iterable[Widget], widget_id: str) -> list[Widget]:
    """Widgets from the root down to ``widget_id``; empty if it is not in the tree."""
    hierarchies = build_hierarchy(widgets)
    hierarchy = hierarchies.get(widget_id)
    if hierarchy is None:
        return []
    return [hierarchies[i].widget for i in hierarchy.path]


def get_descendants(widget: Widget) -> list[Widget]:
    return list(iter_widgets(widget.children))


def get_siblings(widgets: Widget | Iterable[Widget], widget_id: str) -> list[Widget]:
    hierarchy = build_hierarchy(widgets).get(widget_id)
    if hierarchy is None or hierarchy.parent is None:
        return []
    return [child for child in hierarchy.parent.children if child.id != widget_id]


def get_widget_at_path(root: Widget, path: list[int]) -> Widget | None:
    """Follow child indices from ``root``; None if an index is out of range."""
    current = root
    for index in path:
        if not 0 <= index < len(current.children):
            return None
        current = current.children[index]
    return current


def validate_tree(widgets: Widget | Iterable[Widget]) -> list[str]:
    """
    Check structural invariants of extracted trees.

    Returns a list of problems (empty when valid):
    - duplicate widget ids
    - children out of source order
    - a child whose span lies outside its parent's span
    """
    errors: list[str] = []
    seen: set[str] = set()

    for widget in iter_widgets(widgets):
        if widget.id in seen:
            errors.append(f"Duplicate widget ID found: {widget.id}")
        seen.add(widget.id)

        span = widget.source_span
        previous_start = -1
        for child in widget.children:
            child_span = child.source_span
            if child_span.start < previous_start:
                errors.append(f"Children of {widget.id} are out of source order at {child.id}")
            previous_start = child_span.start
            if child_span.start < span.start or child_span.end > span.end:
                errors.append(f"{child.id} lies outside the span of its parent {widget.id}")

    return errors
