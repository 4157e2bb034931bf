"""Component detection: repeated widget structures and their variants.

Widgets whose subtrees share a shape (same widget types, same layout, same
child arity all the way down) are grouped into a ``ComponentPattern``.
Within a pattern, instances that differ from the first one in the same way
form one ``ComponentVariant``. All functions are pure.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from .ir.widgets import ExpressionRef, Widget
from .widget_tree import iter_widgets

logger = logging.getLogger(__name__)

# ── Candidate filtering ──────────────────────────────────────────────

SKIPPED_TYPES = frozenset({"Scaffold", "AppBar", "CupertinoPageScaffold", "MaterialApp"})
SIMPLE_LEAF_TYPES = frozenset({"Text", "Image"})

BUTTON_TYPES = frozenset(
    {"ElevatedButton", "TextButton", "OutlinedButton", "IconButton", "FloatingActionButton", "CupertinoButton"}
)
BASE_NAMES = {"Card": "Card", "Container": "Container", "Row": "Row", "Column": "Column"}

# ── Confidence weights ───────────────────────────────────────────────

W_INSTANCES = 1.0
W_COMPLEXITY = 0.3
W_VARIANTS = 0.2
MAX_INSTANCE_SCORE = 0.5

DIGEST_LENGTH = 12


@dataclass
class ComponentDetectionConfig:
    """Thresholds for turning repeated structures into components."""

    min_instances: int = 2
    min_confidence: float = 0.7
    max_variants: int = 10
    ignore_properties: frozenset[str] = frozenset({"key", "id"})
    include_unknown: bool = True


# ── Results ──────────────────────────────────────────────────────────


@dataclass
class PropertyDifference:
    """One way a variant differs from the pattern's first instance."""

    path: str
    base_value: Any
    variant_value: Any
    kind: str = "property"  # property, style or children


@dataclass
class ComponentVariant:
    id: str
    name: str
    widget: Widget
    differences: list[PropertyDifference] = field(default_factory=list)
    usage_count: int = 1

    @property
    def style_differences(self) -> list[PropertyDifference]:
        return [d for d in self.differences if d.kind == "style"]


@dataclass
class ComponentPattern:
    """Widgets sharing one structure digest."""

    id: str
    name: str
    type: str
    structure_hash: str
    instances: list[Widget]
    variants: list[ComponentVariant]
    confidence: float

    @property
    def usage_count(self) -> int:
        return len(self.instances)


@dataclass
class ComponentDetectionResult:
    patterns: list[ComponentPattern] = field(default_factory=list)
    widget_count: int = 0

    @property
    def total_instances(self) -> int:
        return sum(p.usage_count for p in self.patterns)

    @property
    def unique_patterns(self) -> int:
        return len(self.patterns)

    @property
    def coverage(self) -> float:
        """Percentage of all widgets that are instances of a detected component."""
        if not self.widget_count:
            return 0.0
        return self.total_instances * 100 / self.widget_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "patterns": [
                {
                    "id": p.id,
                    "name": p.name,
                    "type": p.type,
                    "confidence": round(p.confidence, 3),
                    "instances": [w.id for w in p.instances],
                    "variants": [
                        {
                            "id": v.id,
                            "name": v.name,
                            "widget": v.widget.id,
                            "usage_count": v.usage_count,
                            "differences": [
                                {
                                    "path": d.path,
                                    "base": _plain(d.base_value),
                                    "variant": _plain(d.variant_value),
                                    "kind": d.kind,
                                }
                                for d in v.differences
                            ],
                        }
                        for v in p.variants
                    ],
                }
                for p in self.patterns
            ],
            "total_instances": self.total_instances,
            "unique_patterns": self.unique_patterns,
            "coverage": round(self.coverage, 1),
        }


# ── Hashing ──────────────────────────────────────────────────────────


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _digest(data: Any) -> str:
    encoded = json.dumps(data, sort_keys=True, default=str).encode()
    return hashlib.sha256(encoded).hexdigest()[:DIGEST_LENGTH]


def structure_hashes(widgets: Widget | Iterable[Widget]) -> dict[str, str]:
    """
    Structure digest of every widget, keyed by widget id.

    A digest covers the widget's qualified name, its layout type and
    direction, and the digests of its children in order. Computed bottom-up
    so deep trees never recurse.
    """
    ordered = list(iter_widgets(widgets))
    hashes: dict[str, str] = {}
    for widget in reversed(ordered):
        layout = [widget.layout.type, widget.layout.direction] if widget.layout else None
        hashes[widget.id] = _digest(
            [widget.qualified_name, layout, [hashes[child.id] for child in widget.children]]
        )
    return hashes


# ── Differences and naming ───────────────────────────────────────────


def find_differences(
    base: Widget, variant: Widget, ignore: frozenset[str] = frozenset()
) -> list[PropertyDifference]:
    differences: list[PropertyDifference] = []
    for key in sorted(set(base.properties) | set(variant.properties)):
        if key in ignore:
            continue
        base_value = base.properties.get(key)
        variant_value = variant.properties.get(key)
        if _plain(base_value) != _plain(variant_value):
            kind = "style" if key in base.style or key in variant.style else "property"
            differences.append(PropertyDifference(key, base_value, variant_value, kind))
    if len(base.children) != len(variant.children):
        differences.append(
            PropertyDifference("children.length", len(base.children), len(variant.children), "children")
        )
    return differences


def _label(value: Any) -> str:
    text = value.member if isinstance(value, ExpressionRef) else str(value)
    return text[:1].upper() + text[1:]


def variant_name(differences: list[PropertyDifference]) -> str:
    if not differences:
        return "Default"
    first = differences[0]
    path = first.path.lower()
    if "color" in path:
        return f"{_label(first.variant_value)}Color"
    if "size" in path:
        return f"{_label(first.variant_value)}Size"
    if "text" in path:
        return "TextVariant"
    return f"Variant{len(differences)}"


def component_name(widget: Widget, variants: list[ComponentVariant]) -> str:
    if widget.type in BUTTON_TYPES:
        name = "Button"
    elif widget.type in BASE_NAMES:
        name = BASE_NAMES[widget.type]
    elif widget.is_unknown:
        name = widget.name
    else:
        name = "Component"

    varying = [d.path.lower() for v in variants for d in v.differences if d.kind != "children"]
    for descriptor in ("color", "size", "text"):
        if any(descriptor in path for path in varying):
            return name + descriptor.capitalize()
    return name


# ── Scoring ──────────────────────────────────────────────────────────


def complexity_score(widget: Widget) -> float:
    score = 0.2
    score += min(len(widget.children) / 3, 0.3)
    score += min(len(widget.properties) / 5, 0.3)
    if widget.style:
        score += 0.1
    if widget.layout:
        score += 0.1
    return min(score, 1.0)


def variant_score(variants: list[ComponentVariant], max_variants: int) -> float:
    """1.0 for a single variant; fewer and evenly used variants score higher."""
    if not variants:
        return 0.0
    if len(variants) == 1:
        return 1.0
    usage = [v.usage_count for v in variants]
    count_score = max(0.0, 1 - (len(variants) - 1) / max_variants)
    usage_score = (sum(usage) / len(usage)) / max(usage)
    return (count_score + usage_score) / 2


def confidence(instances: list[Widget], variants: list[ComponentVariant], max_variants: int) -> float:
    score = W_INSTANCES * min(len(instances) / 5, MAX_INSTANCE_SCORE)
    score += W_COMPLEXITY * complexity_score(instances[0])
    score += W_VARIANTS * variant_score(variants, max_variants)
    return min(score, 1.0)


# ── Detector ─────────────────────────────────────────────────────────


class ComponentDetector:
    """Finds repeated widget structures in extracted widget trees."""

    def __init__(self, config: ComponentDetectionConfig | None = None):
        self.config = config or ComponentDetectionConfig()

    def is_candidate(self, widget: Widget) -> bool:
        if widget.type in SKIPPED_TYPES:
            return False
        if widget.is_unknown and not self.config.include_unknown:
            return False
        simple_leaf = not widget.children and widget.type in SIMPLE_LEAF_TYPES and len(widget.properties) <= 1
        return not simple_leaf

    def variants(self, instances: list[Widget]) -> list[ComponentVariant]:
        base = instances[0]
        by_signature: dict[str, ComponentVariant] = {}
        for widget in instances:
            differences = find_differences(base, widget, self.config.ignore_properties)
            signature = _digest(sorted(f"{d.path}:{_plain(d.variant_value)}" for d in differences))
            if signature in by_signature:
                by_signature[signature].usage_count += 1
            else:
                by_signature[signature] = ComponentVariant(
                    id=f"variant_{signature}",
                    name=variant_name(differences),
                    widget=widget,
                    differences=differences,
                )
        variants = list(by_signature.values())
        if len(variants) > self.config.max_variants:
            variants.sort(key=lambda v: v.usage_count, reverse=True)
            variants = variants[: self.config.max_variants]
        return variants

    def detect(self, widgets: Widget | Iterable[Widget]) -> ComponentDetectionResult:
        roots = [widgets] if isinstance(widgets, Widget) else list(widgets)
        hashes = structure_hashes(roots)

        groups: dict[str, list[Widget]] = {}
        count = 0
        for widget in iter_widgets(roots):
            count += 1
            if self.is_candidate(widget):
                groups.setdefault(hashes[widget.id], []).append(widget)

        patterns: list[ComponentPattern] = []
        for structure_hash, instances in groups.items():
            if len(instances) < self.config.min_instances:
                continue
            variants = self.variants(instances)
            score = confidence(instances, variants, self.config.max_variants)
            if score < self.config.min_confidence:
                logger.debug("Skipping %s group: confidence %.2f", instances[0].type, score)
                continue
            patterns.append(
                ComponentPattern(
                    id=f"component_{structure_hash}",
                    name=component_name(instances[0], variants),
                    type=instances[0].type,
                    structure_hash=structure_hash,
                    instances=instances,
                    variants=variants,
                    confidence=score,
                )
            )

        logger.debug("Detected %d component patterns across %d widgets", len(patterns), count)
        return ComponentDetectionResult(patterns=patterns, widget_count=count)


def detect_components(
    widgets: Widget | Iterable[Widget], config: ComponentDetectionConfig | None = None
) -> ComponentDetectionResult:
    return ComponentDetector(config).detect(widgets)
