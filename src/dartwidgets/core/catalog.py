"""
Widget and value-type tables used by the extractor.

Each known widget has a structural kind, an explicit positional-argument
table (which property each positional argument fills, in order), the
positional tables of its named constructors, and the layout it implies.
Container-like widgets map their first positional argument to ``child``;
flex and list widgets map it to ``children``; widgets with a natural
primary value (Text, Icon, Image.network) map it to that value.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import DartWidgetsConfig
from .ir.widgets import WidgetKind


@dataclass(frozen=True)
class WidgetSpec:
    """Catalog entry for one widget type."""

    name: str
    kind: WidgetKind
    positional: tuple[str, ...] = ()
    constructors: dict[str, tuple[str, ...]] = field(default_factory=dict)
    layout: str | None = None

    def positional_for(self, constructor: str | None) -> tuple[str, ...]:
        """Positional slots for the default or a named constructor."""
        if constructor is None:
            return self.positional
        return self.constructors.get(constructor, ())


def _spec(
    name: str,
    kind: WidgetKind,
    positional: tuple[str, ...] = (),
    layout: str | None = None,
    **constructors: tuple[str, ...],
) -> WidgetSpec:
    return WidgetSpec(name=name, kind=kind, positional=positional, constructors=constructors, layout=layout)


LEAF = WidgetKind.LEAF
SINGLE = WidgetKind.SINGLE_CHILD
MULTI = WidgetKind.MULTI_CHILD
SLOTTED = WidgetKind.SLOTTED

CHILD = ("child",)
CHILDREN = ("children",)

# =============================================================================
# Widgets
# =============================================================================

BUILTIN_WIDGETS: tuple[WidgetSpec, ...] = (
    # Layout
    _spec("Container", SINGLE, CHILD),
    _spec("Row", MULTI, CHILDREN, layout="row"),
    _spec("Column", MULTI, CHILDREN, layout="column"),
    _spec("Stack", MULTI, CHILDREN, layout="stack"),
    _spec("Wrap", MULTI, CHILDREN, layout="wrap"),
    _spec("Flex", MULTI, CHILDREN, layout="flex"),
    _spec("Padding", SINGLE, ("padding", "child")),
    _spec("Center", SINGLE, CHILD),
    _spec("Align", SINGLE, CHILD),
    _spec("Positioned", SINGLE, CHILD, fill=CHILD, directional=CHILD),
    _spec("Expanded", SINGLE, CHILD),
    _spec("Flexible", SINGLE, CHILD),
    _spec("Spacer", LEAF, ("flex",)),
    _spec("SizedBox", SINGLE, CHILD, expand=CHILD, shrink=CHILD, square=CHILD, fromSize=CHILD),
    _spec("SafeArea", SINGLE, CHILD),
    _spec("Opacity", SINGLE, CHILD),
    _spec("ClipRRect", SINGLE, CHILD),
    _spec("DecoratedBox", SINGLE, CHILD),
    _spec("ConstrainedBox", SINGLE, CHILD),
    _spec("AspectRatio", SINGLE, CHILD),
    _spec("FittedBox", SINGLE, CHILD),
    _spec("Transform", SINGLE, CHILD, rotate=CHILD, scale=CHILD, translate=CHILD),
    _spec("Visibility", SINGLE, CHILD),
    _spec("Divider", LEAF, ("height",)),
    # Content
    _spec("Text", LEAF, ("text",), rich=("text",)),
    _spec("RichText", LEAF, ("text",)),
    _spec("Image", LEAF, ("image",), network=("src",), asset=("src",), file=("file",), memory=("bytes",)),
    _spec("Icon", LEAF, ("icon",)),
    _spec("Tooltip", SINGLE, CHILD),
    # Buttons and input
    _spec("ElevatedButton", SINGLE, CHILD, icon=()),
    _spec("TextButton", SINGLE, CHILD, icon=()),
    _spec("OutlinedButton", SINGLE, CHILD, icon=()),
    _spec("IconButton", LEAF, ("icon",)),
    _spec("FloatingActionButton", SINGLE, CHILD, extended=(), small=CHILD, large=CHILD),
    _spec("InkWell", SINGLE, CHILD),
    _spec("GestureDetector", SINGLE, CHILD),
    _spec("TextField", LEAF),
    _spec("Checkbox", LEAF),
    _spec("Switch", LEAF),
    _spec("Slider", LEAF),
    # Surfaces and scaffolding
    _spec("Card", SINGLE, CHILD),
    _spec("Material", SINGLE, CHILD),
    _spec("Hero", SINGLE, CHILD),
    _spec("Scaffold", SLOTTED, ("body",)),
    _spec("AppBar", SLOTTED, ("title",)),
    _spec("Drawer", SINGLE, CHILD),
    _spec("ListTile", SLOTTED, ("title",)),
    _spec("MaterialApp", SLOTTED, ("home",), router=()),
    # Scrolling
    _spec("ListView", MULTI, CHILDREN, builder=(), separated=(), custom=()),
    _spec("GridView", MULTI, CHILDREN, count=(), extent=(), builder=()),
    _spec("SingleChildScrollView", SINGLE, CHILD),
    _spec("CustomScrollView", MULTI, ("slivers",)),
    _spec("SliverList", MULTI, (), list=CHILDREN, builder=()),
    # Cupertino
    _spec("CupertinoButton", SINGLE, CHILD, filled=CHILD),
    _spec("CupertinoNavigationBar", SLOTTED, ("middle",)),
    _spec("CupertinoPageScaffold", SLOTTED, CHILD),
)

# =============================================================================
# Values
# =============================================================================

# Constructors that build plain values rather than widgets
VALUE_TYPES = frozenset(
    {
        "Alignment",
        "AssetImage",
        "Border",
        "BorderRadius",
        "BorderSide",
        "BoxConstraints",
        "BoxDecoration",
        "BoxShadow",
        "ButtonStyle",
        "CircleBorder",
        "Color",
        "ColorScheme",
        "DecorationImage",
        "Duration",
        "EdgeInsets",
        "EdgeInsetsDirectional",
        "GlobalKey",
        "IconData",
        "InputDecoration",
        "Key",
        "LinearGradient",
        "Matrix4",
        "NetworkImage",
        "Offset",
        "RadialGradient",
        "Radius",
        "RoundedRectangleBorder",
        "ShapeDecoration",
        "Size",
        "StadiumBorder",
        "TextEditingController",
        "TextSpan",
        "TextStyle",
        "TextTheme",
        "ThemeData",
        "ValueKey",
    }
)

# Types whose static members are enum-like constants
ENUM_TYPES = frozenset(
    {
        "Alignment",
        "AlignmentDirectional",
        "Axis",
        "BlendMode",
        "BorderStyle",
        "BoxFit",
        "BoxShape",
        "Clip",
        "CrossAxisAlignment",
        "CupertinoIcons",
        "Curves",
        "FlexFit",
        "FontStyle",
        "FontWeight",
        "Icons",
        "ImageRepeat",
        "MainAxisAlignment",
        "MainAxisSize",
        "StackFit",
        "TextAlign",
        "TextDecoration",
        "TextDirection",
        "TextInputType",
        "TextOverflow",
        "VerticalDirection",
        "WrapAlignment",
    }
)

COLOR_NAMESPACES = frozenset({"Colors", "CupertinoColors"})

# Colour properties recognised by the original Figma importer
COLOR_PROPERTIES = (
    "color",
    "backgroundColor",
    "foregroundColor",
    "shadowColor",
    "borderColor",
    "focusColor",
    "hoverColor",
    "splashColor",
)

STYLE_PROPERTIES = frozenset(
    {
        *COLOR_PROPERTIES,
        "alignment",
        "border",
        "borderRadius",
        "clipBehavior",
        "constraints",
        "crossAxisAlignment",
        "decoration",
        "elevation",
        "fit",
        "flex",
        "height",
        "mainAxisAlignment",
        "mainAxisSize",
        "margin",
        "opacity",
        "padding",
        "shape",
        "spacing",
        "style",
        "textAlign",
        "width",
    }
)

MAIN_AXIS_VALUES = ("start", "center", "end", "spaceBetween", "spaceAround", "spaceEvenly")
CROSS_AXIS_VALUES = ("start", "center", "end", "stretch", "baseline")

LAYOUT_DIRECTIONS = {
    "row": "horizontal",
    "column": "vertical",
    "stack": None,
    "wrap": "horizontal",
    "flex": None,
}


class WidgetCatalog:
    """
    Lookup tables for one extraction run.

    The default catalog holds the built-in tables; ``from_config`` adds
    project widgets, value types and style properties on top.
    """

    def __init__(
        self,
        widgets: tuple[WidgetSpec, ...] | list[WidgetSpec] = BUILTIN_WIDGETS,
        value_types: frozenset[str] = VALUE_TYPES,
        enum_types: frozenset[str] = ENUM_TYPES,
        color_namespaces: frozenset[str] = COLOR_NAMESPACES,
        style_properties: frozenset[str] = STYLE_PROPERTIES,
    ) -> None:
        self.widgets = {spec.name: spec for spec in widgets}
        self.value_types = value_types
        self.enum_types = enum_types
        self.color_namespaces = color_namespaces
        self.style_properties = style_properties

    @classmethod
    def from_config(cls, config: DartWidgetsConfig | None) -> WidgetCatalog:
        if config is None:
            return cls()
        custom = [
            WidgetSpec(
                name=entry.name,
                kind=WidgetKind.MULTI_CHILD if entry.layout else WidgetKind.SINGLE_CHILD,
                positional=tuple(entry.positional),
                layout=entry.layout,
            )
            for entry in config.custom_widgets
        ]
        return cls(
            widgets=[*BUILTIN_WIDGETS, *custom],
            value_types=VALUE_TYPES | set(config.value_types),
            style_properties=STYLE_PROPERTIES | set(config.style_properties),
        )

    def lookup(self, name: str) -> WidgetSpec | None:
        return self.widgets.get(name)

    def is_widget(self, name: str) -> bool:
        return name in self.widgets

    def is_value_type(self, name: str) -> bool:
        return name in self.value_types and name not in self.widgets

    def is_enum_type(self, name: str) -> bool:
        return name in self.enum_types

    def is_color_namespace(self, name: str) -> bool:
        return name in self.color_namespaces

    def is_style_property(self, name: str) -> bool:
        return name in self.style_properties
