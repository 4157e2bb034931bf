"""
Theme extraction and theme-reference resolution.

Finds ``ThemeData`` declarations (standalone or wired into ``MaterialApp``)
in a parsed program, records every ``Theme.of(context)...`` read, and
resolves those reads against the active theme. Colour values that cannot be
interpreted are reported as THEME warnings; nothing here raises on odd
source.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .diagnostics import DiagnosticsMixin
from .errors import Diagnostic, ErrorCategory, make_diagnostic
from .ir.ast import (
    ArgumentList,
    ConstructorCall,
    Expr,
    Identifier,
    Literal,
    MethodCall,
    NamedArgument,
    Node,
    PositionalArgument,
    PropertyAccess,
    SourceSpan,
    child_nodes,
    unparse,
)
from .ir.theme import (
    TEXT_STYLE_NAMES,
    Brightness,
    ColorSchemeSpec,
    TextStyleSpec,
    ThemeModeKind,
    ThemeModeSpec,
    ThemeReference,
    ThemeResolution,
    ThemeSpec,
    default_color_scheme,
    default_text_theme,
)

logger = logging.getLogger(__name__)

# Material primaries and the fixed black/white shades
COLOR_CONSTANTS: dict[str, str] = {
    "Colors.red": "#F44336",
    "Colors.pink": "#E91E63",
    "Colors.purple": "#9C27B0",
    "Colors.deepPurple": "#673AB7",
    "Colors.indigo": "#3F51B5",
    "Colors.blue": "#2196F3",
    "Colors.lightBlue": "#03A9F4",
    "Colors.cyan": "#00BCD4",
    "Colors.teal": "#009688",
    "Colors.green": "#4CAF50",
    "Colors.lightGreen": "#8BC34A",
    "Colors.lime": "#CDDC39",
    "Colors.yellow": "#FFEB3B",
    "Colors.amber": "#FFC107",
    "Colors.orange": "#FF9800",
    "Colors.deepOrange": "#FF5722",
    "Colors.brown": "#795548",
    "Colors.grey": "#9E9E9E",
    "Colors.blueGrey": "#607D8B",
    "Colors.black": "#000000",
    "Colors.black87": "#DD000000",
    "Colors.black54": "#8A000000",
    "Colors.black45": "#73000000",
    "Colors.black38": "#61000000",
    "Colors.black26": "#42000000",
    "Colors.black12": "#1F000000",
    "Colors.white": "#FFFFFF",
    "Colors.white70": "#B3FFFFFF",
    "Colors.white60": "#99FFFFFF",
    "Colors.white54": "#8AFFFFFF",
    "Colors.white38": "#62FFFFFF",
    "Colors.white30": "#4DFFFFFF",
    "Colors.white24": "#3DFFFFFF",
    "Colors.white12": "#1FFFFFFF",
    "Colors.white10": "#1AFFFFFF",
    "Colors.transparent": "#00000000",
}

FONT_WEIGHTS: dict[str, int] = {
    **{f"w{n}00": n * 100 for n in range(1, 10)},
    "normal": 400,
    "bold": 700,
}

# Legacy ThemeData colour getters: (colour scheme role, alpha prefix)
THEME_SHORTCUTS: dict[str, tuple[str, str | None]] = {
    "primaryColor": ("primary", None),
    "accentColor": ("secondary", None),
    "secondaryColor": ("secondary", None),
    "backgroundColor": ("background", None),
    "scaffoldBackgroundColor": ("background", None),
    "cardColor": ("surface", None),
    "dividerColor": ("outline", None),
    "errorColor": ("error", None),
    "disabledColor": ("on_surface", "61"),
    "unselectedWidgetColor": ("on_surface", "61"),
    "highlightColor": ("primary", "1F"),
    "splashColor": ("primary", "1F"),
    "selectedRowColor": ("primary", "1F"),
    "focusColor": ("primary", "1F"),
    "hoverColor": ("primary", "0A"),
}

THEME_ROOTS = frozenset({"theme", "colorScheme", "textTheme"})
COLOR_SCHEME_FACTORIES = frozenset({"light", "dark", "fromSeed"})

_THEME_OF = re.compile(r"^Theme\.of\([^()]*\)")
_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL.sub("_", name).lower()


def with_alpha(color: str, alpha: str) -> str:
    """Replace the alpha channel of ``#RRGGBB`` / ``#AARRGGBB``."""
    return f"#{alpha}{color[-6:]}"


def argb_hex(value: int) -> str:
    return f"#{value & 0xFFFFFFFF:08X}"


# =============================================================================
# Results
# =============================================================================


@dataclass
class ThemeExtraction(DiagnosticsMixin):
    """Themes, theme modes and theme reads found in one program."""

    themes: list[ThemeSpec] = field(default_factory=list)
    modes: list[ThemeModeSpec] = field(default_factory=list)
    references: list[ThemeReference] = field(default_factory=list)
    resolutions: list[ThemeResolution] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def active_theme(self) -> ThemeSpec | None:
        return active_theme(self.themes, self.modes)

    @property
    def has_dark_theme(self) -> bool:
        return any(t.brightness == Brightness.DARK for t in self.themes) or any(
            m.dark_theme is not None for m in self.modes
        )

    @property
    def default_mode(self) -> ThemeModeKind:
        return self.modes[0].mode if self.modes else ThemeModeKind.SYSTEM

    def to_dict(self) -> dict[str, Any]:
        return {
            "themes": [t.model_dump(mode="json") for t in self.themes],
            "modes": [
                {
                    "mode": m.mode.value,
                    "light_theme": _index_of(self.themes, m.light_theme),
                    "dark_theme": _index_of(self.themes, m.dark_theme),
                }
                for m in self.modes
            ],
            "references": [
                {
                    "path": r.reference.path,
                    "line": r.reference.span.line,
                    "column": r.reference.span.column,
                    "value": r.value.model_dump(mode="json") if isinstance(r.value, TextStyleSpec) else r.value,
                }
                for r in self.resolutions
            ],
        }


def _index_of(themes: list[ThemeSpec], theme: ThemeSpec | None) -> int | None:
    return next((i for i, t in enumerate(themes) if t is theme), None)


def active_theme(themes: list[ThemeSpec], modes: list[ThemeModeSpec]) -> ThemeSpec | None:
    """The theme references resolve against: the first app's light theme, else the first theme."""
    if modes:
        return modes[0].light_theme
    return themes[0] if themes else None


# =============================================================================
# Path resolution
# =============================================================================


def theme_segments(path: str) -> list[str]:
    """
    Members read from the theme, without the ``Theme.of(context)`` or
    ``theme.`` root: ``Theme.of(context).colorScheme.primary`` gives
    ``["colorScheme", "primary"]``.
    """
    rest = _THEME_OF.sub("", path, count=1)
    if rest == path and path.startswith("theme."):
        rest = path[len("theme") :]
    return [part for part in rest.split(".") if part]


def resolve_theme_path(path: str, theme: ThemeSpec) -> str | float | TextStyleSpec | None:
    """Resolve a theme read to a colour, number, name or whole text style; None when it does not resolve."""
    parts = theme_segments(path)
    if not parts or any("(" in part for part in parts):
        return None

    head = parts[0]
    if len(parts) == 1:
        if head == "brightness":
            return theme.brightness.value
        if head == "primarySwatch":
            return theme.primary_swatch
        if head in THEME_SHORTCUTS:
            role, alpha = THEME_SHORTCUTS[head]
            color = getattr(theme.color_scheme, role)
            return with_alpha(color, alpha) if alpha else color
        return None

    if head == "colorScheme" and len(parts) == 2:
        value = getattr(theme.color_scheme, snake_case(parts[1]), None)
        if isinstance(value, Brightness):
            return value.value
        return value if isinstance(value, str) else None

    if head == "textTheme" and len(parts) in (2, 3):
        style = theme.text_theme.get(parts[1])
        if style is None or len(parts) == 2:
            return style
        value = getattr(style, snake_case(parts[2]), None)
        return value if isinstance(value, (str, int, float)) else None

    return None


def resolve_theme_references(
    references: Iterable[ThemeReference],
    themes: list[ThemeSpec],
    modes: list[ThemeModeSpec] | None = None,
) -> list[ThemeResolution]:
    """Resolve each reference against the active theme."""
    theme = active_theme(themes, modes or [])
    return [
        ThemeResolution(
            reference=reference,
            value=resolve_theme_path(reference.path, theme) if theme else None,
            theme=theme,
        )
        for reference in references
    ]


class ThemeResolver:
    """Resolves theme reads (``ExpressionRef.theme_path`` values) for widget analysis."""

    def __init__(self, themes: list[ThemeSpec], modes: list[ThemeModeSpec] | None = None):
        self.theme = active_theme(themes, modes or [])

    def resolve(self, path: str) -> str | float | TextStyleSpec | None:
        if self.theme is None:
            return None
        return resolve_theme_path(path, self.theme)

    def resolve_color(self, path: str) -> str | None:
        value = self.resolve(path)
        if isinstance(value, str) and value.startswith("#"):
            return value
        return None

    def resolve_text_style(self, path: str) -> TextStyleSpec | None:
        """The whole style for ``textTheme.<name>`` reads."""
        value = self.resolve(path)
        return value if isinstance(value, TextStyleSpec) else None


# =============================================================================
# Extraction
# =============================================================================


def _named(arguments: ArgumentList) -> list[NamedArgument]:
    return [arg for arg in arguments.arguments if isinstance(arg, NamedArgument)]


def _dotted(expr: Expr) -> str | None:
    """``Colors.red`` style paths built from identifiers only."""
    parts: list[str] = []
    current: Expr = expr
    while isinstance(current, PropertyAccess):
        parts.append(current.property)
        current = current.target
    if not isinstance(current, Identifier):
        return None
    parts.append(current.name)
    return ".".join(reversed(parts))


def _is_theme_of(expr: Expr) -> bool:
    return (
        isinstance(expr, MethodCall)
        and expr.method == "of"
        and isinstance(expr.target, Identifier)
        and expr.target.name == "Theme"
    )


def _is_theme_read(node: PropertyAccess) -> bool:
    root: Expr = node
    while isinstance(root, PropertyAccess):
        root = root.target
    if _is_theme_of(root):
        return True
    return isinstance(root, Identifier) and root.name in THEME_ROOTS


def _number(expr: Expr) -> float | None:
    if isinstance(expr, Literal) and isinstance(expr.value, (int, float)) and not isinstance(expr.value, bool):
        return expr.value
    return None


def _string(expr: Expr) -> str | None:
    if isinstance(expr, Literal) and isinstance(expr.value, str):
        return expr.value
    return None


def _call_name(expr: Expr) -> str | None:
    if isinstance(expr, ConstructorCall):
        return expr.name
    if isinstance(expr, MethodCall) and isinstance(expr.target, Identifier):
        return f"{expr.target.name}.{expr.method}"
    return None


class ThemeAnalyzer:
    """Extracts ThemeData, MaterialApp theme modes and theme reads from AST nodes."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def warn(self, code: str, span: SourceSpan, lexeme: str, theme_path: str) -> None:
        self.diagnostics.append(
            make_diagnostic(
                ErrorCategory.THEME,
                code,
                line=span.line,
                column=span.column,
                lexeme=lexeme,
                theme_path=theme_path,
            )
        )

    # -- Values --

    def color_value(self, expr: Expr, theme_path: str) -> str | None:
        """``Colors.x``, ``Color(0x...)``, ``Color.fromARGB``/``fromRGBO`` or an int literal."""
        value = self._color(expr)
        if value is None:
            self.warn("UNRESOLVED_COLOR", expr.span, unparse(expr), theme_path)
        return value

    def _color(self, expr: Expr) -> str | None:
        number = _number(expr)
        if isinstance(number, int):
            return argb_hex(number)

        dotted = _dotted(expr)
        if dotted is not None:
            return COLOR_CONSTANTS.get(dotted)

        name = _call_name(expr)
        if name is None:
            return None
        assert isinstance(expr, (ConstructorCall, MethodCall))
        args = [_number(arg.value) for arg in expr.arguments.arguments if isinstance(arg, PositionalArgument)]
        if name == "Color" and len(args) == 1 and isinstance(args[0], int):
            return argb_hex(args[0])
        if name == "Color.fromARGB" and len(args) == 4 and all(isinstance(a, int) for a in args):
            a, r, g, b = (int(v) & 0xFF for v in args)
            return f"#{a:02X}{r:02X}{g:02X}{b:02X}"
        if name == "Color.fromRGBO" and len(args) == 4 and all(a is not None for a in args):
            r, g, b = (int(v) & 0xFF for v in args[:3])
            alpha = round(min(max(float(args[3]), 0.0), 1.0) * 255)
            return f"#{alpha:02X}{r:02X}{g:02X}{b:02X}"
        return None

    def brightness(self, expr: Expr) -> Brightness | None:
        dotted = _dotted(expr)
        if dotted == "Brightness.light":
            return Brightness.LIGHT
        if dotted == "Brightness.dark":
            return Brightness.DARK
        return None

    # -- Declarations --

    def text_style(self, call: Expr, theme_path: str) -> TextStyleSpec | None:
        if not isinstance(call, ConstructorCall) or call.name != "TextStyle":
            return None
        values: dict[str, Any] = {}
        for arg in _named(call.arguments):
            value = arg.value
            if arg.name in ("fontSize", "letterSpacing", "wordSpacing", "height"):
                number = _number(value)
                if number is not None:
                    values[snake_case(arg.name)] = number
            elif arg.name == "fontFamily":
                family = _string(value)
                if family is not None:
                    values["font_family"] = family
            elif arg.name == "fontWeight":
                dotted = _dotted(value) or ""
                if dotted.startswith("FontWeight.") and dotted[len("FontWeight.") :] in FONT_WEIGHTS:
                    values["font_weight"] = FONT_WEIGHTS[dotted[len("FontWeight.") :]]
            elif arg.name == "color":
                color = self.color_value(value, f"{theme_path}.color")
                if color is not None:
                    values["color"] = color
        return TextStyleSpec(**values)

    def text_theme(self, call: Expr) -> dict[str, TextStyleSpec] | None:
        if not isinstance(call, ConstructorCall) or call.name != "TextTheme":
            return None
        styles = default_text_theme()
        for arg in _named(call.arguments):
            if arg.name in TEXT_STYLE_NAMES:
                style = self.text_style(arg.value, f"textTheme.{arg.name}")
                if style is not None:
                    styles[arg.name] = style
        return styles

    def color_scheme(self, call: Expr) -> ColorSchemeSpec | None:
        name = _call_name(call)
        if name not in ("ColorScheme", *(f"ColorScheme.{f}" for f in COLOR_SCHEME_FACTORIES)):
            return None
        assert isinstance(call, (ConstructorCall, MethodCall))

        arguments = _named(call.arguments)
        brightness = Brightness.DARK if name == "ColorScheme.dark" else Brightness.LIGHT
        for arg in arguments:
            if arg.name == "brightness":
                brightness = self.brightness(arg.value) or brightness

        roles = set(ColorSchemeSpec.model_fields) - {"brightness"}
        values: dict[str, Any] = default_color_scheme(brightness).model_dump()
        values["brightness"] = brightness
        for arg in arguments:
            role = "primary" if arg.name == "seedColor" else snake_case(arg.name)
            if role in roles:
                color = self.color_value(arg.value, f"colorScheme.{arg.name}")
                if color is not None:
                    values[role] = color
        return ColorSchemeSpec(**values)

    def theme_data(self, call: ConstructorCall | MethodCall) -> ThemeSpec:
        """``ThemeData(...)``, ``ThemeData.light()`` or ``ThemeData.dark()``."""
        brightness = Brightness.DARK if isinstance(call, MethodCall) and call.method == "dark" else Brightness.LIGHT
        explicit_brightness: Brightness | None = None
        values: dict[str, Any] = {}
        for arg in _named(call.arguments):
            if arg.name == "brightness":
                explicit_brightness = self.brightness(arg.value) or explicit_brightness
            elif arg.name == "colorScheme":
                scheme = self.color_scheme(arg.value)
                if scheme is not None:
                    values["color_scheme"] = scheme
            elif arg.name == "textTheme":
                styles = self.text_theme(arg.value)
                if styles is not None:
                    values["text_theme"] = styles
            elif arg.name == "primarySwatch":
                swatch = self.color_value(arg.value, "primarySwatch")
                if swatch is not None:
                    values["primary_swatch"] = swatch

        if explicit_brightness is not None:
            brightness = explicit_brightness
        elif "color_scheme" in values:
            brightness = values["color_scheme"].brightness
        if "color_scheme" not in values:
            scheme = default_color_scheme(brightness)
            if "primary_swatch" in values:
                scheme = scheme.model_copy(update={"primary": values["primary_swatch"]})
            values["color_scheme"] = scheme
        return ThemeSpec(brightness=brightness, source_span=call.span, **values)

    def is_theme_data(self, node: Node) -> bool:
        if isinstance(node, ConstructorCall):
            return node.name == "ThemeData"
        return _call_name(node) in ("ThemeData.light", "ThemeData.dark")  # type: ignore[arg-type]

    def theme_mode(self, app: ConstructorCall, parsed: dict[int, ThemeSpec]) -> ThemeModeSpec | None:
        light = dark = None
        mode = ThemeModeKind.SYSTEM
        for arg in _named(app.arguments):
            if arg.name == "theme":
                light = parsed.get(id(arg.value))
            elif arg.name == "darkTheme":
                dark = parsed.get(id(arg.value))
            elif arg.name == "themeMode":
                dotted = _dotted(arg.value) or ""
                member = dotted.removeprefix("ThemeMode.")
                if dotted.startswith("ThemeMode.") and member in {kind.value for kind in ThemeModeKind}:
                    mode = ThemeModeKind(member)
        if light is None:
            return None
        return ThemeModeSpec(mode=mode, light_theme=light, dark_theme=dark)

    # -- Entry point --

    def extract(self, nodes: Node | Iterable[Node]) -> ThemeExtraction:
        """
        Walk ``nodes`` in source order.

        Returns:
            ThemeExtraction with themes in source order, one mode per
            ``MaterialApp`` that has a ``theme``, and the outermost theme
            reads resolved against the active theme
        """
        self.diagnostics = []
        roots: list[Node] = list(nodes) if isinstance(nodes, (list, tuple)) else [nodes]  # type: ignore[list-item]

        parsed: dict[int, ThemeSpec] = {}
        themes: list[ThemeSpec] = []
        apps: list[ConstructorCall] = []
        references: list[ThemeReference] = []

        stack: list[Node] = list(reversed(roots))
        while stack:
            node = stack.pop()
            if isinstance(node, PropertyAccess) and _is_theme_read(node):
                references.append(ThemeReference(path=unparse(node), span=node.span))
                continue
            if self.is_theme_data(node):
                assert isinstance(node, (ConstructorCall, MethodCall))
                theme = self.theme_data(node)
                parsed[id(node)] = theme
                themes.append(theme)
            elif isinstance(node, ConstructorCall) and node.name == "MaterialApp":
                apps.append(node)
            stack.extend(reversed(child_nodes(node)))

        modes = [mode for app in apps if (mode := self.theme_mode(app, parsed)) is not None]
        resolutions = resolve_theme_references(references, themes, modes)

        if themes or modes:
            for resolution in resolutions:
                if not resolution.resolved:
                    reference = resolution.reference
                    self.warn("UNRESOLVED_THEME_REFERENCE", reference.span, reference.path, reference.path)

        logger.debug(
            "Extracted %d themes, %d modes, %d theme references",
            len(themes),
            len(modes),
            len(references),
        )
        return ThemeExtraction(
            themes=themes,
            modes=modes,
            references=references,
            resolutions=resolutions,
            diagnostics=list(self.diagnostics),
        )


def extract_themes(nodes: Node | Iterable[Node]) -> ThemeExtraction:
    """Convenience wrapper around ThemeAnalyzer.extract."""
    return ThemeAnalyzer().extract(nodes)
