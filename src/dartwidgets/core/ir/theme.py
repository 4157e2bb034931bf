"""
Theme IR types.

Models for the ``ThemeData`` declared in Dart source: colour scheme, text
theme, app theme modes, and the ``Theme.of(context)`` references that widgets
make into them. Colours are ``#AARRGGBB`` or ``#RRGGBB`` hex strings.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .ast import SourceSpan

# =============================================================================
# Enums
# =============================================================================


class Brightness(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class ThemeModeKind(StrEnum):
    """``MaterialApp(themeMode:)``."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


# =============================================================================
# Typography
# =============================================================================


class TextStyleSpec(BaseModel):
    """The ``TextStyle`` arguments a theme can carry."""

    font_size: float | None = None
    font_weight: int | None = Field(default=None, description="100 to 900")
    font_family: str | None = None
    letter_spacing: float | None = None
    word_spacing: float | None = None
    height: float | None = None
    color: str | None = None

    model_config = ConfigDict(frozen=True)


# Material 3 type scale, in Dart names
TEXT_STYLE_NAMES = (
    "displayLarge",
    "displayMedium",
    "displaySmall",
    "headlineLarge",
    "headlineMedium",
    "headlineSmall",
    "titleLarge",
    "titleMedium",
    "titleSmall",
    "bodyLarge",
    "bodyMedium",
    "bodySmall",
    "labelLarge",
    "labelMedium",
    "labelSmall",
)


def default_text_theme() -> dict[str, TextStyleSpec]:
    sizes = (57, 45, 36, 32, 28, 24, 22, 16, 14, 16, 14, 12, 14, 12, 11)
    medium = {"titleMedium", "titleSmall", "labelLarge", "labelMedium", "labelSmall"}
    return {
        name: TextStyleSpec(font_size=size, font_weight=500 if name in medium else 400)
        for name, size in zip(TEXT_STYLE_NAMES, sizes)
    }


# =============================================================================
# Colour scheme
# =============================================================================


class ColorSchemeSpec(BaseModel):
    """``ColorScheme`` roles. Dart's camelCase names map to snake_case fields."""

    brightness: Brightness = Brightness.LIGHT
    primary: str
    on_primary: str
    secondary: str
    on_secondary: str
    error: str
    on_error: str
    background: str
    on_background: str
    surface: str
    on_surface: str
    surface_variant: str
    on_surface_variant: str
    outline: str
    shadow: str

    model_config = ConfigDict(frozen=True)


LIGHT_COLOR_SCHEME = ColorSchemeSpec(
    brightness=Brightness.LIGHT,
    primary="#6200EE",
    on_primary="#FFFFFF",
    secondary="#03DAC6",
    on_secondary="#000000",
    error="#B00020",
    on_error="#FFFFFF",
    background="#FFFFFF",
    on_background="#000000",
    surface="#FFFFFF",
    on_surface="#000000",
    surface_variant="#F5F5F5",
    on_surface_variant="#000000",
    outline="#737373",
    shadow="#000000",
)

DARK_COLOR_SCHEME = ColorSchemeSpec(
    brightness=Brightness.DARK,
    primary="#BB86FC",
    on_primary="#000000",
    secondary="#03DAC6",
    on_secondary="#000000",
    error="#CF6679",
    on_error="#000000",
    background="#121212",
    on_background="#FFFFFF",
    surface="#121212",
    on_surface="#FFFFFF",
    surface_variant="#1E1E1E",
    on_surface_variant="#FFFFFF",
    outline="#8C8C8C",
    shadow="#000000",
)


def default_color_scheme(brightness: Brightness) -> ColorSchemeSpec:
    return DARK_COLOR_SCHEME if brightness == Brightness.DARK else LIGHT_COLOR_SCHEME


# =============================================================================
# Themes
# =============================================================================

DEFAULT_SPACING = {"xs": 4, "sm": 8, "md": 16, "lg": 24, "xl": 32, "xxl": 48}
DEFAULT_BORDER_RADIUS = {"none": 0, "sm": 4, "md": 8, "lg": 12, "xl": 16, "full": 9999}


class ThemeSpec(BaseModel):
    """
    One ``ThemeData`` from source, with Material defaults for what it omits.

    Attributes:
        brightness: Theme brightness
        color_scheme: Colour roles
        text_theme: Styles by Dart name (``titleLarge``...)
        primary_swatch: Base colour of ``primarySwatch``, when it resolves
        spacing: Spacing scale
        border_radius: Corner radius scale
        source_span: Span of the ``ThemeData`` call
    """

    brightness: Brightness = Brightness.LIGHT
    color_scheme: ColorSchemeSpec = LIGHT_COLOR_SCHEME
    text_theme: dict[str, TextStyleSpec] = Field(default_factory=default_text_theme)
    primary_swatch: str | None = None
    spacing: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_SPACING))
    border_radius: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_BORDER_RADIUS))
    source_span: SourceSpan

    model_config = ConfigDict(frozen=True)


class ThemeModeSpec(BaseModel):
    """Themes wired into a ``MaterialApp``."""

    mode: ThemeModeKind = ThemeModeKind.SYSTEM
    light_theme: ThemeSpec
    dark_theme: ThemeSpec | None = None

    model_config = ConfigDict(frozen=True)


class ThemeReference(BaseModel):
    """A ``Theme.of(context)...`` read, as written in source."""

    path: str = Field(description="Source rendering, e.g. Theme.of(context).colorScheme.primary")
    span: SourceSpan

    model_config = ConfigDict(frozen=True)


class ThemeResolution(BaseModel):
    """A theme reference and the value it resolves to, if any."""

    reference: ThemeReference
    value: str | float | TextStyleSpec | None = None
    theme: ThemeSpec | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def resolved(self) -> bool:
        return self.value is not None
