"""Tests for theme extraction and theme-reference resolution.

Covers:
- ThemeData, ThemeData.light/dark and Material defaults
- ColorScheme constructors, TextTheme and colour literals
- MaterialApp theme modes
- Theme.of(context) references and their resolution
- Warnings for colours and references that do not resolve
"""

from __future__ import annotations

import json

import pytest

from dartwidgets.core.errors import ErrorCategory, to_user_message
from dartwidgets.core.ir.ast import SourceSpan
from dartwidgets.core.ir.theme import (
    DARK_COLOR_SCHEME,
    LIGHT_COLOR_SCHEME,
    Brightness,
    TextStyleSpec,
    ThemeModeKind,
    ThemeReference,
    ThemeSpec,
)
from dartwidgets.core.parser import parse_source
from dartwidgets.core.pipeline import analyze_source
from dartwidgets.core.theme import (
    ThemeResolver,
    extract_themes,
    resolve_theme_path,
    resolve_theme_references,
    theme_segments,
)

APP = """
MaterialApp(
  theme: ThemeData(
    colorScheme: ColorScheme.fromSeed(seedColor: Colors.teal),
    textTheme: TextTheme(
      titleLarge: TextStyle(fontSize: 24, fontWeight: FontWeight.bold),
    ),
  ),
  darkTheme: ThemeData(brightness: Brightness.dark),
  themeMode: ThemeMode.dark,
  home: Scaffold(
    body: Text('Hi', style: Theme.of(context).textTheme.titleLarge),
    floatingActionButton: FloatingActionButton(
      backgroundColor: Theme.of(context).colorScheme.primary,
      onPressed: null,
    ),
  ),
)
"""

SPAN = SourceSpan(line=1, column=1, end_line=1, end_column=1, start=0, end=0)


def themes_of(source: str):
    return extract_themes(parse_source(source).program)


class TestThemeData:
    def test_defaults(self) -> None:
        (theme,) = themes_of("ThemeData()").themes
        assert theme.brightness == Brightness.LIGHT
        assert theme.color_scheme == LIGHT_COLOR_SCHEME
        assert theme.text_theme["bodyMedium"].font_size == 14
        assert theme.text_theme["labelLarge"].font_weight == 500
        assert theme.spacing["md"] == 16
        assert theme.border_radius["full"] == 9999

    @pytest.mark.parametrize(
        "source,brightness",
        [
            ("ThemeData.light()", Brightness.LIGHT),
            ("ThemeData.dark()", Brightness.DARK),
            ("ThemeData(brightness: Brightness.dark)", Brightness.DARK),
        ],
    )
    def test_brightness(self, source: str, brightness: Brightness) -> None:
        (theme,) = themes_of(source).themes
        assert theme.brightness == brightness
        expected = DARK_COLOR_SCHEME if brightness == Brightness.DARK else LIGHT_COLOR_SCHEME
        assert theme.color_scheme == expected

    def test_brightness_follows_color_scheme(self) -> None:
        (theme,) = themes_of("ThemeData(colorScheme: ColorScheme.dark(primary: Colors.amber))").themes
        assert theme.brightness == Brightness.DARK
        assert theme.color_scheme.primary == "#FFC107"
        assert theme.color_scheme.background == "#121212"

    def test_primary_swatch(self) -> None:
        (theme,) = themes_of("ThemeData(primarySwatch: Colors.indigo)").themes
        assert theme.primary_swatch == "#3F51B5"
        assert theme.color_scheme.primary == "#3F51B5"

    def test_source_span(self) -> None:
        (theme,) = themes_of("\n\n  ThemeData()").themes
        assert (theme.source_span.line, theme.source_span.column) == (3, 3)

    def test_nested_themes_in_source_order(self) -> None:
        extraction = themes_of("Foo(a: ThemeData.dark(), b: [ThemeData()])")
        assert [t.brightness for t in extraction.themes] == [Brightness.DARK, Brightness.LIGHT]


class TestColors:
    def test_color_scheme_literals(self) -> None:
        source = """ThemeData(colorScheme: ColorScheme(
            primary: const Color(0xFF2196F3),
            secondary: Color.fromARGB(255, 33, 150, 243),
            surface: Color.fromRGBO(33, 150, 243, 0.5),
            onSurface: Colors.black87,
            outline: 0x11223344,
        ))"""
        extraction = themes_of(source)
        scheme = extraction.themes[0].color_scheme
        assert scheme.primary == "#FF2196F3"
        assert scheme.secondary == "#FF2196F3"
        assert scheme.surface == "#802196F3"
        assert scheme.on_surface == "#DD000000"
        assert scheme.outline == "#11223344"
        assert extraction.diagnostics == []

    def test_unresolved_color_keeps_default(self) -> None:
        extraction = themes_of("ThemeData(colorScheme: ColorScheme.light(primary: Colors.blue.shade700))")
        assert extraction.themes[0].color_scheme.primary == LIGHT_COLOR_SCHEME.primary
        (diagnostic,) = extraction.diagnostics
        assert diagnostic.category == ErrorCategory.THEME
        assert diagnostic.code == "UNRESOLVED_COLOR"
        assert diagnostic.lexeme == "Colors.blue.shade700"
        assert to_user_message(diagnostic).startswith("Theme error (colorScheme.primary):")
        assert extraction.success

    def test_seed_color_sets_primary(self) -> None:
        source = "ThemeData(colorScheme: ColorScheme.fromSeed(seedColor: Colors.teal, brightness: Brightness.dark))"
        scheme = themes_of(source).themes[0].color_scheme
        assert scheme.primary == "#009688"
        assert scheme.brightness == Brightness.DARK
        assert scheme.surface == DARK_COLOR_SCHEME.surface


class TestTextTheme:
    def test_overrides_merge_with_defaults(self) -> None:
        source = """ThemeData(textTheme: TextTheme(
            bodyLarge: TextStyle(fontSize: 18, fontFamily: 'Inter', height: 1.4, color: Colors.black),
            labelSmall: TextStyle(fontWeight: FontWeight.w600),
        ))"""
        styles = themes_of(source).themes[0].text_theme
        assert styles["bodyLarge"] == TextStyleSpec(font_size=18, font_family="Inter", height=1.4, color="#000000")
        assert styles["labelSmall"].font_weight == 600
        assert styles["displayLarge"].font_size == 57
        assert len(styles) == 15

    def test_unknown_style_names_are_ignored(self) -> None:
        styles = themes_of("ThemeData(textTheme: TextTheme(headline1: TextStyle(fontSize: 90)))").themes[0].text_theme
        assert "headline1" not in styles


class TestThemeModes:
    def test_material_app(self) -> None:
        extraction = themes_of(APP)
        light, dark = extraction.themes
        (mode,) = extraction.modes
        assert mode.mode == ThemeModeKind.DARK
        assert mode.light_theme is light
        assert mode.dark_theme is dark
        assert extraction.default_mode == ThemeModeKind.DARK
        assert extraction.has_dark_theme
        assert extraction.active_theme is light

    def test_app_without_theme_has_no_mode(self) -> None:
        extraction = themes_of("MaterialApp(darkTheme: ThemeData.dark(), home: Text('a'))")
        assert extraction.modes == []
        assert len(extraction.themes) == 1
        assert extraction.default_mode == ThemeModeKind.SYSTEM

    def test_unset_theme_mode_is_system(self) -> None:
        (mode,) = themes_of("MaterialApp(theme: ThemeData())").modes
        assert mode.mode == ThemeModeKind.SYSTEM
        assert mode.dark_theme is None


class TestReferences:
    def test_references_resolve_against_app_theme(self) -> None:
        extraction = themes_of(APP)
        assert [r.path for r in extraction.references] == [
            "Theme.of(context).textTheme.titleLarge",
            "Theme.of(context).colorScheme.primary",
        ]
        title, primary = extraction.resolutions
        assert title.value == TextStyleSpec(font_size=24, font_weight=700)
        assert primary.value == "#009688"
        assert primary.reference.span.line == 14
        assert extraction.diagnostics == []

    def test_outermost_chain_only(self) -> None:
        source = "ThemeData(); Text('a', style: Theme.of(context).textTheme.bodySmall.copyWith(color: c))"
        extraction = themes_of(source)
        assert [r.path for r in extraction.references] == ["Theme.of(context).textTheme.bodySmall"]
        assert extraction.resolutions[0].value == TextStyleSpec(font_size=12, font_weight=400)

    def test_local_theme_variables(self) -> None:
        source = "ThemeData(); Container(color: theme.colorScheme.secondary, child: Text(textTheme.bodyLarge.fontSize))"
        values = [r.value for r in themes_of(source).resolutions]
        assert values == ["#03DAC6", 16]

    def test_unresolved_reference_warns(self) -> None:
        extraction = themes_of("ThemeData(); Icon(Icons.add, color: Theme.of(context).colorScheme.tertiary)")
        (resolution,) = extraction.resolutions
        assert not resolution.resolved
        (diagnostic,) = extraction.diagnostics
        assert diagnostic.code == "UNRESOLVED_THEME_REFERENCE"
        assert diagnostic.context["theme_path"] == "Theme.of(context).colorScheme.tertiary"
        assert diagnostic.line == 1

    def test_references_without_theme_are_silent(self) -> None:
        extraction = themes_of("Text('a', style: Theme.of(context).textTheme.titleLarge)")
        assert extraction.themes == []
        assert len(extraction.references) == 1
        assert extraction.resolutions[0].value is None
        assert extraction.diagnostics == []

    def test_to_dict_is_json(self) -> None:
        payload = json.loads(json.dumps(themes_of(APP).to_dict()))
        assert payload["modes"] == [{"mode": "dark", "light_theme": 0, "dark_theme": 1}]
        assert payload["references"][1]["value"] == "#009688"
        assert payload["references"][0]["value"]["font_size"] == 24
        assert payload["themes"][1]["brightness"] == "dark"


class TestResolution:
    theme = ThemeSpec(source_span=SPAN)

    @pytest.mark.parametrize(
        "path,segments",
        [
            ("Theme.of(context).colorScheme.primary", ["colorScheme", "primary"]),
            ("theme.brightness", ["brightness"]),
            ("colorScheme.onPrimary", ["colorScheme", "onPrimary"]),
            ("Theme.of(context)", []),
        ],
    )
    def test_segments(self, path: str, segments: list[str]) -> None:
        assert theme_segments(path) == segments

    @pytest.mark.parametrize(
        "path,value",
        [
            ("Theme.of(context).colorScheme.onSurfaceVariant", "#000000"),
            ("Theme.of(context).primaryColor", "#6200EE"),
            ("Theme.of(context).accentColor", "#03DAC6"),
            ("Theme.of(context).disabledColor", "#61000000"),
            ("Theme.of(context).hoverColor", "#0A6200EE"),
            ("Theme.of(context).brightness", "light"),
            ("Theme.of(context).colorScheme.brightness", "light"),
            ("Theme.of(context).textTheme.headlineSmall.fontSize", 24),
            ("Theme.of(context).primarySwatch", None),
            ("Theme.of(context).cardTheme.color", None),
            ("Theme.of(context).textTheme.nope", None),
        ],
    )
    def test_resolve_theme_path(self, path: str, value: object) -> None:
        assert resolve_theme_path(path, self.theme) == value

    def test_resolver(self) -> None:
        resolver = ThemeResolver([self.theme])
        assert resolver.resolve_color("Theme.of(context).colorScheme.error") == "#B00020"
        assert resolver.resolve_color("Theme.of(context).textTheme.bodyLarge.fontSize") is None
        style = resolver.resolve_text_style("Theme.of(context).textTheme.titleMedium")
        assert style == TextStyleSpec(font_size=16, font_weight=500)
        assert ThemeResolver([]).resolve("Theme.of(context).primaryColor") is None

    def test_resolve_references_without_themes(self) -> None:
        reference = ThemeReference(path="Theme.of(context).primaryColor", span=SPAN)
        (resolution,) = resolve_theme_references([reference], [])
        assert resolution.theme is None
        assert not resolution.resolved


class TestWidgetIntegration:
    def test_theme_refs_on_widgets_resolve(self) -> None:
        result = analyze_source(APP)
        resolver = ThemeResolver(extract_themes(result.program).themes)
        fab = result.tree.children_in("home")[0].children_in("floatingActionButton")[0]
        ref = fab.properties["backgroundColor"]
        assert resolver.resolve_color(ref.theme_path) == "#009688"
