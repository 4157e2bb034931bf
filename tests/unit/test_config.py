"""Tests for configuration loading.

Covers:
- dartwidgets.toml and [tool.dartwidgets] in pyproject.toml
- Validation of values and custom widget entries
- Upward config discovery
- DARTWIDGETS_MAX_DEPTH override
"""

from __future__ import annotations

from pathlib import Path

import pytest

from dartwidgets.core.config import (
    DEFAULT_MAX_DEPTH,
    MAX_DEPTH_ENV,
    DartWidgetsConfig,
    find_config,
    load_config,
    parse_config,
    resolve_config,
)
from dartwidgets.core.errors import ConfigError

FULL_CONFIG = """
[parser]
max_depth = 32

[widgets]
style_properties = ["tint"]
value_types = ["AppTextStyle"]

[[widgets.custom]]
name = "GradientButton"

[[widgets.custom]]
name = "HStack"
positional = ["children"]
layout = "row"
"""


class TestParseConfig:
    def test_defaults(self) -> None:
        config = parse_config({})
        assert config == DartWidgetsConfig()
        assert config.max_depth == DEFAULT_MAX_DEPTH

    def test_custom_widget_defaults(self) -> None:
        config = parse_config({"widgets": {"custom": [{"name": "Panel"}]}})
        (panel,) = config.custom_widgets
        assert panel.positional == ["child"]
        assert panel.layout is None

    @pytest.mark.parametrize("value", [0, 129, -1, "64", True, 1.5])
    def test_invalid_max_depth(self, value: object) -> None:
        with pytest.raises(ConfigError, match="max_depth"):
            parse_config({"parser": {"max_depth": value}})

    def test_custom_widget_needs_name(self) -> None:
        with pytest.raises(ConfigError, match="need a name"):
            parse_config({"widgets": {"custom": [{"layout": "row"}]}})

    def test_custom_widget_layout_is_checked(self) -> None:
        with pytest.raises(ConfigError, match="layout must be one of"):
            parse_config({"widgets": {"custom": [{"name": "X", "layout": "grid"}]}})

    def test_string_lists_are_checked(self) -> None:
        with pytest.raises(ConfigError, match="style_properties"):
            parse_config({"widgets": {"style_properties": "tint"}})


class TestLoadConfig:
    def test_load_dartwidgets_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "dartwidgets.toml"
        path.write_text(FULL_CONFIG)
        config = load_config(path)
        assert config.max_depth == 32
        assert config.style_properties == ["tint"]
        assert config.value_types == ["AppTextStyle"]
        assert [w.name for w in config.custom_widgets] == ["GradientButton", "HStack"]
        assert config.custom_widgets[1].layout == "row"
        assert config.source == path

    def test_load_pyproject_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "app"\n\n[tool.dartwidgets.parser]\nmax_depth = 10\n')
        assert load_config(path).max_depth == 10

    def test_invalid_toml_has_location(self, tmp_path: Path) -> None:
        path = tmp_path / "dartwidgets.toml"
        path.write_text("[parser]\nmax_depth = \n")
        with pytest.raises(ConfigError, match="Invalid TOML") as excinfo:
            load_config(path)
        assert excinfo.value.context is not None
        assert excinfo.value.context.line == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(tmp_path / "missing.toml")

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "dartwidgets.toml"
        path.write_text(FULL_CONFIG)
        monkeypatch.setenv(MAX_DEPTH_ENV, "12")
        assert load_config(path).max_depth == 12

    def test_bad_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv(MAX_DEPTH_ENV, "deep")
        with pytest.raises(ConfigError, match=MAX_DEPTH_ENV):
            resolve_config(start=tmp_path)


class TestDiscovery:
    def test_find_in_parent(self, tmp_path: Path) -> None:
        (tmp_path / "dartwidgets.toml").write_text(FULL_CONFIG)
        nested = tmp_path / "lib" / "screens"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "dartwidgets.toml").resolve()

    def test_start_may_be_a_file(self, tmp_path: Path) -> None:
        (tmp_path / "dartwidgets.toml").write_text(FULL_CONFIG)
        source = tmp_path / "home.dart"
        source.write_text("Text('a')")
        assert find_config(source) == (tmp_path / "dartwidgets.toml").resolve()

    def test_dartwidgets_toml_wins_over_pyproject(self, tmp_path: Path) -> None:
        (tmp_path / "dartwidgets.toml").write_text(FULL_CONFIG)
        (tmp_path / "pyproject.toml").write_text("[tool.dartwidgets]\n")
        assert find_config(tmp_path).name == "dartwidgets.toml"

    def test_pyproject_without_table_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "app"\n')
        found = find_config(tmp_path)
        assert found is None or found.parent != tmp_path.resolve()

    def test_resolve_prefers_explicit_path(self, tmp_path: Path) -> None:
        explicit = tmp_path / "other.toml"
        explicit.write_text("[parser]\nmax_depth = 5\n")
        (tmp_path / "dartwidgets.toml").write_text(FULL_CONFIG)
        assert resolve_config(explicit, start=tmp_path).max_depth == 5
        assert resolve_config(start=tmp_path).max_depth == 32
