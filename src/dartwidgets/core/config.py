"""
Configuration for dartwidgets.

Settings live in ``dartwidgets.toml`` or in the ``[tool.dartwidgets]`` table
of ``pyproject.toml``:

    [parser]
    max_depth = 64

    [widgets]
    style_properties = ["elevation"]
    value_types = ["AppTextStyle"]

    [[widgets.custom]]
    name = "GradientButton"
    positional = ["child"]
    layout = "row"

``DARTWIDGETS_MAX_DEPTH`` in the environment overrides ``max_depth``.
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError, make_config_error

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "dartwidgets.toml"
MAX_DEPTH_ENV = "DARTWIDGETS_MAX_DEPTH"

DEFAULT_MAX_DEPTH = 64
# Each nesting level costs several Python frames in the parser
MAX_DEPTH_LIMIT = 128

LAYOUT_TYPES = ("row", "column", "stack", "wrap", "flex")

# tomllib only exposes lineno/colno from Python 3.14
_TOML_POSITION = re.compile(r"at line (\d+), column (\d+)")


@dataclass
class CustomWidgetConfig:
    """A project widget treated as a known widget type."""

    name: str
    positional: list[str] = field(default_factory=lambda: ["child"])
    layout: str | None = None  # "row" | "column" | "stack" | "wrap" | "flex"


@dataclass
class DartWidgetsConfig:
    """Parser and extractor settings."""

    max_depth: int = DEFAULT_MAX_DEPTH
    style_properties: list[str] = field(default_factory=list)
    custom_widgets: list[CustomWidgetConfig] = field(default_factory=list)
    value_types: list[str] = field(default_factory=list)
    source: Path | None = None  # file the settings came from


def _check_max_depth(value: Any, path: Path | None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise make_config_error(f"max_depth must be an integer, got {value!r}", file=path)
    if not 1 <= value <= MAX_DEPTH_LIMIT:
        raise make_config_error(
            f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {value}", file=path
        )
    return value


def _string_list(data: dict[str, Any], key: str, path: Path | None) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise make_config_error(f"{key} must be a list of strings", file=path)
    return list(value)


def parse_config(data: dict[str, Any], path: Path | None = None) -> DartWidgetsConfig:
    """
    Build a config from an already-decoded TOML table.

    Raises:
        ConfigError: If a value has the wrong type
    """
    parser_data = data.get("parser", {})
    widgets_data = data.get("widgets", {})

    custom_widgets = []
    for entry in widgets_data.get("custom", []):
        name = entry.get("name")
        if not name or not isinstance(name, str):
            raise make_config_error("Custom widget entries need a name", file=path)
        layout = entry.get("layout")
        if layout is not None and layout not in LAYOUT_TYPES:
            raise make_config_error(
                f"Custom widget {name}: layout must be one of {', '.join(LAYOUT_TYPES)}",
                file=path,
            )
        custom_widgets.append(
            CustomWidgetConfig(
                name=name,
                positional=_string_list(entry, "positional", path) if "positional" in entry else ["child"],
                layout=layout,
            )
        )

    return DartWidgetsConfig(
        max_depth=_check_max_depth(parser_data.get("max_depth", DEFAULT_MAX_DEPTH), path),
        style_properties=_string_list(widgets_data, "style_properties", path),
        custom_widgets=custom_widgets,
        value_types=_string_list(widgets_data, "value_types", path),
        source=path,
    )


def load_config(path: Path) -> DartWidgetsConfig:
    """
    Load configuration from a dartwidgets.toml or pyproject.toml file.

    Args:
        path: Config file path

    Returns:
        Parsed config, with environment overrides applied

    Raises:
        ConfigError: If the file is unreadable, not valid TOML, or has bad values
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        line, column = _error_position(e)
        raise make_config_error(
            f"Invalid TOML: {e}",
            file=path,
            line=line,
            column=column,
            source=text,
        ) from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("dartwidgets", {})

    config = parse_config(data, path)
    logger.debug("Loaded config from %s", path)
    return apply_env_overrides(config)


def _error_position(e: tomllib.TOMLDecodeError) -> tuple[int | None, int | None]:
    line = getattr(e, "lineno", None)
    column = getattr(e, "colno", None)
    if line is None:
        match = _TOML_POSITION.search(str(e))
        if match:
            line, column = int(match.group(1)), int(match.group(2))
    return line, column


def find_config(start: Path | None = None) -> Path | None:
    """
    Search ``start`` and its parents for a config file.

    A ``dartwidgets.toml`` wins over a ``pyproject.toml`` in the same
    directory; a ``pyproject.toml`` only counts if it has a
    ``[tool.dartwidgets]`` table.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent

    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file() and _has_tool_table(pyproject):
            return pyproject
    return None


def _has_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        logger.debug("Skipping unreadable %s", pyproject)
        return False
    return "dartwidgets" in data.get("tool", {})


def apply_env_overrides(config: DartWidgetsConfig) -> DartWidgetsConfig:
    """Apply ``DARTWIDGETS_MAX_DEPTH`` when set."""
    raw = os.environ.get(MAX_DEPTH_ENV)
    if raw:
        try:
            value = int(raw)
        except ValueError as e:
            raise ConfigError(f"{MAX_DEPTH_ENV} must be an integer, got {raw!r}") from e
        config.max_depth = _check_max_depth(value, None)
    return config


def resolve_config(path: Path | None = None, start: Path | None = None) -> DartWidgetsConfig:
    """
    Load ``path`` if given, else the nearest config above ``start``, else defaults.
    """
    config_path = path or find_config(start)
    if config_path is None:
        return apply_env_overrides(DartWidgetsConfig())
    return load_config(config_path)
