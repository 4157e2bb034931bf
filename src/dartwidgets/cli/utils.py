"""
dartwidgets CLI utilities.

Shared helpers used by the CLI commands: version output, logging setup,
source and config loading.
"""

from __future__ import annotations

import logging
import platform
import sys
from pathlib import Path

import typer

from dartwidgets._version import get_version
from dartwidgets.core.config import DartWidgetsConfig, resolve_config
from dartwidgets.core.errors import DartWidgetsError
from dartwidgets.core.pipeline import read_source

STDIN = "-"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"dartwidgets version {get_version()}")
        typer.echo(f"  Python:        {platform.python_implementation()} {platform.python_version()}")
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send DEBUG logs to stderr when ``--verbose`` is given."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, stream=sys.stderr)


def read_input(file: str) -> tuple[str, Path | None]:
    """
    Read source text from a path or from stdin (``-``).

    Raises:
        typer.Exit: If the file cannot be read
    """
    if file == STDIN:
        return sys.stdin.read(), None
    path = Path(file)
    try:
        return read_source(path), path
    except DartWidgetsError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def load_cli_config(config: Path | None, start: Path | None = None) -> DartWidgetsConfig:
    """
    Load the config given on the command line, else the nearest one.

    Raises:
        typer.Exit: If the config is invalid
    """
    try:
        return resolve_config(config, start=start.parent if start else None)
    except DartWidgetsError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=1)


def display_name(path: Path | None) -> str:
    return str(path) if path else "<stdin>"
