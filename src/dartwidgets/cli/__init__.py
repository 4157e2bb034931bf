"""
dartwidgets CLI package.

- app.py: Typer application and entry point
- commands.py: tokens, parse, widgets and check commands
- utils.py: Shared helpers (version, logging, input and config loading)
"""

from dartwidgets.cli.app import app, main
from dartwidgets.cli.utils import version_callback

__all__ = [
    "app",
    "main",
    "version_callback",
]
