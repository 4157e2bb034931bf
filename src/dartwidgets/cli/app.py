"""
dartwidgets command-line application.

Usage:
    dartwidgets tokens lib/main.dart
    dartwidgets parse lib/main.dart --format source
    dartwidgets widgets lib/main.dart --format json
    dartwidgets check lib/screens/*.dart --strict
    dartwidgets components lib/screens/home.dart
    dartwidgets themes lib/main.dart --format json
"""

from __future__ import annotations

import typer

from dartwidgets.cli.commands import (
    check_command,
    components_command,
    parse_command,
    themes_command,
    tokens_command,
    widgets_command,
)
from dartwidgets.cli.utils import configure_logging, version_callback

app = typer.Typer(
    help="""dartwidgets – Flutter widget trees from Dart source

Commands:
  • tokens, parse: inspect the lexer and parser output
  • widgets: extract the widget tree (tree or JSON)
  • check: verify that files yield widget trees
  • components: find repeated widget structures and their variants
  • themes: extract ThemeData and resolve Theme.of(context) reads
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline details to stderr"),
) -> None:
    """dartwidgets CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="tokens")(tokens_command)
app.command(name="parse")(parse_command)
app.command(name="widgets")(widgets_command)
app.command(name="check")(check_command)
app.command(name="components")(components_command)
app.command(name="themes")(themes_command)


def main() -> None:
    app(standalone_mode=True)


if __name__ == "__main__":
    main()
