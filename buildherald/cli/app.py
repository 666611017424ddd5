"""Main Typer application — imports and registers all CLI commands.

Entry point: ``buildherald`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from buildherald.cli.commands.notify import notify_cmd
from buildherald.cli.commands.rules_cmd import rules_cmd
from buildherald.config import settings

app = typer.Typer(
    name="buildherald",
    help="buildherald: pipeline stage notifications for chat webhooks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="notify", help="Dispatch one stage notification from a JSON file.")(notify_cmd)
app.command(name="rules", help="Show the loaded rules and pipeline variants.")(rules_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
