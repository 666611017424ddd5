"""buildherald CLI — Typer-based command-line interface.

Provides the ``buildherald`` command with subcommands for dispatching a
notification from an event file and inspecting the loaded rules.

All output uses Rich for formatted terminal display.
"""
