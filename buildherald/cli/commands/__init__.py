"""Subcommands registered by ``buildherald.cli.app``."""
