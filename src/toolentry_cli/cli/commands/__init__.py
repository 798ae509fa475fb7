"""Subcommands of the toolentry CLI."""
