"""Subcommands of the wpscaffold tools, one module per command."""
