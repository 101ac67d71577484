"""CLI subcommands for isosync."""
