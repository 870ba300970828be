"""Typer command-line interface; ``leyline.cli.app:app`` is the entry point."""
