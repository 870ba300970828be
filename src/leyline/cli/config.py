"""
CLI: ``leyline config``: configuration inspection.
"""

from __future__ import annotations

import typer

from leyline.cli.utils import command_errors, console, echo, is_verbose, print_json

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
    path: str = typer.Option(".", "--path", "-p", help="Project directory holding .leyline."),
) -> None:
    """Show the effective settings and the project .leyline file."""
    from rich.table import Table

    from leyline.core.config import LeylineFile, get_settings

    with command_errors(is_verbose(ctx)):
        settings = get_settings()
        leyline_file = LeylineFile.load(path)

    if as_json:
        print_json(
            {
                "settings": settings.model_dump(),
                "cache_path": str(settings.cache_path),
                "leyline_file": leyline_file.to_dict() if leyline_file else None,
            }
        )
        return

    table = Table(title="Settings")
    table.add_column("Setting")
    table.add_column("Env")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump().items():
        table.add_row(key, f"LEYLINE_{key.upper()}", str(value))
    console.print(table)

    echo()
    if leyline_file is None:
        echo("No .leyline file found")
        return
    echo(f".leyline file: {leyline_file.file_path}")
    echo(f"  Categories: {', '.join(leyline_file.categories) or '(none)'}")
    echo(f"  Version: {leyline_file.version or '(any)'}")
    echo(f"  Docs path: {leyline_file.docs_path}")
    if not leyline_file.valid:
        echo("  Errors:")
        for error in leyline_file.errors:
            echo(f"    - {error}")
