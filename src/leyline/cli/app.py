"""
Root Typer application for the leyline CLI.

Top-level commands (sync, status, diff, update, show, search, ...) live in
the ``leyline.cli`` modules and are registered here; ``validate`` and
``config`` are sub-apps.
"""

from __future__ import annotations

import typer
from typer import Typer

from leyline import __version__

app = Typer(
    name="leyline",
    help="leyline: synchronize, discover and validate development standards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"leyline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output and debug logging."),
) -> None:
    """leyline CLI: keep a project in step with the leyline standards."""
    from leyline.core.config import get_settings
    from leyline.core.logging import clear_context, configure_logging

    settings = get_settings()
    clear_context()
    configure_logging(
        "DEBUG" if verbose else settings.effective_log_level,
        json_format=settings.structured_logging,
    )
    ctx.obj = {"verbose": verbose}


# ── Simple commands ──────────────────────────────────────────────────────


@app.command("version")
def version_command(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Include system information."),
) -> None:
    """Show the leyline version."""
    from leyline.cli.utils import echo, is_verbose
    from leyline.core.config import get_settings
    from leyline.core.platform import git_available, python_version, system_description

    echo(__version__)
    if is_verbose(ctx, verbose):
        echo()
        echo("System Information:")
        echo(f"  Python version: {python_version()}")
        echo(f"  Platform: {system_description()}")
        echo(f"  Cache directory: {get_settings().cache_path}")
        echo(f"  Git available: {'Yes' if git_available() else 'No'}")


@app.command("categories")
def categories_command() -> None:
    """List the categories available for sync."""
    from leyline.categories import VALID_CATEGORIES
    from leyline.cli.utils import echo

    echo("Available categories for sync:")
    echo()
    for category in VALID_CATEGORIES:
        echo(f"  - {category}")
    echo()
    echo("You can sync them using: leyline sync -c <category1>,<category2>")


@app.command("detect")
def detect_command(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Project directory to inspect."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Suggest categories from the project's files (package.json, ...)."""
    from leyline.cli.utils import command_errors, echo, is_verbose, print_json
    from leyline.detection import detect_categories

    with command_errors(is_verbose(ctx)):
        detected = detect_categories(path)

    if as_json:
        print_json({"path": path, "categories": detected})
        return
    if not detected:
        echo(f"No categories detected in {path}")
        return
    echo(f"Detected categories: {', '.join(detected)}")
    echo()
    echo(f"Sync them using: leyline sync -c {','.join(detected)}")


# ── Command registration ─────────────────────────────────────────────────

from leyline.cli.config import app as config_app  # noqa: E402
from leyline.cli.discovery import search_command, show_command  # noqa: E402
from leyline.cli.sync import diff_command, status_command, sync_command, update_command  # noqa: E402
from leyline.cli.validate import app as validate_app  # noqa: E402

app.command("show")(show_command)
app.command("search")(search_command)
app.command("sync")(sync_command)
app.command("status")(status_command)
app.command("diff")(diff_command)
app.command("update")(update_command)

app.add_typer(validate_app, name="validate", help="Validate and index a standards corpus.")
app.add_typer(config_app, name="config", help="Configuration inspection.")
