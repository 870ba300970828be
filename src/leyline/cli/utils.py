"""
CLI utility helpers: consoles, JSON output and error rendering.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from leyline.core.errors import LeylineError
from leyline.core.logging import get_logger

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


# ── Output helpers ───────────────────────────────────────────────────────


def echo(message: str = "") -> None:
    """Plain line on stdout; report text is never parsed as markup."""
    typer.echo(message)


def _to_dict(obj: Any) -> Any:
    """Convert dataclass / pydantic model / object with ``to_dict`` to plain data."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    return obj


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(_to_dict(payload), default=str))


def is_verbose(ctx: typer.Context | None, local: bool = False) -> bool:
    """Command-level ``-v`` or the root ``--verbose`` flag."""
    if local:
        return True
    obj = ctx.obj if ctx is not None else None
    return bool(obj and obj.get("verbose"))


# ── Error rendering ──────────────────────────────────────────────────────


def render_error(error: LeylineError, verbose: bool = False) -> None:
    """``Error: ...`` followed by numbered recovery suggestions, on stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(error.message)}", soft_wrap=True)

    suggestions = error.recovery_suggestions()
    if suggestions:
        err_console.print()
        err_console.print("To resolve this issue, try:", soft_wrap=True)
        for number, suggestion in enumerate(suggestions, start=1):
            err_console.print(f"  {number}. {escape(suggestion)}", soft_wrap=True)

    if verbose:
        platform_tips = error.platform_specific_suggestions()
        if platform_tips:
            err_console.print()
            err_console.print(f"Platform-specific tips ({error.platform}):", soft_wrap=True)
            for tip in platform_tips:
                err_console.print(f"  • {escape(tip)}", soft_wrap=True)
        err_console.print()
        err_console.print("[dim]Debug information:[/dim]")
        err_console.print(f"  Error type: {type(error).__name__}", soft_wrap=True)
        err_console.print(f"  Category: {error.category.value}", soft_wrap=True)
        if error.operation:
            err_console.print(f"  Operation: {escape(error.operation)}", soft_wrap=True)
        for key, value in error.context.items():
            if value is not None:
                err_console.print(f"  {key}: {escape(str(value))}", soft_wrap=True)
        if error.cause is not None:
            err_console.print(f"  Cause: {escape(repr(error.cause))}", soft_wrap=True)
    else:
        err_console.print()
        err_console.print("[dim]Run with --verbose for more details[/dim]")


@contextmanager
def command_errors(verbose: bool = False) -> Iterator[None]:
    """Render any failure inside a command and exit with status 1."""
    from leyline.commands.base import normalize_error

    try:
        yield
    except (typer.Exit, typer.Abort):
        raise
    except LeylineError as e:
        logger.debug("command_failed", error=e.to_dict())
        render_error(e, verbose)
        raise typer.Exit(code=1) from e
    except Exception as e:
        error = normalize_error(e)
        logger.debug("command_failed", error=error.to_dict())
        render_error(error, verbose)
        raise typer.Exit(code=1) from e
