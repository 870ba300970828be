"""
CLI: ``leyline sync``, ``status``, ``diff`` and ``update``.

The commands in ``leyline.commands`` do the work and return data; the
functions here resolve categories, call them inside ``command_errors`` and
print the reports.
"""

from __future__ import annotations

from typing import Any

import typer

from leyline.cli.utils import command_errors, echo, is_verbose, print_json
from leyline.core.errors import CommandError, ConflictDetectedError
from leyline.core.logging import LogContext

LIST_PREVIEW = 5
DETAIL_THRESHOLD = 20

CategoriesOption = typer.Option(
    None, "--categories", "-c", help="Categories to use, comma separated (e.g. typescript,go)."
)


def _categories(path: str, values: list[str] | None) -> tuple[list[str] | None, str | None]:
    from leyline.categories import parse_categories
    from leyline.commands.base import resolve_categories

    return resolve_categories(path, parse_categories(values))


def _print_file_list(title: str, files: list[str], marker: str, indent: str = "  ", limit: int | None = None) -> None:
    if not files:
        return
    echo(title)
    shown = files if limit is None else files[:limit]
    for file in shown:
        echo(f"{indent}{marker} {file}")
    if limit is not None and len(files) > limit:
        echo(f"{indent}... and {len(files) - limit} more")


# ── sync ─────────────────────────────────────────────────────────────────


def sync_command(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Project directory; files go to <path>/docs/leyline."),
    categories: list[str] | None = CategoriesOption,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite locally modified files."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would be synced."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the local content cache."),
    force_git: bool = typer.Option(False, "--force-git", help="Ignore the cache fast path."),
    stats: bool = typer.Option(False, "--stats", help="Show cache statistics."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List copied and skipped files."),
) -> None:
    """Synchronize leyline standards into a project."""
    from leyline.commands.sync import SyncCommand

    verbose = is_verbose(ctx, verbose)
    with command_errors(verbose), LogContext(command="sync", path=path):
        selected, source = _categories(path, categories)
        command = SyncCommand(
            path,
            selected,
            verbose=verbose,
            force=force,
            force_git=force_git,
            no_cache=no_cache,
            dry_run=dry_run,
            stats=stats,
        )
        target = command.leyline_path

        echo(f"Synchronizing leyline standards to: {target}")
        echo(f"Categories: {', '.join(command.active_categories())}")
        if source == ".leyline file":
            echo("  (from .leyline file)")
        if command.options():
            echo(f"Options: {', '.join(command.options())}")
        echo()

        if verbose and not dry_run:
            echo("Fetching leyline standards...")
            echo(f"Copying files to {target}...")

        report = command.execute()

    if verbose:
        for warning in report.warnings:
            echo(f"Warning: {warning}")
        if report.cache_health_issues:
            echo("Warning: Cache health issues detected:")
            for issue in report.cache_health_issues:
                echo(f"  - {issue['type']}: {issue.get('path') or issue.get('error') or issue.get('size', '')}")

    if report.dry_run:
        echo("Dry run: no files were changed.")
        echo(f"Target: {report.target}")
        echo("Sparse paths:")
        for sparse in report.sparse_paths:
            echo(f"  {sparse}")
        return

    result = report.result
    echo(f"Sync completed: {len(result.copied)} files copied, {len(result.skipped)} files skipped")
    if result.errors:
        echo(f"{len(result.errors)} errors occurred during sync")
    if result.served_from_cache and verbose:
        echo("All files served from cache")

    if verbose:
        if result.copied:
            echo()
            _print_file_list("Copied files:", result.copied, "+")
        if result.skipped:
            echo()
            _print_file_list("Skipped files (use --force to overwrite):", result.skipped, "-")
    if result.errors:
        echo()
        echo("Errors:")
        for error in result.errors:
            echo(f"  ! {error['file']}: {error['error']}")

    if report.stats is not None:
        echo()
        echo("=" * 50)
        echo("CACHE STATISTICS")
        echo("=" * 50)
        echo(report.stats.format_stats(report.cache_directory_stats or {}))


# ── status ───────────────────────────────────────────────────────────────


_COVERAGE_ICONS = {"perfect": "✓", "good": "○", "fair": "△"}


def status_command(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Project directory."),
    categories: list[str] | None = CategoriesOption,
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Include performance details."),
) -> None:
    """Show local changes against the last sync."""
    from leyline.commands.status import StatusCommand, format_age

    verbose = is_verbose(ctx, verbose)
    with command_errors(verbose), LogContext(command="status", path=path):
        selected, _source = _categories(path, categories)
        data = StatusCommand(path, selected, verbose=verbose).execute()

    if as_json:
        print_json(data)
        return

    echo("Leyline Status Report")
    echo("=" * 20)
    echo()
    echo(f"Current Leyline Version: {data['leyline_version']}")
    echo(f"Base Directory: {data['base_directory']}")
    echo(f"Active Categories: {', '.join(data['categories'])}")
    echo()

    state = data["sync_state"]
    echo("Sync State:")
    if state["exists"]:
        echo(f"  ✓ State exists ({format_age(state['state_age_seconds'])} ago)")
        echo(f"  Last sync: {state['last_sync']}")
        echo(f"  Synced version: {state['synced_version']}")
        echo(f"  Synced categories: {', '.join(state['synced_categories'])}")
    else:
        echo("  ✗ No sync state found - run 'leyline sync' first")
    echo()

    changes = data["local_changes"]
    echo("Local Changes:")
    if changes["total_changes"] == 0:
        echo("  ✓ No local changes detected")
    else:
        echo(f"  {changes['total_changes']} change(s) detected:")
        _print_file_list(f"    Added files ({len(changes['added'])}):", changes["added"], "+", "      ", LIST_PREVIEW)
        _print_file_list(
            f"    Modified files ({len(changes['modified'])}):", changes["modified"], "~", "      ", LIST_PREVIEW
        )
        _print_file_list(
            f"    Removed files ({len(changes['removed'])}):", changes["removed"], "-", "      ", LIST_PREVIEW
        )
    echo()

    summary = data["file_summary"]
    echo("File Summary:")
    echo(f"  Total files: {summary['total_files']}")
    if summary["by_category"]:
        echo("  By category:")
        for category, count in sorted(summary["by_category"].items()):
            echo(f"    {category}: {count} files")
    coverage = summary["sync_coverage"]
    icon = _COVERAGE_ICONS.get(coverage["status"], "✗")
    echo(f"  Sync coverage: {icon} {coverage['percentage']}% ({coverage['status']})")

    if verbose:
        performance = data["performance"]
        echo()
        echo("Performance:")
        echo(f"  Execution time: {performance['execution_time_ms']}ms")
        echo(f"  Cache enabled: {'Yes' if performance['cache_enabled'] else 'No'}")


# ── diff ─────────────────────────────────────────────────────────────────


def _check_format(output_format: str) -> str:
    output_format = output_format.lower()
    if output_format not in ("text", "json"):
        raise CommandError(
            f"Invalid format '{output_format}'. Use 'text' or 'json'.",
            suggestions=["Use --format text or --format json"],
        )
    return output_format


def diff_command(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Project directory."),
    categories: list[str] | None = CategoriesOption,
    output_format: str = typer.Option("text", "--format", help="Output format: text or json."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show unified diffs."),
) -> None:
    """Show differences between local and remote standards."""
    from leyline.commands.diff import DiffCommand

    verbose = is_verbose(ctx, verbose)
    with command_errors(verbose), LogContext(command="diff", path=path):
        output_format = _check_format(output_format)
        selected, _source = _categories(path, categories)
        data = DiffCommand(path, selected, verbose=verbose).execute()

    if output_format == "json":
        print_json(data)
        return

    echo("Leyline Diff Report")
    echo("=" * 18)
    echo()

    summary = data["summary"]
    if summary["total_changes"] == 0:
        echo("✓ No differences found between local and remote leyline standards")
        return

    echo(f"Summary: {summary['total_changes']} change(s) detected")
    echo(f"  Added files: {summary['added_files']}")
    echo(f"  Modified files: {summary['modified_files']}")
    echo(f"  Removed files: {summary['removed_files']}")
    echo()

    changes = data["changes"]
    _print_file_list("Added files:", changes["added"], "+")
    _print_file_list("Modified files:", changes["modified"], "~")
    _print_file_list("Removed files:", changes["removed"], "-")

    if verbose and data["unified_diffs"]:
        echo()
        echo("Detailed Diffs:")
        echo("=" * 15)
        for text in data["unified_diffs"].values():
            echo()
            echo(text.rstrip("\n"))


# ── update ───────────────────────────────────────────────────────────────


def _print_plan(plan: Any, verbose: bool) -> None:
    from leyline.commands.update import STATUS_NO_DIFFERENCES, STATUS_NO_STATE

    echo("Leyline Update Preview")
    echo("=" * 21)
    echo()
    echo(f"Status: {plan.summary['status']}")

    if plan.total_changes == 0 and not plan.conflicted:
        if plan.summary["status"] == STATUS_NO_STATE:
            echo("✓ No sync state found")
        elif plan.summary["status"] == STATUS_NO_DIFFERENCES:
            echo("✓ No differences found")
        else:
            echo("✓ Already synchronized with remote standards")
        return

    echo()
    echo("Changes to apply:")
    echo(f"  Files to add: {plan.summary['added']}")
    echo(f"  Files to update: {plan.summary['modified']}")
    echo(f"  Files to remove: {plan.summary['removed']}")
    if plan.conflicted:
        echo(f"  ⚠️  Conflicts detected: {plan.summary['conflicts']}")
    echo()

    if plan.conflicted:
        echo("⚠️  Conflicts found - see details below")
    elif verbose or plan.total_changes < DETAIL_THRESHOLD:
        _print_file_list("Files to add:", plan.changes["added"], "+")
        _print_file_list("Files to update:", plan.changes["modified"], "~")
        _print_file_list("Files to remove:", plan.changes["removed"], "-")
        echo()


def _print_conflicts(plan: Any) -> None:
    echo()
    echo("🚨 Conflict Resolution Required")
    echo("=" * 32)
    echo()
    for number, conflict in enumerate(plan.conflicts, start=1):
        echo(f"{number}. {conflict.path}")
        echo(f"   Issue: {conflict.description}")
        echo("   Options:")
        for option in conflict.resolution_options():
            echo(f"     • {option}")
        echo()
    echo("💡 Resolution Tips:")
    echo("   • Review conflicts carefully before using --force")
    echo("   • Use 'leyline diff' to see exact changes")
    echo("   • Back up important local modifications")
    echo("   • Consider merging critical files manually")
    echo()


def update_command(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Project directory."),
    categories: list[str] | None = CategoriesOption,
    force: bool = typer.Option(False, "--force", "-f", help="Apply even when conflicts exist."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Preview without applying."),
    output_format: str = typer.Option("text", "--format", help="Output format: text or json."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List every change."),
) -> None:
    """Preview and apply upstream changes with conflict detection."""
    from leyline.commands.update import UpdateCommand

    verbose = is_verbose(ctx, verbose)
    with command_errors(verbose), LogContext(command="update", path=path):
        output_format = _check_format(output_format)
        selected, _source = _categories(path, categories)
        command = UpdateCommand(path, selected, verbose=verbose, force=force, dry_run=dry_run)
        plan = command.plan()

        if output_format == "json":
            if dry_run or (plan.conflicted and not force) or plan.total_changes == 0:
                print_json(plan)
                if plan.conflicted and not force and not dry_run:
                    raise typer.Exit(code=1)
                return
            print_json(command.apply(plan))
            return

        _print_plan(plan, verbose)

        if dry_run:
            if plan.conflicted:
                _print_conflicts(plan)
            echo()
            echo("✓ Dry-run complete. No changes were made.")
            return

        if plan.conflicted and not force:
            _print_conflicts(plan)
            raise ConflictDetectedError(plan.conflicts)

        if plan.total_changes == 0:
            echo()
            echo("✓ Already up to date. No changes needed.")
            return

        echo()
        echo("🔄 Applying updates...")
        result = command.apply(plan)

    echo()
    echo("✅ Update completed successfully!")
    echo(f"   Files copied: {len(result.copied)}")
    echo(f"   Files skipped: {len(result.skipped)}")
    echo(f"   Errors: {len(result.errors)}")
    echo(f"   Duration: {result.duration_ms}ms")
    if result.errors and verbose:
        echo()
        echo("Errors encountered:")
        for error in result.errors:
            echo(f"  ⚠️  {error['file']}: {error['error']}")
