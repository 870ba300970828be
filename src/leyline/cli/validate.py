"""
CLI: ``leyline validate``: corpus checks for a leyline repository checkout.
"""

from __future__ import annotations

import typer

from leyline.cli.utils import command_errors, console, echo, is_verbose, print_json

app = typer.Typer(no_args_is_help=True)

RootOption = typer.Option(".", "--root", "-r", help="Repository root containing docs/.")


@app.command("front-matter")
def validate_front_matter(
    ctx: typer.Context,
    root: str = RootOption,
    file: str | None = typer.Option(None, "--file", "-f", help="Validate a single file."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List every checked file."),
) -> None:
    """Validate YAML front-matter of tenets and bindings."""
    from leyline.validation import ErrorFormatter, FrontMatterValidator

    verbose = is_verbose(ctx, verbose)
    with command_errors(verbose):
        validator = FrontMatterValidator(root)
        report = validator.validate_file(file) if file else validator.validate_all()

    if as_json:
        print_json(report)
        if not report.ok:
            raise typer.Exit(code=1)
        return

    if file:
        echo(f"Validating single file: {file}")
    for warning in report.warnings:
        echo(f"  [WARNING] {warning}")
    if verbose:
        failed = set(report.files_with_errors)
        for checked in report.files_checked:
            if checked not in failed:
                echo(f"  [OK] {checked}")

    if not report.ok:
        echo()
        console.print(
            ErrorFormatter().render_text(report.errors, validator.file_contents()),
            soft_wrap=True,
        )
        echo()
        echo("Metadata validation failed!")
        raise typer.Exit(code=1)

    echo(f"All files validated successfully! ({len(report.files_checked)} checked)")
    if report.warnings and not file:
        echo()
        echo(f"Note: {len(report.warnings)} warning(s) were found, but all files passed validation.")


@app.command("links")
def validate_links(
    ctx: typer.Context,
    root: str = RootOption,
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Check that relative markdown links resolve."""
    from leyline.validation import CrossReferenceValidator

    with command_errors(is_verbose(ctx)):
        report = CrossReferenceValidator(root).validate()

    if as_json:
        print_json(report)
        if not report.ok:
            raise typer.Exit(code=1)
        return

    echo(f"Validating cross-references in {report.files_checked} markdown files...")
    grouped = report.by_file()
    for file, broken in grouped.items():
        echo(f"  [ERROR] {file}: {len(broken)} broken link(s)")

    if report.ok:
        echo("✅ All cross-references validated successfully!")
        echo(f"Checked {report.files_checked} files in {report.duration_seconds}s")
        return

    echo()
    echo("❌ Cross-reference validation failed!")
    echo(f"Found {len(report.broken_links)} broken links in {len(grouped)} files:")
    for file, broken in grouped.items():
        echo()
        echo(f"{file}:")
        for error in broken:
            echo(f"  • {error.link} - {error.issue}")
            if error.suggestion:
                echo(f"    Suggestion: {error.suggestion}")
    raise typer.Exit(code=1)


@app.command("reindex")
def reindex(
    ctx: typer.Context,
    root: str = RootOption,
) -> None:
    """Regenerate the tenet and binding 00-index.md files."""
    from leyline.validation import Reindexer

    with command_errors(is_verbose(ctx)):
        result = Reindexer(root).run()

    for misplaced in result.misplaced:
        echo(f"ERROR: Misplaced binding file found in root directory: {misplaced}")
        echo("       This file should be moved to either:")
        echo("       - 'docs/bindings/core/' (if it's a core binding)")
        echo("       - 'docs/bindings/categories/<category>/' (if it's a category-specific binding)")
    if result.misplaced:
        echo(f"Found {len(result.misplaced)} misplaced binding file(s) in root directory. These were skipped.")

    for written in result.written:
        echo(f"Updated {written}")
    echo(
        f"Indexed {result.tenet_count} tenets, {result.core_count} core bindings and "
        f"{sum(result.category_counts.values())} category bindings"
    )
    if result.misplaced:
        raise typer.Exit(code=1)


@app.command("length")
def validate_length(
    ctx: typer.Context,
    root: str = RootOption,
    files: list[str] | None = typer.Argument(None, help="Check only these files (relative to --root)."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every checked file."),
) -> None:
    """Check tenets and bindings against their line limits."""
    from leyline.validation import DocLengthChecker, LengthReport

    verbose = is_verbose(ctx, verbose)
    with command_errors(verbose):
        checker = DocLengthChecker(root)
        if files:
            report = LengthReport()
            for file in files:
                single = checker.check_file(file)
                report.files_checked += single.files_checked
                report.line_counts.update(single.line_counts)
                report.warnings += single.warnings
                report.violations += single.violations
        else:
            report = checker.check_all()

    if as_json:
        print_json(report)
        if not report.ok:
            raise typer.Exit(code=1)
        return

    if verbose:
        flagged = {issue.file for issue in report.warnings + report.violations}
        for checked in report.files_checked:
            if checked not in flagged:
                echo(f"✓ {checked}: {report.line_counts[checked]} lines (OK)")

    if not report.warnings and not report.violations:
        echo(f"✅ All {len(report.files_checked)} documents within limits!")
        return

    if report.warnings:
        echo()
        echo("⚠️  Warnings (approaching limits):")
        for warning in report.warnings:
            echo(f"  {warning.file}: {warning.lines} lines (warn at {warning.limit})")

    if report.ok:
        return

    echo()
    echo("❌ Violations (exceeding limits):")
    for violation in report.violations:
        echo(f"  {violation.file}: {violation.lines} lines (limit: {violation.limit})")
    echo()
    echo("Summary:")
    echo(f"  {len(report.violations)} files exceed limits")
    echo(f"  {len(report.warnings)} files approaching limits")
    raise typer.Exit(code=1)
