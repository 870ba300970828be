"""
CLI: ``leyline show`` and ``leyline search``: browse the synced documents.
"""

from __future__ import annotations

import time

import typer

from leyline.cli.utils import command_errors, echo, is_verbose
from leyline.core.errors import CommandError

PREVIEW_LENGTH = 100


# ── Formatting helpers ───────────────────────────────────────────────────


def relevance_stars(score: int) -> str:
    if score >= 100:
        stars = "★★★★★"
    elif score >= 75:
        stars = "★★★★☆"
    elif score >= 50:
        stars = "★★★☆☆"
    elif score >= 25:
        stars = "★★☆☆☆"
    elif score >= 10:
        stars = "★☆☆☆☆"
    else:
        stars = "☆☆☆☆☆"
    return f"Relevance: {stars} ({score})"


def truncate_preview(content: str | None, max_length: int = PREVIEW_LENGTH, verbose: bool = False) -> str | None:
    """Shorten a preview, preferring a word boundary past 70% of the limit."""
    if not content:
        return None
    length = max_length * 2 if verbose else max_length
    if len(content) <= length:
        return content
    truncated = content[:length]
    last_space = truncated.rfind(" ")
    if last_space > length * 0.7:
        return content[:last_space] + "..."
    return truncated + "..."


def _open_cache(path: str, verbose: bool):
    from leyline.cache.file_cache import FileCache
    from leyline.discovery.metadata_cache import MetadataCache, resolve_docs_root

    file_cache = FileCache()
    if file_cache.init_error:
        if verbose:
            echo(f"Warning: Cache unavailable ({file_cache.init_error}), using slower fallback")
        file_cache = None
    return MetadataCache(resolve_docs_root(path), file_cache=file_cache)


def _print_stats(cache, started: float) -> None:
    from leyline.cache.stats import format_bytes

    stats = cache.performance_stats()
    echo()
    echo("=" * 50)
    echo("DISCOVERY PERFORMANCE STATISTICS")
    echo("=" * 50)
    echo("Command Performance:")
    echo(f"  Total time: {time.perf_counter() - started:.3f}s")
    echo(f"  Cache hit ratio: {stats['hit_ratio'] * 100:.1f}%")
    echo(f"  Documents cached: {stats['document_count']}")
    echo(f"  Categories: {stats['category_count']}")
    echo(f"  Memory usage: {format_bytes(stats['memory_usage'])}")

    if stats["operation_metrics"]:
        echo()
        echo("Operation Performance (Microsecond Precision):")
        for operation, metrics in stats["operation_metrics"].items():
            avg_ms = metrics["avg_time_us"] / 1000.0
            echo(f"  {operation.replace('_', ' ').capitalize()}:")
            echo(f"    Operations: {metrics['count']}")
            echo(f"    Average: {avg_ms:.3f}ms ({metrics['avg_time_us']:.0f}μs)")
            echo(
                f"    Range: {metrics['min_time_us'] / 1000.0:.3f}ms - "
                f"{metrics['max_time_us'] / 1000.0:.3f}ms"
            )
            echo(f"    Target met: {'✅' if avg_ms < 1000 else '❌'} (<1000ms)")

    summary = stats["performance_summary"]
    echo()
    echo("Performance Summary:")
    echo(f"  Total operations: {summary['total_discovery_operations']}")
    echo(f"  Total operation time: {summary['total_operation_time_ms']:.3f}ms")
    echo(f"  Average per operation: {summary['avg_operation_time_ms']:.3f}ms")
    echo(f"  All targets met: {'✅' if summary['performance_target_met'] else '❌'}")

    if stats["scan_count"]:
        echo()
        echo("Cache Operations:")
        echo(f"  Scan operations: {stats['scan_count']}")
        echo(f"  Last scan: {stats['last_scan'] or 'never'}")


# ── Commands ─────────────────────────────────────────────────────────────


def show_command(
    ctx: typer.Context,
    category: str = typer.Argument(..., help="Category to list (e.g. core, typescript)."),
    path: str = typer.Option(".", "--path", "-p", help="Project or leyline repository path."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show paths and previews."),
    stats: bool = typer.Option(False, "--stats", help="Show discovery performance statistics."),
) -> None:
    """Show the documents in a category."""
    verbose = is_verbose(ctx, verbose)
    started = time.perf_counter()

    with command_errors(verbose):
        cache = _open_cache(path, verbose)
        documents = cache.documents_for_category(category)

        if not documents:
            echo(f"No documents found in category '{category}'")
            echo()
            echo(f"Available categories: {', '.join(cache.categories())}")
        else:
            echo(f"Documents in '{category}' ({len(documents)}):")
            echo()
            for document in documents:
                echo(document.title)
                echo(f"  ID: {document.id}")
                echo(f"  Type: {document.type}")
                if verbose:
                    echo(f"  Path: {document.path}")
                    if document.content_preview:
                        echo(f"  Preview: {document.content_preview}")
                echo()

        if stats:
            _print_stats(cache, started)


def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to search for."),
    limit: int = typer.Option(10, "--limit", "-l", min=1, help="Maximum number of results."),
    path: str = typer.Option(".", "--path", "-p", help="Project or leyline repository path."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show relevance, paths and metadata."),
    stats: bool = typer.Option(False, "--stats", help="Show discovery performance statistics."),
) -> None:
    """Full-text search across titles, ids and previews."""
    verbose = is_verbose(ctx, verbose)
    started = time.perf_counter()

    with command_errors(verbose):
        if not query.strip():
            raise CommandError(
                "Search query cannot be empty",
                suggestions=["Provide a search term, e.g. leyline search testing"],
            )

        cache = _open_cache(path, verbose)
        results = cache.search(query)

        if not results:
            echo(f"No results found for '{query}'")
            suggestions = cache.suggest_corrections(query)
            if suggestions:
                echo()
                echo("Did you mean:")
                for suggestion in suggestions:
                    echo(f"  {suggestion}")
        else:
            shown = results[:limit]
            header = f"Search Results for '{query}'"
            if len(results) <= limit:
                echo(f"{header} ({len(results)} results):")
            else:
                echo(f"{header} (showing {len(shown)} of {len(results)}):")
            echo()

            for number, result in enumerate(shown, start=1):
                document = result.document
                echo(f"{number:2d}. {document.title}")
                meta = f"Category: {result.category} | Type: {document.type} | ID: {document.id}"
                if verbose:
                    meta += f" | {relevance_stars(result.score)}"
                echo(f"   {meta}")
                preview = truncate_preview(document.content_preview, verbose=verbose)
                if preview:
                    echo(f"   {preview}")
                if verbose:
                    echo(f"   Path: {document.path}")
                    metadata = ", ".join(f"{k}: {v}" for k, v in list(document.metadata.items())[:3])
                    if metadata:
                        echo(f"   Metadata: {metadata}")
                echo()

            if len(results) > limit:
                echo(f"Showing {limit} of {len(results)} results. Use --limit to see more.")

        if stats:
            _print_stats(cache, started)
