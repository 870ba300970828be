"""
Category catalogue for leyline standards.

A *category* selects a directory of bindings under
``docs/bindings/categories/<name>/``.  Tenets and core bindings are always
synced regardless of the selection.

Examples:
    >>> parse_categories(["typescript,web", " go "])
    ['typescript', 'web', 'go']
    >>> build_sparse_paths(["go"])
    ['docs/tenets/', 'docs/bindings/core/', 'docs/bindings/categories/go/']

Tags:
    leyline, categories, sparse-checkout, discovery
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from leyline.core.errors import ConfigurationError

VALID_CATEGORIES: tuple[str, ...] = (
    "api",
    "browser-extensions",
    "cli",
    "core",
    "csharp",
    "database",
    "git",
    "go",
    "python",
    "react",
    "ruby",
    "rust",
    "security",
    "tenets",
    "typescript",
    "web",
)

ALWAYS_SYNCED_PATHS = ("docs/tenets/", "docs/bindings/core/")


def parse_categories(values: Iterable[str] | str | None) -> list[str]:
    """Flatten ``-c a,b -c c`` style input into a list of names."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    parsed: list[str] = []
    for value in values:
        parsed.extend(part.strip() for part in str(value).split(",") if part.strip())
    return parsed


def validate_categories(categories: Iterable[str] | None) -> None:
    """Raise :class:`ConfigurationError` for the first unknown category."""
    for category in categories or []:
        if not isinstance(category, str):
            raise ConfigurationError(
                f"Category must be a string, got {type(category).__name__}: {category}"
            )
        if category not in VALID_CATEGORIES:
            raise ConfigurationError(
                f"Invalid category '{category}'. "
                f"Valid categories: {', '.join(VALID_CATEGORIES)}",
                context={"category": category},
            )


def normalize_categories(categories: Iterable[str] | None) -> list[str] | None:
    """Deduplicate and sort; None when nothing is selected."""
    if not categories:
        return None
    normalized = sorted({str(c) for c in categories})
    return normalized or None


def build_sparse_paths(categories: Iterable[str] | None) -> list[str]:
    paths = list(ALWAYS_SYNCED_PATHS)
    for category in categories or []:
        if category == "core":
            continue
        path = f"docs/bindings/categories/{category}/"
        if path not in paths:
            paths.append(path)
    return paths


def build_search_patterns(categories: Iterable[str] | None) -> list[str]:
    """Glob patterns, relative to a leyline docs root, for the selection."""
    patterns = ["tenets/**/*.md", "bindings/core/**/*.md"]
    for category in categories or []:
        if category in ("core", "tenets"):
            continue
        pattern = f"bindings/categories/{category}/**/*.md"
        if pattern not in patterns:
            patterns.append(pattern)
    return patterns


def discover_categories(leyline_dir: str | Path) -> list[str]:
    """Categories present on disk: ``core`` plus each category directory."""
    found = {"core"}
    categories_dir = Path(leyline_dir) / "bindings" / "categories"
    if categories_dir.is_dir():
        found.update(
            entry.name
            for entry in categories_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )
    return sorted(found)
