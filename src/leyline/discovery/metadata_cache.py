"""
In-memory document index behind ``leyline show`` and ``leyline search``.

Manifesto:
    Discovery commands must answer in well under a second on a cold start.
    The cache scans the docs tree once per operation, but only re-parses
    files whose mtime moved, so repeat lookups cost a ``stat`` per file.

Architecture:
    ::

        MetadataCache(docs_root)
          ├── _refresh()            mtime check → DocumentScanner for changed files
          ├── _documents            path → Document (insertion ordered, 10 MB cap)
          ├── _categories_index     category → [Document] sorted by title
          └── _operation_stats      per-operation timings (µs) for --stats

Relevance scoring (case-insensitive substring matches):

    =========  =====
    title      +100
    id         +50
    preview    +25
    category   +10
    =========  =====

Examples:
    >>> cache = MetadataCache(resolve_docs_root("."))
    >>> cache.categories()
    ['core', 'tenets', 'typescript']
    >>> [r.document.id for r in cache.search("simplicity")][:1]
    ['simplicity']

Tags:
    leyline, discovery, search, index, performance
"""

from __future__ import annotations

import difflib
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from leyline.cache.file_cache import FileCache
from leyline.core.logging import get_logger
from leyline.discovery.scanner import Document, DocumentScanner

logger = get_logger(__name__)

T = TypeVar("T")

MAX_MEMORY_USAGE = 10 * 1024 * 1024
EVICTION_TARGET = 0.8
PERFORMANCE_TARGET_MS = 1000.0
SCAN_DIRECTORIES = ("tenets", "bindings/core", "bindings/categories")
SKIPPED_FILENAMES = frozenset({"index.md", "glance.md", "00-index.md"})
OPERATIONS = ("list_categories", "show_category", "search_content")


def resolve_docs_root(path: str | Path = ".") -> Path:
    """``<path>/docs/leyline`` for a synced project, else ``<path>/docs``."""
    base = Path(path).expanduser().resolve()
    synced = base / "docs" / "leyline"
    return synced if synced.is_dir() else base / "docs"


@dataclass
class SearchResult:
    document: Document
    score: int

    @property
    def category(self) -> str:
        return self.document.category


class MetadataCache:
    """Category and search index over the markdown documents in ``docs_root``."""

    def __init__(self, docs_root: str | Path, file_cache: FileCache | None = None):
        self.docs_root = Path(docs_root)
        self.file_cache = file_cache
        self._scanner = DocumentScanner()
        self._documents: dict[str, Document] = {}
        self._mtimes: dict[str, float] = {}
        self._categories_index: dict[str, list[Document]] = {}
        self._memory_usage = 0
        self._hit_count = 0
        self._miss_count = 0
        self._scan_count = 0
        self._last_scan: datetime | None = None
        self._timings: dict[str, list[float]] = {op: [] for op in OPERATIONS}

    # ── Public API ───────────────────────────────────────────────────────

    def categories(self) -> list[str]:
        return self._timed("list_categories", lambda: sorted(self._categories_index))

    def documents_for_category(self, category: str) -> list[Document]:
        return self._timed(
            "show_category", lambda: list(self._categories_index.get(str(category), []))
        )

    def search(self, query: str | None) -> list[SearchResult]:
        def run() -> list[SearchResult]:
            if query is None or not query.strip():
                return []
            needle = query.strip().lower()
            results = [
                SearchResult(document=doc, score=score)
                for doc in self._documents.values()
                if (score := _relevance_score(doc, needle)) > 0
            ]
            results.sort(key=lambda r: -r.score)
            return results

        return self._timed("search_content", run)

    def suggest_corrections(self, query: str, limit: int = 5) -> list[str]:
        """Close matches among titles, ids and categories for a failed search."""
        self._refresh()
        vocabulary: dict[str, str] = {}
        for doc in self._documents.values():
            for term in (doc.title, doc.id, doc.category):
                if term:
                    vocabulary.setdefault(term.lower(), term)
        matches = difflib.get_close_matches(query.strip().lower(), list(vocabulary), n=limit, cutoff=0.6)
        return [vocabulary[m] for m in matches]

    def invalidate(self) -> None:
        self._documents.clear()
        self._mtimes.clear()
        self._categories_index.clear()
        self._memory_usage = 0
        self._last_scan = None

    @property
    def document_count(self) -> int:
        return len(self._documents)

    def performance_stats(self) -> dict[str, Any]:
        total = self._hit_count + self._miss_count
        metrics: dict[str, dict[str, Any]] = {}
        for operation, timings in self._timings.items():
            if not timings:
                continue
            total_us = sum(timings)
            avg_us = total_us / len(timings)
            metrics[operation] = {
                "count": len(timings),
                "total_time_us": total_us,
                "avg_time_us": avg_us,
                "min_time_us": min(timings),
                "max_time_us": max(timings),
                "avg_time_ms": avg_us / 1000.0,
                "recent_timings": timings[-10:],
            }

        operation_count = sum(m["count"] for m in metrics.values())
        total_ms = sum(m["total_time_us"] for m in metrics.values()) / 1000.0
        return {
            "hit_ratio": self._hit_count / total if total else 0.0,
            "memory_usage": self._memory_usage,
            "document_count": len(self._documents),
            "category_count": len(self._categories_index),
            "scan_count": self._scan_count,
            "last_scan": self._last_scan.isoformat() if self._last_scan else None,
            "operation_metrics": metrics,
            "performance_summary": {
                "total_discovery_operations": operation_count,
                "total_operation_time_ms": total_ms,
                "avg_operation_time_ms": total_ms / operation_count if operation_count else 0.0,
                "performance_target_met": all(
                    m["avg_time_ms"] < PERFORMANCE_TARGET_MS for m in metrics.values()
                ),
            },
        }

    # ── Internals ────────────────────────────────────────────────────────

    def _timed(self, operation: str, func: Callable[[], T]) -> T:
        started = time.perf_counter()
        self._refresh()
        result = func()
        timings = self._timings[operation]
        timings.append((time.perf_counter() - started) * 1_000_000)
        if len(timings) > 100:
            del timings[0]
        return result

    def _discover_paths(self) -> list[Path]:
        paths: list[Path] = []
        for directory in SCAN_DIRECTORIES:
            base = self.docs_root / directory
            if not base.is_dir():
                continue
            paths.extend(
                p for p in sorted(base.rglob("*.md")) if p.is_file() and p.name not in SKIPPED_FILENAMES
            )
        return paths

    def _refresh(self) -> None:
        paths = self._discover_paths()
        current = {str(p) for p in paths}

        for stale in [p for p in self._documents if p not in current]:
            self._evict(stale)
        for stale in [p for p in self._mtimes if p not in current]:
            del self._mtimes[stale]

        for path in paths:
            key = str(path)
            try:
                mtime = path.stat().st_mtime
            except OSError as e:
                logger.warning("document_stat_failed", path=key, error=str(e))
                continue
            cached_mtime = self._mtimes.get(key)
            if cached_mtime is not None and mtime <= cached_mtime:
                self._hit_count += 1
                continue

            self._miss_count += 1
            self._mtimes[key] = mtime
            self._evict(key)
            document = self._scanner.scan_document(path, self.docs_root)
            if document is not None:
                self._store(document)

        self._rebuild_indexes()
        self._scan_count += 1
        self._last_scan = datetime.now(timezone.utc)

    def _store(self, document: Document) -> None:
        self._documents[document.path] = document
        self._memory_usage += document.size
        if self.file_cache is not None:
            try:
                self.file_cache.put(Path(document.path).read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("discovery_cache_put_failed", path=document.path, error=str(e))
        if self._memory_usage > MAX_MEMORY_USAGE:
            self._evict_oldest()

    def _evict(self, key: str) -> None:
        document = self._documents.pop(key, None)
        if document is not None:
            self._memory_usage -= document.size

    def _evict_oldest(self) -> None:
        while self._memory_usage > MAX_MEMORY_USAGE * EVICTION_TARGET and self._documents:
            oldest = next(iter(self._documents))
            self._evict(oldest)
            # forget the mtime so the file is re-read if it is needed again
            self._mtimes.pop(oldest, None)
        logger.debug("metadata_cache_evicted", memory_usage=self._memory_usage)

    def _rebuild_indexes(self) -> None:
        index: dict[str, list[Document]] = {}
        for document in self._documents.values():
            index.setdefault(document.category, []).append(document)
        for documents in index.values():
            documents.sort(key=lambda d: d.title)
        self._categories_index = index


def _relevance_score(document: Document, query: str) -> int:
    score = 0
    if document.title and query in document.title.lower():
        score += 100
    if document.id and query in document.id.lower():
        score += 50
    if document.content_preview and query in document.content_preview.lower():
        score += 25
    if document.category and query in document.category.lower():
        score += 10
    return score
