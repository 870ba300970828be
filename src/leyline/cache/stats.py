"""Cache hit/miss counters and sync timing for ``leyline sync --stats``."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

# Typical cost of the sparse clone + fetch that a warm cache avoids
GIT_OPERATION_ESTIMATE_SECONDS = 4.0


def format_bytes(size: int | float) -> str:
    """Human readable size: ``0 B``, ``1.5 KB``, ``2.0 MB``..."""
    if not size:
        return "0 B"
    units = ("B", "KB", "MB", "GB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{value:.1f} {units[index]}"


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    puts: int = 0
    git_operations_skipped: bool = False
    cache_check_time: float = 0.0
    sync_start_time: float | None = None
    sync_end_time: float | None = None

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_put(self) -> None:
        self.puts += 1

    def record_git_operations_skipped(self) -> None:
        self.git_operations_skipped = True

    def add_cache_check_time(self, seconds: float) -> None:
        self.cache_check_time += seconds

    def start_sync_timing(self) -> None:
        self.sync_start_time = time.perf_counter()

    def end_sync_timing(self) -> None:
        self.sync_end_time = time.perf_counter()

    @property
    def total_sync_time(self) -> float:
        if self.sync_start_time is None or self.sync_end_time is None:
            return 0.0
        return self.sync_end_time - self.sync_start_time

    @property
    def total_operations(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        if not self.total_operations:
            return 0.0
        return self.hits / self.total_operations

    @property
    def time_saved_estimate(self) -> float:
        return GIT_OPERATION_ESTIMATE_SECONDS if self.git_operations_skipped else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache_hits": self.hits,
            "cache_misses": self.misses,
            "cache_puts": self.puts,
            "cache_hit_ratio": self.hit_ratio,
            "git_operations_skipped": self.git_operations_skipped,
            "total_sync_time": self.total_sync_time,
            "cache_check_time": self.cache_check_time,
            "estimated_time_saved": self.time_saved_estimate,
        }

    def format_stats(self, directory_stats: dict[str, Any] | None = None) -> str:
        lines = [
            "Cache Performance:",
            f"  Cache hits: {self.hits}",
            f"  Cache misses: {self.misses}",
            f"  Cache puts: {self.puts}",
            f"  Hit ratio: {self.hit_ratio * 100:.1f}%",
        ]

        if self.total_sync_time > 0:
            lines += [
                "\nTiming:",
                f"  Total sync time: {self.total_sync_time:.3f}s",
                f"  Cache check time: {self.cache_check_time:.3f}s",
            ]
            if self.git_operations_skipped:
                lines.append(f"  Git operations: skipped (saved ~{self.time_saved_estimate}s)")
            else:
                lines.append("  Git operations: executed")

        if directory_stats:
            lines += [
                "\nCache Directory:",
                f"  Location: {directory_stats.get('path')}",
                f"  Size: {format_bytes(directory_stats.get('size', 0))}",
                f"  Files: {directory_stats.get('file_count', 0)}",
                f"  Utilization: {directory_stats.get('utilization_percent', 0)}%",
            ]

        return "\n".join(lines)
