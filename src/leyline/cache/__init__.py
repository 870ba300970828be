"""Content-addressed cache used to skip redundant copies during sync.

Architecture::

    file_cache.py      FileCache: sha256 → content, sharded on disk
    stats.py           CacheStats: hit/miss counters + timing for ``--stats``
    error_handler.py   CacheErrorHandler: warnings that never break a sync
"""

from .error_handler import CacheErrorHandler
from .file_cache import FileCache
from .stats import CacheStats, format_bytes

__all__ = ["CacheErrorHandler", "CacheStats", "FileCache", "format_bytes"]
