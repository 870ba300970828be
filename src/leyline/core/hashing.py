"""
Content hashing for change detection.

Every comparison in leyline (cache keys, sync manifests, diff, status) is
based on the SHA-256 of a file's text content, so identical content always
maps to the same 64-character hex digest regardless of path or mtime.

Examples:
    >>> content_hash("hello")
    '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    >>> is_sha256("2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824")
    True

Tags:
    hashing, sha256, manifest, leyline
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from pathlib import Path

_SHA256_RE = re.compile(r"\A[a-f0-9]{64}\Z")


def content_hash(content: str | bytes) -> str:
    """SHA-256 hex digest of ``content`` (str is UTF-8 encoded)."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def file_hash(path: str | Path) -> str:
    """SHA-256 hex digest of a file's bytes."""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def is_sha256(value: object) -> bool:
    """True for a lowercase 64-character hex string."""
    return isinstance(value, str) and bool(_SHA256_RE.match(value))


def build_manifest(root: str | Path, pattern: str = "**/*.md") -> dict[str, str]:
    """Map each file under ``root`` matching ``pattern`` to its hash.

    Keys are POSIX paths relative to ``root``.
    """
    root = Path(root)
    if not root.is_dir():
        return {}
    return {
        path.relative_to(root).as_posix(): file_hash(path)
        for path in sorted(root.glob(pattern))
        if path.is_file()
    }


def manifest_for(paths: Iterable[Path], root: Path) -> dict[str, str]:
    """Hash an explicit list of files, keyed relative to ``root``."""
    return {Path(p).relative_to(root).as_posix(): file_hash(p) for p in paths}
