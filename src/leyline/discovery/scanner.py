"""
Single-document metadata extraction.

:class:`DocumentScanner` turns one markdown file into a :class:`Document`:
front-matter, title, category, type and a short preview of the body.  Files
without front-matter are not documents and scan to ``None``.

Examples:
    >>> doc = DocumentScanner().scan_document("docs/tenets/simplicity.md")
    >>> doc.type, doc.category
    ('tenet', 'tenets')

Tags:
    leyline, discovery, front-matter, markdown
"""

from __future__ import annotations

import re
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from leyline.core.hashing import content_hash
from leyline.core.logging import get_logger
from leyline.discovery.front_matter import FrontMatterTooLarge, extract_front_matter

logger = get_logger(__name__)

CONTENT_PREVIEW_LENGTH = 200
_HEADING_RE = re.compile(r"^#+\s*")


@dataclass
class Document:
    id: str | None
    title: str
    path: str
    category: str
    type: str
    metadata: dict[str, Any] = field(default_factory=dict)
    content_preview: str = ""
    content_hash: str = ""
    size: int = 0
    modified_time: float = 0.0
    scan_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.scan_time is not None:
            data["scan_time"] = self.scan_time.isoformat()
        return data


def _relative_parts(path: str | Path, root: str | Path | None) -> tuple[str, ...]:
    path = Path(path)
    if root is not None:
        try:
            return path.relative_to(root).parts
        except ValueError:
            pass
    return path.parts


def category_from_path(path: str | Path, root: str | Path | None = None) -> str:
    """Category of a document, from the innermost marker directory below ``root``."""
    directories = _relative_parts(path, root)[:-1]
    for index in range(len(directories) - 1, -1, -1):
        if index > 0 and directories[index - 1] == "categories":
            return directories[index]
        if directories[index] in ("core", "tenets"):
            return directories[index]
    return "unknown"


def document_type_from_path(path: str | Path, root: str | Path | None = None) -> str:
    for directory in reversed(_relative_parts(path, root)[:-1]):
        if directory == "tenets":
            return "tenet"
        if directory == "bindings":
            return "binding"
    return "unknown"


def _body_lines(content: str) -> list[str]:
    """Stripped lines after the closing front-matter delimiter."""
    lines = content.splitlines()
    in_front_matter = False
    ended = False
    body: list[str] = []
    for line in lines:
        stripped = line.strip()
        if not ended and stripped == "---":
            if in_front_matter:
                ended = True
            in_front_matter = not in_front_matter
            continue
        if ended:
            body.append(stripped)
    return body


def extract_title(content: str, path: str | Path) -> str:
    for line in _body_lines(content):
        if line.startswith("#"):
            title = _HEADING_RE.sub("", line).strip()
            if title:
                return title
    return Path(path).stem.replace("-", " ").capitalize()


def extract_preview(content: str, length: int = CONTENT_PREVIEW_LENGTH) -> str:
    """First body text (headings skipped), cut at a word boundary."""
    preview = ""
    for line in _body_lines(content):
        if not line or line.startswith("#") or line == "---":
            continue
        preview += line + " "
        if len(preview) >= length:
            break

    if len(preview) > length:
        preview = preview[:length]
        last_space = preview.rfind(" ")
        if last_space > 0:
            preview = preview[:last_space]
        preview += "..."
    return preview.strip()


class DocumentScanner:
    """Scan markdown files into :class:`Document` records, keeping statistics."""

    def __init__(self) -> None:
        self.reset_statistics()

    def reset_statistics(self) -> None:
        self._stats: dict[str, Any] = {
            "files_scanned": 0,
            "yaml_parse_errors": 0,
            "total_bytes_processed": 0,
            "avg_scan_time": 0.0,
        }

    def scan_statistics(self) -> dict[str, Any]:
        return dict(self._stats)

    def scan_document(self, path: str | Path, root: str | Path | None = None) -> Document | None:
        started = time.perf_counter()
        path = Path(path)
        if not path.is_file():
            return None

        try:
            raw = path.read_bytes()
            stat = path.stat()
        except OSError as e:
            logger.warning("document_scan_failed", path=str(path), error=str(e))
            return None
        content = raw.decode("utf-8", errors="replace")
        self._stats["total_bytes_processed"] += len(raw)

        try:
            front_matter = extract_front_matter(content, strict=True)
        except (yaml.YAMLError, FrontMatterTooLarge) as e:
            self._stats["yaml_parse_errors"] += 1
            logger.warning("front_matter_parse_failed", path=str(path), error=str(e))
            return None
        if front_matter is None:
            return None

        raw_id = front_matter.get("id")
        document = Document(
            id=str(raw_id) if raw_id is not None else None,
            title=extract_title(content, path),
            path=str(path),
            category=category_from_path(path, root),
            type=document_type_from_path(path, root),
            metadata=front_matter,
            content_preview=extract_preview(content),
            content_hash=content_hash(raw),
            size=len(raw),
            modified_time=stat.st_mtime,
            scan_time=datetime.now(timezone.utc),
        )

        self._record_scan(time.perf_counter() - started)
        return document

    def scan_documents(self, paths: list[str | Path]) -> list[Document]:
        documents = []
        for path in paths:
            document = self.scan_document(path)
            if document is not None:
                documents.append(document)
        return documents

    def _record_scan(self, seconds: float) -> None:
        self._stats["files_scanned"] += 1
        count = self._stats["files_scanned"]
        previous = self._stats["avg_scan_time"]
        self._stats["avg_scan_time"] = previous + (seconds - previous) / count
