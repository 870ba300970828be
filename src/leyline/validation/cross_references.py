"""Check that relative markdown links between documents resolve to files."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from leyline.core.config import get_settings
from leyline.core.logging import get_logger

logger = get_logger(__name__)

LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")
EXTERNAL_RE = re.compile(r"^(https?://|mailto:)")
EXCLUDED_PREFIXES = ("venv/", "node_modules/", "site/")
EXCLUDED_SUFFIXES = ("glance.md", "00-index.md")
BROKEN_LINK = "Broken link - target file does not exist"


@dataclass
class BrokenLink:
    file: str
    link: str
    issue: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "link": self.link, "issue": self.issue, "suggestion": self.suggestion}


@dataclass
class CrossReferenceReport:
    files_checked: int = 0
    broken_links: list[BrokenLink] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.broken_links

    def by_file(self) -> dict[str, list[BrokenLink]]:
        grouped: dict[str, list[BrokenLink]] = {}
        for broken in self.broken_links:
            grouped.setdefault(broken.file, []).append(broken)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "files_checked": self.files_checked,
            "broken_links": [b.to_dict() for b in self.broken_links],
            "duration_seconds": self.duration_seconds,
        }


def suggestion_for(link: str) -> str:
    if link.endswith(".md"):
        if "/tenets/" in link:
            return "Check if the tenet file exists in docs/tenets/ directory"
        if "/bindings/" in link:
            return (
                "Check if the binding file exists in docs/bindings/core/ "
                "or docs/bindings/categories/ directories"
            )
        return "Verify the file path and ensure the referenced file exists"
    return "Link appears to reference a non-markdown file or directory"


class CrossReferenceValidator:
    def __init__(self, root: str | Path = "."):
        self.root = Path(root)
        self.structured = get_settings().structured_logging

    def markdown_files(self) -> list[str]:
        """Root-relative posix paths of the markdown files to check."""
        files = []
        for path in sorted(self.root.glob("**/*.md")):
            relative = path.relative_to(self.root).as_posix()
            if relative.startswith(EXCLUDED_PREFIXES) or relative.endswith(EXCLUDED_SUFFIXES):
                continue
            if path.is_file():
                files.append(relative)
        return files

    def validate(self) -> CrossReferenceReport:
        started = time.perf_counter()
        report = CrossReferenceReport()
        files = self.markdown_files()
        report.files_checked = len(files)

        for relative in files:
            broken = self.validate_file(relative)
            report.broken_links.extend(broken)

        report.duration_seconds = round(time.perf_counter() - started, 3)
        if self.structured:
            logger.info(
                "validation_summary",
                files_validated=report.files_checked,
                total_errors=len(report.broken_links),
                files_with_errors=len(report.by_file()),
                duration_seconds=report.duration_seconds,
            )
        return report

    def validate_file(self, relative: str) -> list[BrokenLink]:
        content = (self.root / relative).read_text(encoding="utf-8", errors="replace")
        broken = []
        for _text, link in LINK_RE.findall(content):
            if EXTERNAL_RE.match(link) or self.link_exists(relative, link):
                continue
            error = BrokenLink(relative, link, BROKEN_LINK, suggestion_for(link))
            broken.append(error)
            if self.structured:
                logger.warning("cross_reference_error", **error.to_dict())
        return broken

    def link_exists(self, relative: str, link: str) -> bool:
        target = link.split("#", 1)[0]
        if not target:
            # pure anchors point into the current document
            return True
        if target.startswith("/"):
            return (self.root / target.lstrip("/")).exists()
        return ((self.root / relative).parent / target).exists()
