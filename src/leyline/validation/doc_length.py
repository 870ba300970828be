"""
Document length limits for tenets and bindings.

Only non-empty body lines count; the front-matter block is ignored.

    ========  ====  ====
    type      warn  fail
    ========  ====  ====
    tenets    100   150
    bindings  200   300
    ========  ====  ====
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from leyline.core.errors import FileSystemError
from leyline.core.logging import get_logger
from leyline.discovery.front_matter import split_front_matter

logger = get_logger(__name__)

LIMITS: dict[str, dict[str, int]] = {
    "tenets": {"warn": 100, "fail": 150},
    "bindings": {"warn": 200, "fail": 300},
}
SKIPPED_FILENAMES = frozenset({"00-index.md"})


@dataclass
class LengthIssue:
    file: str
    lines: int
    limit: int
    type: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LengthReport:
    files_checked: list[str] = field(default_factory=list)
    line_counts: dict[str, int] = field(default_factory=dict)
    warnings: list[LengthIssue] = field(default_factory=list)
    violations: list[LengthIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "files_checked": len(self.files_checked),
            "warnings": [w.to_dict() for w in self.warnings],
            "violations": [v.to_dict() for v in self.violations],
        }


def count_content_lines(content: str) -> int:
    split = split_front_matter(content)
    body = split[1] if split is not None else content
    return sum(1 for line in body.splitlines() if line.strip())


def document_kind(relative: str) -> str:
    return "tenets" if "tenets" in Path(relative).parts[:-1] else "bindings"


class DocLengthChecker:
    """Check every tenet and binding under ``<root>/docs`` against :data:`LIMITS`."""

    def __init__(self, root: str | Path = "."):
        self.root = Path(root)

    def documents(self) -> list[str]:
        docs = self.root / "docs"
        if not docs.is_dir():
            raise FileSystemError(
                f"docs directory not found under {self.root}",
                path=str(docs),
                reason="not_found",
            )
        paths = sorted(docs.glob("tenets/*.md")) + sorted(docs.glob("bindings/**/*.md"))
        return [
            p.relative_to(self.root).as_posix()
            for p in paths
            if p.is_file() and p.name not in SKIPPED_FILENAMES
        ]

    def check_all(self) -> LengthReport:
        report = LengthReport()
        for relative in self.documents():
            self._check(relative, report)
        logger.info(
            "doc_length_checked",
            files=len(report.files_checked),
            warnings=len(report.warnings),
            violations=len(report.violations),
        )
        return report

    def check_file(self, file: str | Path) -> LengthReport:
        path = Path(file)
        if not path.is_absolute():
            path = self.root / path
        try:
            relative = path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            relative = path.as_posix()
        report = LengthReport()
        self._check(relative, report, path)
        return report

    def _check(self, relative: str, report: LengthReport, path: Path | None = None) -> None:
        path = path or self.root / relative
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileSystemError(
                f"Cannot read {relative}: {e}", path=str(path), reason="read_failed", cause=e
            ) from e

        kind = document_kind(relative)
        lines = count_content_lines(content)
        limits = LIMITS[kind]
        report.files_checked.append(relative)
        report.line_counts[relative] = lines
        if lines > limits["fail"]:
            report.violations.append(LengthIssue(relative, lines, limits["fail"], kind))
        elif lines > limits["warn"]:
            report.warnings.append(LengthIssue(relative, lines, limits["warn"], kind))
