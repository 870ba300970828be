"""
Regenerate ``docs/tenets/00-index.md`` and ``docs/bindings/00-index.md``.

Each entry is ``| [id](path) | summary |`` where the summary is the first
paragraph after the document title.  Template placeholders (``[...]`` or
"Write a ... paragraph") are replaced by the ``## Core Belief`` /
``## Rationale`` paragraph or by "See document for details.".

Tags:
    leyline, validation, index, markdown
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from leyline.core.logging import get_logger
from leyline.discovery.front_matter import split_front_matter

logger = get_logger(__name__)

STANDARD_CATEGORIES = ("backend", "cli", "frontend", "go", "rust", "typescript")
INDEX_FILENAME = "00-index.md"
SUMMARY_LIMIT = 150
FALLBACK_SUMMARY = "See document for details."

_PLACEHOLDER_RE = re.compile(r"^\[.*\]$")
_SECTION_RE = re.compile(r"^##\s+(Core Belief|Rationale)\s*$")


@dataclass
class IndexEntry:
    id: str
    summary: str
    path: str


@dataclass
class ReindexResult:
    tenet_count: int = 0
    core_count: int = 0
    category_counts: dict[str, int] = field(default_factory=dict)
    misplaced: list[str] = field(default_factory=list)
    written: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenet_count": self.tenet_count,
            "core_count": self.core_count,
            "category_counts": dict(self.category_counts),
            "misplaced": list(self.misplaced),
            "written": list(self.written),
        }


def category_title(category: str) -> str:
    if category.lower() in ("ts", "go"):
        return category.upper()
    if "typescript" in category.lower():
        return "TypeScript"
    return category.capitalize()


def _paragraph_after(lines: list[str], start: int) -> str | None:
    """First paragraph beginning after ``lines[start]``, whitespace collapsed."""
    paragraph: list[str] = []
    for line in lines[start + 1 :]:
        stripped = line.strip()
        if not paragraph:
            if not stripped:
                continue
            if stripped.startswith("#"):
                return None
        elif not stripped or stripped.startswith("#"):
            break
        paragraph.append(stripped)
    return " ".join(" ".join(paragraph).split()) or None


def _is_template_text(text: str) -> bool:
    return "Write a" in text and ("paragraph" in text or "explanation" in text)


def extract_summary(body: str) -> str | None:
    """Summary for an index row, or None when the body has no ``#`` title."""
    lines = body.split("\n")
    title_index = next(
        (i for i, line in enumerate(lines) if line.startswith("#") and not line.startswith("##")),
        None,
    )
    if title_index is None:
        return None

    summary = _paragraph_after(lines, title_index) or FALLBACK_SUMMARY
    if _PLACEHOLDER_RE.match(summary):
        section = next((i for i, line in enumerate(lines) if _SECTION_RE.match(line.strip())), None)
        section_text = _paragraph_after(lines, section) if section is not None else None
        summary = section_text if section_text and not _PLACEHOLDER_RE.match(section_text) else FALLBACK_SUMMARY
    elif _is_template_text(summary):
        summary = FALLBACK_SUMMARY

    if len(summary) > SUMMARY_LIMIT:
        summary = summary[:147] + "..."
    return summary


def read_entry(path: Path, link: str) -> IndexEntry | None:
    content = path.read_text(encoding="utf-8", errors="replace").replace("\r\n", "\n")
    split = split_front_matter(content)
    if split is None:
        logger.debug("reindex_skipped_no_front_matter", path=str(path))
        return None
    yaml_text, body = split

    try:
        front_matter = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError:
        front_matter = {}
    if not isinstance(front_matter, dict):
        front_matter = {}

    summary = extract_summary(body)
    if summary is None:
        return None
    return IndexEntry(id=str(front_matter.get("id") or path.stem), summary=summary, path=link)


def _table(entries: list[IndexEntry]) -> str:
    rows = ["| ID | Summary |", "|---|---|"]
    rows += [f"| [{e.id}]({e.path}) | {e.summary} |" for e in entries]
    return "\n".join(rows) + "\n"


class Reindexer:
    def __init__(self, root: str | Path = "."):
        self.root = Path(root)
        self.tenets_dir = self.root / "docs" / "tenets"
        self.bindings_dir = self.root / "docs" / "bindings"

    def run(self) -> ReindexResult:
        result = ReindexResult()
        if self.tenets_dir.is_dir():
            result.tenet_count = self.write_tenets_index()
            result.written.append(str(self.tenets_dir / INDEX_FILENAME))
        if self.bindings_dir.is_dir():
            self.write_bindings_index(result)
            result.written.append(str(self.bindings_dir / INDEX_FILENAME))
        logger.info(
            "reindex_completed",
            tenets=result.tenet_count,
            core=result.core_count,
            categories=len(result.category_counts),
        )
        return result

    def write_tenets_index(self) -> int:
        entries = [
            entry
            for path in self._markdown(self.tenets_dir)
            if (entry := read_entry(path, f"./{path.stem}.md")) is not None
        ]
        content = (
            "# Tenets Index\n\n"
            "This file contains an automatically generated list of all tenets "
            "with their one-line summaries.\n\n"
        )
        content += _table(entries) if entries else "_No tenets defined yet._\n"
        (self.tenets_dir / INDEX_FILENAME).write_text(content, encoding="utf-8")
        return len(entries)

    def write_bindings_index(self, result: ReindexResult) -> None:
        result.misplaced = [str(p) for p in self._markdown(self.bindings_dir)]
        for path in result.misplaced:
            logger.warning("misplaced_binding_file", path=path)

        core = [
            entry
            for path in self._markdown(self.bindings_dir / "core")
            if (entry := read_entry(path, f"./core/{path.name}")) is not None
        ]

        categories: dict[str, list[IndexEntry]] = {name: [] for name in STANDARD_CATEGORIES}
        categories_dir = self.bindings_dir / "categories"
        if categories_dir.is_dir():
            for directory in sorted(d for d in categories_dir.iterdir() if d.is_dir()):
                entries = categories.setdefault(directory.name, [])
                for path in self._markdown(directory):
                    entry = read_entry(path, f"./categories/{directory.name}/{path.name}")
                    if entry is not None:
                        entries.append(entry)

        content = (
            "# Bindings Index\n\n"
            "This file contains an automatically generated list of all bindings "
            "with their one-line summaries.\n\n"
            "## Core Bindings\n\n"
        )
        content += _table(core) if core else "_No core bindings defined yet._\n\n"

        extra = sorted(set(categories) - set(STANDARD_CATEGORIES))
        for name in (*STANDARD_CATEGORIES, *extra):
            entries = categories[name]
            content += f"\n## {category_title(name)} Bindings\n\n"
            content += _table(entries) if entries else f"_No {name} bindings defined yet._\n"

        (self.bindings_dir / INDEX_FILENAME).write_text(content, encoding="utf-8")
        result.core_count = len(core)
        result.category_counts = {name: len(entries) for name, entries in categories.items()}

    @staticmethod
    def _markdown(directory: Path) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob("*.md") if p.is_file() and p.name != INDEX_FILENAME)
