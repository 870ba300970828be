"""
Front-matter schema validation for tenet and binding documents.

Manifesto:
    Every document in the corpus carries a YAML front-matter block, and the
    tooling (index generation, sync, discovery) trusts it.  Validation
    collects *all* problems in one pass so an author fixes a file once,
    with a line number and a concrete suggestion for each error.

Architecture:
    ::

        FrontMatterValidator(root)
          ├── expected_version        <root>/VERSION
          ├── validate_all()          tenets/*.md, bindings/core/*.md,
          │                           bindings/categories/*/*.md
          ├── validate_file(path)     kind inferred from /tenets/ or /bindings/
          └── ValidationReport        errors (ErrorCollector), warnings, files_checked

    Required keys:

    ========  ===============================================
    tenets    id, last_modified, version
    bindings  id, last_modified, derived_from, enforced_by, version
    ========  ===============================================

Guardrails:
    ❌ DON'T: stop at the first error in a file
    ✅ DO: report every violation with its YAML line when known

    ❌ DON'T: accept unquoted garbage dates
    ✅ DO: accept a YAML date or a quoted ``YYYY-MM-DD`` that parses

Tags:
    leyline, validation, front-matter, yaml
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from leyline.core.errors import ConfigurationError
from leyline.core.logging import get_logger
from leyline.validation.collector import ErrorCollector, ValidationError
from leyline.validation.yaml_lines import parse_with_lines

logger = get_logger(__name__)

REQUIRED_KEYS = {
    "tenets": ("id", "last_modified", "version"),
    "bindings": ("id", "last_modified", "derived_from", "enforced_by", "version"),
}
INDEX_FILENAME = "00-index.md"

_FRONT_MATTER_RE = re.compile(r"^---\n(.*?)\n---", re.MULTILINE | re.DOTALL)
_ID_RE = re.compile(r"^[a-z0-9-]+$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+$")

NO_FRONT_MATTER_EXAMPLE = "  ---\n  id: example-id\n  last_modified: '2025-05-09'\n  ---"


def valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_ID_RE.match(value))


def valid_date(value: Any) -> bool:
    if isinstance(value, date):
        return True
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


@dataclass
class ValidationReport:
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    files_checked: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def files_with_errors(self) -> list[str]:
        return list(dict.fromkeys(e.file for e in self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
            "files_checked": list(self.files_checked),
        }


class FrontMatterValidator:
    def __init__(self, root: str | Path = ".", expected_version: str | None = None):
        self.root = Path(root)
        self.expected_version = expected_version or self._read_version()
        self.collector = ErrorCollector()
        self._ids: dict[str, str] = {}
        self._warnings: list[str] = []
        self._checked: list[str] = []

    def _read_version(self) -> str:
        version_file = self.root / "VERSION"
        if not version_file.is_file():
            raise ConfigurationError(
                "VERSION file not found",
                context={"path": str(version_file)},
            )
        return version_file.read_text(encoding="utf-8").strip()

    # ── Entry points ─────────────────────────────────────────────────────

    def validate_all(self) -> ValidationReport:
        self._reset()
        docs = self.root / "docs"
        for path in self._markdown(docs / "tenets", "*.md"):
            self._validate(path, "tenets")

        bindings = self._markdown(docs / "bindings" / "core", "*.md")
        bindings += self._markdown(docs / "bindings" / "categories", "*/*.md")
        misplaced = self._markdown(docs / "bindings", "*.md")
        if misplaced:
            self._warnings.append(
                f"Found {len(misplaced)} binding file(s) directly in docs/bindings/ directory. "
                "These should be moved to either docs/bindings/core/ or "
                "docs/bindings/categories/<category>/: "
                + ", ".join(self._display(p) for p in misplaced)
            )
        for path in bindings:
            self._validate(path, "bindings")

        return self._report()

    def validate_file(self, path: str | Path) -> ValidationReport:
        """Validate one file; a relative ``path`` is taken relative to the root."""
        self._reset()
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        directories = Path(self._display(path)).parts[:-1]
        if "tenets" in directories:
            self._validate(path, "tenets")
        elif "bindings" in directories:
            self._validate(path, "bindings")
        else:
            self.collector.add_error(
                file=self._display(path),
                type="invalid_file_path",
                message="Unable to determine file type from path",
                suggestion="Path must include /tenets/ or /bindings/ to identify the file type.",
            )
        return self._report()

    def file_contents(self) -> dict[str, str]:
        """Display path → text for files with errors, for context snippets."""
        contents = {}
        for display in self.collector.files():
            path = self.root / display if not Path(display).is_absolute() else Path(display)
            try:
                contents[display] = path.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
        return contents

    # ── Internals ────────────────────────────────────────────────────────

    def _reset(self) -> None:
        self.collector.clear()
        self._ids.clear()
        self._warnings = []
        self._checked = []

    def _report(self) -> ValidationReport:
        return ValidationReport(
            errors=self.collector.errors,
            warnings=list(self._warnings),
            files_checked=list(self._checked),
        )

    @staticmethod
    def _markdown(directory: Path, pattern: str) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob(pattern) if p.is_file() and p.name != INDEX_FILENAME)

    def _display(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return str(path)

    def _error(self, file: str, type: str, message: str, **kwargs: Any) -> None:
        self.collector.add_error(file=file, type=type, message=message, **kwargs)

    def _validate(self, path: Path, kind: str) -> None:
        file = self._display(path)
        self._checked.append(file)
        content = path.read_text(encoding="utf-8", errors="replace").replace("\r\n", "\n")

        match = _FRONT_MATTER_RE.search(content)
        if not match:
            self._error(
                file,
                "no_frontmatter",
                "No front-matter found",
                suggestion=(
                    f"All {kind} files must begin with YAML front-matter between triple dashes. "
                    f"See TENET_FORMATTING.md for the standard format. Example:\n{NO_FRONT_MATTER_EXAMPLE}"
                ),
            )
            return

        # front-matter YAML starts on the line after the opening delimiter
        offset = content[: match.start(1)].count("\n")
        parsed = parse_with_lines(match.group(1))
        for error in parsed["errors"]:
            line = error["line"] + offset if error["line"] else None
            self._error(file, error["type"], error["message"], line=line, suggestion=error["suggestion"])

        data = parsed["data"]
        if not isinstance(data, dict):
            if not parsed["errors"]:
                self._error(
                    file,
                    "empty_frontmatter",
                    "Empty YAML in front-matter",
                    suggestion="Front-matter must include required fields. See TENET_FORMATTING.md for details.",
                )
            return

        lines = {key: number + offset for key, number in parsed["line_map"].items()}
        self._check_fields(file, kind, data, lines)
        logger.debug("front_matter_checked", file=file, kind=kind)

    def _check_fields(self, file: str, kind: str, data: dict[str, Any], lines: dict[str, int]) -> None:
        required = REQUIRED_KEYS[kind]
        missing = [key for key in required if key not in data]
        if missing:
            self._error(
                file,
                "missing_required_fields",
                f"Missing required keys in YAML front-matter: {', '.join(missing)}",
                suggestion=(
                    f"{kind.capitalize()} must include: {', '.join(required)}. "
                    "See TENET_FORMATTING.md for the standard format."
                ),
            )

        doc_id = data.get("id")
        if doc_id is not None and str(doc_id) in self._ids:
            self._error(
                file,
                "duplicate_id",
                f"Duplicate ID '{doc_id}' in YAML front-matter (already used in {self._ids[str(doc_id)]})",
                line=lines.get("id"),
                field="id",
                suggestion="Each document must have a unique ID. Choose a different ID value.",
            )
        if not valid_id(doc_id):
            self._error(
                file,
                "invalid_id_format",
                f"Invalid ID format '{doc_id}' in YAML front-matter",
                line=lines.get("id"),
                field="id",
                suggestion="ID must contain only lowercase letters, numbers, and hyphens (e.g., 'example-id').",
            )
        if doc_id is not None:
            self._ids[str(doc_id)] = file

        if not valid_date(data.get("last_modified")):
            self._error(
                file,
                "invalid_date_format",
                "Invalid date format in 'last_modified' field",
                line=lines.get("last_modified"),
                field="last_modified",
                suggestion=(
                    "Date must be in ISO format (YYYY-MM-DD) and enclosed in quotes. "
                    "Example: last_modified: '2025-05-09'"
                ),
            )

        self._check_version(file, data.get("version"), lines)

        if kind == "bindings":
            self._check_binding_fields(file, data, lines)

        unknown = [key for key in data if key not in required]
        if unknown:
            self._error(
                file,
                "unknown_fields",
                f"Unknown key(s) in YAML front-matter: {', '.join(map(str, unknown))}",
                suggestion=(
                    f"Only these keys are allowed: {', '.join(required)}. "
                    "Remove unknown keys or check TENET_FORMATTING.md for valid fields."
                ),
            )

    def _check_version(self, file: str, version: Any, lines: dict[str, int]) -> None:
        expected = self.expected_version
        if isinstance(version, str) and _SEMVER_RE.match(version) and version == expected:
            return
        common = {"line": lines.get("version"), "field": "version"}
        if version is None or version == "":
            self._error(
                file,
                "missing_version",
                "Missing 'version' field in YAML front-matter",
                suggestion=(
                    "The 'version' field is required and must match the VERSION file. "
                    f"Expected: version: '{expected}'"
                ),
                **common,
            )
        elif version != expected:
            self._error(
                file,
                "version_mismatch",
                "Version mismatch in YAML front-matter",
                suggestion=(
                    f"Document version '{version}' does not match VERSION file '{expected}'. "
                    f"Expected: version: '{expected}'"
                ),
                **common,
            )
        else:
            self._error(
                file,
                "invalid_version_format",
                "Invalid version format in YAML front-matter",
                suggestion=f"Version must be in semantic version format (e.g., '{expected}').",
                **common,
            )

    def _check_binding_fields(self, file: str, data: dict[str, Any], lines: dict[str, int]) -> None:
        derived_from = data.get("derived_from")
        if not valid_id(derived_from):
            self._error(
                file,
                "invalid_derived_from_format",
                "Invalid format for 'derived_from' in YAML front-matter",
                line=lines.get("derived_from"),
                field="derived_from",
                suggestion=(
                    "The 'derived_from' field must be a string containing only lowercase "
                    "letters, numbers, and hyphens."
                ),
            )
        tenet = self.root / "docs" / "tenets" / f"{derived_from}.md"
        if not (isinstance(derived_from, str) and derived_from and tenet.is_file()):
            self._error(
                file,
                "nonexistent_tenet_reference",
                f"References non-existent tenet '{derived_from}'",
                line=lines.get("derived_from"),
                field="derived_from",
                suggestion=(
                    "The 'derived_from' field must reference an existing tenet ID. "
                    "Check docs/tenets/ for available tenets."
                ),
            )

        enforced_by = data.get("enforced_by")
        if not (isinstance(enforced_by, str) and enforced_by):
            self._error(
                file,
                "invalid_enforced_by_format",
                "Invalid format for 'enforced_by' in YAML front-matter",
                line=lines.get("enforced_by"),
                field="enforced_by",
                suggestion="The 'enforced_by' field must be a non-empty string.",
            )
