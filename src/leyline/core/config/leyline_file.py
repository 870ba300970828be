"""
Project-level ``.leyline`` configuration file.

A project can pin the categories it syncs by committing a ``.leyline`` YAML
file at its root::

    categories:
      - typescript
      - web
    version: ">=2.0.0"
    docs_path: docs/leyline

Problems are collected into ``errors`` instead of raised, so a broken file
degrades to "no project configuration" with a readable explanation.

Tags:
    leyline, configuration, yaml, project-file
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

DEFAULT_FILENAME = ".leyline"
DEFAULT_DOCS_PATH = "docs/leyline"
ALLOWED_KEYS = ("categories", "version", "docs_path")

_VERSION_CONSTRAINT_RE = re.compile(r"^[><=~]+\s*\d+\.\d+(\.\d+)?")


class LeylineFile:
    """Parsed ``.leyline`` file."""

    def __init__(self, file_path: str | Path):
        self.file_path = Path(file_path)
        self.categories: list[str] = []
        self.version: str | None = None
        self.docs_path: str = DEFAULT_DOCS_PATH
        self._errors: list[str] = []

        self._parse_file()
        self._validate_configuration()

    @classmethod
    def load(cls, directory: str | Path | None = None) -> LeylineFile | None:
        """Load ``<directory>/.leyline``; None when the file does not exist."""
        file_path = Path(directory or Path.cwd()) / DEFAULT_FILENAME
        if not file_path.is_file():
            return None
        return cls(file_path)

    @property
    def valid(self) -> bool:
        return not self._errors

    @property
    def errors(self) -> list[str]:
        return list(self._errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": list(self.categories),
            "version": self.version,
            "docs_path": self.docs_path,
        }

    # ── Parsing ──────────────────────────────────────────────────────────

    def _parse_file(self) -> None:
        try:
            data = yaml.safe_load(self.file_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            self._errors.append(f"YAML syntax error: {e}")
            return
        except (OSError, UnicodeDecodeError) as e:
            self._errors.append(f"Failed to parse configuration: {e}")
            return

        if data is None:
            return
        if not isinstance(data, dict):
            self._errors.append("Configuration must be a YAML hash")
            return

        self.categories = self._parse_categories(data.get("categories"))
        self.version = self._parse_version(data.get("version"))
        self.docs_path = self._parse_docs_path(data.get("docs_path"))

        unknown = [str(k) for k in data if k not in ALLOWED_KEYS]
        if unknown:
            self._errors.append(f"Unknown configuration keys: {', '.join(unknown)}")

    def _parse_categories(self, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            self._errors.append("categories must be an array")
            return []

        invalid = [c for c in value if not (isinstance(c, str) and c)]
        if invalid:
            self._errors.append(f"Invalid categories: {invalid!r}")

        # dict.fromkeys keeps first-seen order while dropping duplicates
        return list(dict.fromkeys(c for c in value if isinstance(c, str) and c))

    def _parse_version(self, value: Any) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            self._errors.append("version must be a string")
            return None
        if not _VERSION_CONSTRAINT_RE.match(value):
            self._errors.append(f"Invalid version constraint: {value}")
            return None
        return value

    def _parse_docs_path(self, value: Any) -> str:
        if value is None:
            return DEFAULT_DOCS_PATH
        if not isinstance(value, str):
            self._errors.append("docs_path must be a string")
            return DEFAULT_DOCS_PATH
        return value.strip()

    def _validate_configuration(self) -> None:
        if "all" in self.categories:
            self._errors.append("Use specific category names instead of 'all'")
        # core is always synced, listing it is harmless
        self.categories = [c for c in self.categories if c != "core"]

    def __repr__(self) -> str:
        return f"LeylineFile({str(self.file_path)!r}, categories={self.categories!r})"
