"""Base class for project language detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from leyline.core.errors import DetectionError


class LanguageDetector(ABC):
    """Inspect a project directory and report matching leyline categories."""

    def __init__(self, project_path: str | Path):
        self.project_path = Path(project_path).expanduser().resolve()
        if not self.project_path.is_dir():
            raise DetectionError(
                f"Project path does not exist: {self.project_path}",
                context={"project_path": str(self.project_path)},
            )

    @abstractmethod
    def detect(self) -> list[str]:
        """Return the categories this detector recognizes in the project."""

    def file_exists(self, relative_path: str) -> bool:
        return (self.project_path / relative_path).exists()

    def read_file(self, relative_path: str) -> str | None:
        path = self.project_path / relative_path
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DetectionError(f"Failed to read file {relative_path}: {e}", cause=e) from e
