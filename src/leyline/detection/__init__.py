"""Project language detection: suggest categories to sync.

Example::

    from leyline.detection import detect_categories

    detect_categories("/path/to/project")   # ['typescript', 'web']
"""

from __future__ import annotations

from pathlib import Path

from leyline.core.logging import get_logger

from .base import LanguageDetector
from .node import NodeDetector

logger = get_logger(__name__)

DETECTORS: tuple[type[LanguageDetector], ...] = (NodeDetector,)


def detect_categories(project_path: str | Path = ".") -> list[str]:
    """Run every detector and return the de-duplicated categories, in order."""
    found: list[str] = []
    for detector_class in DETECTORS:
        for category in detector_class(project_path).detect():
            if category not in found:
                found.append(category)
    logger.debug("categories_detected", path=str(project_path), categories=found)
    return found


__all__ = ["DETECTORS", "LanguageDetector", "NodeDetector", "detect_categories"]
