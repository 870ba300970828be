"""Detect TypeScript and web projects from ``package.json``."""

from __future__ import annotations

import json
from typing import Any

from leyline.core.errors import DetectionError
from leyline.detection.base import LanguageDetector

TYPESCRIPT_INDICATORS = frozenset({"typescript", "ts-node", "tsx", "tsc"})
WEB_INDICATORS = frozenset(
    {
        "react",
        "react-dom",
        "next",
        "gatsby",
        "vue",
        "svelte",
        "vite",
        "webpack",
        "@angular/core",
        "@angular/cli",
    }
)
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")


class NodeDetector(LanguageDetector):
    def detect(self) -> list[str]:
        package = self._parse_package_json()
        if not package:
            return []

        dependencies = self._collect_dependencies(package)
        categories = []
        if any(d in TYPESCRIPT_INDICATORS or d.startswith("@types/") for d in dependencies):
            categories.append("typescript")
        if any(d in WEB_INDICATORS or d.startswith("@types/react") for d in dependencies):
            categories.append("web")
        return categories

    def _parse_package_json(self) -> dict[str, Any] | None:
        content = self.read_file("package.json")
        if content is None:
            return None
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DetectionError(f"Failed to parse package.json: {e}", cause=e) from e
        return data if isinstance(data, dict) else None

    @staticmethod
    def _collect_dependencies(package: dict[str, Any]) -> list[str]:
        dependencies: list[str] = []
        for section in DEPENDENCY_SECTIONS:
            deps = package.get(section)
            if isinstance(deps, dict):
                dependencies.extend(deps)
        return dependencies
