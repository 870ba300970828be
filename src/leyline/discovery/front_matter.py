"""Fast YAML front-matter extraction for discovery."""

from __future__ import annotations

from typing import Any

import yaml

from leyline.core.logging import get_logger

logger = get_logger(__name__)

MAX_FRONT_MATTER_SIZE = 8 * 1024


class FrontMatterTooLarge(ValueError):
    pass


def split_front_matter(content: str) -> tuple[str, str] | None:
    """Return ``(yaml_text, body)`` or None when there is no front-matter block."""
    if not content.startswith("---"):
        return None
    end = content.find("\n---\n", 4)
    if end == -1:
        return None
    return content[4:end], content[end + len("\n---\n"):]


def extract_front_matter(content: str, strict: bool = False) -> dict[str, Any] | None:
    """Parse the leading ``---`` block; None when absent, oversized or invalid.

    With ``strict=True`` an oversized block raises :class:`FrontMatterTooLarge`
    and invalid YAML raises ``yaml.YAMLError`` instead of returning None.
    """
    parts = split_front_matter(content)
    if parts is None:
        return None
    yaml_text = parts[0]
    size = len(yaml_text.encode("utf-8"))
    try:
        if size > MAX_FRONT_MATTER_SIZE:
            raise FrontMatterTooLarge(f"Front-matter too large ({size} bytes)")
        data = yaml.safe_load(yaml_text)
    except (FrontMatterTooLarge, yaml.YAMLError) as e:
        if strict:
            raise
        logger.debug("front_matter_rejected", error=str(e))
        return None
    return data if isinstance(data, dict) else None
