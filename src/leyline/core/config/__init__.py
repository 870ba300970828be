"""Configuration: process-wide settings and the per-project ``.leyline`` file.

Quick start::

    from leyline.core.config import get_settings, LeylineFile

    settings = get_settings()
    print(settings.cache_path)

    project = LeylineFile.load("/path/to/project")
    if project and project.valid:
        print(project.categories)
"""

from .leyline_file import LeylineFile
from .settings import (
    DEFAULT_CACHE_THRESHOLD,
    DEFAULT_REMOTE_REF,
    DEFAULT_REMOTE_URL,
    LeylineSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_CACHE_THRESHOLD",
    "DEFAULT_REMOTE_REF",
    "DEFAULT_REMOTE_URL",
    "LeylineFile",
    "LeylineSettings",
    "clear_settings_cache",
    "get_settings",
]
