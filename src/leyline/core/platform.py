"""Platform detection helpers used by error suggestions and ``leyline version``."""

from __future__ import annotations

import platform as _platform
import shutil
import sys


def current_platform() -> str:
    """Return ``windows``, ``macos``, ``linux`` or ``unknown``."""
    if sys.platform.startswith(("win32", "cygwin", "msys")):
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        return "linux"
    return "unknown"


def is_windows() -> bool:
    return current_platform() == "windows"


def git_available() -> bool:
    """True when a ``git`` executable is on PATH."""
    return shutil.which("git") is not None


def python_version() -> str:
    return _platform.python_version()


def system_description() -> str:
    return f"{_platform.system()} {_platform.machine()}".strip()
