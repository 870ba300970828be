"""Command orchestration behind the ``leyline`` CLI.

Each command returns plain data (dicts or dataclasses) and raises
``LeylineError`` subclasses; rendering lives in ``leyline.cli``.
"""

from .base import BaseCommand, normalize_error, resolve_categories
from .diff import DiffCommand
from .status import StatusCommand
from .sync import SyncCommand, SyncReport
from .update import Conflict, UpdateCommand, UpdatePlan, UpdateResult

__all__ = [
    "BaseCommand",
    "Conflict",
    "DiffCommand",
    "StatusCommand",
    "SyncCommand",
    "SyncReport",
    "UpdateCommand",
    "UpdatePlan",
    "UpdateResult",
    "normalize_error",
    "resolve_categories",
]
