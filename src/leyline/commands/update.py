"""
``leyline update``: preview upstream changes, detect conflicts, apply.

Manifesto:
    An update must never silently destroy local edits.  The plan compares
    three manifests: the baseline recorded by the last sync, the files on
    disk now, and the freshly fetched upstream tree.  A file that changed
    locally since the baseline *and* differs upstream is a conflict, and
    conflicts stop the update unless ``--force`` is given.

Architecture:
    ::

        UpdateCommand
          ├── plan()     → UpdatePlan(changes, conflicts, summary, metadata)
          │     ├── SyncState.compare_with_current_files()   local vs baseline
          │     ├── fetch_remote_docs()                       local vs remote
          │     └── _detect_conflicts()                       both_modified, ...
          ├── apply(plan) → UpdateResult                      FileSyncer + new baseline
          └── execute()   → plan (dry run / nothing to do) or UpdateResult

    Conflict types:

    =============================  ==========================================
    both_modified                  changed locally and upstream
    local_added_remote_modified    added locally, different file upstream
    local_modified_remote_removed  changed locally, deleted upstream
    =============================  ==========================================

Examples:
    >>> command = UpdateCommand("/path/to/project", dry_run=True)
    >>> plan = command.execute()
    >>> plan.summary["status"]
    'Updates available'

Tags:
    leyline, commands, update, conflicts
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from leyline import __version__
from leyline.commands.base import BaseCommand
from leyline.commands.sync import validate_target_path
from leyline.core.errors import ConflictDetectedError, GitError
from leyline.core.logging import get_logger
from leyline.sync.comparator import FileComparator
from leyline.sync.file_syncer import FileSyncer
from leyline.sync.git_client import GitClient
from leyline.sync.remote import fetch_remote_docs
from leyline.sync.state import SyncState

logger = get_logger(__name__)

STATUS_NO_STATE = "No sync state found"
STATUS_NO_DIFFERENCES = "No differences found"
STATUS_CONFLICTS = "Updates available with conflicts"
STATUS_UPDATES = "Updates available"
STATUS_UP_TO_DATE = "Up to date"

_CONFLICT_DESCRIPTIONS = {
    "both_modified": "File modified both locally and remotely",
    "local_added_remote_modified": "File added locally but also exists remotely with different content",
    "local_modified_remote_removed": "File modified locally but removed remotely",
}


@dataclass
class Conflict:
    path: str
    type: str
    local_content: str | None = None
    remote_content: str | None = None

    @property
    def description(self) -> str:
        return _CONFLICT_DESCRIPTIONS.get(self.type, "Unknown conflict type")

    def resolution_options(self) -> list[str]:
        if self.type == "local_modified_remote_removed":
            return [
                "Keep local file (ignore remote removal)",
                "Remove local file (accept remote removal)",
            ]
        return [
            "Keep local version (ignore remote changes)",
            "Accept remote version (lose local changes)",
            "Merge manually",
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "type": self.type,
            "description": self.description,
            "resolution_options": self.resolution_options(),
        }


@dataclass
class UpdatePlan:
    changes: dict[str, list[str]]
    conflicts: list[Conflict]
    summary: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def conflicted(self) -> bool:
        return bool(self.conflicts)

    @property
    def total_changes(self) -> int:
        return self.summary.get("total_changes", 0)

    @property
    def safe_to_apply(self) -> bool:
        return not self.conflicted and self.total_changes > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "status": self.summary.get("status"),
                "total_changes": self.total_changes,
                "added_files": self.summary.get("added", 0),
                "modified_files": self.summary.get("modified", 0),
                "removed_files": self.summary.get("removed", 0),
                "conflicts": self.summary.get("conflicts", 0),
            },
            "changes": {k: list(v) for k, v in self.changes.items()},
            "conflicts": [c.to_dict() for c in self.conflicts],
            "metadata": dict(self.metadata),
        }


@dataclass
class UpdateResult:
    plan: UpdatePlan
    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)
    duration_ms: float = 0.0
    state_saved: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.plan.to_dict(),
            "result": {
                "files_copied": len(self.copied),
                "files_skipped": len(self.skipped),
                "errors": list(self.errors),
                "duration_ms": self.duration_ms,
                "state_saved": self.state_saved,
            },
        }


def build_summary(changes: dict[str, list[str]], conflicts: list[Conflict], status: str | None = None) -> dict[str, Any]:
    added, modified, removed = (len(changes.get(k, [])) for k in ("added", "modified", "removed"))
    total = added + modified + removed
    if status is None:
        if conflicts:
            status = STATUS_CONFLICTS
        elif total:
            status = STATUS_UPDATES
        else:
            status = STATUS_UP_TO_DATE
    return {
        "total_changes": total,
        "added": added,
        "modified": modified,
        "removed": removed,
        "conflicts": len(conflicts),
        "status": status,
    }


def _empty_changes() -> dict[str, list[str]]:
    return {"added": [], "modified": [], "removed": []}


class UpdateCommand(BaseCommand):
    def __init__(
        self,
        directory: str | Path = ".",
        categories: list[str] | None = None,
        cache_dir: str | Path | None = None,
        verbose: bool = False,
        *,
        force: bool = False,
        dry_run: bool = False,
        remote_url: str | None = None,
        remote_ref: str | None = None,
        git_client: GitClient | None = None,
    ):
        super().__init__(validate_target_path(directory), categories, cache_dir, verbose)
        self.force = force
        self.dry_run = dry_run
        self.remote_url = remote_url
        self.remote_ref = remote_ref
        self.git_client = git_client
        self.state = SyncState(self.cache_dir)

    def execute(self) -> UpdatePlan | UpdateResult:
        """Plan, then apply unless this is a dry run or nothing changed."""
        plan = self.plan()
        if self.dry_run:
            return plan
        if plan.conflicted and not self.force:
            raise ConflictDetectedError(plan.conflicts)
        if plan.total_changes == 0:
            return plan
        return self.apply(plan)

    # ── Planning ─────────────────────────────────────────────────────────

    def plan(self) -> UpdatePlan:
        categories = self.active_categories()
        metadata: dict[str, Any] = {
            "baseline_exists": self.state.state_exists(),
            "categories": categories,
            "cache_enabled": self.cache_available(),
        }

        local_manifest = self.relative_manifest(self.leyline_path, self.discover_files(categories=categories))
        baseline = self.state.compare_with_current_files(local_manifest)
        if baseline is None:
            metadata["baseline_exists"] = False
            return UpdatePlan(_empty_changes(), [], build_summary({}, [], STATUS_NO_STATE), metadata)
        metadata["local_edits"] = sorted(set(baseline["modified"]) | set(baseline["added"]))

        try:
            with self._fetch(categories) as remote_root:
                remote_manifest = self.relative_manifest(
                    remote_root, self.discover_files(remote_root, categories)
                )
                remote_changes = FileComparator.compare_manifests(local_manifest, remote_manifest)
                conflicts = self._detect_conflicts(baseline, remote_changes, remote_root)
        except GitError as e:
            logger.warning("update_fetch_failed", error=e.message)
            metadata["fetch_error"] = e.message
            return UpdatePlan(_empty_changes(), [], build_summary({}, [], STATUS_NO_DIFFERENCES), metadata)

        changes = {k: remote_changes[k] for k in ("added", "modified", "removed")}
        return UpdatePlan(changes, conflicts, build_summary(changes, conflicts), metadata)

    def _detect_conflicts(
        self, baseline: dict[str, Any], remote: dict[str, list[str]], remote_root: Path
    ) -> list[Conflict]:
        locally_modified = set(baseline["modified"])
        locally_added = set(baseline["added"])
        remote_modified = set(remote["modified"])

        conflicts = [
            self._conflict(path, "both_modified", remote_root)
            for path in sorted(locally_modified & remote_modified)
        ]
        conflicts += [
            self._conflict(path, "local_added_remote_modified", remote_root)
            for path in sorted(locally_added & remote_modified)
        ]
        conflicts += [
            self._conflict(path, "local_modified_remote_removed", remote_root)
            for path in sorted(locally_modified & set(remote["removed"]))
        ]
        return conflicts

    def _conflict(self, relative: str, kind: str, remote_root: Path) -> Conflict:
        return Conflict(
            path=relative,
            type=kind,
            local_content=_read(self.leyline_path / relative),
            remote_content=_read(remote_root / relative),
        )

    # ── Applying ─────────────────────────────────────────────────────────

    def apply(self, plan: UpdatePlan) -> UpdateResult:
        """Copy the planned upstream changes; local edits are only overwritten with ``force``."""
        started = time.perf_counter()
        categories = plan.metadata.get("categories") or self.active_categories()
        result = UpdateResult(plan=plan)

        paths = list(plan.changes.get("added", [])) + list(plan.changes.get("modified", []))
        if not self.force:
            local_edits = set(plan.metadata.get("local_edits", []))
            local_edits.update(c.path for c in plan.conflicts)
            paths = [p for p in paths if p not in local_edits]

        with self._fetch(categories) as remote_root:
            syncer = FileSyncer(remote_root, self.leyline_path, cache=self.file_cache)
            synced = syncer.sync(force=True, force_git=True, paths=paths)
            remote_manifest = self.relative_manifest(remote_root, self.discover_files(remote_root, categories))

        result.copied, result.skipped, result.errors = synced.copied, synced.skipped, synced.errors
        result.duration_ms = self.elapsed_ms(started)

        if synced.ok:
            local_manifest = self.relative_manifest(self.leyline_path, self.discover_files(categories=categories))
            result.state_saved = self.state.save_sync_state(
                categories,
                self.state.baseline_manifest(remote_manifest, local_manifest),
                leyline_version=__version__,
                sync_duration_ms=result.duration_ms,
            )
        logger.info("update_applied", copied=len(result.copied), errors=len(result.errors))
        return result

    def _fetch(self, categories: list[str]):
        return fetch_remote_docs(
            categories,
            base_dir=self.base_directory,
            remote_url=self.remote_url,
            remote_ref=self.remote_ref,
            git_client=self.git_client,
        )


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
