"""
Thin git wrapper for sparse checkouts of the leyline repository.

Only the directories selected by category are materialized::

    client = GitClient()
    client.setup_sparse_checkout("/tmp/leyline-sync-x1y2")
    client.add_sparse_paths(["docs/tenets/", "docs/bindings/core/"])
    client.fetch_version("https://github.com/phrazzld/leyline.git", "master")
    ...
    client.cleanup()

Every subcommand runs through :meth:`GitClient._run` with an argument list
(never a shell string), so URLs and refs cannot inject shell syntax.  URLs,
refs and sparse paths are still validated before they reach git.

Tags:
    leyline, git, sparse-checkout, subprocess
"""

from __future__ import annotations

import re
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from leyline.core.config import get_settings
from leyline.core.errors import GitCommandError, GitNotAvailableError
from leyline.core.logging import get_logger
from leyline.core.platform import git_available

logger = get_logger(__name__)

_REMOTE_URL_PATTERNS = (
    re.compile(r"\A(https?://|git@)[\w\-.]+[\w\-]+(/[\w\-.]+)*\.git\Z"),
    re.compile(r"\Afile://.*\Z"),
)


class GitClient:
    """Run git subcommands inside a single working directory."""

    def __init__(self, timeout: int | None = None):
        self.working_directory: Path | None = None
        self.timeout = timeout or get_settings().git_timeout_seconds

    def is_git_available(self) -> bool:
        return git_available()

    def setup_sparse_checkout(self, directory: str | Path) -> None:
        if not self.is_git_available():
            raise GitNotAvailableError(
                "Git binary not found. Please install git and ensure it is in your PATH.",
                operation="setup_sparse_checkout",
            )

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        self.working_directory = directory

        self._run("init")
        self._run("config", "core.sparseCheckout", "true")

    def add_sparse_paths(self, paths: Iterable[str] | str | None) -> None:
        working_directory = self._require_working_directory()
        if paths is None:
            return
        if isinstance(paths, str):
            paths = [paths]
        paths = list(paths)
        if not paths:
            return

        for path in paths:
            _validate_sparse_path(path)

        info_dir = working_directory / ".git" / "info"
        info_dir.mkdir(parents=True, exist_ok=True)
        with open(info_dir / "sparse-checkout", "a", encoding="utf-8") as fh:
            for path in paths:
                fh.write(f"{path}\n")
        logger.debug("sparse_paths_added", paths=paths)

    def fetch_version(self, remote_url: str, version_ref: str | None = None) -> None:
        self._require_working_directory()
        _validate_remote_url(remote_url)
        if version_ref is not None:
            _validate_version_reference(version_ref)
        ref = version_ref or "HEAD"

        self._add_remote_origin(remote_url)
        self._run("fetch", "origin", ref)
        self._run("checkout", "FETCH_HEAD")
        logger.info("git_fetch_completed", remote=remote_url, ref=ref)

    def cleanup(self) -> None:
        if self.working_directory is None:
            return
        if self.working_directory.exists():
            shutil.rmtree(self.working_directory, ignore_errors=True)
        self.working_directory = None

    # ── Internals ────────────────────────────────────────────────────────

    def _require_working_directory(self) -> Path:
        if self.working_directory is None:
            raise GitCommandError(
                "No working directory set. Call setup_sparse_checkout first."
            )
        return self.working_directory

    def _add_remote_origin(self, remote_url: str) -> None:
        try:
            self._run("remote", "add", "origin", remote_url)
        except GitCommandError as e:
            details = f"{e.message} {e.stderr_output or ''}"
            if "already exists" not in details and "remote origin" not in details:
                raise
            self._run("remote", "remove", "origin")
            self._run("remote", "add", "origin", remote_url)

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        command = " ".join(cmd)
        logger.debug("git_command", command=command, cwd=str(self.working_directory))
        try:
            result = subprocess.run(
                cmd,
                cwd=self.working_directory,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise GitCommandError(
                f"Git command timed out after {self.timeout}s: {command}",
                command=command,
                exit_status="timeout",
                cause=exc,
            ) from exc
        except OSError as exc:
            raise GitNotAvailableError(
                f"Failed to run git: {exc}", command=command, cause=exc
            ) from exc

        if result.returncode != 0:
            logger.warning(
                "git_command_failed",
                command=command,
                exit_status=result.returncode,
                stderr=result.stderr.strip(),
            )
            raise GitCommandError(
                f"Git command failed: {command} (exit status: {result.returncode})",
                command=command,
                exit_status=result.returncode,
                stderr_output=result.stderr,
            )
        return result


def _validate_sparse_path(path: str) -> None:
    if " " in path:
        raise GitCommandError(f"Invalid sparse-checkout path '{path}': paths cannot contain spaces")
    if path.startswith("/"):
        raise GitCommandError(f"Invalid sparse-checkout path '{path}': absolute paths not allowed")
    if "../" in path:
        raise GitCommandError(
            f"Invalid sparse-checkout path '{path}': parent directory traversal not allowed"
        )


def _validate_remote_url(url: str) -> None:
    if not isinstance(url, str) or not any(p.match(url) for p in _REMOTE_URL_PATTERNS):
        raise GitCommandError(f"Invalid remote URL format: {url}")


def _validate_version_reference(ref: str) -> None:
    if "../" in ref or "..\\" in ref or " " in ref or ref.startswith("-"):
        raise GitCommandError(f"Invalid version reference: {ref}")
