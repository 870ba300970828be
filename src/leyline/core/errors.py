"""
Structured error types for leyline.

Every failure the CLI can surface is a LeylineError. Each error carries a
category, the operation that failed, a context mapping, and an optional
chained cause, and it knows how to explain itself to the user through
``recovery_suggestions()``.

Manifesto:
    - **Typed hierarchy:** One subclass per failure domain (git, cache, sync state...)
    - **Actionable:** Every error lists concrete recovery steps
    - **Platform aware:** Suggestions adapt to windows / macos / linux
    - **Serializable:** ``to_dict()`` feeds ``--json`` output and structured logs

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        LeylineError                              │
        │          (message, operation, context, category, cause)          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConflictDetectedError   InvalidSyncStateError  SyncStateError   │
        │  (CONFLICT)              (SYNC_STATE)           (SYNC_STATE)     │
        │                                                                  │
        │  ComparisonFailedError   RemoteAccessError      GitError         │
        │  (COMPARISON)            (REMOTE_ACCESS)        (GIT)            │
        │                                                    │             │
        │                                      GitNotAvailableError        │
        │                                      GitCommandError             │
        │                                                                  │
        │  CacheError              FileSystemError        PlatformError    │
        │  └ CacheOperationError   (FILESYSTEM)           (PLATFORM)       │
        │                                                                  │
        │  ConfigurationError  SyncError  DetectionError  CommandError     │
        │  ValidationFailedError                                           │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = GitError("fetch failed", command="git fetch origin master", exit_status=128)
    >>> err.category
    <ErrorCategory.GIT: 'git'>
    >>> err.recovery_suggestions()[0]
    'Verify git is installed and in PATH'

    >>> err = CacheError("disk full").with_context(cache_dir="/tmp/c")
    >>> err.to_dict()["context"]
    {'cache_dir': '/tmp/c'}

Guardrails:
    ❌ DON'T: raise bare Exception from library code
    ✅ DO: raise the LeylineError subclass for the failing domain

    ❌ DON'T: print from library code
    ✅ DO: let the CLI render ``recovery_suggestions()``

Tags:
    error-handling, exception-hierarchy, recovery, leyline
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from leyline.core.platform import current_platform


class ErrorCategory(str, Enum):
    """Error domains used for rendering and structured logs."""

    GENERAL = "general"
    CONFLICT = "conflict"
    SYNC = "sync"
    SYNC_STATE = "sync_state"
    COMPARISON = "comparison"
    REMOTE_ACCESS = "remote_access"
    CACHE = "cache"
    FILESYSTEM = "filesystem"
    GIT = "git"
    PLATFORM = "platform"
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    DETECTION = "detection"
    COMMAND = "command"


class LeylineError(Exception):
    """
    Base exception for all leyline errors.

    Subclasses set ``default_category`` and override ``recovery_suggestions``.
    ``context`` is a flat mapping; ``None`` values are dropped when serialized.
    """

    default_category: ErrorCategory = ErrorCategory.GENERAL

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        context: dict[str, Any] | None = None,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.context: dict[str, Any] = dict(context or {})
        self.category = category or self.default_category
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def platform(self) -> str:
        return current_platform()

    def recovery_suggestions(self) -> list[str]:
        return [
            "Run the command with --verbose for more detailed error information",
            "Check the Leyline documentation for troubleshooting guidance",
        ]

    def platform_specific_suggestions(self) -> list[str]:
        plat = self.platform
        if plat == "windows":
            return [
                "Ensure Windows Defender is not blocking file operations",
                "Try running as Administrator if permission errors occur",
            ]
        if plat == "macos":
            return [
                "Check System Preferences > Security & Privacy for file access permissions",
                "Use 'sudo' if administrative access is required",
            ]
        if plat == "linux":
            return [
                "Check file permissions with 'ls -la'",
                "Use 'sudo' if administrative access is required",
            ]
        return []

    def with_context(self, **kwargs: Any) -> LeylineError:
        """Add context entries (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "platform": self.platform,
        }
        if self.operation:
            result["operation"] = self.operation
        context = {k: v for k, v in self.context.items() if v is not None}
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# UPDATE / SYNC STATE
# =============================================================================


class ConflictDetectedError(LeylineError):
    """Local and remote both changed the same files."""

    default_category = ErrorCategory.CONFLICT

    def __init__(self, conflicts: Any, **kwargs: Any):
        if conflicts is None:
            conflicts = []
        elif isinstance(conflicts, (str, bytes)) or not isinstance(conflicts, (list, tuple, set)):
            conflicts = [conflicts]
        self.conflicts = list(conflicts)
        super().__init__(self._build_message(), **kwargs)

    @property
    def conflicted_paths(self) -> list[str]:
        return [getattr(c, "path", None) or str(c) for c in self.conflicts]

    @property
    def conflict_count(self) -> int:
        return len(self.conflicts)

    def _build_message(self) -> str:
        count = len(self.conflicts)
        paths = ", ".join(self.conflicted_paths[:3])
        message = f"{count} conflict{'s' if count != 1 else ''} detected in: {paths}"
        if count > 3:
            message += f" and {count - 3} more"
        return message

    def recovery_suggestions(self) -> list[str]:
        return [
            "Review conflicts carefully before proceeding",
            "Use 'leyline diff' to see exact differences",
            "Create backups of important local modifications",
            "Use --force to override local changes with remote versions",
            "Manually merge conflicts in affected files",
            "Use --dry-run to preview changes without applying them",
        ]


class InvalidSyncStateError(LeylineError):
    """The persisted sync state cannot be trusted."""

    default_category = ErrorCategory.SYNC_STATE

    def __init__(
        self,
        message: str = "Sync state is invalid or corrupted",
        *,
        state_file: str | None = None,
        validation_errors: list[str] | None = None,
        **kwargs: Any,
    ):
        self.state_file = state_file
        self.validation_errors = list(validation_errors or [])
        context = {"state_file": state_file, **kwargs.pop("context", {})}
        super().__init__(message, context=context, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        suggestions = [
            "Run 'leyline sync --force' to rebuild sync state from scratch",
            "Verify cache directory permissions are correct",
        ]
        if self.state_file:
            suggestions.append(f"Delete corrupted state file: rm '{self.state_file}'")
            suggestions.append("Check disk space in cache directory")
        if self.validation_errors:
            suggestions.append(f"Validation errors found: {', '.join(self.validation_errors)}")
        return suggestions + [
            "Clear entire cache if problems persist: rm -rf ~/.cache/leyline",
            "Check for concurrent leyline processes that might be corrupting state",
        ]


class SyncStateError(LeylineError):
    """Sync state metadata was rejected before it was written."""

    default_category = ErrorCategory.SYNC_STATE


class SyncError(LeylineError):
    """File synchronization could not start."""

    default_category = ErrorCategory.SYNC

    def recovery_suggestions(self) -> list[str]:
        return [
            "Check that the target path is a valid directory name",
            "Run 'leyline sync --verbose' to see each step",
        ]


# =============================================================================
# COMPARISON / REMOTE
# =============================================================================


class ComparisonFailedError(LeylineError):
    """Two files could not be compared."""

    default_category = ErrorCategory.COMPARISON

    def __init__(
        self,
        file_a: str | None,
        file_b: str | None = None,
        *,
        reason: str | None = None,
        **kwargs: Any,
    ):
        self.file_a = file_a
        self.file_b = file_b
        self.reason = reason
        message = f"Failed to compare files: {file_a} and {file_b}"
        if reason:
            message += f" ({reason})"
        context = {"file_a": file_a, "file_b": file_b, "reason": reason}
        super().__init__(message, context=context, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        suggestions = ["Verify both files exist and are readable"]
        reason = (self.reason or "").lower()
        if "permission" in reason:
            suggestions += [
                f"Check file permissions: ls -la '{self.file_a}' '{self.file_b}'",
                "Ensure you have read access to both files",
            ]
        elif "encoding" in reason:
            suggestions += [
                "Files may have encoding issues - ensure they are UTF-8",
                f"Use 'file' command to check file types: file '{self.file_a}'",
            ]
        elif "size" in reason or "too large" in reason:
            suggestions += [
                "One of the files may be too large for comparison",
                "Check available memory and disk space",
            ]
        elif "lock" in reason:
            suggestions += [
                "Files may be locked by another process",
                "Wait for other processes to complete and retry",
            ]
        return suggestions + self.platform_specific_suggestions()


class RemoteAccessError(LeylineError):
    """The upstream repository could not be reached."""

    default_category = ErrorCategory.REMOTE_ACCESS

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        operation_type: str | None = None,
        http_status: int | None = None,
        **kwargs: Any,
    ):
        self.url = url
        self.operation_type = operation_type
        self.http_status = http_status
        context = {
            "url": url,
            "operation_type": operation_type,
            "http_status": http_status,
            **kwargs.pop("context", {}),
        }
        super().__init__(message, context=context, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        suggestions: list[str] = []
        if self.http_status in (401, 403):
            suggestions += [
                "Check authentication credentials",
                "Verify you have access to the repository",
                "Update git credentials if using HTTPS",
            ]
        elif self.http_status == 404:
            suggestions += [
                "Verify the repository URL is correct",
                "Check if the repository exists and is accessible",
            ]
        elif self.http_status in (408, 502, 503, 504):
            suggestions += [
                "Network or server issue - retry in a few minutes",
                "Check your internet connection",
            ]
        elif self.http_status == 429:
            suggestions += [
                "Rate limited - wait before retrying",
                "Check if you're making too many requests",
            ]
        suggestions += [
            "Check firewall and proxy settings",
            "Try using a different network connection",
        ]
        domain = _extract_domain(self.url)
        if domain:
            suggestions.append(f"Verify DNS resolution: nslookup {domain}")
        return suggestions


def _extract_domain(url: str | None) -> str | None:
    if not url:
        return None
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


# =============================================================================
# CACHE / FILESYSTEM
# =============================================================================


class CacheError(LeylineError):
    """Cache directory or content problem."""

    default_category = ErrorCategory.CACHE

    def recovery_suggestions(self) -> list[str]:
        return [
            "Clear the cache directory: rm -rf ~/.cache/leyline",
            "Run sync with --no-cache flag to bypass cache",
            "Check cache directory permissions and available disk space",
        ]


class CacheOperationError(CacheError):
    """A specific cache read/write/delete failed."""

    def __init__(
        self,
        message: str,
        *,
        cache_path: str | None = None,
        operation_type: str | None = None,
        **kwargs: Any,
    ):
        self.cache_path = cache_path
        self.operation_type = operation_type
        self.disk_space_available = _disk_space(cache_path)
        context = {"cache_path": cache_path, "operation_type": operation_type}
        super().__init__(message, context=context, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        suggestions: list[str] = []
        if self.operation_type in ("write", "put", "disk_full"):
            suggestions += [
                f"Check available disk space: {self.disk_space_available or 'unknown'}",
                "Clean up old cache files: rm -rf ~/.cache/leyline/content",
            ]
            if self.cache_path:
                from os.path import dirname

                suggestions.append(
                    f"Verify cache directory permissions: ls -la '{dirname(self.cache_path)}'"
                )
        elif self.operation_type in ("read", "get"):
            suggestions += [
                "Cache may be corrupted - try clearing it: rm -rf ~/.cache/leyline",
                "Check file permissions on cache directory",
            ]
        elif self.operation_type == "delete":
            suggestions += [
                "Check if files are locked by another process",
                "Verify you have write permissions to cache directory",
            ]
        suggestions += [
            "Try running with a different cache directory: LEYLINE_CACHE_DIR=/tmp/leyline-cache",
            "Check for concurrent leyline processes using the same cache",
        ]
        return suggestions + self.platform_specific_suggestions()


def _disk_space(path: str | None) -> str | None:
    if not path:
        return None
    import os
    import shutil

    directory = os.path.dirname(path) or path
    if not os.path.exists(directory):
        return None
    try:
        free = shutil.disk_usage(directory).free
    except OSError:
        return None
    return f"{free // (1024 * 1024)}MB available"


class FileSystemError(LeylineError):
    """A filesystem operation failed (permissions, read-only, disk full)."""

    default_category = ErrorCategory.FILESYSTEM

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        reason: str | None = None,
        **kwargs: Any,
    ):
        self.path = path
        self.reason = reason
        super().__init__(message, context={"path": path, "reason": reason}, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        suggestions: list[str] = []
        if self.reason == "permission_denied":
            suggestions += [
                "Ensure you have appropriate access rights",
                "Try running with elevated privileges if necessary",
            ]
            if self.path:
                suggestions.append(f"Check file permissions: ls -la '{self.path}'")
        elif self.reason == "read_only_filesystem":
            suggestions += [
                "Filesystem is mounted read-only",
                "Remount filesystem with write permissions if possible",
            ]
            if self.path:
                suggestions.append(f"Check mount options: mount | grep '{self.path}'")
        elif self.reason == "disk_full":
            suggestions += [
                "Free up disk space",
                "Remove unnecessary files or move to another location",
            ]
            if self.path:
                suggestions.append(f"Check disk usage: df -h '{self.path}'")
        return suggestions + self.platform_specific_suggestions()


# =============================================================================
# GIT
# =============================================================================


class GitError(LeylineError):
    """A git invocation failed."""

    default_category = ErrorCategory.GIT

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        exit_status: int | str | None = None,
        stderr_output: str | None = None,
        **kwargs: Any,
    ):
        self.command = command
        self.exit_status = exit_status
        self.stderr_output = stderr_output
        context = {"command": command, "exit_status": exit_status, **kwargs.pop("context", {})}
        super().__init__(message, context=context, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        suggestions: list[str] = []
        stderr = (self.stderr_output or "").lower()
        if "permission denied" in stderr or "access denied" in stderr:
            suggestions += [
                "Check git repository permissions",
                "Verify SSH key or authentication credentials",
                "Ensure git user has appropriate access rights",
            ]
        elif "not found" in stderr or "does not exist" in stderr:
            suggestions += [
                "Verify the repository URL is correct",
                "Check if the repository exists and is accessible",
                "Ensure the branch or tag exists",
            ]
        elif "network" in stderr or "connection" in stderr:
            suggestions += [
                "Check internet connection",
                "Verify DNS resolution for git host",
                "Check firewall and proxy settings",
            ]
        return suggestions + [
            "Verify git is installed and in PATH",
            "Check git configuration: git config --list",
            "Try running the git command manually for more details",
        ]


class GitNotAvailableError(GitError):
    """No git executable on PATH."""

    def recovery_suggestions(self) -> list[str]:
        return [
            "Install git and ensure it is in your PATH",
            "Verify with: git --version",
        ]


class GitCommandError(GitError):
    """A git subcommand exited non-zero or was rejected before running."""


# =============================================================================
# PLATFORM / CONFIG / MISC
# =============================================================================


class PlatformError(LeylineError):
    """An OS-specific operation failed (locking, permissions)."""

    default_category = ErrorCategory.PLATFORM

    def __init__(self, message: str, *, platform_operation: str | None = None, **kwargs: Any):
        self.platform_operation = platform_operation
        context = {
            "platform_operation": platform_operation,
            "platform_type": current_platform(),
            **kwargs.pop("context", {}),
        }
        super().__init__(message, context=context, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        plat = self.platform
        if self.platform_operation == "file_locking":
            if plat == "windows":
                return [
                    "Close any programs that might be using the files",
                    "Check Windows Resource Monitor for file handles",
                    "Try restarting if files remain locked",
                ]
            if plat in ("macos", "linux"):
                return [
                    f"Check for processes using the files: lsof '{self.context.get('file_path')}'",
                    "Wait for other processes to complete",
                    "Use 'fuser' to identify blocking processes",
                ]
        if self.platform_operation == "permissions":
            if plat == "windows":
                return [
                    "Run Command Prompt as Administrator",
                    "Check file properties > Security tab for permissions",
                    "Use 'icacls' command to modify permissions",
                ]
            if plat == "macos":
                return [
                    "Use 'chmod' to fix permissions: chmod 644 filename",
                    "Check System Preferences > Security & Privacy",
                    "Use 'sudo' for administrative operations",
                ]
            if plat == "linux":
                return [
                    "Check permissions: ls -la filename",
                    "Use 'chmod' to fix permissions: chmod 644 filename",
                    "Use 'sudo' for administrative operations",
                ]
        return []


class ConfigurationError(LeylineError):
    """Invalid categories, settings or ``.leyline`` file."""

    default_category = ErrorCategory.CONFIGURATION

    def recovery_suggestions(self) -> list[str]:
        return [
            "Check .leyline file syntax (must be valid YAML)",
            "Ensure categories is an array of strings",
            'Validate version constraint format (e.g., ">=2.0.0")',
            "Run leyline categories to see available categories",
        ]


class DetectionError(LeylineError):
    """Project language detection failed."""

    default_category = ErrorCategory.DETECTION

    def recovery_suggestions(self) -> list[str]:
        return [
            "Verify the project path exists",
            "Check that package.json is valid JSON",
        ]


class ValidationFailedError(LeylineError):
    """Document validation found errors."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, error_count: int = 0, **kwargs: Any):
        self.error_count = error_count
        super().__init__(message, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        return [
            "Fix the reported issues and re-run validation",
            "Validate a single file with: leyline validate front-matter -f <file>",
        ]


class CommandError(LeylineError):
    """A CLI command could not complete."""

    default_category = ErrorCategory.COMMAND

    def __init__(
        self,
        message: str,
        *,
        suggestions: list[str] | None = None,
        **kwargs: Any,
    ):
        self._suggestions = list(suggestions or [])
        super().__init__(message, **kwargs)

    def recovery_suggestions(self) -> list[str]:
        if self._suggestions:
            return list(self._suggestions)
        return [
            "Ensure the leyline directory exists: docs/leyline",
            "Run leyline sync first to initialize",
            "Check file permissions in the project directory",
        ]


__all__ = [
    "ErrorCategory",
    "LeylineError",
    "ConflictDetectedError",
    "InvalidSyncStateError",
    "SyncStateError",
    "SyncError",
    "ComparisonFailedError",
    "RemoteAccessError",
    "CacheError",
    "CacheOperationError",
    "FileSystemError",
    "GitError",
    "GitNotAvailableError",
    "GitCommandError",
    "PlatformError",
    "ConfigurationError",
    "DetectionError",
    "ValidationFailedError",
    "CommandError",
]
