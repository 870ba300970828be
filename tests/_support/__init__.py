"""
Test support utilities for leyline tests.

Helpers that build small standards corpora on disk and turn them into git
repositories, for tests that need more than a single fixture file.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

VERSION = "0.1.0"

TENETS = {
    "simplicity": (
        "Simplicity Above All",
        "Prefer the simplest design that solves the problem at hand.",
    ),
    "testability": (
        "Design for Testability",
        "Structure code so that every behaviour can be verified in isolation.",
    ),
}

CORE_BINDINGS = {
    "require-conventional-commits": (
        "simplicity",
        "Require Conventional Commits",
        "Every commit message follows the conventional commits format.",
    ),
}

CATEGORY_BINDINGS = {
    "typescript": {
        "no-any": (
            "simplicity",
            "Avoid the any Type",
            "TypeScript code must not use the any type outside of tests.",
        ),
    },
    "go": {
        "error-wrapping": (
            "testability",
            "Wrap Errors with Context",
            "Go errors are wrapped with context before being returned.",
        ),
    },
}


def tenet_text(doc_id: str, title: str, summary: str, version: str = VERSION) -> str:
    return (
        "---\n"
        f"id: {doc_id}\n"
        "last_modified: '2025-05-09'\n"
        f"version: '{version}'\n"
        "---\n"
        f"# Tenet: {title}\n"
        "\n"
        f"{summary}\n"
        "\n"
        "## Core Belief\n"
        "\n"
        "Small things compose.\n"
    )


def binding_text(doc_id: str, derived_from: str, title: str, summary: str, version: str = VERSION) -> str:
    return (
        "---\n"
        f"id: {doc_id}\n"
        "last_modified: '2025-05-09'\n"
        f"derived_from: {derived_from}\n"
        "enforced_by: code review\n"
        f"version: '{version}'\n"
        "---\n"
        f"# Binding: {title}\n"
        "\n"
        f"{summary}\n"
    )


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def build_docs(docs: Path) -> Path:
    """Write the sample corpus below ``docs`` (tenets/, bindings/...)."""
    for doc_id, (title, summary) in TENETS.items():
        write(docs / "tenets" / f"{doc_id}.md", tenet_text(doc_id, title, summary))
    for doc_id, (tenet, title, summary) in CORE_BINDINGS.items():
        write(docs / "bindings" / "core" / f"{doc_id}.md", binding_text(doc_id, tenet, title, summary))
    for category, bindings in CATEGORY_BINDINGS.items():
        for doc_id, (tenet, title, summary) in bindings.items():
            write(
                docs / "bindings" / "categories" / category / f"{doc_id}.md",
                binding_text(doc_id, tenet, title, summary),
            )
    return docs


def build_repo(root: Path) -> Path:
    """A leyline repository checkout: VERSION plus docs/."""
    root.mkdir(parents=True, exist_ok=True)
    write(root / "VERSION", VERSION + "\n")
    build_docs(root / "docs")
    return root


# ── git ──────────────────────────────────────────────────────────────────


def git_installed() -> bool:
    return shutil.which("git") is not None


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c", "user.name=Leyline Tests",
            "-c", "user.email=tests@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def init_git_repo(root: Path, branch: str = "master") -> str:
    """Commit everything under ``root`` on ``branch``; return its file:// URL."""
    git(root, "init", "-q")
    git(root, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    commit_all(root, "Initial standards")
    return root.resolve().as_uri()


def commit_all(root: Path, message: str) -> None:
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", message)


def fake_git_client(source_docs: Path):
    """A GitClient stand-in whose fetch copies the sparse paths from ``source_docs``."""
    from unittest.mock import MagicMock

    from leyline.sync.git_client import GitClient

    client = MagicMock(spec=GitClient)

    def fetch(remote_url, version_ref=None):
        checkout = Path(client.setup_sparse_checkout.call_args.args[0])
        for call in client.add_sparse_paths.call_args_list:
            for sparse in call.args[0]:
                relative = sparse.removeprefix("docs/").rstrip("/")
                source = source_docs / relative
                if source.is_dir():
                    shutil.copytree(source, checkout / "docs" / relative, dirs_exist_ok=True)

    client.fetch_version.side_effect = fetch
    return client
