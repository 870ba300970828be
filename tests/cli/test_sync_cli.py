"""Tests for the sync, status, diff and update CLI commands.

The remote is the sample docs tree served through a fake git client, so
these run without git or network access.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from _support import fake_git_client, write
from leyline.cli.app import app
from leyline.core.errors import GitCommandError

runner = CliRunner()


@pytest.fixture
def upstream(docs_root, monkeypatch):
    """Every GitClient created by the commands fetches from ``docs_root``."""
    monkeypatch.setattr("leyline.sync.remote.GitClient", lambda: fake_git_client(docs_root))
    return docs_root


@pytest.fixture
def synced(project, upstream):
    result = runner.invoke(app, ["sync", str(project)])
    assert result.exit_code == 0, result.output
    return project


def _local(project, relative):
    return project / "docs" / "leyline" / relative


# ── sync ─────────────────────────────────────────────────────────────


class TestSyncCli:
    def test_sync_core(self, project, upstream):
        result = runner.invoke(app, ["sync", str(project)])
        assert result.exit_code == 0
        assert f"Synchronizing leyline standards to: {project / 'docs' / 'leyline'}" in result.stdout
        assert "Categories: core" in result.stdout
        assert "Sync completed: 3 files copied, 0 files skipped" in result.stdout
        assert _local(project, "tenets/simplicity.md").is_file()

    def test_sync_categories_verbose(self, project, upstream):
        result = runner.invoke(app, ["sync", str(project), "-c", "typescript,go", "-v"])
        assert result.exit_code == 0
        assert "Categories: go, typescript" in result.stdout
        assert "Copied files:" in result.stdout
        assert "  + bindings/categories/go/error-wrapping.md" in result.stdout

    def test_categories_from_leyline_file(self, project, upstream):
        (project / ".leyline").write_text("categories:\n  - go\n", encoding="utf-8")
        result = runner.invoke(app, ["sync", str(project)])
        assert result.exit_code == 0
        assert "Categories: go" in result.stdout
        assert "(from .leyline file)" in result.stdout

    def test_dry_run(self, project, upstream):
        result = runner.invoke(app, ["sync", str(project), "--dry-run", "-c", "rust"])
        assert result.exit_code == 0
        assert "Options: dry-run" in result.stdout
        assert "Dry run: no files were changed." in result.stdout
        assert "  docs/bindings/categories/rust/" in result.stdout
        assert not (project / "docs").exists()

    def test_short_dry_run_flag(self, project, upstream):
        result = runner.invoke(app, ["sync", str(project), "-n"])
        assert result.exit_code == 0
        assert "Dry run: no files were changed." in result.stdout
        assert not (project / "docs").exists()

    def test_second_sync_skips_and_shows_stats(self, synced):
        result = runner.invoke(app, ["sync", str(synced), "--stats"])
        assert result.exit_code == 0
        assert "Sync completed: 0 files copied, 3 files skipped" in result.stdout
        assert "CACHE STATISTICS" in result.stdout

    def test_invalid_category(self, project, upstream):
        result = runner.invoke(app, ["sync", str(project), "-c", "cobol"])
        assert result.exit_code == 1
        assert "Invalid category 'cobol'" in result.output

    def test_missing_parent_directory(self, tmp_path, upstream):
        result = runner.invoke(app, ["sync", str(tmp_path / "a" / "b")])
        assert result.exit_code == 1
        assert "Parent directory does not exist" in result.output

    def test_git_failure(self, project, docs_root, monkeypatch):
        client = fake_git_client(docs_root)
        client.fetch_version.side_effect = GitCommandError(
            "Git command failed: git fetch origin master", stderr_output="fatal: couldn't find remote ref"
        )
        monkeypatch.setattr("leyline.sync.remote.GitClient", lambda: client)
        result = runner.invoke(app, ["sync", str(project)])
        assert result.exit_code == 1
        assert "Error: Git command failed" in result.output
        assert "Run with --verbose for more details" in result.output

    def test_git_failure_verbose_shows_debug_information(self, project, docs_root, monkeypatch):
        client = fake_git_client(docs_root)
        client.fetch_version.side_effect = GitCommandError("Git command failed", command="git fetch")
        monkeypatch.setattr("leyline.sync.remote.GitClient", lambda: client)
        result = runner.invoke(app, ["--verbose", "sync", str(project)])
        assert result.exit_code == 1
        assert "Error type: GitCommandError" in result.output
        assert "command: git fetch" in result.output


# ── status ───────────────────────────────────────────────────────────


class TestStatusCli:
    def test_clean(self, synced):
        result = runner.invoke(app, ["status", str(synced)])
        assert result.exit_code == 0
        assert result.stdout.startswith("Leyline Status Report")
        assert "  ✓ State exists" in result.stdout
        assert "  ✓ No local changes detected" in result.stdout
        assert "Sync coverage: ✓ 100.0% (perfect)" in result.stdout

    def test_changes_listed(self, synced):
        _local(synced, "tenets/simplicity.md").write_text("edited", encoding="utf-8")
        result = runner.invoke(app, ["status", str(synced)])
        assert "  1 change(s) detected:" in result.stdout
        assert "      ~ tenets/simplicity.md" in result.stdout

    def test_without_state(self, project):
        result = runner.invoke(app, ["status", str(project)])
        assert result.exit_code == 0
        assert "  ✗ No sync state found - run 'leyline sync' first" in result.stdout

    def test_json(self, synced):
        result = runner.invoke(app, ["status", str(synced), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["sync_state"]["exists"] is True
        assert data["file_summary"]["total_files"] == 3


# ── diff ─────────────────────────────────────────────────────────────


class TestDiffCli:
    def test_no_differences(self, synced):
        result = runner.invoke(app, ["diff", str(synced)])
        assert result.exit_code == 0
        assert "✓ No differences found between local and remote leyline standards" in result.stdout

    def test_changes(self, synced, upstream):
        write(upstream / "tenets" / "simplicity.md", "rewritten upstream\n")
        result = runner.invoke(app, ["diff", str(synced), "-v"])
        assert result.exit_code == 0
        assert "Summary: 1 change(s) detected" in result.stdout
        assert "  ~ tenets/simplicity.md" in result.stdout
        assert "Detailed Diffs:" in result.stdout
        assert "+rewritten upstream" in result.stdout

    def test_json(self, synced, upstream):
        write(upstream / "tenets" / "new.md", "new\n")
        result = runner.invoke(app, ["diff", str(synced), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["changes"]["added"] == ["tenets/new.md"]

    def test_invalid_format(self, synced):
        result = runner.invoke(app, ["diff", str(synced), "--format", "xml"])
        assert result.exit_code == 1
        assert "Invalid format 'xml'" in result.output

    def test_requires_synced_project(self, project, upstream):
        result = runner.invoke(app, ["diff", str(project)])
        assert result.exit_code == 1
        assert "No leyline directory found to compare" in result.output
        assert "Run leyline sync first to establish baseline" in result.output


# ── update ───────────────────────────────────────────────────────────


class TestUpdateCli:
    def test_up_to_date(self, synced):
        result = runner.invoke(app, ["update", str(synced)])
        assert result.exit_code == 0
        assert "Status: Up to date" in result.stdout
        assert "✓ Already up to date. No changes needed." in result.stdout

    def test_applies_changes(self, synced, upstream):
        write(upstream / "tenets" / "simplicity.md", "rewritten upstream\n")
        result = runner.invoke(app, ["update", str(synced)])
        assert result.exit_code == 0
        assert "  ~ tenets/simplicity.md" in result.stdout
        assert "✅ Update completed successfully!" in result.stdout
        assert "   Files copied: 1" in result.stdout
        assert _local(synced, "tenets/simplicity.md").read_text(encoding="utf-8") == "rewritten upstream\n"

    def test_dry_run(self, synced, upstream):
        write(upstream / "tenets" / "simplicity.md", "rewritten upstream\n")
        result = runner.invoke(app, ["update", str(synced), "-n"])
        assert result.exit_code == 0
        assert "✓ Dry-run complete. No changes were made." in result.stdout
        assert _local(synced, "tenets/simplicity.md").read_text(encoding="utf-8") != "rewritten upstream\n"

    def test_conflict_stops_update(self, synced, upstream):
        write(upstream / "tenets" / "simplicity.md", "rewritten upstream\n")
        _local(synced, "tenets/simplicity.md").write_text("local edit\n", encoding="utf-8")

        result = runner.invoke(app, ["update", str(synced)])
        assert result.exit_code == 1
        assert "🚨 Conflict Resolution Required" in result.output
        assert "   Issue: File modified both locally and remotely" in result.output
        assert "Error: 1 conflict detected in: tenets/simplicity.md" in result.output
        assert _local(synced, "tenets/simplicity.md").read_text(encoding="utf-8") == "local edit\n"

    def test_force(self, synced, upstream):
        write(upstream / "tenets" / "simplicity.md", "rewritten upstream\n")
        _local(synced, "tenets/simplicity.md").write_text("local edit\n", encoding="utf-8")

        result = runner.invoke(app, ["update", str(synced), "--force"])
        assert result.exit_code == 0
        assert "✅ Update completed successfully!" in result.stdout
        assert _local(synced, "tenets/simplicity.md").read_text(encoding="utf-8") == "rewritten upstream\n"

    def test_json_without_state(self, synced_project, upstream):
        result = runner.invoke(app, ["update", str(synced_project), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["summary"]["status"] == "No sync state found"

    def test_json_conflict_exits_nonzero(self, synced, upstream):
        write(upstream / "tenets" / "simplicity.md", "rewritten upstream\n")
        _local(synced, "tenets/simplicity.md").write_text("local edit\n", encoding="utf-8")

        result = runner.invoke(app, ["update", str(synced), "--format", "json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["conflicts"][0]["type"] == "both_modified"

    def test_json_apply(self, synced, upstream):
        write(upstream / "tenets" / "new.md", "new\n")
        result = runner.invoke(app, ["update", str(synced), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["result"]["files_copied"] == 1
