"""Tests for leyline.sync.state and leyline.sync.comparator."""

from __future__ import annotations

import io

import pytest
import yaml

from leyline.cache import CacheErrorHandler, FileCache
from leyline.core.errors import ComparisonFailedError, SyncStateError
from leyline.core.hashing import content_hash
from leyline.sync.comparator import FileComparator
from leyline.sync.state import SCHEMA_VERSION, SyncState

A = content_hash("a")
B = content_hash("b")
C = content_hash("c")


@pytest.fixture
def state(cache_dir):
    return SyncState(cache_dir, error_handler=CacheErrorHandler(stream=io.StringIO()))


class TestSyncState:
    def test_defaults_to_settings_cache_dir(self, cache_dir):
        assert SyncState().state_file_path == cache_dir / "sync_state.yaml"

    def test_save_and_load(self, state):
        assert state.save_sync_state(["core"], {"tenets/a.md": A}, cache_hit_ratio=0.5, sync_duration_ms=12.5)
        loaded = state.load_sync_state()
        assert loaded["version"] == SCHEMA_VERSION
        assert loaded["categories"] == ["core"]
        assert loaded["manifest"] == {"tenets/a.md": A}
        assert loaded["leyline_version"]
        assert loaded["metadata"] == {"total_files": 1, "cache_hit_ratio": 0.5, "sync_duration_ms": 12.5}
        assert not state.state_file_path.with_name("sync_state.yaml.tmp").exists()

    def test_missing_state(self, state):
        assert not state.state_exists()
        assert state.load_sync_state() is None
        assert state.compare_with_current_files({}) is None
        assert state.state_age_seconds() is None

    @pytest.mark.parametrize(
        ("categories", "manifest", "message"),
        [
            ("core", {}, "Categories must be an array"),
            (["core"], [], "Manifest must be a hash"),
            (["core"], {"a.md": "nothex"}, "Invalid hash for file a.md"),
        ],
    )
    def test_save_validates(self, state, categories, manifest, message):
        with pytest.raises(SyncStateError, match=message):
            state.save_sync_state(categories, manifest)
        assert not state.state_exists()

    @pytest.mark.parametrize(
        "document",
        [
            "not: [valid",
            "- a list\n",
            "version: 1\ntimestamp: x\ncategories: core\nmanifest: {}\n",
            "version: 99\ntimestamp: x\ncategories: []\nmanifest: {}\n",
        ],
    )
    def test_corrupted_state_loads_as_none(self, state, cache_dir, document):
        cache_dir.mkdir(parents=True, exist_ok=True)
        state.state_file_path.write_text(document, encoding="utf-8")
        assert state.load_sync_state() is None

    def test_clear(self, state):
        state.save_sync_state([], {})
        assert state.clear_sync_state()
        assert not state.state_exists()
        assert state.clear_sync_state()

    def test_compare_with_current_files(self, state):
        state.save_sync_state(["core"], {"keep.md": A, "edit.md": B, "gone.md": C})
        comparison = state.compare_with_current_files({"keep.md": A, "edit.md": C, "new.md": A})
        assert comparison["added"] == ["new.md"]
        assert comparison["removed"] == ["gone.md"]
        assert comparison["modified"] == ["edit.md"]
        assert comparison["unchanged"] == ["keep.md"]
        assert comparison["base_categories"] == ["core"]

    def test_written_as_plain_yaml(self, state):
        state.save_sync_state(["go"], {"a.md": A})
        data = yaml.safe_load(state.state_file_path.read_text(encoding="utf-8"))
        assert list(data) == ["version", "timestamp", "leyline_version", "categories", "manifest", "metadata"]


class TestFileComparator:
    def _file(self, tmp_path, name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_content_hash_stores_in_cache(self, tmp_path, cache_dir):
        cache = FileCache(cache_dir)
        path = self._file(tmp_path, "a.md", "a")
        assert FileComparator(cache).content_hash(path) == A
        assert cache.get(A) == "a"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ComparisonFailedError) as exc_info:
            FileComparator().content_hash(tmp_path / "nope.md")
        assert exc_info.value.reason == "file_not_found"

    def test_create_manifest_skips_missing(self, tmp_path):
        path = self._file(tmp_path, "a.md", "a")
        assert FileComparator().create_manifest([path, tmp_path / "nope.md"]) == {str(path): A}

    def test_files_identical(self, tmp_path):
        a = self._file(tmp_path, "a.md", "same")
        b = self._file(tmp_path, "b.md", "same")
        c = self._file(tmp_path, "c.md", "diff")
        comparator = FileComparator()
        assert comparator.files_identical(a, b)
        assert not comparator.files_identical(a, c)
        assert not comparator.files_identical(a, tmp_path / "nope.md")

    def test_generate_diff_data(self, tmp_path):
        a = self._file(tmp_path, "a.md", "a")
        b = self._file(tmp_path, "b.md", "bb")
        data = FileComparator().generate_diff_data(a, b)
        assert data["identical"] is False
        assert data["size_a"] == 1
        assert data["size_b"] == 2
        assert data["hash_a"] == A
        with pytest.raises(ComparisonFailedError):
            FileComparator().generate_diff_data(a, tmp_path / "nope.md")

    def test_detect_modifications(self, tmp_path):
        a = self._file(tmp_path, "a.md", "a")
        b = self._file(tmp_path, "b.md", "changed")
        base = {str(a): A, str(b): B}
        assert FileComparator().detect_modifications(base, [a, b]) == [str(b)]
        assert FileComparator().detect_modifications(None, [a]) == []

    def test_compare_manifests(self):
        changes = FileComparator.compare_manifests({"x": A, "y": B}, {"y": C, "z": A})
        assert changes == {"added": ["z"], "removed": ["x"], "modified": ["y"], "unchanged": []}

    def test_unified_diff(self, tmp_path):
        local = self._file(tmp_path, "local.md", "one\ntwo\n")
        remote = self._file(tmp_path, "remote.md", "one\nthree")
        text = FileComparator.unified_diff(local, remote, "tenets/x.md")
        assert text.startswith("diff --git a/tenets/x.md b/tenets/x.md\n--- a/tenets/x.md\n+++ b/tenets/x.md\n")
        assert "-two\n" in text
        assert "+three\n" in text
