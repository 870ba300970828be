"""Tests for leyline.discovery: front-matter, DocumentScanner and MetadataCache."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest
import yaml

from _support import build_docs, write
from leyline.cache import FileCache
from leyline.discovery import (
    DocumentScanner,
    MetadataCache,
    extract_front_matter,
    resolve_docs_root,
    split_front_matter,
)
from leyline.discovery import metadata_cache
from leyline.discovery.front_matter import MAX_FRONT_MATTER_SIZE, FrontMatterTooLarge
from leyline.discovery.scanner import category_from_path, document_type_from_path, extract_preview, extract_title


class TestFrontMatter:
    def test_split(self):
        assert split_front_matter("---\nid: x\n---\n# Title\n") == ("id: x", "# Title\n")

    def test_no_block(self):
        assert split_front_matter("# Title\n") is None
        assert split_front_matter("---\nid: x\n") is None
        assert extract_front_matter("# Title") is None

    def test_invalid_yaml(self):
        assert extract_front_matter("---\nid: [x\n---\n") is None
        with pytest.raises(yaml.YAMLError):
            extract_front_matter("---\nid: [x\n---\n", strict=True)

    def test_non_mapping(self):
        assert extract_front_matter("---\n- a\n---\n") is None

    def test_oversized(self):
        content = "---\nbig: '" + "x" * MAX_FRONT_MATTER_SIZE + "'\n---\n"
        assert extract_front_matter(content) is None
        with pytest.raises(FrontMatterTooLarge):
            extract_front_matter(content, strict=True)


class TestPathHelpers:
    @pytest.mark.parametrize(
        ("path", "category", "kind"),
        [
            ("docs/tenets/simplicity.md", "tenets", "tenet"),
            ("docs/bindings/core/x.md", "core", "binding"),
            ("docs/bindings/categories/go/x.md", "go", "binding"),
            ("notes/readme.md", "unknown", "unknown"),
        ],
    )
    def test_category_and_type(self, path, category, kind):
        assert category_from_path(path) == category
        assert document_type_from_path(path) == kind

    def test_only_the_part_below_root_counts(self):
        root = "/srv/core/tenets/project/docs"
        assert category_from_path(f"{root}/tenets/simplicity.md", root) == "tenets"
        assert category_from_path(f"{root}/bindings/categories/go/x.md", root) == "go"
        assert document_type_from_path(f"{root}/bindings/core/x.md", root) == "binding"

    def test_innermost_marker_wins_without_root(self):
        assert category_from_path("/srv/core/project/docs/tenets/simplicity.md") == "tenets"
        assert document_type_from_path("/srv/tenets/docs/bindings/core/x.md") == "binding"

    def test_title_from_heading_or_filename(self):
        assert extract_title("---\nid: x\n---\n\n## Tenet: Simplicity\n", "x.md") == "Tenet: Simplicity"
        assert extract_title("---\nid: x\n---\nno heading\n", "keep-it-simple.md") == "Keep it simple"

    def test_preview_skips_headings_and_truncates(self):
        body = "---\nid: x\n---\n# Title\n\n" + " ".join(["word"] * 80) + "\n"
        preview = extract_preview(body)
        assert preview.startswith("word word")
        assert preview.endswith("...")
        assert len(preview) <= 203


class TestDocumentScanner:
    def test_scan_document(self, docs_root):
        scanner = DocumentScanner()
        document = scanner.scan_document(docs_root / "tenets" / "simplicity.md")
        assert document.id == "simplicity"
        assert document.title == "Tenet: Simplicity Above All"
        assert document.type == "tenet"
        assert document.category == "tenets"
        assert document.content_preview.startswith("Prefer the simplest design")
        assert len(document.content_hash) == 64
        assert document.to_dict()["scan_time"]
        assert scanner.scan_statistics()["files_scanned"] == 1

    def test_files_without_front_matter_are_skipped(self, tmp_path):
        path = write(tmp_path / "plain.md", "# Just a heading\n")
        assert DocumentScanner().scan_document(path) is None
        assert DocumentScanner().scan_document(tmp_path / "missing.md") is None

    def test_yaml_errors_are_counted(self, tmp_path):
        path = write(tmp_path / "bad.md", "---\nid: [oops\n---\n# Bad\n")
        scanner = DocumentScanner()
        assert scanner.scan_document(path) is None
        assert scanner.scan_statistics()["yaml_parse_errors"] == 1

    def test_scan_documents(self, docs_root):
        paths = sorted(docs_root.rglob("*.md"))
        assert len(DocumentScanner().scan_documents(paths)) == len(paths)


class TestMetadataCache:
    def test_categories(self, docs_root):
        assert MetadataCache(docs_root).categories() == ["core", "go", "tenets", "typescript"]

    def test_documents_sorted_by_title(self, docs_root):
        documents = MetadataCache(docs_root).documents_for_category("tenets")
        assert [d.id for d in documents] == ["testability", "simplicity"]

    def test_unknown_category(self, docs_root):
        assert MetadataCache(docs_root).documents_for_category("cobol") == []

    def test_index_files_are_ignored(self, docs_root):
        write(docs_root / "tenets" / "00-index.md", "---\nid: index\n---\n# Index\n")
        ids = [d.id for d in MetadataCache(docs_root).documents_for_category("tenets")]
        assert "index" not in ids

    def test_search_scores(self, docs_root):
        results = MetadataCache(docs_root).search("simplicity")
        assert results[0].document.id == "simplicity"
        assert results[0].score == 150

    def test_search_preview_and_category(self, docs_root):
        results = MetadataCache(docs_root).search("TypeScript")
        assert results[0].document.id == "no-any"
        assert results[0].score == 35
        assert results[0].category == "typescript"

    def test_search_empty_query(self, docs_root):
        cache = MetadataCache(docs_root)
        assert cache.search("") == []
        assert cache.search("   ") == []
        assert cache.search(None) == []

    def test_suggest_corrections(self, docs_root):
        assert "simplicity" in MetadataCache(docs_root).suggest_corrections("simplicty")

    def test_rescans_only_changed_files(self, docs_root):
        cache = MetadataCache(docs_root)
        cache.categories()
        cache.categories()
        stats = cache.performance_stats()
        assert stats["document_count"] == 5
        assert stats["hit_ratio"] == 0.5

    def test_picks_up_changes(self, docs_root):
        cache = MetadataCache(docs_root)
        assert cache.search("zebra") == []
        path = docs_root / "tenets" / "simplicity.md"
        path.write_text(path.read_text(encoding="utf-8").replace("Prefer", "Zebra"), encoding="utf-8")
        mtime = path.stat().st_mtime + 5
        os.utime(path, (mtime, mtime))
        assert [r.document.id for r in cache.search("zebra")] == ["simplicity"]

    def test_removed_files_leave_the_index(self, docs_root):
        cache = MetadataCache(docs_root)
        assert "go" in cache.categories()
        (docs_root / "bindings" / "categories" / "go" / "error-wrapping.md").unlink()
        assert "go" not in cache.categories()

    def test_performance_stats(self, docs_root):
        cache = MetadataCache(docs_root)
        cache.search("simplicity")
        stats = cache.performance_stats()
        metrics = stats["operation_metrics"]["search_content"]
        assert metrics["count"] == 1
        assert stats["performance_summary"]["total_discovery_operations"] == 1
        assert stats["performance_summary"]["performance_target_met"] is True
        assert stats["last_scan"]

    def test_documents_stored_in_file_cache(self, docs_root, cache_dir):
        file_cache = MagicMock(spec=FileCache)
        MetadataCache(docs_root, file_cache=file_cache).categories()
        assert file_cache.put.call_count == 5

    def test_parent_directory_names_do_not_leak_into_categories(self, tmp_path):
        docs = build_docs(tmp_path / "core" / "project" / "docs")
        cache = MetadataCache(docs)
        assert cache.categories() == ["core", "go", "tenets", "typescript"]
        assert [d.id for d in cache.documents_for_category("tenets")] == ["testability", "simplicity"]

    def test_memory_cap_evicts_oldest_documents(self, docs_root, monkeypatch):
        total = sum(p.stat().st_size for p in docs_root.rglob("*.md"))
        cap = total - 1
        monkeypatch.setattr(metadata_cache, "MAX_MEMORY_USAGE", cap)
        cache = MetadataCache(docs_root)
        categories = cache.categories()

        stats = cache.performance_stats()
        assert stats["memory_usage"] <= cap * metadata_cache.EVICTION_TARGET
        assert 0 < stats["document_count"] < 5
        # the last scanned document stays, the first scanned one is evicted
        assert "typescript" in categories
        assert str(docs_root / "tenets" / "simplicity.md") not in cache._documents

    def test_memory_usage_tracks_document_sizes(self, docs_root):
        cache = MetadataCache(docs_root)
        cache.categories()
        total = sum(p.stat().st_size for p in docs_root.rglob("*.md"))
        assert cache.performance_stats()["memory_usage"] == total
        cache.invalidate()
        assert cache.performance_stats()["memory_usage"] == 0

    def test_invalidate(self, docs_root):
        cache = MetadataCache(docs_root)
        cache.categories()
        cache.invalidate()
        assert cache.document_count == 0


class TestResolveDocsRoot:
    def test_synced_project(self, synced_project):
        assert resolve_docs_root(synced_project) == (synced_project / "docs" / "leyline").resolve()

    def test_repository_checkout(self, leyline_repo):
        assert resolve_docs_root(leyline_repo) == (leyline_repo / "docs").resolve()
