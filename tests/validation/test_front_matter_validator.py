"""Tests for leyline.validation.front_matter."""

from __future__ import annotations

import pytest

from _support import write
from leyline.core.errors import ConfigurationError
from leyline.validation import FrontMatterValidator


def _tenet(repo, name, front_matter, body="# Tenet: Example\n\nSummary.\n"):
    return write(repo / "docs" / "tenets" / f"{name}.md", f"---\n{front_matter}---\n{body}")


def _binding(repo, name, front_matter, category=None):
    directory = repo / "docs" / "bindings" / ("core" if category is None else f"categories/{category}")
    return write(directory / f"{name}.md", f"---\n{front_matter}---\n# Binding: Example\n\nSummary.\n")


def _types(report):
    return [e.type for e in report.errors]


GOOD_TENET = "id: {id}\nlast_modified: '2025-05-09'\nversion: '0.1.0'\n"
GOOD_BINDING = (
    "id: {id}\nlast_modified: '2025-05-09'\nderived_from: simplicity\n"
    "enforced_by: code review\nversion: '0.1.0'\n"
)


class TestValidateAll:
    def test_sample_corpus_is_valid(self, leyline_repo):
        report = FrontMatterValidator(leyline_repo).validate_all()
        assert report.ok
        assert report.files_checked == [
            "docs/tenets/simplicity.md",
            "docs/tenets/testability.md",
            "docs/bindings/core/require-conventional-commits.md",
            "docs/bindings/categories/go/error-wrapping.md",
            "docs/bindings/categories/typescript/no-any.md",
        ]

    def test_requires_version_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="VERSION file not found"):
            FrontMatterValidator(tmp_path)

    def test_index_files_skipped(self, leyline_repo):
        write(leyline_repo / "docs" / "tenets" / "00-index.md", "# Tenets Index\n")
        report = FrontMatterValidator(leyline_repo).validate_all()
        assert report.ok
        assert "docs/tenets/00-index.md" not in report.files_checked

    def test_misplaced_binding_warns(self, leyline_repo):
        write(leyline_repo / "docs" / "bindings" / "stray.md", "---\nid: stray\n---\n")
        report = FrontMatterValidator(leyline_repo).validate_all()
        assert len(report.warnings) == 1
        assert "docs/bindings/stray.md" in report.warnings[0]
        assert "docs/bindings/stray.md" not in report.files_checked

    def test_duplicate_ids_reported_on_later_file(self, leyline_repo):
        _tenet(leyline_repo, "copy", GOOD_TENET.format(id="simplicity"))
        report = FrontMatterValidator(leyline_repo).validate_all()
        duplicates = [e for e in report.errors if e.type == "duplicate_id"]
        assert len(duplicates) == 1
        assert duplicates[0].file == "docs/tenets/simplicity.md"
        assert "already used in docs/tenets/copy.md" in duplicates[0].message
        assert duplicates[0].line == 2

    def test_collects_every_error(self, leyline_repo):
        _tenet(leyline_repo, "broken", "id: Bad_ID\nlast_modified: 'May 9'\nversion: '0.1.0'\nauthor: me\n")
        report = FrontMatterValidator(leyline_repo).validate_all()
        assert _types(report) == ["invalid_id_format", "invalid_date_format", "unknown_fields"]
        assert report.files_with_errors == ["docs/tenets/broken.md"]
        assert report.to_dict()["ok"] is False


class TestValidateFile:
    def test_no_front_matter(self, leyline_repo):
        path = write(leyline_repo / "docs" / "tenets" / "bare.md", "# Bare\n")
        report = FrontMatterValidator(leyline_repo).validate_file(path)
        assert _types(report) == ["no_frontmatter"]
        assert "must begin with YAML front-matter" in report.errors[0].suggestion

    def test_empty_front_matter(self, leyline_repo):
        path = write(leyline_repo / "docs" / "tenets" / "empty.md", "---\n\n---\n# Empty\n")
        assert _types(FrontMatterValidator(leyline_repo).validate_file(path)) == ["empty_frontmatter"]

    def test_yaml_syntax_error(self, leyline_repo):
        path = _tenet(leyline_repo, "syntax", "id: [unclosed\n")
        report = FrontMatterValidator(leyline_repo).validate_file(path)
        assert _types(report) == ["yaml_syntax"]
        assert report.errors[0].message.startswith("YAML syntax error:")

    def test_line_numbers_are_file_lines(self, leyline_repo):
        path = _tenet(leyline_repo, "dated", "id: dated\nlast_modified: 'yesterday'\nversion: '0.1.0'\n")
        error = FrontMatterValidator(leyline_repo).validate_file(path).errors[0]
        assert (error.type, error.line, error.field) == ("invalid_date_format", 3, "last_modified")

    def test_yaml_date_accepted(self, leyline_repo):
        path = _tenet(leyline_repo, "dated", "id: dated\nlast_modified: 2025-05-09\nversion: '0.1.0'\n")
        assert FrontMatterValidator(leyline_repo).validate_file(path).ok

    def test_missing_version(self, leyline_repo):
        path = _tenet(leyline_repo, "unversioned", "id: unversioned\nlast_modified: '2025-05-09'\n")
        report = FrontMatterValidator(leyline_repo).validate_file(path)
        assert _types(report) == ["missing_required_fields", "missing_version"]
        assert report.errors[0].message.endswith("version")

    def test_version_mismatch(self, leyline_repo):
        path = _tenet(leyline_repo, "old", "id: old\nlast_modified: '2025-05-09'\nversion: '0.0.9'\n")
        error = FrontMatterValidator(leyline_repo).validate_file(path).errors[0]
        assert error.type == "version_mismatch"
        assert "'0.0.9' does not match VERSION file '0.1.0'" in error.suggestion

    def test_invalid_version_format(self, leyline_repo):
        path = _tenet(leyline_repo, "short", "id: short\nlast_modified: '2025-05-09'\nversion: '1.0'\n")
        report = FrontMatterValidator(leyline_repo, expected_version="1.0").validate_file(path)
        assert _types(report) == ["invalid_version_format"]

    def test_binding_references_unknown_tenet(self, leyline_repo):
        path = _binding(leyline_repo, "orphan", GOOD_BINDING.format(id="orphan").replace("simplicity", "ghost"))
        report = FrontMatterValidator(leyline_repo).validate_file(path)
        assert _types(report) == ["nonexistent_tenet_reference"]
        assert report.errors[0].line == 4

    def test_binding_field_formats(self, leyline_repo):
        path = _binding(
            leyline_repo,
            "sloppy",
            "id: sloppy\nlast_modified: '2025-05-09'\nderived_from: Not_A_Tenet\n"
            "enforced_by: ''\nversion: '0.1.0'\n",
            category="go",
        )
        report = FrontMatterValidator(leyline_repo).validate_file(path)
        assert _types(report) == [
            "invalid_derived_from_format",
            "nonexistent_tenet_reference",
            "invalid_enforced_by_format",
        ]

    def test_relative_path_is_resolved_against_root(self, leyline_repo, tmp_path, monkeypatch):
        _tenet(leyline_repo, "old", "id: old\nlast_modified: '2025-05-09'\nversion: '0.0.9'\n")
        monkeypatch.chdir(tmp_path)
        report = FrontMatterValidator(leyline_repo).validate_file("docs/tenets/old.md")
        assert _types(report) == ["version_mismatch"]
        assert report.files_checked == ["docs/tenets/old.md"]

    def test_unknown_path(self, leyline_repo):
        path = write(leyline_repo / "README.md", "# Readme\n")
        report = FrontMatterValidator(leyline_repo).validate_file(path)
        assert _types(report) == ["invalid_file_path"]

    def test_file_contents_for_errors(self, leyline_repo):
        path = _tenet(leyline_repo, "broken", "id: Bad_ID\nlast_modified: '2025-05-09'\nversion: '0.1.0'\n")
        validator = FrontMatterValidator(leyline_repo)
        validator.validate_file(path)
        contents = validator.file_contents()
        assert list(contents) == ["docs/tenets/broken.md"]
        assert "Bad_ID" in contents["docs/tenets/broken.md"]

    def test_runs_are_independent(self, leyline_repo):
        validator = FrontMatterValidator(leyline_repo)
        simplicity = leyline_repo / "docs" / "tenets" / "simplicity.md"
        assert validator.validate_file(simplicity).ok
        assert validator.validate_file(simplicity).ok
