"""Tests for leyline.validation.reindex."""

from __future__ import annotations

from _support import write
from leyline.validation import Reindexer
from leyline.validation.reindex import FALLBACK_SUMMARY, category_title, extract_summary


class TestExtractSummary:
    def test_first_paragraph(self):
        body = "# Tenet: X\n\nFirst line\ncontinues   here.\n\nSecond paragraph.\n"
        assert extract_summary(body) == "First line continues here."

    def test_no_title(self):
        assert extract_summary("Just prose.\n") is None

    def test_placeholder_uses_core_belief(self):
        body = "# Tenet: X\n\n[One line summary]\n\n## Core Belief\n\nSmall things compose.\n"
        assert extract_summary(body) == "Small things compose."

    def test_placeholder_without_section(self):
        assert extract_summary("# Tenet: X\n\n[One line summary]\n") == FALLBACK_SUMMARY

    def test_template_text(self):
        body = "# Binding: X\n\nWrite a one-paragraph explanation of the rule.\n"
        assert extract_summary(body) == FALLBACK_SUMMARY

    def test_heading_right_after_title(self):
        assert extract_summary("# Tenet: X\n\n## Details\n\nText.\n") == FALLBACK_SUMMARY

    def test_truncated(self):
        summary = extract_summary("# T\n\n" + "word " * 60 + "\n")
        assert len(summary) == 150
        assert summary.endswith("...")


class TestCategoryTitle:
    def test_titles(self):
        assert category_title("go") == "GO"
        assert category_title("typescript") == "TypeScript"
        assert category_title("frontend") == "Frontend"


class TestReindexer:
    def test_writes_both_indexes(self, leyline_repo):
        result = Reindexer(leyline_repo).run()
        assert result.tenet_count == 2
        assert result.core_count == 1
        assert result.category_counts["go"] == 1
        assert result.category_counts["typescript"] == 1
        assert result.category_counts["rust"] == 0
        assert result.misplaced == []

        tenets = (leyline_repo / "docs" / "tenets" / "00-index.md").read_text(encoding="utf-8")
        assert tenets.startswith("# Tenets Index\n")
        assert (
            "| [simplicity](./simplicity.md) | Prefer the simplest design that solves the problem at hand. |"
            in tenets
        )

        bindings = (leyline_repo / "docs" / "bindings" / "00-index.md").read_text(encoding="utf-8")
        assert bindings.startswith("# Bindings Index\n")
        assert "| [require-conventional-commits](./core/require-conventional-commits.md) |" in bindings
        assert "## TypeScript Bindings" in bindings
        assert "| [no-any](./categories/typescript/no-any.md) |" in bindings
        assert "_No rust bindings defined yet._" in bindings

    def test_rerun_ignores_generated_index(self, leyline_repo):
        Reindexer(leyline_repo).run()
        assert Reindexer(leyline_repo).run().tenet_count == 2

    def test_extra_category_listed_after_standard_ones(self, leyline_repo):
        write(
            leyline_repo / "docs" / "bindings" / "categories" / "python" / "typed.md",
            "---\nid: typed\n---\n# Binding: Typed\n\nUse type hints.\n",
        )
        Reindexer(leyline_repo).run()
        bindings = (leyline_repo / "docs" / "bindings" / "00-index.md").read_text(encoding="utf-8")
        assert bindings.index("## Python Bindings") > bindings.index("## TypeScript Bindings")

    def test_misplaced_and_untitled_files(self, leyline_repo):
        write(leyline_repo / "docs" / "bindings" / "stray.md", "---\nid: stray\n---\n# Stray\n\nText.\n")
        write(leyline_repo / "docs" / "tenets" / "draft.md", "---\nid: draft\n---\nNo title here.\n")
        write(leyline_repo / "docs" / "tenets" / "plain.md", "# No front matter\n\nText.\n")

        result = Reindexer(leyline_repo).run()
        assert [p.rsplit("/", 1)[-1] for p in result.misplaced] == ["stray.md"]
        assert result.tenet_count == 2

    def test_front_matter_id_falls_back_to_stem(self, leyline_repo):
        write(leyline_repo / "docs" / "tenets" / "anonymous.md", "---\ntitle: nothing\n---\n# A\n\nText.\n")
        Reindexer(leyline_repo).run()
        index = (leyline_repo / "docs" / "tenets" / "00-index.md").read_text(encoding="utf-8")
        assert "| [anonymous](./anonymous.md) | Text. |" in index

    def test_empty_tenets_directory(self, tmp_path):
        (tmp_path / "docs" / "tenets").mkdir(parents=True)
        result = Reindexer(tmp_path).run()
        assert result.tenet_count == 0
        index = (tmp_path / "docs" / "tenets" / "00-index.md").read_text(encoding="utf-8")
        assert "_No tenets defined yet._" in index
