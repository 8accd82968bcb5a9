"""
Tests for result aggregation and report rendering (report.py).

Tests totals, the Markdown PR summary, SARIF conversion and report files.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from migration.models import FileAnalysisResult, MigrationFinding
from migration.report import (
    REPORT_TITLE,
    convert_to_sarif,
    generate_summary,
    save_results,
    severity_to_sarif_level,
    summarize,
)


def _error(line, rule_id="create-event-dispatcher", message="createEventDispatcher is deprecated in Svelte 5", suggestion=None):
    return MigrationFinding(line_number=line, message=message, severity="error", rule_id=rule_id, suggestion=suggestion)


def _warning(line, rule_id="export-let", message="export let should be replaced with $props()", suggestion=None):
    return MigrationFinding(line_number=line, message=message, severity="warning", rule_id=rule_id, suggestion=suggestion)


@pytest.fixture
def mixed_results():
    return [
        FileAnalysisResult(
            file_path="src/App.svelte",
            errors=[_error(2, suggestion="Use callback props instead of createEventDispatcher")],
            warnings=[_warning(3), _warning(4, rule_id="reactive-statement", message="Reactive statement")],
        ),
        FileAnalysisResult(file_path="src/Clean.svelte"),
        FileAnalysisResult(file_path="src/Page.svelte", warnings=[_warning(1)]),
    ]


# ============================================================================
# summarize
# ============================================================================


class TestSummarize:
    def test_totals(self, mixed_results):
        summary = summarize(mixed_results)
        assert summary.files_analyzed == 3
        assert summary.total_errors == 1
        assert summary.total_warnings == 3
        assert summary.has_issues is True
        assert summary.results is mixed_results

    def test_empty(self):
        summary = summarize([])
        assert summary.files_analyzed == 0
        assert summary.has_issues is False

    def test_totals_equal_list_lengths(self, mixed_results):
        summary = summarize(mixed_results)
        assert summary.total_errors == sum(len(r.errors) for r in mixed_results)
        assert summary.total_warnings == sum(len(r.warnings) for r in mixed_results)


# ============================================================================
# generate_summary
# ============================================================================


class TestGenerateSummary:
    def test_no_issues(self):
        text = generate_summary([FileAnalysisResult(file_path="src/Clean.svelte")])
        assert text.startswith(REPORT_TITLE)
        assert "Great news!" in text
        assert "ready for Svelte 5" in text
        assert "## 📊 Summary" not in text
        assert "Migration Resources" not in text

    def test_two_errors_in_one_file(self):
        results = [FileAnalysisResult(file_path="src/A.svelte", errors=[_error(1), _error(5)])]
        text = generate_summary(results)
        assert "## ❌ Issues (2)" in text
        assert "<summary>📄 <code>src/A.svelte</code> - 2 issues</summary>" in text
        assert "## ⚠️ Warnings" not in text

    def test_singular_labels(self):
        results = [FileAnalysisResult(file_path="src/A.svelte", errors=[_error(1)], warnings=[_warning(2)])]
        text = generate_summary(results)
        assert "- 1 issue</summary>" in text
        assert "- 1 warning</summary>" in text

    def test_sections_in_order(self, mixed_results):
        text = generate_summary(mixed_results)
        positions = [
            text.index("## 📊 Summary"),
            text.index("## ❌ Issues (1)"),
            text.index("## ⚠️ Warnings (3)"),
            text.index("## 📚 Migration Resources"),
        ]
        assert positions == sorted(positions)

    def test_summary_counts(self, mixed_results):
        text = generate_summary(mixed_results)
        assert "- **Files analysed:** 3" in text
        assert "- **Issues found:** 1" in text
        assert "- **Warnings found:** 3" in text

    def test_finding_lines_and_hints(self, mixed_results):
        text = generate_summary(mixed_results)
        assert "- **Line 2:** createEventDispatcher is deprecated in Svelte 5" in text
        assert "  - 💡 **Suggestion:** Use callback props instead of createEventDispatcher" in text
        assert "<summary>📄 <code>src/App.svelte</code> - 2 warnings</summary>" in text

    def test_clean_files_have_no_block(self, mixed_results):
        assert "src/Clean.svelte" not in generate_summary(mixed_results)

    def test_ai_suggestions_section(self):
        result = FileAnalysisResult(
            file_path="src/A.svelte",
            errors=[_error(1)],
            ai_suggestions=["1. Replace the dispatcher with an onsave prop"],
        )
        text = generate_summary([result])
        assert "## 🤖 AI Suggestions" in text
        assert "- 1 suggestion</summary>" in text
        assert "- 1. Replace the dispatcher with an onsave prop" in text

    def test_no_ai_section_without_suggestions(self, mixed_results):
        assert "AI Suggestions" not in generate_summary(mixed_results)

    def test_resource_links(self, mixed_results):
        text = generate_summary(mixed_results)
        assert "https://svelte.dev/docs/svelte/v5-migration-guide" in text
        assert "npx sv migrate svelte-5" in text

    def test_deterministic(self, mixed_results):
        assert generate_summary(mixed_results) == generate_summary(mixed_results)


# ============================================================================
# SARIF / files
# ============================================================================


class TestSarif:
    def test_severity_levels(self):
        assert severity_to_sarif_level("error") == "error"
        assert severity_to_sarif_level("warning") == "warning"

    def test_convert(self, mixed_results):
        sarif = convert_to_sarif(mixed_results)
        assert sarif["version"] == "2.1.0"

        run = sarif["runs"][0]
        assert len(run["tool"]["driver"]["rules"]) == 22
        assert len(run["results"]) == 4

        first = run["results"][0]
        assert first["ruleId"] == "create-event-dispatcher"
        assert first["level"] == "error"
        location = first["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "src/App.svelte"
        assert location["region"]["startLine"] == 2
        assert first["properties"]["suggestion"].startswith("Use callback props")

    def test_no_findings(self):
        sarif = convert_to_sarif([FileAnalysisResult(file_path="a.svelte")])
        assert sarif["runs"][0]["results"] == []


class TestSaveResults:
    def test_writes_all_formats(self, tmp_path, mixed_results):
        written = save_results(mixed_results, str(tmp_path / "out"))

        assert set(written) == {"json", "sarif", "markdown"}
        for path in written.values():
            assert path.exists()

        payload = json.loads(written["json"].read_text(encoding="utf-8"))
        assert payload["files_analyzed"] == 3
        assert payload["total_errors"] == 1
        assert payload["total_warnings"] == 3
        assert payload["results"][0]["file_path"] == "src/App.svelte"
        assert payload["results"][0]["errors"][0]["line_number"] == 2

        sarif = json.loads(written["sarif"].read_text(encoding="utf-8"))
        assert sarif["version"] == "2.1.0"

        assert "## ❌ Issues (1)" in written["markdown"].read_text(encoding="utf-8")

    def test_uses_given_summary_text(self, tmp_path, mixed_results):
        written = save_results(mixed_results, str(tmp_path), summary_text="custom summary")
        assert written["markdown"].read_text(encoding="utf-8") == "custom summary"
