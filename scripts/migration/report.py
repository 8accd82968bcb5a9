"""
Svelte Migration Report Generation.

This module reduces per-file results into totals and renders them for humans
(Markdown PR comment) and machines (JSON, SARIF).

Functions:
    summarize: Reduce file results into a BatchSummary
    generate_summary: Render the Markdown summary posted to the PR
    save_results: Save results in multiple formats (JSON, SARIF, Markdown)
    convert_to_sarif: Convert results to SARIF format for GitHub Code Scanning
    severity_to_sarif_level: Convert severity to SARIF level
    print_summary: Print scan summary to console
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from migration.models import SEVERITY_ERROR, BatchSummary, FileAnalysisResult, MigrationFinding
from migration.rules import MIGRATION_RULES

logger = logging.getLogger(__name__)

REPORT_TITLE = "# 🔄 Svelte Migration Analysis Results\n\n"

MIGRATION_RESOURCES = (
    "- [Svelte 5 Migration Guide](https://svelte.dev/docs/svelte/v5-migration-guide)\n"
    "- [Automatic Migration Tool](https://svelte.dev/docs/svelte/v5-migration-guide#migration-script): "
    "`npx sv migrate svelte-5`\n"
    "- [Svelte 5 Documentation](https://svelte.dev/docs/svelte)\n"
)


def summarize(results: list[FileAnalysisResult]) -> BatchSummary:
    """Reduce file results into totals"""
    return BatchSummary(
        files_analyzed=len(results),
        total_errors=sum(len(r.errors) for r in results),
        total_warnings=sum(len(r.warnings) for r in results),
        results=results,
    )


def _pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _render_file_block(file_path: str, findings: list[MigrationFinding], noun: str) -> list[str]:
    block = [
        "<details>\n",
        f"<summary>📄 <code>{file_path}</code> - {_pluralize(len(findings), noun)}</summary>\n\n",
    ]
    for finding in findings:
        block.append(f"- **Line {finding.line_number}:** {finding.message}\n")
        if finding.suggestion:
            block.append(f"  - 💡 **Suggestion:** {finding.suggestion}\n")
    block.append("\n</details>\n\n")
    return block


def generate_summary(results: list[FileAnalysisResult]) -> str:
    """Generate the Markdown summary for a batch.

    Args:
        results: File results in analysis order

    Returns:
        Markdown-formatted summary string
    """
    summary = summarize(results)
    report = [REPORT_TITLE]

    if not summary.has_issues:
        report.append("✅ **Great news!** No Svelte 4 patterns detected in your codebase.\n\n")
        report.append("Your project appears to be ready for Svelte 5!\n")
        return "".join(report)

    report.append("## 📊 Summary\n\n")
    report.append(f"- **Files analysed:** {summary.files_analyzed}\n")
    report.append(f"- **Issues found:** {summary.total_errors}\n")
    report.append(f"- **Warnings found:** {summary.total_warnings}\n\n")

    if summary.total_errors > 0:
        report.append(f"## ❌ Issues ({summary.total_errors})\n\n")
        report.append("These are breaking changes that must be addressed for Svelte 5:\n\n")
        for result in results:
            if result.errors:
                report.extend(_render_file_block(result.file_path, result.errors, "issue"))

    if summary.total_warnings > 0:
        report.append(f"## ⚠️ Warnings ({summary.total_warnings})\n\n")
        report.append("These patterns will still work but are deprecated in Svelte 5:\n\n")
        for result in results:
            if result.warnings:
                report.extend(_render_file_block(result.file_path, result.warnings, "warning"))

    with_suggestions = [r for r in results if r.ai_suggestions]
    if with_suggestions:
        report.append("## 🤖 AI Suggestions\n\n")
        for result in with_suggestions:
            report.append("<details>\n")
            report.append(
                f"<summary>📄 <code>{result.file_path}</code> - "
                f"{_pluralize(len(result.ai_suggestions), 'suggestion')}</summary>\n\n"
            )
            for suggestion in result.ai_suggestions:
                report.append(f"- {suggestion}\n")
            report.append("\n</details>\n\n")

    report.append("## 📚 Migration Resources\n\n")
    report.append(MIGRATION_RESOURCES)
    report.append("\n")

    return "".join(report)


def severity_to_sarif_level(severity: str) -> str:
    """Convert severity to SARIF level.

    Args:
        severity: Severity string (error, warning)

    Returns:
        SARIF level string (error, warning)
    """
    return "error" if severity == SEVERITY_ERROR else "warning"


def convert_to_sarif(results: list[FileAnalysisResult]) -> dict:
    """Convert results to SARIF format for GitHub Code Scanning.

    Args:
        results: File results to convert

    Returns:
        Dictionary containing SARIF-formatted results
    """
    sarif = {
        "version": "2.1.0",
        "$schema": "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "Svelte Migration Analyzer",
                        "version": "1.0.0",
                        "informationUri": "https://svelte.dev/docs/svelte/v5-migration-guide",
                        "rules": [
                            {
                                "id": rule.rule_id,
                                "shortDescription": {"text": rule.message},
                                "defaultConfiguration": {"level": severity_to_sarif_level(rule.severity)},
                            }
                            for rule in MIGRATION_RULES
                        ],
                    }
                },
                "results": [],
            }
        ],
    }

    for result in results:
        for finding in result.findings:
            sarif_result = {
                "ruleId": finding.rule_id,
                "level": severity_to_sarif_level(finding.severity),
                "message": {"text": finding.message},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": result.file_path},
                            "region": {"startLine": finding.line_number},
                        }
                    }
                ],
            }
            if finding.suggestion:
                sarif_result["properties"] = {"suggestion": finding.suggestion}

            sarif["runs"][0]["results"].append(sarif_result)

    return sarif


def save_results(results: list[FileAnalysisResult], output_dir: str, summary_text: Optional[str] = None) -> dict[str, Path]:
    """Save results in multiple formats.

    Args:
        results: File results to save
        output_dir: Directory to save results to
        summary_text: Pre-rendered Markdown summary (rendered here if omitted)

    Returns:
        Mapping of format name to written file path
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    summary = summarize(results)
    written = {}

    # Save JSON
    json_file = output_path / f"svelte-migration-{timestamp}.json"
    payload = {
        "timestamp": timestamp,
        "files_analyzed": summary.files_analyzed,
        "total_errors": summary.total_errors,
        "total_warnings": summary.total_warnings,
        "has_issues": summary.has_issues,
        "results": [asdict(r) for r in results],
    }
    with open(json_file, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)
    logger.info(f"💾 JSON results: {json_file}")
    written["json"] = json_file

    # Save SARIF
    sarif_file = output_path / f"svelte-migration-{timestamp}.sarif"
    with open(sarif_file, "w", encoding="utf-8") as f:
        json.dump(convert_to_sarif(results), f, indent=2)
    logger.info(f"💾 SARIF results: {sarif_file}")
    written["sarif"] = sarif_file

    # Save Markdown report
    md_file = output_path / f"svelte-migration-{timestamp}.md"
    with open(md_file, "w", encoding="utf-8") as f:
        f.write(summary_text if summary_text is not None else generate_summary(results))
    logger.info(f"💾 Markdown report: {md_file}")
    written["markdown"] = md_file

    return written


def print_summary(summary: BatchSummary) -> None:
    """Print scan summary to console.

    Args:
        summary: The batch totals to print
    """
    print("\n" + "=" * 80)
    print("🔄 SVELTE MIGRATION ANALYSIS - FINAL RESULTS")
    print("=" * 80)
    print(f"📁 Files analysed: {summary.files_analyzed}")
    print(f"   ❌ Issues:   {summary.total_errors}")
    print(f"   ⚠️  Warnings: {summary.total_warnings}")
    print("=" * 80)


__all__ = [
    "MIGRATION_RESOURCES",
    "summarize",
    "generate_summary",
    "save_results",
    "convert_to_sarif",
    "severity_to_sarif_level",
    "print_summary",
]
