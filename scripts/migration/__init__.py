"""Svelte 4 to Svelte 5 migration analysis package."""

from migration.analyzer import MigrationAnalyzer, find_svelte_files
from migration.models import (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    BatchSummary,
    FileAnalysisResult,
    MigrationFinding,
    ModernisationProposal,
)
from migration.report import convert_to_sarif, generate_summary, save_results, summarize
from migration.rules import MIGRATION_RULES, MigrationRule, get_rule
from migration.scanner import MigrationScanner, scan_content
from migration.suggestions import LLMSuggestionAugmenter, NullAugmenter, SuggestionAugmenter

__all__ = [
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "BatchSummary",
    "FileAnalysisResult",
    "MigrationFinding",
    "ModernisationProposal",
    "MIGRATION_RULES",
    "MigrationRule",
    "get_rule",
    "MigrationScanner",
    "scan_content",
    "MigrationAnalyzer",
    "find_svelte_files",
    "SuggestionAugmenter",
    "NullAugmenter",
    "LLMSuggestionAugmenter",
    "summarize",
    "generate_summary",
    "convert_to_sarif",
    "save_results",
]
