"""
Svelte Migration Analysis Data Models.

This module contains the core dataclass definitions used across the migration
analysis pipeline.

Classes:
    MigrationFinding: One rule match on one line of one file
    FileAnalysisResult: Findings (and optional AI suggestions) for one file
    BatchSummary: Totals derived from a batch of file results
    ModernisationProposal: LLM-proposed Svelte 5 rewrite of a component
"""

from dataclasses import dataclass, field
from typing import Optional

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITIES = (SEVERITY_ERROR, SEVERITY_WARNING)


@dataclass(frozen=True)
class MigrationFinding:
    """Single deprecated-pattern match"""

    line_number: int  # 1-based
    message: str
    severity: str  # 'error', 'warning'
    rule_id: str
    suggestion: Optional[str] = None
    column: Optional[int] = None  # not populated by the line scanner


@dataclass
class FileAnalysisResult:
    """Scan result for a single file"""

    file_path: str
    errors: list[MigrationFinding] = field(default_factory=list)
    warnings: list[MigrationFinding] = field(default_factory=list)
    ai_suggestions: Optional[list[str]] = None

    @property
    def findings(self) -> list[MigrationFinding]:
        return self.errors + self.warnings

    @property
    def has_findings(self) -> bool:
        return bool(self.errors or self.warnings)


@dataclass
class BatchSummary:
    """Totals across every analysed file"""

    files_analyzed: int
    total_errors: int
    total_warnings: int
    results: list[FileAnalysisResult]

    @property
    def has_issues(self) -> bool:
        return self.total_errors > 0 or self.total_warnings > 0


@dataclass
class ModernisationProposal:
    """Best-effort Svelte 5 rewrite suggested by the LLM. Never applied to disk."""

    rewritten_content: str = ""
    migration_steps: list[str] = field(default_factory=list)


__all__ = [
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "SEVERITIES",
    "MigrationFinding",
    "FileAnalysisResult",
    "BatchSummary",
    "ModernisationProposal",
]
