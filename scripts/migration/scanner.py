"""
Line-oriented Svelte 4 pattern scanner.

Applies the rule table to one file's text, line by line. Pure function of its
inputs: no I/O, no shared state, identical input gives identically ordered
output.
"""

import logging
from typing import Iterable, Optional

from migration.models import SEVERITY_ERROR, FileAnalysisResult, MigrationFinding
from migration.rules import MIGRATION_RULES, MigrationRule

logger = logging.getLogger(__name__)


class MigrationScanner:
    """Scan file contents against an ordered rule table"""

    def __init__(self, rules: Optional[Iterable[MigrationRule]] = None):
        self.rules = tuple(MIGRATION_RULES if rules is None else rules)

    def scan(self, file_path: str, content: str) -> FileAnalysisResult:
        """Scan content and partition findings by rule severity

        Args:
            file_path: Path reported on the result
            content: Full file text

        Returns:
            FileAnalysisResult with errors and warnings in line order
        """
        result = FileAnalysisResult(file_path=file_path)
        if not content:
            return result

        for index, line in enumerate(content.split("\n")):
            if not line:
                continue

            for rule in self.rules:
                if not rule.matches(line):
                    continue

                finding = MigrationFinding(
                    line_number=index + 1,
                    message=rule.message,
                    severity=rule.severity,
                    rule_id=rule.rule_id,
                    suggestion=rule.suggestion,
                )
                if rule.severity == SEVERITY_ERROR:
                    result.errors.append(finding)
                else:
                    result.warnings.append(finding)

        logger.debug(
            f"Scanned {file_path}: {len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result


_default_scanner = MigrationScanner()


def scan_content(file_path: str, content: str) -> FileAnalysisResult:
    """Scan content with the built-in rule table"""
    return _default_scanner.scan(file_path, content)


__all__ = ["MigrationScanner", "scan_content"]
