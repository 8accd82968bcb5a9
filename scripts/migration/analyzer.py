"""
Batch Svelte migration analyzer.

Drives the scanner (and optional suggestion augmenter) over a list of files,
one at a time and in input order. This is the only failure-isolation
boundary of the pipeline: unreadable files become a synthetic
``file-read-error`` finding and LLM failures are logged, so one file never
stops the rest of the batch.

Usage::

    analyzer = MigrationAnalyzer()
    files = find_svelte_files(["src"], ["node_modules"])
    results = analyzer.analyze_files(files)
"""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Optional

from migration.models import SEVERITY_ERROR, FileAnalysisResult, MigrationFinding
from migration.scanner import MigrationScanner
from migration.suggestions import NullAugmenter, SuggestionAugmenter

logger = logging.getLogger(__name__)

FILE_READ_ERROR_RULE = "file-read-error"
SVELTE_GLOB = "**/*.svelte"


def _is_excluded(file_path: str, exclude_paths: Iterable[str]) -> bool:
    posix_path = Path(file_path).as_posix()
    for exclude in exclude_paths:
        exclude = exclude.rstrip("/")
        if not exclude:
            continue
        if fnmatch.fnmatch(posix_path, f"{exclude}/*") or fnmatch.fnmatch(posix_path, exclude):
            return True
    return False


def find_svelte_files(
    search_paths: Iterable[str],
    exclude_paths: Iterable[str],
    pattern: str = SVELTE_GLOB,
) -> list[str]:
    """Find component files under the search roots

    Args:
        search_paths: Root directories to search, in priority order
        exclude_paths: Paths or globs whose contents are skipped
        pattern: Glob applied below each root

    Returns:
        De-duplicated file paths, first occurrence wins
    """
    exclude_paths = [p for p in exclude_paths if p]
    seen = set()
    files = []

    for search_path in search_paths:
        root = Path(search_path)
        if not root.is_dir():
            logger.debug(f"Search path does not exist, skipping: {search_path}")
            continue

        for candidate in sorted(root.glob(pattern)):
            if not candidate.is_file():
                continue
            file_path = candidate.as_posix()
            if file_path in seen or _is_excluded(file_path, exclude_paths):
                continue
            seen.add(file_path)
            files.append(file_path)

    logger.info(f"📂 Found {len(files)} Svelte files")
    return files


def read_error_result(file_path: str, error: Exception) -> FileAnalysisResult:
    """Result standing in for a file that could not be read"""
    finding = MigrationFinding(
        line_number=1,
        message=f"Failed to read file: {error}",
        severity=SEVERITY_ERROR,
        rule_id=FILE_READ_ERROR_RULE,
    )
    return FileAnalysisResult(file_path=file_path, errors=[finding])


class MigrationAnalyzer:
    """Sequential batch analysis with per-file failure isolation"""

    def __init__(
        self,
        augmenter: Optional[SuggestionAugmenter] = None,
        scanner: Optional[MigrationScanner] = None,
    ):
        self.augmenter = augmenter or NullAugmenter()
        self.scanner = scanner or MigrationScanner()

    def analyze_files(self, file_paths: Iterable[str]) -> list[FileAnalysisResult]:
        """Analyze every file, returning one result per path in input order"""
        results = []

        for file_path in file_paths:
            try:
                content = Path(file_path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"⚠️  Failed to analyze file {file_path}: {e}")
                results.append(read_error_result(file_path, e))
                continue

            results.append(self.analyze_content(file_path, content))

        return results

    def analyze_content(self, file_path: str, content: str) -> FileAnalysisResult:
        """Scan already-loaded content and attach AI suggestions when configured"""
        result = self.scanner.scan(file_path, content)

        if self.augmenter.enabled and result.has_findings:
            try:
                result.ai_suggestions = self.augmenter.augment(
                    file_path, content, result.errors, result.warnings
                )
            except Exception as e:
                logger.warning(f"⚠️  AI analysis failed for {file_path}: {e}")

        return result


__all__ = [
    "FILE_READ_ERROR_RULE",
    "SVELTE_GLOB",
    "MigrationAnalyzer",
    "find_svelte_files",
    "read_error_result",
]
