"""CLI entry point for the Svelte migration analyzer.

This module is the GitHub Action / command-line wrapper around the analysis
core. It resolves configuration, picks the files to analyse, runs the batch,
publishes outputs and the pull-request comment, and maps the totals to an
exit code.
"""

import argparse
import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Any, Optional

from config_loader import build_unified_config, validate_config
from exceptions import ConfigurationError, MigrationError
from github_service import GitHubService
from migration.analyzer import MigrationAnalyzer, find_svelte_files
from migration.report import generate_summary, print_summary, save_results, summarize
from migration.rules import MIGRATION_RULES
from migration.suggestions import LLMSuggestionAugmenter, NullAugmenter, SuggestionAugmenter
from orchestrator.llm_manager import create_llm_manager

logger = logging.getLogger(__name__)

NO_FILES_SUMMARY = "No Svelte files found to analyse"


def write_github_outputs(outputs: dict[str, Any]) -> None:
    """Publish step outputs through ``$GITHUB_OUTPUT``

    Multi-line values use the heredoc delimiter syntax. Falls back to
    printing ``key=value`` lines when run outside Actions.
    """
    github_output = os.environ.get("GITHUB_OUTPUT")
    lines = []
    for key, value in outputs.items():
        if isinstance(value, bool):
            value = str(value).lower()
        value = str(value)
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            lines.append(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            lines.append(f"{key}={value}\n")

    if github_output:
        with open(github_output, "a", encoding="utf-8") as f:
            f.writelines(lines)
    else:
        # Fallback for local testing
        for line in lines:
            print(line, end="")


def build_augmenter(config: dict) -> SuggestionAugmenter:
    """Return an LLM-backed augmenter when AI analysis is enabled and usable"""
    if not config.get("enable_ai_analysis"):
        return NullAugmenter()

    llm = create_llm_manager(config)
    if llm is None:
        logger.warning("⚠️  AI analysis requested but no LLM provider could be initialized; continuing without it")
        return NullAugmenter()

    return LLMSuggestionAugmenter(llm, max_tokens=config.get("max_tokens", 4000))


def run_analysis(config: dict, github: Optional[GitHubService] = None) -> int:
    """Run the full analysis for a resolved config

    Returns:
        Process exit code
    """
    for issue in validate_config(config):
        if issue.startswith("ERROR"):
            raise ConfigurationError(issue)
        logger.warning(issue)

    logger.info("🔍 Starting Svelte migration analysis...")

    github = github or GitHubService.from_env(config.get("github_token", ""))
    augmenter = build_augmenter(config)

    if config.get("filter_changed_files") and github.is_pull_request:
        logger.info("📋 Getting changed files from PR...")
        files = github.get_changed_files()
    else:
        logger.info("📂 Scanning for Svelte files...")
        files = find_svelte_files(config.get("paths", []), config.get("exclude_paths", []))

    if not files:
        logger.info(f"✨ {NO_FILES_SUMMARY}")
        write_github_outputs(
            {
                "files-analysed": 0,
                "issues-found": 0,
                "warnings-found": 0,
                "has-issues": False,
                "summary": NO_FILES_SUMMARY,
            }
        )
        return 0

    logger.info(f"📊 Analysing {len(files)} Svelte files...")
    results = MigrationAnalyzer(augmenter=augmenter).analyze_files(files)

    summary = summarize(results)
    summary_text = generate_summary(results)

    write_github_outputs(
        {
            "files-analysed": summary.files_analyzed,
            "issues-found": summary.total_errors,
            "warnings-found": summary.total_warnings,
            "has-issues": summary.has_issues,
            "summary": summary_text,
        }
    )

    if config.get("output_dir"):
        save_results(results, config["output_dir"], summary_text)

    if github.is_pull_request and summary.has_issues:
        github.create_or_update_comment(summary_text)

    if config.get("github_token"):
        if config.get("create_check_run"):
            github.create_check_run(summary_text, summary.total_errors, summary.total_warnings)
        if config.get("create_annotations"):
            github.create_annotations(results)

    print_summary(summary)

    if summary.total_errors > 0:
        print(f"::error::❌ Found {summary.total_errors} migration issues")
    if summary.total_warnings > 0:
        print(f"::warning::⚠️ Found {summary.total_warnings} migration warnings")
    if not summary.has_issues:
        logger.info("✅ No migration issues found!")

    exit_code = 0
    if config.get("fail_on_error") and summary.total_errors > 0:
        logger.error(f"Migration analysis failed: {summary.total_errors} issues found")
        exit_code = 1
    if config.get("fail_on_warning") and summary.total_warnings > 0:
        logger.error(f"Migration analysis failed: {summary.total_warnings} warnings found")
        exit_code = 1

    return exit_code


def run_propose(config: dict, file_path: str) -> int:
    """Print an LLM-proposed Svelte 5 rewrite of one component. Never writes files."""
    llm = create_llm_manager(config)
    if llm is None:
        raise ConfigurationError("Proposing a rewrite needs ANTHROPIC_API_KEY, OPENAI_API_KEY or OLLAMA_ENDPOINT")

    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MigrationError(f"Failed to read file: {e}") from e

    augmenter = LLMSuggestionAugmenter(llm, max_tokens=config.get("max_tokens", 4000))
    proposal = augmenter.propose_modernisation(content)

    if not proposal.rewritten_content and not proposal.migration_steps:
        logger.warning("⚠️  The model response did not contain a rewrite or migration steps")
        return 1

    print("**MODERNISED CODE:**")
    print("```svelte")
    print(proposal.rewritten_content)
    print("```\n")
    print("**MIGRATION STEPS:**")
    for step in proposal.migration_steps:
        print(step)
    return 0


def list_rules() -> int:
    for rule in MIGRATION_RULES:
        print(f"{rule.rule_id:<26} {rule.severity:<8} {rule.message}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svelte-migration",
        description="Svelte Migration Analyzer - Detect Svelte 4 patterns and suggest Svelte 5 migrations",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--repo-path", default=".", help="Repository root holding .svelte-migration.yml")
    subparsers = parser.add_subparsers(dest="command")

    analyze = subparsers.add_parser("analyze", help="Analyse Svelte files (default)")
    analyze.add_argument("--paths", nargs="+", help="Paths to search for Svelte files")
    analyze.add_argument("--exclude-paths", nargs="+", help="Paths to exclude from analysis")
    analyze.add_argument(
        "--filter-changed-files",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only analyse files changed in the pull request",
    )
    analyze.add_argument("--fail-on-error", action=argparse.BooleanOptionalAction, default=None)
    analyze.add_argument("--fail-on-warning", action=argparse.BooleanOptionalAction, default=None)
    analyze.add_argument(
        "--enable-ai-analysis",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable AI suggestions with Claude/OpenAI/Ollama",
    )
    analyze.add_argument("--ai-provider", help="AI provider (anthropic, openai, ollama)")
    analyze.add_argument("--model", help="Model name (default: provider default)")
    analyze.add_argument("--max-tokens", type=int, help="Maximum output tokens per AI request")
    analyze.add_argument("--output-dir", help="Write JSON, SARIF and Markdown reports here")
    analyze.add_argument("--create-check-run", action=argparse.BooleanOptionalAction, default=None)
    analyze.add_argument("--create-annotations", action=argparse.BooleanOptionalAction, default=None)

    propose = subparsers.add_parser("propose", help="Print an AI-proposed Svelte 5 rewrite of a component")
    propose.add_argument("file", help="Component to modernise")
    propose.add_argument("--ai-provider", help="AI provider (anthropic, openai, ollama)")
    propose.add_argument("--model", help="Model name (default: provider default)")

    subparsers.add_parser("rules", help="List the detection rules")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for the migration analyzer"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "rules":
        return list_rules()

    config = build_unified_config(cli_args=args, repo_path=args.repo_path)

    try:
        if args.command == "propose":
            return run_propose(config, args.file)
        return run_analysis(config)
    except MigrationError as e:
        logger.error(f"Action failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
