"""
AI Suggestion Module for Svelte Migration Analysis.

This module turns pattern-matched findings into natural-language migration
advice by asking an LLM (Claude/OpenAI/Ollama via LLMManager) about a file.

Classes:
    SuggestionAugmenter: Interface the batch analyzer depends on
    NullAugmenter: Used when AI analysis is disabled
    LLMSuggestionAugmenter: Sends prompts through an LLM client

Functions:
    build_analysis_prompt: Build the per-file suggestion prompt
    build_modernisation_prompt: Build the full-rewrite prompt
    parse_suggestions: Split a narrative response into suggestions
    parse_modernisation: Extract rewritten code and steps from a response
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from exceptions import AugmentationError
from migration.models import MigrationFinding, ModernisationProposal

logger = logging.getLogger(__name__)

# Units at or below this length are artifacts of malformed output
MIN_SUGGESTION_LENGTH = 10

MODERNISED_CODE_MARKER = "**MODERNISED CODE:**"
MIGRATION_STEPS_MARKER = "**MIGRATION STEPS:**"

_LIST_MARKER_RE = re.compile(r"^(\d+\.|[-*])")
_NUMBERED_RE = re.compile(r"^\d+\.")
_MODERNISED_CODE_RE = re.compile(
    re.escape(MODERNISED_CODE_MARKER) + r"[\s\S]*?```svelte\n([\s\S]*?)\n```"
)
_MIGRATION_STEPS_RE = re.compile(re.escape(MIGRATION_STEPS_MARKER) + r"\n([\s\S]*)")


class SuggestionAugmenter(ABC):
    """Source of AI remediation suggestions for scanned files"""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @abstractmethod
    def augment(
        self,
        file_path: str,
        content: str,
        errors: list[MigrationFinding],
        warnings: list[MigrationFinding],
    ) -> list[str]:
        ...

    @abstractmethod
    def propose_modernisation(self, content: str) -> ModernisationProposal:
        ...


class NullAugmenter(SuggestionAugmenter):
    """No-op augmenter used when AI analysis is off"""

    @property
    def enabled(self) -> bool:
        return False

    def augment(self, file_path, content, errors, warnings) -> list[str]:
        return []

    def propose_modernisation(self, content: str) -> ModernisationProposal:
        return ModernisationProposal()


class LLMSuggestionAugmenter(SuggestionAugmenter):
    """Augmenter backed by an LLM client exposing ``generate(prompt, max_tokens=...)``"""

    def __init__(self, llm: Any, max_tokens: int = 4000, modernisation_max_tokens: int = 6000):
        self.llm = llm
        self.max_tokens = max_tokens
        self.modernisation_max_tokens = modernisation_max_tokens

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    def augment(
        self,
        file_path: str,
        content: str,
        errors: list[MigrationFinding],
        warnings: list[MigrationFinding],
    ) -> list[str]:
        """Ask the LLM for migration advice on one file

        Raises:
            AugmentationError: If the LLM call fails
        """
        prompt = build_analysis_prompt(file_path, content, errors, warnings)
        try:
            response = self.llm.generate(prompt, max_tokens=self.max_tokens)
        except Exception as e:
            raise AugmentationError(f"Failed to analyse {file_path} with LLM: {e}") from e

        suggestions = parse_suggestions(response or "")
        logger.debug(f"   🤖 {len(suggestions)} AI suggestions for {file_path}")
        return suggestions

    def propose_modernisation(self, content: str) -> ModernisationProposal:
        """Ask the LLM for a full Svelte 5 rewrite of a component

        Raises:
            AugmentationError: If the LLM call fails
        """
        prompt = build_modernisation_prompt(content)
        try:
            response = self.llm.generate(prompt, max_tokens=self.modernisation_max_tokens)
        except Exception as e:
            raise AugmentationError(f"Failed to get component suggestions: {e}") from e

        return parse_modernisation(response or "")


def _format_findings(findings: list[MigrationFinding]) -> str:
    return "\n".join(f"- Line {f.line_number}: {f.message}" for f in findings)


def build_analysis_prompt(
    file_path: str,
    content: str,
    errors: list[MigrationFinding],
    warnings: list[MigrationFinding],
) -> str:
    """Build the per-file suggestion prompt

    Args:
        file_path: Path of the analysed file
        content: Full file content
        errors: Error-severity findings
        warnings: Warning-severity findings

    Returns:
        Prompt text
    """
    return f"""You are an expert Svelte developer specialising in migrating from Svelte 4 to Svelte 5.

Analyse this Svelte file and provide specific, actionable migration suggestions.

**File:** {file_path}

**Detected Issues:**
{_format_findings(errors)}

**Detected Warnings:**
{_format_findings(warnings)}

**File Content:**
```svelte
{content}
```

Please provide:

1. **Specific Code Examples**: For each issue/warning, show the exact "before" code and the corrected "after" code
2. **Priority Assessment**: Which issues should be addressed first and why
3. **Svelte 5 Best Practices**: Modern Svelte 5 patterns that would improve this code
4. **Migration Strategy**: Step-by-step approach for migrating this file

Focus on:
- Replacing reactive statements ($:) with $derived or $effect appropriately
- Converting export let to $props()
- Updating event handlers from on: to event properties
- Replacing slots with snippets where appropriate
- Converting createEventDispatcher to callback props
- Using runes ($state, $derived, $effect) effectively

Format your response as a numbered list of actionable suggestions. Be specific about line numbers and exact code changes."""


def build_modernisation_prompt(content: str) -> str:
    """Build the prompt asking for a complete Svelte 5 rewrite"""
    return f"""You are a Svelte 5 migration expert. Convert this Svelte 4 component to modern Svelte 5 syntax.

**Original Component:**
```svelte
{content}
```

Please provide:
1. The fully modernised Svelte 5 version of this component
2. A step-by-step migration guide

Use these Svelte 5 patterns:
- $state() for reactive variables
- $derived() for computed values
- $effect() for side effects
- $props() for component props
- Event properties (onclick) instead of on:click
- Snippets instead of slots where appropriate
- Callback props instead of createEventDispatcher

Format as:
{MODERNISED_CODE_MARKER}
```svelte
[modernised component here]
```

{MIGRATION_STEPS_MARKER}
1. [step 1]
2. [step 2]
..."""


def parse_suggestions(response: str) -> list[str]:
    """Split an LLM narrative into discrete suggestions

    A line starting with a numbered (``1.``) or bullet (``-``/``*``) marker
    opens a new suggestion; other non-empty lines are appended to the current
    one. Suggestions of MIN_SUGGESTION_LENGTH characters or fewer are dropped.

    Args:
        response: Raw LLM response text

    Returns:
        Suggestions in response order
    """
    units = []
    current = ""

    for raw_line in response.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if _LIST_MARKER_RE.match(line):
            if current:
                units.append(current.strip())
            current = line
        else:
            current += " " + line

    if current:
        units.append(current.strip())

    return [unit for unit in units if len(unit) > MIN_SUGGESTION_LENGTH]


def parse_modernisation(response: str) -> ModernisationProposal:
    """Extract the rewritten component and migration steps from an LLM response

    Either part is empty when its marker is missing from the response.
    """
    code_match = _MODERNISED_CODE_RE.search(response)
    rewritten_content = code_match.group(1).strip() if code_match else ""

    steps_match = _MIGRATION_STEPS_RE.search(response)
    steps_text = steps_match.group(1) if steps_match else ""
    migration_steps = [
        line.strip() for line in steps_text.split("\n") if _NUMBERED_RE.match(line.strip())
    ]

    return ModernisationProposal(rewritten_content=rewritten_content, migration_steps=migration_steps)


__all__ = [
    "MIN_SUGGESTION_LENGTH",
    "MODERNISED_CODE_MARKER",
    "MIGRATION_STEPS_MARKER",
    "SuggestionAugmenter",
    "NullAugmenter",
    "LLMSuggestionAugmenter",
    "build_analysis_prompt",
    "build_modernisation_prompt",
    "parse_suggestions",
    "parse_modernisation",
]
