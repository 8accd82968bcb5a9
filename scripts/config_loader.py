"""
Configuration Loader for the Svelte Migration Analyzer.

Implements a layered configuration system:
    hardcoded defaults < .svelte-migration.yml < env vars < CLI args

Usage:
    from config_loader import build_unified_config
    config = build_unified_config(cli_args=args)
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = ".svelte-migration.yml"

# ---------------------------------------------------------------------------
# Default configuration
# ---------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """Return all configuration parameters with sensible defaults.

    This is the lowest-priority layer.  Every configurable key must appear
    here so that downstream code never needs to guard against missing keys.
    """
    return {
        # -- GitHub --
        "github_token": "",
        "filter_changed_files": True,
        "create_check_run": False,
        "create_annotations": False,

        # -- Failure policy --
        "fail_on_error": False,
        "fail_on_warning": False,

        # -- Files --
        "paths": ["src", "app", "lib"],
        "exclude_paths": ["node_modules", ".git", "dist", "build"],

        # -- AI --
        "enable_ai_analysis": False,
        "ai_provider": "auto",
        "model": "auto",
        "anthropic_api_key": "",
        "openai_api_key": "",
        "ollama_endpoint": "",
        "max_tokens": 4000,
        "retry_max_attempts": 3,

        # -- Output --
        "output_dir": "",
    }

# ---------------------------------------------------------------------------
# Flatten nested YAML -> flat config dict
# ---------------------------------------------------------------------------

_SECTION_KEY_MAP = {
    "ai": {
        "enabled": "enable_ai_analysis",
        "provider": "ai_provider",
        "model": "model",
        "max_tokens": "max_tokens",
        "retry_max_attempts": "retry_max_attempts",
        "ollama_endpoint": "ollama_endpoint",
    },
    "files": {
        "paths": "paths",
        "exclude_paths": "exclude_paths",
        "changed_only": "filter_changed_files",
    },
    "github": {
        "check_run": "create_check_run",
        "annotations": "create_annotations",
    },
    "fail_on": {
        "error": "fail_on_error",
        "warning": "fail_on_warning",
    },
    "output": {
        "dir": "output_dir",
    },
}


def flatten_config(nested: dict) -> Dict[str, Any]:
    """Convert a nested ``.svelte-migration.yml`` dict to a flat config dict.

    Mapping rules:
    - ``nested["ai"]["enabled"]``        -> ``enable_ai_analysis``
    - ``nested["ai"]["provider"]``       -> ``ai_provider``
    - ``nested["files"]["paths"]``       -> ``paths``
    - ``nested["files"]["changed_only"]``-> ``filter_changed_files``
    - ``nested["github"]["check_run"]``  -> ``create_check_run``
    - ``nested["fail_on"]["warning"]``   -> ``fail_on_warning``
    - ``nested["output"]["dir"]``        -> ``output_dir``
    - Top-level keys that already name a config key pass through as-is.

    Only non-None values are included.  Secrets are never read from YAML.
    """
    flat: Dict[str, Any] = {}
    known_keys = get_default_config()

    for section, key_map in _SECTION_KEY_MAP.items():
        block = nested.get(section)
        if not isinstance(block, dict):
            continue
        for key, config_key in key_map.items():
            if block.get(key) is not None:
                flat[config_key] = block[key]

    for key, value in nested.items():
        if key in _SECTION_KEY_MAP or value is None:
            continue
        if key in known_keys and not key.endswith("_api_key") and key != "github_token":
            flat[key] = value

    for list_key in ("paths", "exclude_paths"):
        if isinstance(flat.get(list_key), str):
            flat[list_key] = _split_list(flat[list_key])

    return flat

# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

# Mapping: (env_var_name, ...) -> (config_key, type)
# Types: "str", "bool", "int", "list"
# GitHub Actions exposes inputs as INPUT_<NAME> with the dashes kept.
_ENV_MAPPINGS: List[tuple] = [
    # GitHub
    (("INPUT_GITHUB-TOKEN", "INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"),     "github_token",         "str"),
    (("INPUT_FILTER-CHANGED-FILES", "FILTER_CHANGED_FILES"),           "filter_changed_files", "bool"),
    (("INPUT_CREATE-CHECK-RUN", "CREATE_CHECK_RUN"),                   "create_check_run",     "bool"),
    (("INPUT_CREATE-ANNOTATIONS", "CREATE_ANNOTATIONS"),               "create_annotations",   "bool"),

    # Failure policy
    (("INPUT_FAIL-ON-ERROR", "FAIL_ON_ERROR"),                         "fail_on_error",        "bool"),
    (("INPUT_FAIL-ON-WARNING", "FAIL_ON_WARNING"),                     "fail_on_warning",      "bool"),

    # Files
    (("INPUT_PATHS", "MIGRATION_PATHS"),                               "paths",                "list"),
    (("INPUT_EXCLUDE-PATHS", "EXCLUDE_PATHS"),                         "exclude_paths",        "list"),

    # AI
    (("INPUT_ENABLE-AI-ANALYSIS", "ENABLE_AI_ANALYSIS"),               "enable_ai_analysis",   "bool"),
    (("INPUT_AI-PROVIDER", "AI_PROVIDER"),                             "ai_provider",          "str"),
    (("INPUT_MODEL", "MODEL"),                                         "model",                "str"),
    (("INPUT_ANTHROPIC-API-KEY", "ANTHROPIC_API_KEY"),                 "anthropic_api_key",    "str"),
    (("INPUT_OPENAI-API-KEY", "OPENAI_API_KEY"),                       "openai_api_key",       "str"),
    (("INPUT_OLLAMA-ENDPOINT", "OLLAMA_ENDPOINT"),                     "ollama_endpoint",      "str"),
    (("INPUT_MAX-TOKENS", "MAX_TOKENS"),                               "max_tokens",           "int"),
    (("RETRY_MAX_ATTEMPTS",),                                          "retry_max_attempts",   "int"),

    # Output
    (("INPUT_OUTPUT-DIR", "OUTPUT_DIR"),                               "output_dir",           "str"),
]


def _split_list(raw: str) -> List[str]:
    """Split a multiline or comma-separated input into non-empty entries."""
    parts = raw.replace(",", "\n").splitlines()
    return [p.strip() for p in parts if p.strip()]


def _coerce(raw: str, type_tag: str) -> Any:
    """Convert a raw env-var string to the appropriate Python type."""
    if type_tag == "bool":
        return raw.strip().lower() in ("true", "1", "yes")
    if type_tag == "int":
        return int(raw)
    if type_tag == "list":
        return _split_list(raw)
    return raw


def load_env_overrides() -> Dict[str, Any]:
    """Load configuration values from explicitly-set environment variables.

    Only variables that are **present** and non-empty in ``os.environ`` are
    returned (the Actions runner sets unset inputs to empty strings).  The
    first found name wins (left-to-right in the mapping tuple).
    """
    overrides: Dict[str, Any] = {}

    for env_names, config_key, type_tag in _ENV_MAPPINGS:
        for env_name in env_names:
            raw = os.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                overrides[config_key] = _coerce(raw, type_tag)
            except (ValueError, TypeError) as exc:
                logger.warning(
                    "Ignoring env var %s: could not convert %r to %s (%s)",
                    env_name, raw, type_tag, exc,
                )
            break  # first match wins

    return overrides

# ---------------------------------------------------------------------------
# CLI argument extraction
# ---------------------------------------------------------------------------

# Mapping: argparse attribute -> config key
_CLI_ATTR_MAP: Dict[str, str] = {
    "paths": "paths",
    "exclude_paths": "exclude_paths",
    "filter_changed_files": "filter_changed_files",
    "fail_on_error": "fail_on_error",
    "fail_on_warning": "fail_on_warning",
    "enable_ai_analysis": "enable_ai_analysis",
    "ai_provider": "ai_provider",
    "model": "model",
    "max_tokens": "max_tokens",
    "output_dir": "output_dir",
    "create_check_run": "create_check_run",
    "create_annotations": "create_annotations",
}


def extract_cli_overrides(args: Any) -> Dict[str, Any]:
    """Extract explicitly-set CLI arguments into a flat config dict.

    Only attributes whose value is not ``None`` are included, so that
    argparse defaults do not shadow earlier layers.
    """
    if args is None:
        return {}

    overrides: Dict[str, Any] = {}
    for attr, config_key in _CLI_ATTR_MAP.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides[config_key] = value

    return overrides

# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------

def deep_merge(base: dict, override: dict) -> dict:
    """Merge *override* into *base*.  Only non-None override values win.

    This operates on **flat** dicts (no recursive descent).
    """
    merged = dict(base)
    for key, value in override.items():
        if value is not None:
            merged[key] = value
    return merged

# ---------------------------------------------------------------------------
# .svelte-migration.yml loader
# ---------------------------------------------------------------------------

def load_project_config(repo_path: str = ".") -> Dict[str, Any]:
    """Load ``.svelte-migration.yml`` from *repo_path* and return a flat config dict.

    Returns an empty dict if the file does not exist.
    """
    yml_path = Path(repo_path) / PROJECT_CONFIG_FILE
    if not yml_path.is_file():
        return {}

    logger.info("Loading %s from %s", PROJECT_CONFIG_FILE, yml_path)
    with open(yml_path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        logger.warning("Ignoring %s: expected a mapping at top level", yml_path)
        return {}

    return flatten_config(raw)

# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def build_unified_config(cli_args: Any = None, repo_path: str = ".") -> Dict[str, Any]:
    """Build a fully-merged configuration dict.

    Layer precedence (last wins):
        1. Hard-coded defaults          (``get_default_config()``)
        2. ``.svelte-migration.yml``    (project-level overrides)
        3. Environment variables        (``load_env_overrides()``)
        4. CLI arguments                (``extract_cli_overrides()``)
    """
    config = get_default_config()

    project = load_project_config(repo_path)
    if project:
        config = deep_merge(config, project)
        logger.info("Applied %s overrides (%d keys)", PROJECT_CONFIG_FILE, len(project))

    env_overrides = load_env_overrides()
    if env_overrides:
        config = deep_merge(config, env_overrides)
        logger.debug("Applied %d env-var overrides", len(env_overrides))

    cli_overrides = extract_cli_overrides(cli_args)
    if cli_overrides:
        config = deep_merge(config, cli_overrides)
        logger.debug("Applied %d CLI overrides", len(cli_overrides))

    return config

# ---------------------------------------------------------------------------
# Configuration validation
# ---------------------------------------------------------------------------

_VALID_AI_PROVIDERS = {"auto", "anthropic", "openai", "ollama"}


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Validate a configuration dict and return a list of warnings/errors.

    Returns
    -------
    list[str]
        Human-readable messages prefixed ``ERROR:`` or ``WARNING:``.  An empty
        list means the config is valid.
    """
    issues: List[str] = []

    provider = config.get("ai_provider", "auto")
    if provider not in _VALID_AI_PROVIDERS:
        issues.append(
            f"ERROR: Invalid ai_provider '{provider}'. "
            f"Must be one of: {', '.join(sorted(_VALID_AI_PROVIDERS))}"
        )

    if config.get("enable_ai_analysis"):
        if provider == "anthropic" and not config.get("anthropic_api_key"):
            issues.append("ERROR: ai_provider is 'anthropic' but ANTHROPIC_API_KEY is not set.")
        if provider == "openai" and not config.get("openai_api_key"):
            issues.append("ERROR: ai_provider is 'openai' but OPENAI_API_KEY is not set.")
        if provider == "auto" and not (
            config.get("anthropic_api_key")
            or config.get("openai_api_key")
            or config.get("ollama_endpoint")
        ):
            issues.append(
                "WARNING: enable_ai_analysis is set but no API key or endpoint is "
                "configured.  AI suggestions will be skipped."
            )

    if not config.get("paths"):
        issues.append("ERROR: paths must list at least one directory to search.")

    max_tokens = config.get("max_tokens", 4000)
    if isinstance(max_tokens, int) and max_tokens < 1:
        issues.append("ERROR: max_tokens must be >= 1.")

    retry_max_attempts = config.get("retry_max_attempts", 3)
    if isinstance(retry_max_attempts, int) and retry_max_attempts < 1:
        issues.append("ERROR: retry_max_attempts must be >= 1.")

    if (config.get("create_check_run") or config.get("create_annotations")) and not config.get("github_token"):
        issues.append(
            "WARNING: check runs/annotations requested but no GitHub token is set. "
            "They will be skipped."
        )

    return issues
