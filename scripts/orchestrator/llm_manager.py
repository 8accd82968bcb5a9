#!/usr/bin/env python3
"""
LLM Provider Management Module
Centralized management for all LLM/AI provider interactions.

Supports multiple LLM providers:
- Anthropic (Claude)
- OpenAI (GPT-4)
- Ollama (local, self-hosted)

Features:
- Provider auto-detection
- Client initialization with error handling
- Retry logic with exponential backoff
- Per-request transport timeout
"""

import logging
from typing import Optional

import anthropic
import openai
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from exceptions import LLMException

# Configure logging
logger = logging.getLogger(__name__)

# Seconds before a single request is abandoned
REQUEST_TIMEOUT = 300.0

# Transient failures worth another attempt
RETRYABLE_ERRORS = (
    ConnectionError,
    TimeoutError,
    OSError,
    anthropic.APIConnectionError,
    anthropic.APITimeoutError,
    anthropic.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
)


class LLMManager:
    """Unified LLM provider management

    Handles all interactions with LLM providers including:
    - Provider detection and client initialization
    - Model selection
    - API calls with retry logic
    """

    # Default models for each provider
    DEFAULT_MODELS = {
        "anthropic": "claude-sonnet-4-5-20250929",
        "openai": "gpt-4-turbo-preview",
        "ollama": "llama3.2:3b",
    }

    def __init__(self, config: dict = None):
        """Initialize LLM Manager

        Args:
            config: Configuration dictionary with API keys and settings
        """
        self.config = config or {}
        self.client = None
        self.provider = None
        self.model = None
        self.temperature = self.config.get("temperature", 0.1)

        self._apply_retry_strategy()

    def _apply_retry_strategy(self):
        """Wrap call_llm_api with tenacity retry based on config."""
        max_attempts = self.config.get("retry_max_attempts", 3)

        self.call_llm_api = retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=4, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )(self.call_llm_api)
        logger.debug("Tenacity retry enabled (max_attempts=%d)", max_attempts)

    def detect_provider(self) -> str:
        """Auto-detect which AI provider to use based on available keys

        Returns:
            Provider name or None if no provider is configured
        """
        provider = self.config.get("ai_provider", "auto")

        # Explicit provider selection (overrides auto-detection)
        if provider != "auto":
            return provider

        # Priority: Anthropic > OpenAI > Ollama (local)
        if self.config.get("anthropic_api_key"):
            return "anthropic"
        elif self.config.get("openai_api_key"):
            return "openai"
        elif self.config.get("ollama_endpoint"):
            return "ollama"
        else:
            logger.warning("No AI provider configured")
            logger.info("Set one of: ANTHROPIC_API_KEY, OPENAI_API_KEY, or OLLAMA_ENDPOINT")
            return None

    def initialize(self, provider: str = None) -> bool:
        """Initialize LLM client for the specified provider

        Args:
            provider: Provider name (if None, will auto-detect)

        Returns:
            True if initialization successful, False otherwise
        """
        if provider is None:
            provider = self.detect_provider()

        if provider is None:
            logger.error("No provider detected or specified")
            return False

        try:
            self.client, self.provider = self._get_client(provider)
            self.model = self.get_model_name(provider)
            logger.info(f"Successfully initialized LLM Manager with {self.provider} / {self.model}")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize LLM: {type(e).__name__}: {e}")
            return False

    def _get_client(self, provider: str):
        """Get AI client for the specified provider

        Args:
            provider: Provider name

        Returns:
            Tuple of (client, provider_name)

        Raises:
            ValueError: If API key is not configured or provider is unknown
        """
        if provider == "anthropic":
            from anthropic import Anthropic

            api_key = self.config.get("anthropic_api_key")
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not set")

            logger.info("Using Anthropic API")
            return Anthropic(api_key=api_key), "anthropic"

        elif provider == "openai":
            from openai import OpenAI

            api_key = self.config.get("openai_api_key")
            if not api_key:
                raise ValueError("OPENAI_API_KEY not set")

            logger.info("Using OpenAI API")
            return OpenAI(api_key=api_key), "openai"

        elif provider == "ollama":
            from openai import OpenAI

            endpoint = self.config.get("ollama_endpoint") or "http://localhost:11434"
            # Sanitize endpoint URL for logging
            safe_endpoint = (
                str(endpoint).split("@")[-1] if "@" in str(endpoint) else str(endpoint).split("//")[-1].split("/")[0]
            )
            logger.info(f"Using Ollama endpoint: {safe_endpoint}")
            return OpenAI(base_url=f"{endpoint}/v1", api_key="ollama"), "ollama"

        else:
            safe_provider = str(provider).split("/")[-1] if provider else "unknown"
            logger.error(f"Unknown AI provider: {safe_provider}")
            raise ValueError(f"Unknown provider: {safe_provider}")

    def get_model_name(self, provider: str = None) -> str:
        """Get the appropriate model name for the provider

        Args:
            provider: Provider name (if None, uses self.provider)

        Returns:
            Model name
        """
        if provider is None:
            provider = self.provider

        model = self.config.get("model", "auto")

        if model and model != "auto":
            return model

        return self.DEFAULT_MODELS.get(provider, self.DEFAULT_MODELS["anthropic"])

    def call_llm_api(self, prompt: str, max_tokens: int, operation: str = "LLM call") -> tuple:
        """Call LLM API with retry logic

        Args:
            prompt: Prompt text
            max_tokens: Maximum output tokens
            operation: Description of operation for logging

        Returns:
            Tuple of (response_text, input_tokens, output_tokens)

        Raises:
            LLMException: If the manager has not been initialized
        """
        if self.client is None or self.provider is None:
            raise LLMException("LLM Manager not initialized. Call initialize() first.")

        logger.debug(f"{operation}: {len(prompt)} prompt chars, max_tokens={max_tokens}")

        try:
            if self.provider == "anthropic":
                message = self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=self.temperature,
                    messages=[{"role": "user", "content": prompt}],
                    timeout=REQUEST_TIMEOUT,
                )
                first = message.content[0] if message.content else None
                response_text = getattr(first, "text", "") or ""
                input_tokens = message.usage.input_tokens
                output_tokens = message.usage.output_tokens

            elif self.provider in ["openai", "ollama"]:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=max_tokens,
                    temperature=self.temperature,
                    timeout=REQUEST_TIMEOUT,
                )
                response_text = response.choices[0].message.content or ""
                input_tokens = response.usage.prompt_tokens
                output_tokens = response.usage.completion_tokens

            else:
                raise ValueError(f"Unknown provider: {self.provider}")

            return response_text, input_tokens, output_tokens

        except Exception as e:
            logger.error(f"LLM API call failed ({operation}): {type(e).__name__}: {e}")
            raise

    def generate(self, user_prompt: str, system_prompt: str = "", max_tokens: int = 4096) -> str:
        """Generate a response given user and optional system prompts.

        Returns:
            Response text string.
        """
        if system_prompt:
            combined = f"{system_prompt}\n\n{user_prompt}"
        else:
            combined = user_prompt
        text, _inp, _out = self.call_llm_api(combined, max_tokens=max_tokens)
        return text


def create_llm_manager(config: dict) -> Optional["LLMManager"]:
    """Build and initialize an LLMManager, or return None if no provider works

    Args:
        config: Configuration dictionary

    Returns:
        Initialized manager or None
    """
    manager = LLMManager(config)
    if not manager.initialize():
        return None
    return manager
