#!/usr/bin/env python3
"""
Svelte Migration Exceptions Module

Custom exception classes for the migration analyzer.
Centralized exception definitions for consistent error handling.
"""

__all__ = [
    "MigrationError",
    "AugmentationError",
    "ConfigurationError",
    "GitHubAPIError",
    "LLMException",
]


class MigrationError(Exception):
    """Base exception for all migration-analyzer errors"""
    pass


class AugmentationError(MigrationError):
    """Raised when the LLM service fails to produce suggestions for a file"""
    pass


class ConfigurationError(MigrationError):
    """Raised when the resolved configuration cannot start an analysis"""
    pass


class GitHubAPIError(MigrationError):
    """Raised when a GitHub REST API call fails"""
    pass


class LLMException(MigrationError):
    """Base exception for LLM-related errors"""
    pass
