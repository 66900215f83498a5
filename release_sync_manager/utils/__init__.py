"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_ALLOWED_BASE_BRANCHES,
    FEATURE_BRANCH_PATTERN,
    RELEASE_NOTES_VERSION_PATTERN,
    SEMANTIC_VERSION_TOKEN_PATTERN,
)
from .retry import retry_on_rate_limit

__all__ = [
    "FEATURE_BRANCH_PATTERN",
    "DEFAULT_ALLOWED_BASE_BRANCHES",
    "RELEASE_NOTES_VERSION_PATTERN",
    "SEMANTIC_VERSION_TOKEN_PATTERN",
    "retry_on_rate_limit",
]
