"""
Utility functions and helpers.

Provides logging setup, Git URL classification and source validation.
"""

from repo_catalog.utils.logging_config import setup_logging
from repo_catalog.utils.git_url import (
    NormalizedReference,
    convert_github_web_url,
    find_local_override,
    is_valid_git_repository_url,
    normalize_repository_url,
    repository_name,
)
from repo_catalog.utils.validation import (
    SourceRecord,
    ValidationError,
    validate_source,
    validate_sources,
)

__all__ = [
    "setup_logging",
    "NormalizedReference",
    "convert_github_web_url",
    "find_local_override",
    "is_valid_git_repository_url",
    "normalize_repository_url",
    "repository_name",
    "SourceRecord",
    "ValidationError",
    "validate_source",
    "validate_sources",
]
