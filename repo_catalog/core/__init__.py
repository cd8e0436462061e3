"""
Core module containing configuration and the exception hierarchy.
"""

from repo_catalog.core.config import (
    Config,
    CatalogConfig,
    FetchConfig,
    ResolverConfig,
    ValidationConfig,
)
from repo_catalog.core.exceptions import (
    CatalogError,
    MalformedReferenceError,
    GitCommandError,
    RepositoryAccessError,
    CacheCleanupError,
    StructureValidationError,
    MissingMetadataError,
    MissingReadmeError,
)

__all__ = [
    "Config",
    "CatalogConfig",
    "FetchConfig",
    "ResolverConfig",
    "ValidationConfig",
    "CatalogError",
    "MalformedReferenceError",
    "GitCommandError",
    "RepositoryAccessError",
    "CacheCleanupError",
    "StructureValidationError",
    "MissingMetadataError",
    "MissingReadmeError",
]
