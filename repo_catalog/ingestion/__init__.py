"""
Repository acquisition: caching, base directory resolution and scanning.
"""

from repo_catalog.ingestion.repository import (
    FetchResult,
    PackageManagerItem,
    RepositoryMetadata,
)
from repo_catalog.ingestion.git_handler import GitHandler
from repo_catalog.ingestion.cache import RepositoryCacheManager
from repo_catalog.ingestion.resolver import StructureValidator, SubdirectoryResolver
from repo_catalog.ingestion.scanner import MetadataScanner, parse_repository_metadata

__all__ = [
    "FetchResult",
    "PackageManagerItem",
    "RepositoryMetadata",
    "GitHandler",
    "RepositoryCacheManager",
    "StructureValidator",
    "SubdirectoryResolver",
    "MetadataScanner",
    "parse_repository_metadata",
]
