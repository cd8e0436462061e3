"""
Main engine for fetching repository catalogs.

Provides a high-level interface that runs the whole fetch: normalize
the reference, bring the cached working copy up to date, resolve the
base directory, validate it and scan it for items.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from repo_catalog.core.config import CatalogConfig, Config
from repo_catalog.core.exceptions import RepositoryAccessError
from repo_catalog.ingestion.cache import RepositoryCacheManager
from repo_catalog.ingestion.repository import FetchResult, PackageManagerItem
from repo_catalog.ingestion.resolver import StructureValidator, SubdirectoryResolver
from repo_catalog.ingestion.scanner import MetadataScanner, parse_repository_metadata
from repo_catalog.utils.git_url import (
    NormalizedReference,
    find_local_override,
    normalize_repository_url,
)

logger = logging.getLogger(__name__)

ItemScanner = Callable[[Path, str, str], List[PackageManagerItem]]


class RepositoryFetcher:
    """
    Fetches and validates package manager repositories.

    The scanner turning a validated directory into items is pluggable;
    by default MetadataScanner is used.
    """

    def __init__(
        self,
        config: CatalogConfig = None,
        scanner: Optional[ItemScanner] = None,
        cache_manager: Optional[RepositoryCacheManager] = None,
    ):
        self.config = config or Config.get()
        self.cache_manager = cache_manager or RepositoryCacheManager(self.config.fetch)
        self.validator = StructureValidator(self.config.resolver)
        self.resolver = SubdirectoryResolver(self.config.resolver, self.validator)
        self.scanner = scanner or MetadataScanner(self.config.resolver)

    @property
    def cache_root(self) -> Path:
        return Path(self.config.fetch.cache_dir)

    def normalize(self, url: str) -> NormalizedReference:
        """Normalize a repository reference with the configured overrides."""
        return normalize_repository_url(url, self.config.fetch.local_overrides)

    def fetch_repository(
        self,
        url: str,
        force_refresh: bool = False,
        source_name: Optional[str] = None,
    ) -> FetchResult:
        """
        Fetch a repository and scan it for catalog items.

        Args:
            url: Repository reference as configured by the user.
            force_refresh: Discard the cached copy and clone again.
            source_name: Name used for items when metadata has none.

        Returns:
            FetchResult for the repository.

        Raises:
            MalformedReferenceError: If the URL is not a Git repository URL.
            RepositoryAccessError: If the repository could not be reached.
            StructureValidationError: If a required file is missing.
        """
        reference = self.normalize(url)
        if reference.clone_url != url.strip():
            logger.info(
                f"Converted {url} to {reference.clone_url} "
                f"with subdirectory {reference.requested_subdir or 'none'}"
            )

        repo_root = self._acquire(reference, force_refresh)

        base_dir = self.resolver.resolve(repo_root, reference.requested_subdir)
        self.validator.validate(base_dir)

        metadata = parse_repository_metadata(base_dir, self.config.resolver)
        items = self.scanner(base_dir, reference.clone_url, source_name or metadata.name)

        logger.info(f"Fetched {len(items)} items from {reference.clone_url}")

        return FetchResult(
            metadata=metadata,
            items=tuple(items),
            url=url,
            valid_url=reference.clone_url,
            subdir=reference.requested_subdir,
            base_dir=base_dir,
        )

    def _acquire(self, reference: NormalizedReference, force_refresh: bool) -> Path:
        if not reference.uses_local_override:
            return self.cache_manager.ensure_fresh(
                reference.clone_url, self.cache_root, force_refresh
            )

        override = find_local_override(reference.clone_url, self.config.fetch.local_overrides)
        local_dir = Path(override).expanduser()
        if not local_dir.is_dir():
            raise RepositoryAccessError(
                f"Local override for {reference.clone_url} is not a directory: {local_dir}",
                details={"url": reference.clone_url, "path": str(local_dir)},
            )

        logger.info(f"Using local directory {local_dir} for {reference.clone_url}")
        return local_dir


def fetch_repository(
    url: str,
    force_refresh: bool = False,
    source_name: Optional[str] = None,
    config: CatalogConfig = None,
) -> FetchResult:
    """Convenience function to fetch a single repository."""
    return RepositoryFetcher(config).fetch_repository(url, force_refresh, source_name)
