"""
On-disk repository cache.

Keeps one working copy per clone URL under a cache root and brings it
up to date on every fetch. A cache entry is disposable: on corruption,
a forced refresh or an origin mismatch it is deleted wholesale and
cloned again. Partially cloned directories are never left behind.

Calls for the same entry are serialised with an in-process lock.
Separate processes sharing a cache root must run at most one fetch per
clone URL at a time.
"""

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from repo_catalog.core.config import FetchConfig
from repo_catalog.core.exceptions import (
    CacheCleanupError,
    GitCommandError,
    RepositoryAccessError,
)
from repo_catalog.ingestion.git_handler import GitHandler
from repo_catalog.utils.git_url import repository_name

logger = logging.getLogger(__name__)

GitFactory = Callable[[FetchConfig, Optional[Path]], GitHandler]

_ENTRY_LOCKS: Dict[str, threading.Lock] = {}
_ENTRY_LOCKS_GUARD = threading.Lock()


def _entry_lock(repo_dir: Path) -> threading.Lock:
    key = os.path.abspath(repo_dir)
    with _ENTRY_LOCKS_GUARD:
        if key not in _ENTRY_LOCKS:
            _ENTRY_LOCKS[key] = threading.Lock()
        return _ENTRY_LOCKS[key]


class RepositoryCacheManager:
    """
    Maintains cached working copies of remote repositories.

    Entry states:
        absent            -> clone
        present           -> fetch, hard reset to the remote default
                             branch, clean; recoverable failures fall
                             back to a fresh clone
        present + forced  -> delete and clone
    """

    def __init__(self, config: FetchConfig, git_factory: Optional[GitFactory] = None):
        self.config = config
        self.git_factory = git_factory or GitHandler

    def entry_path(self, clone_url: str, cache_root: Path) -> Path:
        """
        Directory holding the working copy for a clone URL.

        Raises:
            MalformedReferenceError: If the URL yields no usable name.
            RepositoryAccessError: If the entry would not be a direct child
                of cache_root.
        """
        repo_dir = Path(cache_root) / repository_name(clone_url)
        root = os.path.normpath(os.path.abspath(cache_root))
        if os.path.dirname(os.path.normpath(os.path.abspath(repo_dir))) != root:
            raise RepositoryAccessError(
                f"Cache entry for {clone_url} would fall outside {cache_root}",
                details={"url": clone_url, "path": str(repo_dir)},
            )
        return repo_dir

    @staticmethod
    def is_present(repo_dir: Path) -> bool:
        return (Path(repo_dir) / ".git").exists()

    def ensure_fresh(
        self, clone_url: str, cache_root: Path, force_refresh: bool = False
    ) -> Path:
        """
        Make sure an up to date working copy of clone_url exists.

        Args:
            clone_url: Canonical clone URL.
            cache_root: Directory holding all cache entries.
            force_refresh: Discard any existing entry and clone again.

        Returns:
            Path to the clean working copy.

        Raises:
            MalformedReferenceError: If the URL yields no usable entry name.
            RepositoryAccessError: If the repository cannot be cloned or
                refreshed, or the cache cannot be cleaned up.
        """
        cache_root = Path(cache_root)
        try:
            cache_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepositoryAccessError(
                f"Cannot create cache directory {cache_root}: {e}",
                details={"path": str(cache_root)},
            ) from e

        repo_dir = self.entry_path(clone_url, cache_root)

        with _entry_lock(repo_dir):
            refreshed = False
            if self.is_present(repo_dir) and not force_refresh:
                refreshed = self._refresh(clone_url, repo_dir)

            if not refreshed:
                self._clone_fresh(clone_url, repo_dir)

            git = self.git_factory(self.config, repo_dir)
            try:
                branch = git.current_branch()
            except GitCommandError as e:
                raise RepositoryAccessError(
                    f"Failed to clone/pull repository {clone_url}: {e}",
                    details={"url": clone_url, "path": str(repo_dir)},
                ) from e

        logger.info(
            f"Repository {'pulled' if refreshed else 'cloned'} successfully "
            f"on branch {branch}: {repo_dir}"
        )
        return repo_dir

    def _refresh(self, clone_url: str, repo_dir: Path) -> bool:
        """
        Update an existing entry in place.

        Returns:
            True if the entry is now up to date, False if it was removed
            and must be cloned again.
        """
        git = self.git_factory(self.config, repo_dir)

        try:
            origin = git.remote_url()
            if origin != clone_url:
                logger.warning(
                    f"Cache entry {repo_dir} tracks {origin}, not {clone_url}; re-cloning"
                )
                self._remove(repo_dir)
                return False

            git.fetch()
            branch = git.default_remote_branch()
            git.reset_hard(f"origin/{branch}")
            git.clean()

        except GitCommandError as e:
            if not self._is_recoverable(e):
                raise RepositoryAccessError(
                    f"Failed to clone/pull repository {clone_url}: {e}",
                    details={"url": clone_url, "path": str(repo_dir)},
                ) from e

            logger.warning(f"Cache entry {repo_dir} is unusable ({e}); re-cloning")
            self._remove(repo_dir)
            return False

        return True

    def _is_recoverable(self, error: GitCommandError) -> bool:
        message = f"{error} {error.stderr}".lower()
        return any(sig.lower() in message for sig in self.config.recovery_signatures)

    def _clone_fresh(self, clone_url: str, repo_dir: Path) -> None:
        self._remove(repo_dir)
        if os.path.lexists(repo_dir):
            raise CacheCleanupError(str(repo_dir), "directory still exists after removal")

        try:
            self.git_factory(self.config, None).clone(clone_url, repo_dir)

            git = self.git_factory(self.config, repo_dir)
            git.reset_hard("HEAD")
            git.clean()

        except GitCommandError as e:
            self._discard_partial(repo_dir)
            raise RepositoryAccessError(
                f"Failed to clone/pull repository {clone_url}: {e}",
                details={"url": clone_url, "path": str(repo_dir)},
            ) from e
        except BaseException:
            self._discard_partial(repo_dir)
            raise

    def _remove(self, repo_dir: Path) -> None:
        """Delete an entry; a missing entry is not an error."""
        try:
            if os.path.islink(repo_dir) or os.path.isfile(repo_dir):
                os.unlink(repo_dir)
            elif os.path.isdir(repo_dir):
                shutil.rmtree(repo_dir)
        except OSError as e:
            raise CacheCleanupError(str(repo_dir), str(e)) from e

    def _discard_partial(self, repo_dir: Path) -> None:
        try:
            self._remove(repo_dir)
        except CacheCleanupError as e:
            logger.warning(f"Failed to remove partial clone: {e}")

    def remove(self, clone_url: str, cache_root: Path) -> bool:
        """
        Delete the cache entry for a clone URL.

        Returns:
            True if an entry was removed.
        """
        repo_dir = self.entry_path(clone_url, cache_root)
        with _entry_lock(repo_dir):
            if not os.path.lexists(repo_dir):
                return False
            self._remove(repo_dir)
        logger.info(f"Removed cache entry: {repo_dir}")
        return True

    @staticmethod
    def list_entries(cache_root: Path) -> List[Path]:
        """List cache entries that are git working copies."""
        cache_root = Path(cache_root)
        if not cache_root.is_dir():
            return []
        return sorted(
            p for p in cache_root.iterdir()
            if p.is_dir() and (p / ".git").exists()
        )
