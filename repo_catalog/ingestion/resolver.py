"""
Base directory resolution and structural validation.

A fetched repository may hold its catalog in a subdirectory. The
resolver picks the directory to scan, and the validator checks that it
carries the metadata and README documents.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from repo_catalog.core.config import ResolverConfig
from repo_catalog.core.exceptions import MissingMetadataError, MissingReadmeError

logger = logging.getLogger(__name__)


class StructureValidator:
    """Checks that a directory holds the required catalog files."""

    def __init__(self, config: ResolverConfig):
        self.config = config

    def has_required_files(self, directory: Path) -> bool:
        directory = Path(directory)
        return (
            (directory / self.config.metadata_filename).is_file()
            and (directory / self.config.readme_filename).is_file()
        )

    def validate(self, directory: Path) -> None:
        """
        Validate the structure of a base directory.

        Raises:
            MissingMetadataError: If the metadata document is absent.
            MissingReadmeError: If the README document is absent.
        """
        directory = Path(directory)

        if not (directory / self.config.metadata_filename).is_file():
            raise MissingMetadataError(str(directory), self.config.metadata_filename)

        if not (directory / self.config.readme_filename).is_file():
            raise MissingReadmeError(str(directory), self.config.readme_filename)


class SubdirectoryResolver:
    """
    Locates the base directory inside a repository.

    Resolution order:
        1. no subdirectory requested -> repository root
        2. literal path exists inside the repository -> that path (parent
           directory for files)
        3. bounded depth-first search, first of: entry named like the
           requested subdirectory, or directory holding both required files
        4. required files at the root -> repository root
        5. the literal path, left for structural validation to reject; the
           repository root when the literal path points outside it
    """

    def __init__(self, config: ResolverConfig, validator: Optional[StructureValidator] = None):
        self.config = config
        self.validator = validator or StructureValidator(config)

    def resolve(self, repo_root: Path, requested_subdir: Optional[str]) -> Path:
        repo_root = Path(repo_root)
        subdir = (requested_subdir or "").strip("/")
        if not subdir:
            return repo_root

        literal = repo_root / subdir
        if not self._is_inside(repo_root, literal):
            logger.warning(f"Requested path {subdir} points outside {repo_root}, ignoring it")
            literal = None
        elif literal.is_dir():
            return literal
        elif literal.is_file():
            logger.debug(f"Requested path {subdir} is a file, using its directory")
            return literal.parent

        found = self.search(repo_root, subdir)
        if found is not None:
            logger.info(f"Subdirectory {subdir} not found, using {found}")
            return found

        if self.validator.has_required_files(repo_root):
            logger.info(f"Subdirectory {subdir} not found, using repository root")
            return repo_root

        logger.warning(f"Subdirectory {subdir} could not be resolved in {repo_root}")
        return literal if literal is not None else repo_root

    @staticmethod
    def _is_inside(repo_root: Path, path: Path) -> bool:
        # resolve() also follows symlinks that lead out of the working copy
        root = repo_root.resolve()
        resolved = path.resolve()
        return resolved == root or root in resolved.parents

    def search(self, repo_root: Path, subdir: str) -> Optional[Path]:
        """
        Depth-first search below repo_root for a matching directory.

        Children are visited in name order, .git is skipped and the
        search descends at most max_search_depth levels.
        """
        target_name = Path(subdir).name
        stack: List[Tuple[Path, int]] = [
            (child, 1) for child in reversed(self._child_dirs(repo_root))
        ]

        while stack:
            current, depth = stack.pop()

            if current.name == target_name:
                return current
            if self.validator.has_required_files(current):
                return current

            if depth < self.config.max_search_depth:
                stack.extend(
                    (child, depth + 1) for child in reversed(self._child_dirs(current))
                )

        return None

    @staticmethod
    def _child_dirs(directory: Path) -> List[Path]:
        try:
            with os.scandir(directory) as entries:
                names = sorted(
                    entry.name for entry in entries
                    if entry.is_dir(follow_symlinks=False) and entry.name != ".git"
                )
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return []
        return [Path(directory) / name for name in names]
