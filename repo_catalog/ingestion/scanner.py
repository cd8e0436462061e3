"""
Metadata parsing and catalog item discovery.

Reads the YAML metadata documents of a validated base directory and
turns every item directory below it into a PackageManagerItem.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from repo_catalog.core.config import ResolverConfig
from repo_catalog.ingestion.repository import (
    ITEM_TYPES,
    PackageManagerItem,
    RepositoryMetadata,
)

logger = logging.getLogger(__name__)


def load_metadata_document(path: Path) -> Optional[Dict[str, Any]]:
    """
    Load a YAML metadata document.

    Returns:
        The parsed mapping, or None if the file is unreadable, is not
        valid YAML or does not hold a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.error(f"Failed to parse metadata {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.error(f"Metadata {path} is not a mapping")
        return None
    return data


def parse_repository_metadata(base_dir: Path, config: ResolverConfig) -> RepositoryMetadata:
    """Parse the repository level metadata document."""
    data = load_metadata_document(Path(base_dir) / config.metadata_filename)
    if data is None:
        return RepositoryMetadata.unknown()
    return RepositoryMetadata.from_dict(data)


class MetadataScanner:
    """
    Default item scanner.

    Every directory below the base directory that holds its own metadata
    document becomes one catalog item.
    """

    def __init__(self, config: ResolverConfig):
        self.config = config

    def __call__(self, base_dir: Path, repo_url: str, source_name: str) -> List[PackageManagerItem]:
        return self.scan_directory(base_dir, repo_url, source_name)

    def scan_directory(
        self, base_dir: Path, repo_url: str, source_name: str
    ) -> List[PackageManagerItem]:
        base_dir = Path(base_dir)
        items = []

        for root, dirs, files in os.walk(base_dir):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            current = Path(root)
            if current == base_dir or self.config.metadata_filename not in files:
                continue

            item = self._build_item(current, base_dir, repo_url, source_name)
            if item is not None:
                items.append(item)

        logger.debug(f"Discovered {len(items)} items in {base_dir}")
        return items

    def _build_item(
        self, item_dir: Path, base_dir: Path, repo_url: str, source_name: str
    ) -> Optional[PackageManagerItem]:
        data = load_metadata_document(item_dir / self.config.metadata_filename)
        if data is None:
            return None

        item_type = str(data.get("type") or "other")
        if item_type not in ITEM_TYPES:
            item_type = "other"

        tags = data.get("tags") or ()
        if isinstance(tags, str):
            tags = (tags,)

        relative = item_dir.relative_to(base_dir).as_posix()
        version = data.get("version")

        return PackageManagerItem(
            name=str(data.get("name") or item_dir.name),
            description=str(data.get("description") or ""),
            type=item_type,
            url=f"{repo_url}#{relative}",
            repo_url=repo_url,
            path=relative,
            author=data.get("author"),
            tags=tuple(str(tag) for tag in tags),
            version=str(version) if version is not None else None,
            source_name=source_name,
        )
