"""
Repository data structures produced by a fetch.

All types are immutable; a FetchResult is built once per successful
fetch and handed to the caller as-is.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

ITEM_TYPES = ("role", "mcp-server", "storage", "other")


@dataclass(frozen=True)
class RepositoryMetadata:
    """Metadata read from a repository's metadata document."""

    name: str
    description: str = ""
    version: str = "0.0.0"
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        # extra is a read-only copy of the parsed document
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryMetadata":
        """Create metadata from a parsed document."""
        known = {"name", "description", "version"}
        return cls(
            name=str(data.get("name") or "Unknown Repository"),
            description=str(data.get("description") or ""),
            version=str(data.get("version") or "0.0.0"),
            extra={k: v for k, v in data.items() if k not in known},
        )

    @classmethod
    def unknown(cls) -> "RepositoryMetadata":
        """Placeholder used when the metadata document cannot be parsed."""
        return cls(
            name="Unknown Repository",
            description="Failed to load repository",
            version="0.0.0",
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "name": self.name,
            "description": self.description,
            "version": self.version,
        })
        return data


@dataclass(frozen=True)
class PackageManagerItem:
    """A single catalog entry found inside a repository."""

    name: str
    description: str
    type: str
    url: str
    repo_url: str
    path: str = ""
    author: Optional[str] = None
    tags: Tuple[str, ...] = ()
    version: Optional[str] = None
    source_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "url": self.url,
            "repo_url": self.repo_url,
            "path": self.path,
            "author": self.author,
            "tags": list(self.tags),
            "version": self.version,
            "source_name": self.source_name,
        }


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching one repository reference."""

    metadata: RepositoryMetadata
    items: Tuple[PackageManagerItem, ...]
    url: str
    valid_url: str
    subdir: Optional[str] = None
    base_dir: Optional[Path] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "metadata": self.metadata.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "url": self.url,
            "valid_url": self.valid_url,
            "subdir": self.subdir,
            "base_dir": str(self.base_dir) if self.base_dir else None,
        }
