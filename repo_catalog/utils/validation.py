"""
Input validation utilities for configured repository sources.

Validation results are returned as data; nothing in this module raises
for bad input or touches the network or disk.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from repo_catalog.utils.git_url import is_valid_git_repository_url

MAX_NAME_LENGTH = 20

DUPLICATE_SUFFIX = "(case and whitespace insensitive match)"

_SCP_LIKE = re.compile(r"^[A-Za-z0-9._-]+@[A-Za-z0-9.-]+:\S+$")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ValidationError:
    """A single validation problem for a source field."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass
class SourceRecord:
    """A repository source as configured by the user."""

    url: str
    name: Optional[str] = None
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Dict) -> "SourceRecord":
        """Create a SourceRecord from a configuration entry."""
        return cls(
            url=data.get("url") or "",
            name=data.get("name"),
            enabled=bool(data.get("enabled", True)),
        )

    def to_dict(self) -> Dict:
        data = {"url": self.url, "enabled": self.enabled}
        if self.name is not None:
            data["name"] = self.name
        return data


def _is_well_formed_url(url: str) -> bool:
    if _SCP_LIKE.match(url):
        return True
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def _has_non_visible_chars(value: str) -> bool:
    return any(ch != " " and not ch.isprintable() for ch in value)


def _normalize_key(value: str) -> str:
    return _WHITESPACE.sub("", value.lower())


def validate_source_url(url: str) -> List[ValidationError]:
    """
    Validate a source URL.

    Args:
        url: URL to validate.

    Returns:
        List of validation errors, empty if valid.
    """
    if not url:
        return [ValidationError("url", "URL cannot be empty")]

    if not _is_well_formed_url(url):
        return [ValidationError("url", "Invalid URL format")]

    errors = []

    if _has_non_visible_chars(url):
        errors.append(ValidationError(
            "url", "URL contains non-visible characters other than spaces"
        ))

    if not is_valid_git_repository_url(url):
        errors.append(ValidationError(
            "url",
            "URL must be a valid Git repository URL "
            "(e.g., https://github.com/username/repo)",
        ))

    return errors


def validate_source_name(
    name: Optional[str], max_length: int = MAX_NAME_LENGTH
) -> List[ValidationError]:
    """Validate an optional source display name."""
    if not name:
        return []

    errors = []

    if len(name) > max_length:
        errors.append(ValidationError(
            "name", f"Name must be {max_length} characters or less"
        ))

    if _has_non_visible_chars(name):
        errors.append(ValidationError(
            "name", "Name contains non-visible characters other than spaces"
        ))

    return errors


def _group_indices(
    values: Iterable[Optional[str]], skip_missing: bool
) -> Dict[str, List[int]]:
    groups: Dict[str, List[int]] = {}
    for index, value in enumerate(values):
        if skip_missing and not value:
            continue
        groups.setdefault(_normalize_key(value or ""), []).append(index)
    return groups


def find_duplicate_sources(sources: Sequence[SourceRecord]) -> List[ValidationError]:
    """
    Report URL and name collisions within a source list.

    Every member of a colliding group receives one error naming the first
    other member of the group. URL errors come first, in list order.
    Empty URLs collide with each other; sources without a name do not.
    """
    errors = []

    for field, label, skip_missing in (("url", "URL", False), ("name", "name", True)):
        groups = _group_indices(
            (getattr(source, field) for source in sources), skip_missing
        )
        collisions = []
        for indices in groups.values():
            if len(indices) < 2:
                continue
            for index in indices:
                other = next(i for i in indices if i != index)
                collisions.append((index, other))

        for index, other in sorted(collisions):
            errors.append(ValidationError(
                field,
                f"Source #{index + 1} has a duplicate {label} with "
                f"Source #{other + 1} {DUPLICATE_SUFFIX}",
            ))

    return errors


def _first_match(key: str, values: Iterable[Optional[str]]) -> Optional[int]:
    for index, value in enumerate(values):
        if value and _normalize_key(value) == key:
            return index
    return None


def validate_source(
    source: SourceRecord,
    existing_sources: Sequence[SourceRecord] = (),
    max_name_length: int = MAX_NAME_LENGTH,
) -> List[ValidationError]:
    """
    Validate a new source against format rules and an existing list.

    Args:
        source: The source about to be added.
        existing_sources: Sources already configured.
        max_name_length: Maximum allowed display name length.

    Returns:
        List of validation errors, empty if valid.
    """
    errors = validate_source_url(source.url)
    errors.extend(validate_source_name(source.name, max_name_length))

    if source.url:
        index = _first_match(
            _normalize_key(source.url), (s.url for s in existing_sources)
        )
        if index is not None:
            errors.append(ValidationError(
                "url", f"URL is a duplicate of Source #{index + 1} {DUPLICATE_SUFFIX}"
            ))

    if source.name:
        index = _first_match(
            _normalize_key(source.name), (s.name for s in existing_sources)
        )
        if index is not None:
            errors.append(ValidationError(
                "name", f"Name is a duplicate of Source #{index + 1} {DUPLICATE_SUFFIX}"
            ))

    return errors


def validate_sources(
    sources: Sequence[SourceRecord], max_name_length: int = MAX_NAME_LENGTH
) -> List[ValidationError]:
    """
    Validate a whole source list for format errors and duplicates.

    Per-source errors are prefixed with ``Source #<n>:``; the duplicate
    pass follows and names both conflicting sources.
    """
    errors = []

    for index, source in enumerate(sources):
        source_errors = validate_source_url(source.url)
        source_errors.extend(validate_source_name(source.name, max_name_length))
        for error in source_errors:
            errors.append(ValidationError(
                error.field, f"Source #{index + 1}: {error.message}"
            ))

    errors.extend(find_duplicate_sources(sources))
    return errors
