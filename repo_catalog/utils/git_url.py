"""
Git repository URL classification and normalization.

The same compiled patterns back both the validity check and the
rewrite of GitHub browser URLs into clone URLs.
"""

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from repo_catalog.core.exceptions import MalformedReferenceError

logger = logging.getLogger(__name__)

_NAME = r"[a-zA-Z0-9_.-]+"

_DOT_SEGMENTS = (".", "..")

GIT_URL_PATTERNS = {
    # https://github.com/<owner>/<repo>/(tree|blob)/<ref>[/<path>]
    "GITHUB_WEB_URL": re.compile(
        rf"^https?://github\.com/({_NAME})/({_NAME})/(tree|blob)/([^/]+)(?:/(.*))?$"
    ),
    "HTTPS": re.compile(
        rf"^https?://(github\.com|gitlab\.com|bitbucket\.org|dev\.azure\.com)/{_NAME}/{_NAME}(\.git)?$"
    ),
    "SSH": re.compile(
        rf"^git@(github\.com|gitlab\.com|bitbucket\.org):({_NAME})/({_NAME})(\.git)?$"
    ),
    "GIT_PROTOCOL": re.compile(
        rf"^git://(github\.com|gitlab\.com|bitbucket\.org)/{_NAME}/{_NAME}(\.git)?$"
    ),
}

_PLAIN_PATTERNS = ("HTTPS", "SSH", "GIT_PROTOCOL")


@dataclass(frozen=True)
class NormalizedReference:
    """A repository reference rewritten into a clone URL."""

    clone_url: str
    requested_subdir: Optional[str] = None
    uses_local_override: bool = False


def convert_github_web_url(url: str) -> Optional[Tuple[str, Optional[str]]]:
    """
    Convert a GitHub browser URL into a clone URL and subdirectory.

    Args:
        url: URL of the form .../<owner>/<repo>/(tree|blob)/<ref>[/<path>].

    Returns:
        Tuple of (clone_url, subdir) or None if the URL is not a GitHub
        browser URL. ``subdir`` is None when the URL stops at the ref and
        an empty string when it stops at ``<ref>/``.
    """
    match = GIT_URL_PATTERNS["GITHUB_WEB_URL"].match(url.strip())
    if not match:
        return None

    owner, repo = match.group(1), match.group(2)
    return f"https://github.com/{owner}/{repo}.git", match.group(5)


def _matches_plain_pattern(url: str) -> bool:
    return any(GIT_URL_PATTERNS[name].match(url) for name in _PLAIN_PATTERNS)


def _check_path_segments(clone_url: str) -> None:
    # '.' and '..' match the name pattern but would escape the cache root
    if any(segment in _DOT_SEGMENTS for segment in re.split(r"[/:]", clone_url)):
        raise MalformedReferenceError(clone_url, "Repository path contains '.' or '..'")
    repository_name(clone_url)


def _classify(trimmed: str) -> Optional[Tuple[str, Optional[str]]]:
    converted = convert_github_web_url(trimmed)
    if converted is not None:
        return converted
    if _matches_plain_pattern(trimmed):
        return trimmed, None
    return None


def is_valid_git_repository_url(url: str) -> bool:
    """Check whether a URL is a usable Git repository reference."""
    classified = _classify(url.strip())
    if classified is None:
        return False
    try:
        _check_path_segments(classified[0])
    except MalformedReferenceError:
        return False
    return True


def _override_key(clone_url: str) -> str:
    key = clone_url.strip().rstrip("/")
    return key[:-4] if key.endswith(".git") else key


def find_local_override(
    clone_url: str, local_overrides: Optional[Mapping[str, str]]
) -> Optional[str]:
    """
    Look up the local directory configured for a clone URL.

    Override keys may be written in any accepted URL form. They are
    normalized before matching, and a trailing .git or slash is ignored
    on both sides.
    """
    if not local_overrides:
        return None

    wanted = _override_key(clone_url)
    for raw_key, directory in local_overrides.items():
        classified = _classify((raw_key or "").strip())
        if classified is None:
            logger.warning(f"Ignoring local override for invalid URL: {raw_key}")
            continue
        if _override_key(classified[0]) == wanted:
            return directory
    return None


def normalize_repository_url(
    raw: str, local_overrides: Optional[Mapping[str, str]] = None
) -> NormalizedReference:
    """
    Normalize a user supplied repository reference.

    Args:
        raw: Clone URL, SSH/git URL or GitHub browser URL.
        local_overrides: Optional mapping of repository URL to a local directory.

    Returns:
        NormalizedReference for the repository.

    Raises:
        MalformedReferenceError: If the reference matches no known shape
            or names a '.' or '..' path segment.
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        raise MalformedReferenceError(raw or "", "Repository URL cannot be empty")

    classified = _classify(trimmed)
    if classified is None:
        raise MalformedReferenceError(trimmed)

    clone_url, subdir = classified
    _check_path_segments(clone_url)

    return NormalizedReference(
        clone_url=clone_url,
        requested_subdir=subdir,
        uses_local_override=find_local_override(clone_url, local_overrides) is not None,
    )


def repository_name(clone_url: str) -> str:
    """
    Derive the cache directory name for a clone URL.

    The last path segment (after '/' or the scp-style ':') with any
    .git suffix removed.

    Raises:
        MalformedReferenceError: If the segment is missing or is a
            relative path component such as '.' or '..'.
    """
    match = re.search(r"[/:]([^/:]+?)(?:\.git)?/?$", clone_url.strip())
    if not match:
        raise MalformedReferenceError(clone_url, "Invalid repository URL")
    name = match.group(1)
    if name in _DOT_SEGMENTS:
        raise MalformedReferenceError(clone_url, f"Invalid repository name: {name}")
    return name
