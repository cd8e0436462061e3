"""
Custom exceptions for the repository catalog fetcher.

Provides a hierarchy of exceptions for the different fetch stages so
callers can tell an unreachable repository apart from one that was
reached but has the wrong layout.
"""

from typing import List, Optional


class CatalogError(Exception):
    """Base exception for all catalog fetch errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class MalformedReferenceError(CatalogError):
    """Raised when a repository reference matches no recognized URL shape."""

    def __init__(self, reference: str, reason: str = None):
        reason = reason or "Not a recognized Git repository URL"
        super().__init__(
            f"{reason}: {reference}",
            stage="Normalization",
            details={"reference": reference, "reason": reason},
        )
        self.reference = reference
        self.reason = reason


class GitCommandError(CatalogError):
    """Raised when a git subprocess fails, times out or cannot be started."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(
            message,
            stage="Git",
            details={"command": command, "returncode": returncode, "stderr": stderr},
        )
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr or ""


class RepositoryAccessError(CatalogError):
    """Raised when a repository cannot be cloned, refreshed or reached."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Cache", details=details)


class CacheCleanupError(RepositoryAccessError):
    """Raised when a cache entry cannot be removed from disk."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Failed to clean up cache directory {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class StructureValidationError(CatalogError):
    """Raised when a resolved base directory lacks a required file."""

    def __init__(self, message: str, path: str = None, filename: str = None):
        super().__init__(
            message,
            stage="Validation",
            details={"path": path, "filename": filename},
        )
        self.path = path
        self.filename = filename


class MissingMetadataError(StructureValidationError):
    """Raised when the metadata document is absent."""

    def __init__(self, path: str, filename: str):
        super().__init__(
            f"Repository is missing {filename} file",
            path=path,
            filename=filename,
        )


class MissingReadmeError(StructureValidationError):
    """Raised when the README document is absent."""

    def __init__(self, path: str, filename: str):
        super().__init__(
            f"Repository is missing {filename} file",
            path=path,
            filename=filename,
        )
