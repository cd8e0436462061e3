"""
Git operations handler for the repository cache.

A GitHandler is a short-lived handle bound to one working directory.
Callers build one per operation instead of sharing a long-lived client.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from repo_catalog.core.config import FetchConfig
from repo_catalog.core.exceptions import GitCommandError

logger = logging.getLogger(__name__)


class GitHandler:
    """
    Runs git commands through subprocess for a single working copy.

    Every failure, including timeouts and a missing git binary, is
    raised as GitCommandError with the captured stderr attached.
    """

    def __init__(self, config: FetchConfig, repo_dir: Optional[Path] = None):
        self.config = config
        self.repo_dir = Path(repo_dir) if repo_dir is not None else None

    @staticmethod
    def is_available() -> bool:
        """Check if git is available on the system."""
        try:
            result = subprocess.run(
                ["git", "--version"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def run(self, *args: str, cwd: Optional[Path] = None) -> str:
        """
        Run a git command and return its stripped stdout.

        Raises:
            GitCommandError: If git exits non-zero, times out or is missing.
        """
        cmd: List[str] = ["git", *args]
        workdir = cwd if cwd is not None else self.repo_dir
        logger.debug(f"Git command: {' '.join(cmd)} (cwd={workdir})")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(workdir) if workdir is not None else None,
                timeout=self.config.git_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(
                f"git {args[0]} timed out after {self.config.git_timeout} seconds",
                command=cmd,
            ) from e
        except (FileNotFoundError, NotADirectoryError) as e:
            raise GitCommandError(
                f"Unable to run git {args[0]}: {e}", command=cmd
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise GitCommandError(
                f"git {args[0]} failed: {stderr or 'exit code ' + str(result.returncode)}",
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )

        return result.stdout.strip()

    def clone(self, url: str, target: Path) -> None:
        """Clone a repository into target, which must not exist yet."""
        cmd = ["clone"]
        if self.config.clone_depth > 0:
            cmd.extend(["--depth", str(self.config.clone_depth)])
        cmd.extend([url, str(target)])

        logger.info(f"Cloning repository: {url}")
        self.run(*cmd, cwd=Path(target).parent)

    def fetch(self) -> None:
        """Fetch from origin."""
        cmd = ["fetch", "origin"]
        if self.config.clone_depth > 0:
            cmd.extend(["--depth", str(self.config.clone_depth)])
        self.run(*cmd)

    def reset_hard(self, ref: str) -> None:
        self.run("reset", "--hard", ref)

    def clean(self) -> None:
        """Remove untracked files and directories."""
        self.run("clean", "-f", "-d")

    def current_branch(self) -> str:
        return self.run("rev-parse", "--abbrev-ref", "HEAD")

    def remote_url(self) -> str:
        return self.run("remote", "get-url", "origin")

    def default_remote_branch(self) -> str:
        """
        Name of the remote's default branch.

        Read from refs/remotes/origin/HEAD, which clone records; falls back
        to the checked out branch when that ref is missing.
        """
        try:
            ref = self.run("symbolic-ref", "--short", "refs/remotes/origin/HEAD")
        except GitCommandError:
            return self.current_branch()
        return ref.split("/", 1)[1] if ref.startswith("origin/") else ref
