"""
Configuration management for the repository catalog fetcher.

Provides centralized configuration for fetching, directory resolution
and source validation with sensible defaults.
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import find_dotenv, load_dotenv


@dataclass
class FetchConfig:
    """Configuration for cloning and refreshing cached repositories."""

    # Root directory holding one working copy per clone URL
    cache_dir: str = "./data/package-manager-cache"

    # Clone depth for remote repositories (0 = full clone)
    clone_depth: int = 0

    # Timeout for git operations (seconds)
    git_timeout: int = 300

    # Lower-cased fragments of git errors that trigger a full re-clone
    recovery_signatures: List[str] = field(default_factory=lambda: [
        "not a git repository",
        "repository not found",
        "refusing to merge unrelated histories",
        "does not appear to be a git repository",
        "could not read from remote repository",
        "no such remote",
    ])

    # Canonical clone URL -> local directory used instead of the cache
    local_overrides: Dict[str, str] = field(default_factory=dict)


@dataclass
class ResolverConfig:
    """Configuration for base directory resolution and structure checks."""

    metadata_filename: str = "metadata.en.yml"
    readme_filename: str = "README.md"

    # Levels below the repository root searched for a missing subdirectory
    max_search_depth: int = 3


@dataclass
class ValidationConfig:
    """Configuration for source list validation."""

    max_name_length: int = 20


@dataclass
class CatalogConfig:
    """Master configuration combining all component configurations."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    # Enable verbose logging
    verbose: bool = False

    # Configured sources as plain dictionaries (url, name, enabled)
    sources: List[Dict] = field(default_factory=list)


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables, a .env file and
    JSON configuration files.
    """

    _instance: Optional["Config"] = None
    _config: CatalogConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = CatalogConfig()
        return cls._instance

    @classmethod
    def get(cls) -> CatalogConfig:
        """Get the current configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> CatalogConfig:
        """Restore the default configuration."""
        instance = cls()
        instance._config = CatalogConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> CatalogConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded CatalogConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, env_file: Optional[str] = None) -> CatalogConfig:
        """
        Load configuration from environment variables.

        Variables are prefixed with RCAT_ and may be provided through a
        .env file, which never overrides variables already set.

        Returns:
            CatalogConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True), override=False)

        instance = cls()
        config = instance._config

        if os.getenv("RCAT_CACHE_DIR"):
            config.fetch.cache_dir = os.getenv("RCAT_CACHE_DIR")

        if os.getenv("RCAT_GIT_TIMEOUT"):
            config.fetch.git_timeout = int(os.getenv("RCAT_GIT_TIMEOUT"))

        if os.getenv("RCAT_CLONE_DEPTH"):
            config.fetch.clone_depth = int(os.getenv("RCAT_CLONE_DEPTH"))

        if os.getenv("RCAT_VERBOSE"):
            config.verbose = os.getenv("RCAT_VERBOSE").lower() in ("true", "1", "yes")

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> CatalogConfig:
        """Convert a dictionary to CatalogConfig."""
        config = CatalogConfig()

        if "fetch" in data:
            config.fetch = FetchConfig(**data["fetch"])

        if "resolver" in data:
            config.resolver = ResolverConfig(**data["resolver"])

        if "validation" in data:
            config.validation = ValidationConfig(**data["validation"])

        if "verbose" in data:
            config.verbose = data["verbose"]

        if "sources" in data:
            config.sources = list(data["sources"])

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config = cls.get()
        data = cls._config_to_dict(config)

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: CatalogConfig) -> dict:
        """Convert CatalogConfig to a dictionary."""
        return {
            "fetch": {
                "cache_dir": config.fetch.cache_dir,
                "clone_depth": config.fetch.clone_depth,
                "git_timeout": config.fetch.git_timeout,
                "recovery_signatures": config.fetch.recovery_signatures,
                "local_overrides": config.fetch.local_overrides,
            },
            "resolver": {
                "metadata_filename": config.resolver.metadata_filename,
                "readme_filename": config.resolver.readme_filename,
                "max_search_depth": config.resolver.max_search_depth,
            },
            "validation": {
                "max_name_length": config.validation.max_name_length,
            },
            "verbose": config.verbose,
            "sources": config.sources,
        }
