"""
Unit tests for core module components.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from repo_catalog.core.config import (
    Config,
    CatalogConfig,
    FetchConfig,
    ResolverConfig,
    ValidationConfig,
)
from repo_catalog.core.exceptions import (
    CatalogError,
    MalformedReferenceError,
    GitCommandError,
    RepositoryAccessError,
    CacheCleanupError,
    StructureValidationError,
    MissingMetadataError,
    MissingReadmeError,
)


class TestConfig(unittest.TestCase):
    """Tests for configuration management."""

    def tearDown(self):
        Config.reset()

    def test_default_config(self):
        """Test that default configuration is created correctly."""
        config = CatalogConfig()

        self.assertIsInstance(config.fetch, FetchConfig)
        self.assertIsInstance(config.resolver, ResolverConfig)
        self.assertIsInstance(config.validation, ValidationConfig)
        self.assertFalse(config.verbose)
        self.assertEqual(config.sources, [])

    def test_fetch_config_defaults(self):
        """Test fetch configuration defaults."""
        config = FetchConfig()

        self.assertEqual(config.clone_depth, 0)
        self.assertEqual(config.git_timeout, 300)
        self.assertIn("not a git repository", config.recovery_signatures)
        self.assertIn("refusing to merge unrelated histories", config.recovery_signatures)
        self.assertEqual(config.local_overrides, {})

    def test_resolver_config_defaults(self):
        """Test resolver configuration defaults."""
        config = ResolverConfig()

        self.assertEqual(config.metadata_filename, "metadata.en.yml")
        self.assertEqual(config.readme_filename, "README.md")
        self.assertEqual(config.max_search_depth, 3)

    def test_validation_config_defaults(self):
        """Test validation configuration defaults."""
        self.assertEqual(ValidationConfig().max_name_length, 20)

    def test_config_save_and_load(self):
        """Test configuration serialization and deserialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            Config.get().fetch.local_overrides = {"https://github.com/o/r.git": "/srv/r"}
            Config.get().sources = [{"url": "https://github.com/o/r", "enabled": True}]

            Config.save_to_file(str(config_path))

            with open(config_path) as f:
                data = json.load(f)
            self.assertIn("fetch", data)
            self.assertIn("resolver", data)
            self.assertIn("validation", data)

            Config.reset()
            loaded = Config.load_from_file(str(config_path))

            self.assertEqual(loaded.fetch.local_overrides, {"https://github.com/o/r.git": "/srv/r"})
            self.assertEqual(loaded.sources[0]["url"], "https://github.com/o/r")
            self.assertIs(Config.get(), loaded)

    def test_load_missing_file(self):
        """Test loading a configuration file that does not exist."""
        with self.assertRaises(FileNotFoundError):
            Config.load_from_file("/nonexistent/config.json")

    def test_load_from_env(self):
        """Test loading configuration from environment variables."""
        env = {
            "RCAT_CACHE_DIR": "/tmp/rcat-cache",
            "RCAT_GIT_TIMEOUT": "42",
            "RCAT_CLONE_DEPTH": "1",
            "RCAT_VERBOSE": "yes",
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text("")
            with mock.patch.dict(os.environ, env):
                config = Config.load_from_env(str(env_file))

        self.assertEqual(config.fetch.cache_dir, "/tmp/rcat-cache")
        self.assertEqual(config.fetch.git_timeout, 42)
        self.assertEqual(config.fetch.clone_depth, 1)
        self.assertTrue(config.verbose)

    def test_load_from_dotenv_file(self):
        """Test loading configuration from a .env file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text("RCAT_CACHE_DIR=/srv/from-dotenv\n")
            with mock.patch.dict(os.environ, {}, clear=False):
                os.environ.pop("RCAT_CACHE_DIR", None)
                config = Config.load_from_env(str(env_file))

        self.assertEqual(config.fetch.cache_dir, "/srv/from-dotenv")

    def test_singleton(self):
        """Test that Config is a singleton."""
        self.assertIs(Config(), Config())
        self.assertIs(Config.get(), Config.get())


class TestExceptions(unittest.TestCase):
    """Tests for the exception hierarchy."""

    def test_base_error_formatting(self):
        """Test base error message formatting."""
        error = CatalogError("Something failed", stage="Cache", details={"k": "v"})

        self.assertEqual(str(error), "[Cache] Something failed")
        self.assertEqual(error.details, {"k": "v"})
        self.assertEqual(str(CatalogError("plain")), "plain")

    def test_malformed_reference(self):
        """Test malformed reference errors."""
        error = MalformedReferenceError("not-a-url")

        self.assertIsInstance(error, CatalogError)
        self.assertEqual(error.stage, "Normalization")
        self.assertIn("not-a-url", str(error))

    def test_git_command_error(self):
        """Test git command error details."""
        error = GitCommandError("git clone failed", ["git", "clone"], 128, "fatal: nope")

        self.assertEqual(error.returncode, 128)
        self.assertEqual(error.stderr, "fatal: nope")
        self.assertEqual(error.details["command"], ["git", "clone"])

    def test_cleanup_error_is_access_error(self):
        """Test that cleanup errors are access errors."""
        error = CacheCleanupError("/cache/repo", "busy")

        self.assertIsInstance(error, RepositoryAccessError)
        self.assertEqual(error.stage, "Cache")
        self.assertIn("/cache/repo", str(error))

    def test_structure_errors_are_distinct(self):
        """Test structure error messages and hierarchy."""
        metadata = MissingMetadataError("/repo", "metadata.en.yml")
        readme = MissingReadmeError("/repo", "README.md")

        self.assertIsInstance(metadata, StructureValidationError)
        self.assertIsInstance(readme, StructureValidationError)
        self.assertNotIsInstance(metadata, RepositoryAccessError)
        self.assertEqual(str(metadata), "[Validation] Repository is missing metadata.en.yml file")
        self.assertEqual(str(readme), "[Validation] Repository is missing README.md file")


if __name__ == "__main__":
    unittest.main()
