"""
Unit tests for base directory resolution and structural validation.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from repo_catalog.core.config import ResolverConfig
from repo_catalog.core.exceptions import (
    MissingMetadataError,
    MissingReadmeError,
    StructureValidationError,
)
from repo_catalog.ingestion.resolver import StructureValidator, SubdirectoryResolver


def make_catalog(directory: Path, metadata: bool = True, readme: bool = True) -> Path:
    """Create a directory holding the required catalog files."""
    directory.mkdir(parents=True, exist_ok=True)
    if metadata:
        (directory / "metadata.en.yml").write_text("name: Test\n")
    if readme:
        (directory / "README.md").write_text("# Test\n")
    return directory


class TestStructureValidator(unittest.TestCase):
    """Tests for required file checks."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.validator = StructureValidator(ResolverConfig())

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_valid_directory(self):
        """Test a directory with both required files."""
        make_catalog(self.tmpdir)

        self.validator.validate(self.tmpdir)
        self.assertTrue(self.validator.has_required_files(self.tmpdir))

    def test_missing_metadata(self):
        """Test a directory without metadata."""
        make_catalog(self.tmpdir, metadata=False)

        with self.assertRaises(MissingMetadataError) as ctx:
            self.validator.validate(self.tmpdir)

        self.assertIn("Repository is missing metadata.en.yml file", str(ctx.exception))
        self.assertEqual(ctx.exception.filename, "metadata.en.yml")

    def test_missing_readme(self):
        """Test a directory without a README."""
        make_catalog(self.tmpdir, readme=False)

        with self.assertRaises(MissingReadmeError) as ctx:
            self.validator.validate(self.tmpdir)

        self.assertIn("Repository is missing README.md file", str(ctx.exception))

    def test_metadata_is_reported_first(self):
        """Test that missing metadata is reported first."""
        with self.assertRaises(MissingMetadataError):
            self.validator.validate(self.tmpdir)

    def test_nonexistent_directory(self):
        """Test validating a directory that does not exist."""
        with self.assertRaises(StructureValidationError):
            self.validator.validate(self.tmpdir / "nope")

    def test_directory_named_like_file_does_not_count(self):
        """Test that directories do not count as required files."""
        (self.tmpdir / "metadata.en.yml").mkdir()
        (self.tmpdir / "README.md").write_text("# Test\n")

        self.assertFalse(self.validator.has_required_files(self.tmpdir))

    def test_custom_filenames(self):
        """Test custom required file names."""
        validator = StructureValidator(
            ResolverConfig(metadata_filename="meta.yml", readme_filename="README")
        )
        (self.tmpdir / "meta.yml").write_text("name: x\n")

        with self.assertRaises(MissingReadmeError) as ctx:
            validator.validate(self.tmpdir)

        self.assertIn("README file", str(ctx.exception))


class TestSubdirectoryResolver(unittest.TestCase):
    """Tests for base directory resolution."""

    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        self.resolver = SubdirectoryResolver(ResolverConfig())

    def tearDown(self):
        shutil.rmtree(self.root)

    def test_no_subdirectory_uses_root(self):
        """Test resolving without a subdirectory."""
        self.assertEqual(self.resolver.resolve(self.root, None), self.root)

    def test_empty_subdirectory_uses_root(self):
        """Test resolving an empty subdirectory."""
        self.assertEqual(self.resolver.resolve(self.root, ""), self.root)
        self.assertEqual(self.resolver.resolve(self.root, "/"), self.root)

    def test_literal_path(self):
        """Test resolving an existing path."""
        target = (self.root / "packages" / "core")
        target.mkdir(parents=True)

        self.assertEqual(self.resolver.resolve(self.root, "packages/core"), target)
        self.assertEqual(self.resolver.resolve(self.root, "packages/core/"), target)

    def test_literal_file_uses_its_directory(self):
        """Test resolving a path to a file."""
        make_catalog(self.root)

        self.assertEqual(self.resolver.resolve(self.root, "README.md"), self.root)

    def test_search_by_name(self):
        """Test finding a directory by name."""
        target = self.root / "nested" / "catalog"
        target.mkdir(parents=True)

        self.assertEqual(self.resolver.resolve(self.root, "catalog"), target)

    def test_search_by_structure(self):
        """Test finding a directory by its required files."""
        target = make_catalog(self.root / "packages" / "catalog")

        self.assertEqual(self.resolver.resolve(self.root, "missing"), target)

    def test_first_match_in_name_order_wins(self):
        """Test that the first match in name order wins."""
        by_name = self.root / "a" / "wanted"
        by_name.mkdir(parents=True)
        make_catalog(self.root / "b")

        self.assertEqual(self.resolver.resolve(self.root, "wanted"), by_name)

    def test_structural_match_before_later_name_match(self):
        """Test a structural match found before a name match."""
        structural = make_catalog(self.root / "a")
        (self.root / "b" / "wanted").mkdir(parents=True)

        self.assertEqual(self.resolver.resolve(self.root, "wanted"), structural)

    def test_depth_first_order(self):
        """Test depth-first search order."""
        deep = self.root / "a" / "x" / "wanted"
        deep.mkdir(parents=True)
        (self.root / "b" / "wanted").mkdir(parents=True)

        self.assertEqual(self.resolver.resolve(self.root, "wanted"), deep)

    def test_search_depth_is_bounded(self):
        """Test the search depth limit."""
        (self.root / "l1" / "l2" / "l3" / "wanted").mkdir(parents=True)

        result = self.resolver.resolve(self.root, "wanted")

        self.assertEqual(result, self.root / "wanted")

        (self.root / "k1" / "k2" / "wanted").mkdir(parents=True)
        self.assertEqual(
            self.resolver.resolve(self.root, "wanted"),
            self.root / "k1" / "k2" / "wanted",
        )

    def test_git_directory_is_skipped(self):
        """Test that .git is never searched."""
        (self.root / ".git" / "wanted").mkdir(parents=True)

        self.assertEqual(self.resolver.resolve(self.root, "wanted"), self.root / "wanted")

    def test_nested_request_matches_last_segment(self):
        """Test matching a nested path by its last segment."""
        target = self.root / "moved" / "roles"
        target.mkdir(parents=True)

        self.assertEqual(self.resolver.resolve(self.root, "catalog/roles"), target)

    def test_falls_back_to_root_with_required_files(self):
        """Test falling back to a valid repository root."""
        make_catalog(self.root)
        (self.root / "docs").mkdir()

        self.assertEqual(self.resolver.resolve(self.root, "missing"), self.root)

    def test_unresolved_path_is_returned(self):
        """Test returning the unresolved path."""
        (self.root / "docs").mkdir()

        result = self.resolver.resolve(self.root, "missing")

        self.assertEqual(result, self.root / "missing")
        with self.assertRaises(MissingMetadataError):
            StructureValidator(ResolverConfig()).validate(result)

    def test_parent_traversal_stays_inside_repository(self):
        """Test that '..' in the requested path never leaves the repository."""
        repo = self.root / "cache" / "r"
        repo.mkdir(parents=True)
        make_catalog(self.root / "secrets")

        result = self.resolver.resolve(repo, "../../secrets")

        self.assertEqual(result, repo)
        with self.assertRaises(MissingMetadataError):
            StructureValidator(ResolverConfig()).validate(result)

    def test_parent_traversal_falls_back_to_search(self):
        """Test that an escaping path is still matched by name inside the repository."""
        repo = self.root / "r"
        target = make_catalog(repo / "nested" / "secrets")
        (self.root / "secrets").mkdir()

        self.assertEqual(self.resolver.resolve(repo, "../secrets"), target)

    def test_symlink_out_of_repository_is_ignored(self):
        """Test that a symlink leading outside the repository is not followed."""
        repo = self.root / "r"
        repo.mkdir()
        outside = make_catalog(self.root / "outside")
        (repo / "catalog").symlink_to(outside, target_is_directory=True)

        self.assertEqual(self.resolver.resolve(repo, "catalog"), repo)

    def test_inner_parent_segments_are_allowed(self):
        """Test that '..' which stays inside the repository still resolves."""
        target = self.root / "packages"
        target.mkdir()
        (self.root / "docs").mkdir()

        result = self.resolver.resolve(self.root, "docs/../packages")

        self.assertEqual(result.resolve(), target.resolve())

    def test_custom_search_depth(self):
        """Test a custom search depth."""
        (self.root / "a" / "b" / "wanted").mkdir(parents=True)
        resolver = SubdirectoryResolver(ResolverConfig(max_search_depth=2))

        self.assertEqual(resolver.resolve(self.root, "wanted"), self.root / "wanted")


if __name__ == "__main__":
    unittest.main()
