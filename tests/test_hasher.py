"""Tests for content hashing."""

import hashlib
import os
import string
from collections.abc import Callable
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tmplsync.core.hasher import compute_directory_hash
from tmplsync.errors import ConfigurationError
from tmplsync.services.filesystem import list_files


@pytest.mark.unit
class TestComputeDirectoryHash:
    """Tests for compute_directory_hash."""

    def test_returns_lowercase_hex_sha256(self, make_version_dir: Callable[..., Path]) -> None:
        """Digest is 64 lowercase hex characters."""
        digest = compute_directory_hash(make_version_dir("v1"))
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_identical_directories_hash_equal(
        self, make_version_dir: Callable[..., Path]
    ) -> None:
        """Byte-identical trees produce the same digest."""
        files = {"main.tf": "resource {}\n", "modules/a/vars.tf": "variable x {}\n"}
        first = make_version_dir("a", files)
        second = make_version_dir("b", files)
        assert compute_directory_hash(first) == compute_directory_hash(second)

    def test_repeated_calls_are_stable(self, make_version_dir: Callable[..., Path]) -> None:
        """Hashing the same directory twice gives the same result."""
        directory = make_version_dir("v1", {"a.tf": "a", "b/c.tf": "c"})
        assert compute_directory_hash(directory) == compute_directory_hash(directory)

    def test_content_change_changes_hash(self, make_version_dir: Callable[..., Path]) -> None:
        """One byte of difference changes the digest."""
        first = make_version_dir("a", {"main.tf": "count = 1\n"})
        second = make_version_dir("b", {"main.tf": "count = 2\n"})
        assert compute_directory_hash(first) != compute_directory_hash(second)

    def test_mtime_is_not_an_input(self, make_version_dir: Callable[..., Path]) -> None:
        """Touching a file does not change the digest."""
        directory = make_version_dir("v1", {"main.tf": "x"})
        before = compute_directory_hash(directory)
        os.utime(directory / "main.tf", (0, 0))
        assert compute_directory_hash(directory) == before

    def test_matches_sha256_of_concatenated_contents(
        self, make_version_dir: Callable[..., Path]
    ) -> None:
        """Digest is SHA-256 over file contents in depth-first walk order."""
        directory = make_version_dir("v1", {"b.tf": "B", "a/z.tf": "Z", "a.tf": "A"})
        expected = hashlib.sha256(b"Z" + b"A" + b"B").hexdigest()
        assert compute_directory_hash(directory) == expected

    def test_file_order_matters(self, make_version_dir: Callable[..., Path]) -> None:
        """Swapping contents between files changes the digest."""
        first = make_version_dir("a", {"1.tf": "one", "2.tf": "two"})
        second = make_version_dir("b", {"1.tf": "two", "2.tf": "one"})
        assert compute_directory_hash(first) != compute_directory_hash(second)

    def test_empty_directory(self, tmp_path: Path) -> None:
        """An empty directory hashes to the digest of no input."""
        empty = tmp_path / "empty"
        empty.mkdir()
        assert compute_directory_hash(empty) == hashlib.sha256().hexdigest()

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        """A missing directory is a configuration error."""
        with pytest.raises(ConfigurationError, match="not a directory"):
            compute_directory_hash(tmp_path / "missing")

    def test_file_instead_of_directory_raises(self, tmp_path: Path) -> None:
        """A regular file is not a version directory."""
        path = tmp_path / "main.tf"
        path.write_text("x")
        with pytest.raises(ConfigurationError):
            compute_directory_hash(path)

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions required")
    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root reads anything")
    def test_unreadable_file_raises(self, make_version_dir: Callable[..., Path]) -> None:
        """Read errors surface as configuration errors, never a partial hash."""
        directory = make_version_dir("v1", {"main.tf": "x"})
        (directory / "main.tf").chmod(0)
        try:
            with pytest.raises(ConfigurationError, match="failed to compute directory hash"):
                compute_directory_hash(directory)
        finally:
            (directory / "main.tf").chmod(0o644)


@pytest.mark.unit
class TestListFiles:
    """Tests for list_files ordering."""

    def test_depth_first_sorted_order(self, make_version_dir: Callable[..., Path]) -> None:
        """A directory sorts before a file sharing its name as a prefix."""
        directory = make_version_dir(
            "v1", {"b.tf": "", "a/y.tf": "", "a/x.tf": "", "a.tf": "", "c/d/e.tf": ""}
        )
        names = [p.relative_to(directory).as_posix() for p in list_files(directory)]
        assert names == ["a/x.tf", "a/y.tf", "a.tf", "b.tf", "c/d/e.tf"]

    def test_directories_are_not_listed(self, make_version_dir: Callable[..., Path]) -> None:
        """Only regular files are returned."""
        directory = make_version_dir("v1", {"sub/main.tf": ""})
        (directory / "emptydir").mkdir()
        assert list_files(directory) == [directory / "sub" / "main.tf"]


class TestHashProperties:
    """Property-based tests for the content hash."""

    file_names = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=8)
    trees = st.dictionaries(file_names, st.binary(max_size=64), min_size=1, max_size=5)

    @given(files=trees)
    @settings(max_examples=50)
    def test_copy_hashes_equal(self, tmp_path_factory: pytest.TempPathFactory, files: dict) -> None:
        """A byte-for-byte copy of a directory always hashes the same."""
        first = tmp_path_factory.mktemp("first")
        second = tmp_path_factory.mktemp("second")
        for name, content in files.items():
            (first / f"{name}.tf").write_bytes(content)
            (second / f"{name}.tf").write_bytes(content)
        assert compute_directory_hash(first) == compute_directory_hash(second)

    @given(files=trees)
    @settings(max_examples=50)
    def test_hash_is_digest_of_sorted_contents(
        self, tmp_path_factory: pytest.TempPathFactory, files: dict
    ) -> None:
        """The digest equals SHA-256 of the contents in name order."""
        directory = tmp_path_factory.mktemp("tree")
        for name, content in files.items():
            (directory / f"{name}.tf").write_bytes(content)
        expected = hashlib.sha256(b"".join(files[name] for name in sorted(files))).hexdigest()
        assert compute_directory_hash(directory) == expected
