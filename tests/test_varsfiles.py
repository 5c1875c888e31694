"""Tests for Terraform variable file discovery."""

from collections.abc import Callable
from pathlib import Path

import pytest

from tmplsync.errors import ConfigurationError
from tmplsync.models import Variable
from tmplsync.services.varsfiles import collect_variables, discover_vars_files, parse_vars_file


@pytest.mark.unit
class TestDiscoverVarsFiles:
    """Tests for discover_vars_files."""

    def test_default_file_first_then_auto_files_sorted(
        self, make_version_dir: Callable[..., Path]
    ) -> None:
        """terraform.tfvars.json precedes *.auto.tfvars.json in name order."""
        directory = make_version_dir(
            "v1",
            {
                "b.auto.tfvars.json": "{}",
                "terraform.tfvars.json": "{}",
                "a.auto.tfvars.json": "{}",
                "main.tf": "",
                "other.tfvars.json": "{}",
            },
        )
        names = [p.name for p in discover_vars_files(directory)]
        assert names == ["terraform.tfvars.json", "a.auto.tfvars.json", "b.auto.tfvars.json"]

    def test_no_files(self, make_version_dir: Callable[..., Path]) -> None:
        """A directory without variable files yields nothing."""
        assert discover_vars_files(make_version_dir("v1")) == []


@pytest.mark.unit
class TestParseVarsFile:
    """Tests for parse_vars_file."""

    def test_strings_and_complex_values(self, tmp_path: Path) -> None:
        """Strings pass through; everything else is JSON-encoded."""
        path = tmp_path / "terraform.tfvars.json"
        path.write_text('{"region": "eu", "count": 2, "tags": {"a": "b"}, "on": true}')
        assert parse_vars_file(path) == [
            Variable(name="region", value="eu"),
            Variable(name="count", value="2"),
            Variable(name="tags", value='{"a": "b"}'),
            Variable(name="on", value="true"),
        ]

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Malformed files are configuration errors."""
        path = tmp_path / "terraform.tfvars.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="failed to parse"):
            parse_vars_file(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        """The top level must be an object."""
        path = tmp_path / "terraform.tfvars.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="JSON object"):
            parse_vars_file(path)


@pytest.mark.unit
class TestCollectVariables:
    """Tests for collect_variables."""

    def test_declared_after_file_values(self, make_version_dir: Callable[..., Path]) -> None:
        """Declared variables come last so they override file values."""
        directory = make_version_dir(
            "v1", {"main.tf": "", "terraform.tfvars.json": '{"region": "eu"}'}
        )
        declared = [Variable(name="region", value="us")]
        assert collect_variables(directory, declared) == [
            Variable(name="region", value="eu"),
            Variable(name="region", value="us"),
        ]
