"""Tests for the apply pass."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch
from uuid import uuid4

import pytest
from factories import FakeCoder, make_record

from tmplsync.config import EngineConfig, TemplateConfig, VersionConfig
from tmplsync.core.applier import apply_plan
from tmplsync.core.hasher import compute_directory_hash
from tmplsync.core.planner import plan_template
from tmplsync.core.reconciler import reconcile_versions
from tmplsync.core.state_store import load_state, save_state
from tmplsync.errors import ConfigurationError, RemoteJobError
from tmplsync.models import JobStatus, TemplateState
from tmplsync.services import bundle_directory


def _template(*versions: VersionConfig) -> TemplateConfig:
    return TemplateConfig(name="kubernetes", versions=list(versions))


@pytest.mark.unit
class TestApplyPlan:
    """Tests for apply_plan."""

    def test_first_apply_creates_template_with_first_version(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """The first created version is used to create the template."""
        make_version_dir("v1")
        make_version_dir("v2")
        template = _template(
            VersionConfig(directory=Path("v1"), name="one"),
            VersionConfig(directory=Path("v2"), active=True),
        )
        plan = plan_template(template, EngineConfig(), tmp_path, None)
        client = FakeCoder()

        state = apply_plan(plan, template, client, max_retries=3)

        created = client.calls_named("create_version")
        assert [c[1] for c in created] == ["one", "generated-1"]
        assert created[0][2] is None
        [(_, name, first_version_id)] = client.calls_named("create_template")
        assert name == "kubernetes"
        assert first_version_id == plan.versions[0].id
        assert created[1][2] == state.template_id
        [(_, template_id, active_id)] = client.calls_named("activate")
        assert template_id == state.template_id
        assert active_id == plan.versions[1].id

        records = state.records()
        assert [r.name for r in records] == ["one", "generated-1"]
        assert [r.active for r in records] == [False, True]

    def test_second_apply_is_a_no_op(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """Applying against the new checkpoint creates nothing."""
        make_version_dir("v1")
        template = _template(VersionConfig(directory=Path("v1"), active=True))
        client = FakeCoder()
        plan = plan_template(template, EngineConfig(), tmp_path, None)
        state = apply_plan(plan, template, client, 3)

        again = plan_template(template, EngineConfig(), tmp_path, state)
        assert not again.has_changes
        assert again.versions[0].name == "generated-1"

    def test_rename_and_activate_existing(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """Existing versions are renamed and activated, not recreated."""
        first = compute_directory_hash(make_version_dir("v1"))
        second = compute_directory_hash(make_version_dir("v2", {"main.tf": "two"}))
        old_one = make_record("old", active=True)
        two = make_record("two")
        state = TemplateState(
            template_name="kubernetes",
            template_id=uuid4(),
            last_versions={first: [old_one], second: [two]},
        )
        template = _template(
            VersionConfig(directory=Path("v1"), name="new"),
            VersionConfig(directory=Path("v2"), name="two", active=True),
        )
        plan = plan_template(template, EngineConfig(), tmp_path, state)
        client = FakeCoder()

        new_state = apply_plan(plan, template, client, 3)

        assert client.calls_named("create_version") == []
        assert client.calls_named("rename") == [("rename", old_one.id, "new")]
        assert client.calls_named("activate") == [("activate", state.template_id, two.id)]
        assert new_state.template_id == state.template_id
        assert new_state.last_versions[first][0].name == "new"
        assert new_state.active_record() == new_state.last_versions[second][0]

    def test_failed_job_aborts_without_state(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """A failed import raises and leaves the stored checkpoint untouched."""
        make_version_dir("v1")
        project_dir = tmp_path / ".tmplsync"
        project_dir.mkdir()
        previous = TemplateState(template_name="kubernetes", template_id=uuid4())
        save_state(project_dir, previous)

        template = _template(VersionConfig(directory=Path("v1"), active=True))
        plan = plan_template(template, EngineConfig(), tmp_path, previous)
        client = FakeCoder(job_status=JobStatus.FAILED, job_error="terraform init failed")

        with pytest.raises(RemoteJobError, match="terraform init failed"):
            apply_plan(plan, template, client, 3)

        stored = load_state(project_dir, "kubernetes")
        assert stored is not None
        assert stored.last_versions == {}
        assert client.calls_named("activate") == []

    def test_bad_vars_file_fails_before_any_remote_call(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """A broken variables file in a later version leaves the server untouched."""
        make_version_dir("v1")
        make_version_dir("v2", {"main.tf": "# v2\n", "terraform.tfvars.json": "{not json"})
        template = _template(
            VersionConfig(directory=Path("v1")),
            VersionConfig(directory=Path("v2"), active=True),
        )
        plan = plan_template(template, EngineConfig(), tmp_path, None)
        client = FakeCoder()

        with pytest.raises(ConfigurationError, match="failed to parse variables file"):
            apply_plan(plan, template, client, 3)

        assert client.calls == []
        assert client.templates == {}

    def test_oversized_bundle_fails_before_any_remote_call(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """A version too large to upload aborts the pass up front."""
        make_version_dir("v1")
        make_version_dir("v2", {"main.tf": "# v2\n" + "x" * 4096})
        template = _template(
            VersionConfig(directory=Path("v1"), active=True),
            VersionConfig(directory=Path("v2")),
        )
        plan = plan_template(template, EngineConfig(), tmp_path, None)
        client = FakeCoder()

        with (
            patch(
                "tmplsync.core.applier.bundle_directory",
                side_effect=lambda directory: bundle_directory(directory, limit=2048),
            ),
            pytest.raises(ConfigurationError),
        ):
            apply_plan(plan, template, client, 3)

        assert client.calls == []

    def test_duplicate_content_keeps_identities(
        self, tmp_path: Path, make_version_dir: Callable[..., Path]
    ) -> None:
        """Two identical unnamed versions map back in the same order."""
        make_version_dir("v1")
        template = _template(
            VersionConfig(directory=Path("v1")),
            VersionConfig(directory=Path("v1"), active=True),
        )
        client = FakeCoder()
        plan = plan_template(template, EngineConfig(), tmp_path, None)
        state = apply_plan(plan, template, client, 3)

        definitions = [v.definition for v in plan.versions]
        again = reconcile_versions(definitions, state.last_versions)
        assert [v.id for v in again] == [v.id for v in plan.versions]
        assert [v.name for v in again] == ["generated-1", "generated-2"]
