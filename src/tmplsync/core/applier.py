"""Apply a plan against the remote service."""

import logging
from dataclasses import dataclass
from uuid import UUID

from ..config import TemplateConfig
from ..models import (
    CreateTemplateRequest,
    CreateVersionRequest,
    Plan,
    ResolvedVersion,
    TemplateState,
    TemplateVersion,
    Variable,
    VersionDefinition,
)
from ..services import CoderClient, bundle_directory, collect_variables
from .job_waiter import wait_for_job
from .reconciler import build_last_versions

logger = logging.getLogger(__name__)


@dataclass
class PreparedUpload:
    """Bundle and variable values of a version pending creation."""

    bundle: bytes
    variables: list[Variable]


def prepare_upload(definition: VersionDefinition) -> PreparedUpload:
    """Bundle a version directory and collect its variables.

    Raises:
        ConfigurationError: If the bundle or a variables file is invalid
    """
    return PreparedUpload(
        bundle=bundle_directory(definition.directory),
        variables=collect_variables(definition.directory, definition.variables),
    )


def create_version(
    client: CoderClient,
    organization: str,
    version: ResolvedVersion,
    prepared: PreparedUpload,
    template_id: UUID | None,
    max_retries: int,
) -> TemplateVersion:
    """Upload a version's content, create it and wait for its import job.

    Args:
        client: Remote client
        organization: Organization to create the version in
        version: Resolved version pending creation
        prepared: Bundle and variables from prepare_upload
        template_id: Template to attach the version to (None for the first version)
        max_retries: Log stream reconnect bound

    Returns:
        The created version as reported once the import succeeded
    """
    definition = version.definition
    logger.info("Uploading %s", definition.directory)
    file_id = client.upload(prepared.bundle)
    request = CreateVersionRequest(
        name=definition.name or "",
        message=definition.message or "",
        template_id=template_id,
        file_id=file_id,
        user_variable_values=prepared.variables,
    )
    created = client.create_template_version(organization, request)
    logger.info("Waiting for import job of template version %s", created.id)
    wait_for_job(client, created.id, max_retries=max_retries)
    return client.template_version(created.id)


def apply_plan(
    plan: Plan,
    template: TemplateConfig,
    client: CoderClient,
    max_retries: int,
) -> TemplateState:
    """Create, rename and activate versions so the remote matches the plan.

    The plan's versions are updated in place with the identities and names
    the server assigned. The returned state is the next checkpoint; the
    caller persists it only because this function returned.

    Every new version is bundled before the first remote call, so a bad
    directory or variables file fails the pass with nothing changed remotely.

    Args:
        plan: Plan from a planning pass
        template: Declared template (for template creation metadata)
        client: Remote client
        max_retries: Log stream reconnect bound per import job

    Returns:
        New template state to persist

    Raises:
        ConfigurationError: If a new version can't be bundled; no remote calls were made
        TmplsyncError: On any remote failure; nothing is persisted
    """
    template_id = plan.template_id
    organization = plan.organization

    uploads = {v.index: prepare_upload(v.definition) for v in plan.versions if v.is_new}

    for version in plan.versions:
        if version.is_new:
            created = create_version(
                client, organization, version, uploads[version.index], template_id, max_retries
            )
            version.id = created.id
            version.name = created.name
            logger.info("Created %s (%s)", version.label, created.id)
            if template_id is None:
                request = CreateTemplateRequest(
                    name=template.name,
                    display_name=template.display_name or template.name,
                    description=template.description,
                    icon=template.icon,
                    template_version_id=created.id,
                )
                created_template = client.create_template(organization, request)
                template_id = created_template.id
                logger.info("Created template %s (%s)", template.name, template_id)
        elif version.needs_rename:
            assert version.id is not None and version.name is not None
            client.update_template_version(version.id, version.name, version.definition.message)
            logger.info(
                "Renamed template version %s from %s to %s",
                version.id,
                version.previous.name if version.previous else "",
                version.name,
            )

    assert template_id is not None
    if plan.needs_activation:
        active = plan.active_version
        assert active.id is not None
        logger.info("Marking %s as active", active.label)
        client.update_active_version(template_id, active.id)

    return TemplateState(
        template_name=template.name,
        template_id=template_id,
        organization=organization,
        last_versions=build_last_versions(plan.versions),
    )
