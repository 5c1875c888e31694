"""Planning pass: hash, reconcile and resolve the declared versions."""

import logging
from pathlib import Path

from ..config import EngineConfig, TemplateConfig
from ..models import Plan, TemplateState, VersionDefinition
from .active import resolve_active_version
from .hasher import compute_directory_hash
from .reconciler import reconcile_versions

logger = logging.getLogger(__name__)


def build_definitions(template: TemplateConfig, project_root: Path) -> list[VersionDefinition]:
    """Turn the declared versions into definitions carrying their content hash.

    Args:
        template: Declared template
        project_root: Base for relative version directories

    Returns:
        One definition per declared version, in order

    Raises:
        ConfigurationError: If any version directory can't be hashed
    """
    definitions = []
    for version in template.versions:
        directory = version.directory
        if not directory.is_absolute():
            directory = project_root / directory
        content_hash = compute_directory_hash(directory)
        logger.debug("Hashed %s: %s", directory, content_hash)
        definitions.append(
            VersionDefinition(
                directory=directory,
                content_hash=content_hash,
                name=version.name,
                message=version.message,
                active=version.active,
                variables=list(version.tf_vars),
            )
        )
    return definitions


def plan_template(
    template: TemplateConfig,
    engine: EngineConfig,
    project_root: Path,
    state: TemplateState | None,
    organization: str = "default",
) -> Plan:
    """Run one planning pass.

    Nothing remote is touched and the checkpoint is only read, so a plan can
    be computed any number of times with the same result.

    Args:
        template: Declared template
        engine: Engine options
        project_root: Base for relative version directories
        state: Checkpoint from the last successful apply, or None
        organization: Organization used when the template is created

    Returns:
        The plan

    Raises:
        ConfigurationError: If a version directory can't be hashed
        AmbiguityError: If the declaration does not determine one active version
    """
    definitions = build_definitions(template, project_root)
    last_versions = state.last_versions if state else {}
    resolved = reconcile_versions(
        definitions, last_versions, match_variables=engine.match_variables
    )
    template_id = state.template_id if state else None
    active = resolve_active_version(resolved, creating=template_id is None)
    plan = Plan(
        template_name=template.name,
        template_id=template_id,
        organization=state.organization if state and state.template_id else organization,
        versions=resolved,
        active_index=active.index,
    )
    logger.info(
        "Planned %d version(s) for %s: %d to create",
        len(resolved),
        template.name,
        sum(1 for v in resolved if v.is_new),
    )
    return plan
