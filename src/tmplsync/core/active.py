"""Active version resolution.

Runs after reconciliation, because whether an entry is "the same version,
modified" or "a new version" decides what an unspecified ``active`` means.
An explicit ``active = true`` always decides. With none declared, an existing
version that was last known active stays active, unless it is explicitly
deactivated. The resolver never guesses a replacement: when the declaration
does not determine exactly one active version it fails.
"""

import logging

from ..errors import AmbiguityError
from ..models import ResolvedVersion

logger = logging.getLogger(__name__)


def _too_many(active: list[ResolvedVersion]) -> AmbiguityError:
    labels = [entry.label for entry in active]
    return AmbiguityError(
        f"only one template version can be active at a time, got {len(active)}: "
        + ", ".join(labels),
        versions=labels,
    )


def resolve_active_version(versions: list[ResolvedVersion], creating: bool) -> ResolvedVersion:
    """Determine the single active version and set ``active`` on every entry.

    Args:
        versions: Reconciled versions in declared order
        creating: True if the template does not exist yet

    Returns:
        The version that must be active

    Raises:
        AmbiguityError: If zero or more than one version would be active
    """
    active = [entry for entry in versions if entry.definition.active is True]
    if not active:
        active = [
            entry for entry in versions if entry.definition.active is None and entry.was_active
        ]

    if len(active) > 1:
        raise _too_many(active)

    if not active:
        if creating:
            raise AmbiguityError("at least one template version must be active when creating")
        deactivated = [
            entry for entry in versions if entry.was_active and entry.definition.active is False
        ]
        if deactivated:
            labels = [entry.label for entry in deactivated]
            raise AmbiguityError(
                "could not determine which template version should be active: "
                f"{labels[0]} was active and is being deactivated, "
                "but no other version is being activated",
                versions=labels,
            )
        raise AmbiguityError(
            "could not determine which template version should be active: "
            "no declared version is active or was previously active",
        )

    chosen = active[0]
    for entry in versions:
        entry.active = entry is chosen
    logger.debug("Resolved active version: %s", chosen.label)
    return chosen
