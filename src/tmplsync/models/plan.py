"""Plan model produced by a planning pass."""

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from .version import ResolvedVersion


class VersionAction(str, Enum):
    """What an apply will do with a declared version."""

    CREATE = "create"
    RENAME = "rename"
    KEEP = "keep"


class Plan(BaseModel):
    """Outcome of reconciling the declared versions against the checkpoint.

    Attributes:
        template_name: Name of the managed template.
        template_id: Remote template ID, or None if the template will be created.
        organization: Organization the template lives in.
        versions: Declared versions with resolved identities, in declared order.
        active_index: Index of the version that must end up active.
    """

    template_name: str
    template_id: UUID | None = None
    organization: str = "default"
    versions: list[ResolvedVersion]
    active_index: int

    @property
    def creating(self) -> bool:
        return self.template_id is None

    @property
    def active_version(self) -> ResolvedVersion:
        return self.versions[self.active_index]

    def action_for(self, version: ResolvedVersion) -> VersionAction:
        if version.is_new:
            return VersionAction.CREATE
        if version.needs_rename:
            return VersionAction.RENAME
        return VersionAction.KEEP

    @property
    def needs_activation(self) -> bool:
        """True if the active version has to be marked active on the server.

        A new template is created with its first version active, and an
        existing version that was already active stays so.
        """
        active = self.active_version
        if self.creating:
            return active.index != 0
        return not active.was_active

    @property
    def has_changes(self) -> bool:
        return self.creating or self.needs_activation or any(
            self.action_for(v) is not VersionAction.KEEP for v in self.versions
        )

    def to_summary(self) -> dict[str, Any]:
        """Summarize the plan for display or JSON output."""
        return {
            "template": self.template_name,
            "template_id": self.template_id,
            "create_template": self.creating,
            "activate": self.active_version.label if self.needs_activation else None,
            "versions": [
                {
                    "index": v.index,
                    "directory": str(v.definition.directory),
                    "content_hash": v.definition.content_hash,
                    "id": v.id,
                    "name": v.name,
                    "active": v.active,
                    "action": self.action_for(v).value,
                }
                for v in self.versions
            ],
        }
