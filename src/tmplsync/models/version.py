"""Version models used by the reconciliation engine.

A VersionDefinition is the declared intent for one version slot, rebuilt from
configuration on every pass. A PreviousVersionRecord is what an earlier pass
remembered about a version it created. A ResolvedVersion pairs the two after
reconciliation.
"""

from pathlib import Path
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Variable(BaseModel):
    """A single Terraform variable value."""

    name: str = Field(description="Variable name")
    value: str = Field(description="Variable value")


def variables_to_map(variables: list[Variable]) -> dict[str, str]:
    """Collapse an ordered variable list into a name -> value map (last wins)."""
    return {v.name: v.value for v in variables}


class VersionDefinition(BaseModel):
    """Declared intent for one version slot.

    Attributes:
        directory: Content directory for the version.
        content_hash: SHA-256 fingerprint of the directory contents.
        name: Explicit version name, or None to let the server generate one.
        message: Optional version message.
        active: True/False when declared, None when left unspecified.
        variables: Terraform variable values, in declared order.
    """

    directory: Path
    content_hash: str
    name: str | None = None
    message: str | None = None
    active: bool | None = None
    variables: list[Variable] = Field(default_factory=list)

    def tf_vars(self) -> dict[str, str]:
        return variables_to_map(self.variables)


class PreviousVersionRecord(BaseModel):
    """A version created by an earlier pass, as stored in the checkpoint."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(description="Remote version ID")
    name: str = Field(description="Version name at creation or last rename")
    tf_vars: dict[str, str] = Field(default_factory=dict, description="Variables fingerprint")
    active: bool = Field(default=False, description="Whether the version was last known active")


class ResolvedVersion(BaseModel):
    """A declared version annotated with its resolved identity.

    ``id`` is either a checkpoint record's ID or None (pending creation).
    ``name`` is the existing, declared, or None (to be generated) name.
    ``active`` is filled in by the active version resolver.
    """

    index: int = Field(ge=0, description="Position in the declared list")
    definition: VersionDefinition
    id: UUID | None = None
    name: str | None = None
    previous: PreviousVersionRecord | None = None
    active: bool = False

    @property
    def is_new(self) -> bool:
        return self.id is None

    @property
    def needs_rename(self) -> bool:
        """True if an existing version's explicit name differs from the recorded one."""
        return (
            self.previous is not None
            and self.definition.name is not None
            and self.definition.name != self.previous.name
        )

    @property
    def was_active(self) -> bool:
        return self.previous is not None and self.previous.active

    @property
    def label(self) -> str:
        """Human-readable label for diagnostics."""
        if self.name:
            return f'version "{self.name}"'
        return f"version #{self.index + 1} ({self.definition.directory})"

    def to_record(self) -> PreviousVersionRecord:
        """Build the checkpoint record for this version once it exists remotely."""
        if self.id is None or self.name is None:
            raise ValueError(f"{self.label} has no remote identity yet")
        return PreviousVersionRecord(
            id=self.id,
            name=self.name,
            tf_vars=self.definition.tf_vars(),
            active=self.active,
        )
