"""Persisted checkpoint for a managed template.

The checkpoint maps each content hash to the ordered list of versions that
were created from identical content. It is read at the start of a pass and
rewritten wholesale at the end of a successful one.
"""

from datetime import datetime
from typing import Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from .version import PreviousVersionRecord

LastVersionsByHash = dict[str, list[PreviousVersionRecord]]


class TemplateState(BaseModel):
    """State file written to .tmplsync/state/<template>.json.

    Attributes:
        template_name: Name of the managed template.
        template_id: Remote template ID once the template exists.
        organization: Organization the template was created in.
        last_versions: Checkpoint of previously created versions by content hash.
        updated_at: When the state was last written.

    On disk each record under ``last_versions`` is a JSON object with the keys
    ``id``, ``name``, ``tf_vars`` (the variable name to value map the version
    was created with) and ``active``:

        {"last_versions": {"<hash>": [{"id": "...", "name": "v1",
                                      "tf_vars": {"region": "eu"}, "active": true}]}}
    """

    template_name: str
    template_id: UUID | None = None
    organization: str = "default"
    last_versions: LastVersionsByHash = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def validate_unique_identities(self) -> Self:
        """The same version ID must never appear twice in the checkpoint."""
        seen: set[UUID] = set()
        for content_hash, records in self.last_versions.items():
            for record in records:
                if record.id in seen:
                    raise ValueError(
                        f"version {record.id} appears more than once (hash {content_hash})"
                    )
                seen.add(record.id)
        return self

    def records(self) -> list[PreviousVersionRecord]:
        """All records in hash order, then bucket order."""
        return [record for records in self.last_versions.values() for record in records]

    def active_record(self) -> PreviousVersionRecord | None:
        return next((record for record in self.records() if record.active), None)
