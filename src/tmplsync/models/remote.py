"""Models for remote API payloads.

Only the fields tmplsync reads are declared; unknown fields in responses are
ignored.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from .version import Variable


class JobStatus(str, Enum):
    """Provisioner job status as reported by the server."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    CANCELING = "canceling"
    CANCELED = "canceled"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_active(self) -> bool:
        """True while the job may still produce output or change state."""
        return self in (JobStatus.PENDING, JobStatus.RUNNING, JobStatus.CANCELING)


class ProvisionerJob(BaseModel):
    """Import job attached to a template version."""

    id: UUID | None = None
    status: JobStatus = JobStatus.UNKNOWN
    error: str = ""


class JobLog(BaseModel):
    """A single log entry streamed from an import job."""

    id: int = 0
    created_at: datetime | None = None
    log_source: str = ""
    log_level: str = "info"
    stage: str = ""
    output: str = ""


class TemplateVersion(BaseModel):
    """A template version as returned by the server."""

    id: UUID
    name: str = ""
    message: str = ""
    template_id: UUID | None = None
    job: ProvisionerJob = Field(default_factory=ProvisionerJob)


class Template(BaseModel):
    """A template as returned by the server."""

    id: UUID
    name: str
    display_name: str = ""
    organization_id: UUID | None = None
    active_version_id: UUID | None = None


class CreateVersionRequest(BaseModel):
    """Body of a create template version call."""

    name: str = ""
    message: str = ""
    template_id: UUID | None = None
    file_id: UUID
    storage_method: str = "file"
    provisioner: str = "terraform"
    user_variable_values: list[Variable] = Field(default_factory=list)


class CreateTemplateRequest(BaseModel):
    """Body of a create template call."""

    name: str
    display_name: str = ""
    description: str = ""
    icon: str = ""
    template_version_id: UUID
