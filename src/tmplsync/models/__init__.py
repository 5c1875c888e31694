"""Pydantic data models for tmplsync.

This package defines the data structures used throughout tmplsync for:
- Declared and resolved versions (VersionDefinition, ResolvedVersion)
- The persisted checkpoint (TemplateState, PreviousVersionRecord)
- Planning output (Plan, VersionAction)
- Remote API payloads (TemplateVersion, ProvisionerJob, JobLog, Template)

Example:
    >>> from tmplsync.models import PreviousVersionRecord
    >>> record = PreviousVersionRecord(id=uuid4(), name="v1")
    >>> record.model_dump_json()
"""

from .lock import Lock
from .plan import Plan, VersionAction
from .remote import (
    CreateTemplateRequest,
    CreateVersionRequest,
    JobLog,
    JobStatus,
    ProvisionerJob,
    Template,
    TemplateVersion,
)
from .state import LastVersionsByHash, TemplateState
from .version import (
    PreviousVersionRecord,
    ResolvedVersion,
    Variable,
    VersionDefinition,
    variables_to_map,
)

__all__ = [
    "CreateTemplateRequest",
    "CreateVersionRequest",
    "JobLog",
    "JobStatus",
    "LastVersionsByHash",
    "Lock",
    "Plan",
    "PreviousVersionRecord",
    "ProvisionerJob",
    "ResolvedVersion",
    "Template",
    "TemplateState",
    "TemplateVersion",
    "Variable",
    "VersionAction",
    "VersionDefinition",
    "variables_to_map",
]
