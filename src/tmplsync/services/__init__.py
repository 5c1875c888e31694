"""External service integrations for tmplsync.

This package provides interfaces to the remote service and the file system:
- client: Coder API client (templates, versions, job logs)
- archive: Template bundle creation for upload
- varsfiles: Terraform variable file discovery
- filesystem: Common file system helpers
"""

from .archive import bundle_directory
from .client import CoderClient
from .filesystem import list_files
from .varsfiles import collect_variables, discover_vars_files, parse_vars_file

__all__ = [
    "CoderClient",
    "bundle_directory",
    "collect_variables",
    "discover_vars_files",
    "list_files",
    "parse_vars_file",
]
