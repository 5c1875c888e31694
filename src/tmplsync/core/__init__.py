"""Core business logic for tmplsync.

This package contains the reconciliation engine and the passes built on it:
- hasher: Content fingerprinting
- reconciler: Version identity matching against the checkpoint
- active: Active version resolution
- job_waiter: Import job following with bounded reconnects
- planner / applier: Planning and apply passes
- state_store: Checkpoint persistence
- lock_manager: Project locking
- project_dir: Project directory discovery
"""

from .active import resolve_active_version
from .applier import apply_plan, create_version
from .hasher import compute_directory_hash
from .job_waiter import wait_for_job, wait_for_job_once
from .lock_manager import acquire_lock, project_lock, release_lock
from .planner import build_definitions, plan_template
from .project_dir import (
    Project,
    find_project_root,
    get_project_dir,
    get_state_dir,
    load_project,
)
from .reconciler import build_last_versions, reconcile_versions
from .state_store import load_state, save_state, state_path

__all__ = [
    "Project",
    "acquire_lock",
    "apply_plan",
    "build_definitions",
    "build_last_versions",
    "compute_directory_hash",
    "create_version",
    "find_project_root",
    "get_project_dir",
    "get_state_dir",
    "load_project",
    "load_state",
    "plan_template",
    "project_lock",
    "reconcile_versions",
    "release_lock",
    "resolve_active_version",
    "save_state",
    "state_path",
    "wait_for_job",
    "wait_for_job_once",
]
