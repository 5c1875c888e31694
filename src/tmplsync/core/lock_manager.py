"""Lock manager for tmplsync project concurrency control.

Provides PID-based file locking so that two passes never rewrite the same
project's checkpoint concurrently. Includes stale lock detection for crash
recovery.

Uses atomic file creation (O_CREAT | O_EXCL) to prevent TOCTOU races.
"""

import contextlib
import os
import time
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from ..errors import LockError
from ..models import Lock

LOCK_FILE = "active.lock"
STALE_TIMEOUT_SECONDS = 3600  # 1 hour
MAX_LOCK_RETRIES = 3  # Max retries when clearing stale locks
UNREADABLE_LOCK_GRACE_SECONDS = 10  # A writer fills the file right after creating it
LOCK_RETRY_DELAY = 0.1


def _lock_path(project_dir: Path) -> Path:
    """Get path to lock file."""
    return project_dir / LOCK_FILE


def _lock_age_seconds(lock_path: Path) -> float | None:
    """Seconds since the lock file was last written, None if it is gone."""
    try:
        return time.time() - lock_path.stat().st_mtime
    except FileNotFoundError:
        return None


def _is_pid_running(pid: int) -> bool:
    """Check if a process with given PID is running."""
    try:
        os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
        return True
    except OSError:
        return False


def get_current_lock(project_dir: Path) -> Lock | None:
    """Get current lock if it exists and is valid.

    Args:
        project_dir: Path to .tmplsync directory

    Returns:
        Lock if valid lock exists, None otherwise
    """
    lock_path = _lock_path(project_dir)
    if not lock_path.exists():
        return None

    try:
        return Lock.model_validate_json(lock_path.read_text())
    except (OSError, ValidationError):
        # Corrupted or vanished lock file - treat as no lock
        return None


def is_stale_lock(lock: Lock, timeout_seconds: int = STALE_TIMEOUT_SECONDS) -> bool:
    """Check if lock is stale (PID dead or timeout exceeded).

    Args:
        lock: Lock to check
        timeout_seconds: Max lock age before considered stale

    Returns:
        True if lock is stale and should be cleared
    """
    if not _is_pid_running(lock.pid):
        return True
    return datetime.now() - lock.started_at > timedelta(seconds=timeout_seconds)


def _try_atomic_create(lock_path: Path, lock: Lock) -> bool:
    """Attempt atomic lock file creation.

    Returns:
        True if lock was created, False if file already exists
    """
    try:
        fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        try:
            os.write(fd, lock.model_dump_json(indent=2).encode())
        finally:
            os.close(fd)
        return True
    except FileExistsError:
        return False


def acquire_lock(project_dir: Path, template: str, command: str) -> Lock:
    """Acquire the project lock.

    Args:
        project_dir: Path to .tmplsync directory
        template: Template being modified
        command: Command acquiring the lock

    Returns:
        Lock object if acquired

    Raises:
        LockError: If another process holds an active lock
    """
    lock_path = _lock_path(project_dir)
    lock = Lock(pid=os.getpid(), template=template, command=command)

    for _ in range(MAX_LOCK_RETRIES):
        if _try_atomic_create(lock_path, lock):
            return lock

        existing = get_current_lock(project_dir)
        if existing is None:
            # Unreadable: either another writer is mid-create or a crash left it behind
            age = _lock_age_seconds(lock_path)
            if age is not None and age > UNREADABLE_LOCK_GRACE_SECONDS:
                with contextlib.suppress(FileNotFoundError):
                    lock_path.unlink()
            else:
                time.sleep(LOCK_RETRY_DELAY)
            continue

        if existing.pid == os.getpid():
            lock_path.write_text(lock.model_dump_json(indent=2))
            return lock

        if is_stale_lock(existing):
            with contextlib.suppress(FileNotFoundError):
                lock_path.unlink()
            continue

        raise LockError(
            f"another tmplsync pass is in progress ({existing.describe()})"
        )

    raise LockError("failed to acquire lock after multiple attempts")


def release_lock(project_dir: Path) -> None:
    """Release lock if owned by current process."""
    existing = get_current_lock(project_dir)
    if existing and existing.pid == os.getpid():
        _lock_path(project_dir).unlink(missing_ok=True)


@contextlib.contextmanager
def project_lock(project_dir: Path, template: str, command: str) -> Iterator[Lock]:
    """Hold the project lock for the duration of a block."""
    lock = acquire_lock(project_dir, template, command)
    try:
        yield lock
    finally:
        release_lock(project_dir)
