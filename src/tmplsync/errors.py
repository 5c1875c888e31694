"""Error types for tmplsync.

Every error raised by the reconciliation core and the remote client derives
from TmplsyncError. Each carries a short summary and a human-readable detail
so that commands can render it as user-facing configuration feedback, and an
exit code the CLI uses when the error aborts a command.
"""

from typing import Any


class TmplsyncError(Exception):
    """Base exception for tmplsync errors."""

    summary = "Error"
    exit_code = 1

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_diagnostic(self) -> dict[str, Any]:
        """Return the error as a diagnostic dict for display or JSON output."""
        return {"summary": self.summary, "detail": self.detail}


class ConfigurationError(TmplsyncError):
    """Declared configuration is invalid or a declared directory is unreadable."""

    summary = "Configuration error"
    exit_code = 2


class CheckpointError(ConfigurationError):
    """Persisted checkpoint could not be read, parsed or written."""

    summary = "Checkpoint error"


class ProjectNotFoundError(TmplsyncError):
    """No .tmplsync directory was found."""

    summary = "Project not initialized"
    exit_code = 3


class AmbiguityError(TmplsyncError):
    """The declared versions do not determine a single active version."""

    summary = "Ambiguous active version"
    exit_code = 2

    def __init__(self, detail: str, versions: list[str] | None = None) -> None:
        super().__init__(detail)
        self.versions = versions or []

    def to_diagnostic(self) -> dict[str, Any]:
        return {**super().to_diagnostic(), "versions": self.versions}


class APIError(TmplsyncError):
    """The remote service answered with an error status."""

    summary = "Client error"

    def __init__(self, status_code: int, message: str, detail: str = "") -> None:
        text = f"{message} (HTTP {status_code})"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)
        self.status_code = status_code
        self.message = message

    def to_diagnostic(self) -> dict[str, Any]:
        return {**super().to_diagnostic(), "status_code": self.status_code}


class RemoteJobError(TmplsyncError):
    """A remote import job finished without succeeding."""

    summary = "Import job failed"

    def __init__(self, status: str, error: str) -> None:
        super().__init__(f"provisioner job did not succeed: {status} ({error})")
        self.status = status
        self.error = error


class TransientStreamError(TmplsyncError):
    """The log stream closed while the job was still active."""

    summary = "Log stream disconnected"

    def __init__(self, status: str, logs: list[Any] | None = None) -> None:
        super().__init__(f"provisioner job still active after log stream closed: {status}")
        self.status = status
        self.logs = logs or []


class RetryExhaustedError(TmplsyncError):
    """The import job never reached a terminal state within the retry bound."""

    summary = "Import job did not complete"

    def __init__(self, attempts: int) -> None:
        super().__init__(f"provisioner job did not complete after {attempts} retries")
        self.attempts = attempts


class LockError(TmplsyncError):
    """Error acquiring or managing the project lock."""

    summary = "Project locked"


def is_not_found(err: Exception) -> bool:
    """Return True if err means the remote resource does not exist."""
    if not isinstance(err, APIError):
        return False
    if err.status_code == 404:
        return True
    # The user lookup middleware answers 400 for unknown users
    return err.status_code == 400 and "must be an existing uuid or username" in err.message
