"""Project lock record.

The lock file lives at .tmplsync/active.lock and names the process applying
changes to a template, so a second apply on the same project can refuse to
run instead of racing on the checkpoint.
"""

import socket
from datetime import datetime

from pydantic import BaseModel, Field


class Lock(BaseModel):
    """Holder of the project lock."""

    pid: int = Field(description="Process ID holding the lock")
    host: str = Field(default_factory=socket.gethostname)
    template: str = Field(description="Template being applied")
    command: str = Field(description="Command that acquired the lock")
    started_at: datetime = Field(default_factory=datetime.now)

    def describe(self) -> str:
        """One-line summary of the holder for error messages."""
        return (
            f"PID {self.pid} on {self.host}, command: {self.command}, "
            f"template: {self.template}, since {self.started_at:%Y-%m-%d %H:%M:%S}"
        )
