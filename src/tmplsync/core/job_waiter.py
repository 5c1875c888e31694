"""Waiting for template version import jobs.

An import job is followed with a state machine:

1. open the job's log stream from offset zero,
2. drain it until the server closes it, then close it,
3. poll the job status once,
4. decide: succeeded (done), failed (fatal), or still active (the stream
   dropped early; reconnect and go again).

Reconnects are bounded. There is no timeout or cancellation inside the
retry loop; a caller that needs a wall-clock bound must impose it around
the whole call.
"""

import logging
from collections.abc import Iterator
from contextlib import AbstractContextManager
from typing import Protocol
from uuid import UUID

from ..constants import MAX_JOB_RETRIES
from ..errors import RemoteJobError, RetryExhaustedError, TransientStreamError
from ..logging import job_log_level
from ..models import JobLog, JobStatus, TemplateVersion

logger = logging.getLogger(__name__)


class JobClient(Protocol):
    """The part of the remote client the job waiter uses."""

    def stream_version_logs(
        self, version_id: UUID, after: int = 0
    ) -> AbstractContextManager[Iterator[JobLog]]: ...

    def template_version(self, version_id: UUID) -> TemplateVersion: ...


def _emit(entry: JobLog) -> None:
    logger.log(
        job_log_level(entry.log_level),
        "[%s] %s",
        entry.stage or entry.log_source or "job",
        entry.output,
    )


def wait_for_job_once(client: JobClient, version_id: UUID) -> list[JobLog]:
    """Run one subscribe, drain, poll attempt.

    Args:
        client: Remote client
        version_id: Template version whose import job to follow

    Returns:
        The log entries streamed during this attempt, if the job succeeded

    Raises:
        RemoteJobError: If the job reached a terminal state other than success
        TransientStreamError: If the stream closed while the job is still active;
            carries this attempt's logs
        APIError: If the stream can't be opened or the status poll fails
    """
    logs: list[JobLog] = []
    with client.stream_version_logs(version_id, after=0) as entries:
        for entry in entries:
            _emit(entry)
            logs.append(entry)

    version = client.template_version(version_id)
    status = version.job.status
    if status.is_active:
        raise TransientStreamError(status.value, logs)
    if status is not JobStatus.SUCCEEDED:
        raise RemoteJobError(status.value, version.job.error)
    return logs


def wait_for_job(
    client: JobClient,
    version_id: UUID,
    max_retries: int = MAX_JOB_RETRIES,
) -> list[JobLog]:
    """Follow an import job until it succeeds.

    Each attempt opens a fresh log stream. Logs of every attempt are
    returned in order.

    Args:
        client: Remote client
        version_id: Template version whose import job to follow
        max_retries: Total number of attempts

    Returns:
        All log entries streamed across attempts

    Raises:
        RemoteJobError: If the job failed (not retried)
        RetryExhaustedError: If the job was still active after the last attempt
    """
    logs: list[JobLog] = []
    for attempt in range(1, max_retries + 1):
        try:
            logs.extend(wait_for_job_once(client, version_id))
            return logs
        except TransientStreamError as e:
            logs.extend(e.logs)
            logger.warning(
                "Provisioner job still active, continuing to wait (attempt %d/%d): %s",
                attempt,
                max_retries,
                e.status,
            )
    raise RetryExhaustedError(max_retries)
