"""HTTP client for the Coder API endpoints tmplsync needs."""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from uuid import UUID

import httpx
from pydantic import ValidationError

from ..config import CoderConfig
from ..constants import HTTP_TIMEOUT, SESSION_TOKEN_HEADER, STREAM_READ_TIMEOUT
from ..errors import APIError
from ..models import (
    CreateTemplateRequest,
    CreateVersionRequest,
    JobLog,
    Template,
    TemplateVersion,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2"


def _error_from_response(response: httpx.Response) -> APIError:
    """Build an APIError from an error response body.

    The server answers ``{"message": ..., "detail": ...}``; anything else is
    reported with the raw body.
    """
    message = response.reason_phrase or "request failed"
    detail = ""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        detail = response.text[:200]
    else:
        if isinstance(body, dict):
            message = body.get("message") or message
            detail = body.get("detail") or ""
    return APIError(response.status_code, message, detail)


class CoderClient:
    """Blocking client for template and template version endpoints.

    Passed explicitly to the planner, applier and job waiter; holds the
    configured base URL and session token.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float = HTTP_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize with the deployment URL and an optional HTTP client."""
        headers = {SESSION_TOKEN_HEADER: token} if token else {}
        if http_client is None:
            http_client = httpx.Client(timeout=timeout)
        http_client.base_url = url.rstrip("/") + API_PREFIX
        http_client.headers.update(headers)
        self._http = http_client

    @classmethod
    def from_config(cls, config: CoderConfig) -> "CoderClient":
        """Build a client from the [coder] configuration section."""
        return cls(config.url, token=config.get_token(), timeout=config.timeout)

    def __enter__(self) -> "CoderClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, path)
        response = self._http.request(method, path, **kwargs)
        if response.status_code >= 400:
            raise _error_from_response(response)
        return response

    # Files

    def upload(self, bundle: bytes, content_type: str = "application/x-tar") -> UUID:
        """Upload a template bundle and return its file ID."""
        response = self._request(
            "POST", "/files", content=bundle, headers={"Content-Type": content_type}
        )
        return UUID(response.json()["hash"])

    # Template versions

    def create_template_version(
        self, organization: str, request: CreateVersionRequest
    ) -> TemplateVersion:
        """Create a template version; its import job starts immediately."""
        response = self._request(
            "POST",
            f"/organizations/{organization}/templateversions",
            json=request.model_dump(mode="json", exclude_none=True),
        )
        return TemplateVersion.model_validate(response.json())

    def template_version(self, version_id: UUID) -> TemplateVersion:
        response = self._request("GET", f"/templateversions/{version_id}")
        return TemplateVersion.model_validate(response.json())

    def update_template_version(
        self, version_id: UUID, name: str, message: str | None = None
    ) -> TemplateVersion:
        """Rename a template version (and optionally replace its message)."""
        body: dict[str, str] = {"name": name}
        if message is not None:
            body["message"] = message
        response = self._request("PATCH", f"/templateversions/{version_id}", json=body)
        return TemplateVersion.model_validate(response.json())

    @contextmanager
    def stream_version_logs(self, version_id: UUID, after: int = 0) -> Iterator[Iterator[JobLog]]:
        """Follow the import job logs of a template version.

        Yields an iterator of log entries that ends when the server closes the
        stream. The connection is closed when the context exits, whether or
        not the iterator was drained.

        Raises:
            APIError: If the stream can't be opened
        """
        params = {"after": str(after), "follow": "true"}
        timeout = httpx.Timeout(self._http.timeout.connect, read=STREAM_READ_TIMEOUT)
        with self._http.stream(
            "GET", f"/templateversions/{version_id}/logs", params=params, timeout=timeout
        ) as response:
            if response.status_code >= 400:
                response.read()
                raise _error_from_response(response)
            yield self._iter_logs(response)

    def _iter_logs(self, response: httpx.Response) -> Iterator[JobLog]:
        try:
            for line in response.iter_lines():
                if not line.strip():
                    continue
                try:
                    yield JobLog.model_validate_json(line)
                except ValidationError as e:
                    logger.debug("Skipping malformed log entry: %s", e)
        except (httpx.RemoteProtocolError, httpx.ReadError) as e:
            # A dropped connection ends the stream like a normal close;
            # the job status poll decides what happens next.
            logger.debug("Log stream ended early: %s", e)

    # Templates

    def create_template(self, organization: str, request: CreateTemplateRequest) -> Template:
        response = self._request(
            "POST",
            f"/organizations/{organization}/templates",
            json=request.model_dump(mode="json"),
        )
        return Template.model_validate(response.json())

    def template(self, template_id: UUID) -> Template:
        response = self._request("GET", f"/templates/{template_id}")
        return Template.model_validate(response.json())

    def template_by_name(self, organization: str, name: str) -> Template:
        response = self._request("GET", f"/organizations/{organization}/templates/{name}")
        return Template.model_validate(response.json())

    def update_active_version(self, template_id: UUID, version_id: UUID) -> None:
        """Mark a version as the template's active version."""
        self._request("PATCH", f"/templates/{template_id}/versions", json={"id": str(version_id)})
