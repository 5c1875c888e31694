"""Status command implementation."""

import logging
from typing import Any
from uuid import UUID

import typer
from rich.table import Table

from ..core import load_project, load_state
from ..errors import APIError, TmplsyncError, is_not_found
from ..models import TemplateState
from ..output import get_output_context
from ..services import CoderClient

logger = logging.getLogger(__name__)


def _check_remote(client: CoderClient, state: TemplateState) -> dict[str, str]:
    """Look up every checkpoint record remotely.

    Returns a map of version ID to remote status ("ok", "not found" or a job
    status other than succeeded).
    """
    found: dict[str, str] = {}
    for record in state.records():
        try:
            version = client.template_version(record.id)
        except APIError as e:
            if not is_not_found(e):
                raise
            logger.warning("Template version %s (%s) not found remotely", record.name, record.id)
            found[str(record.id)] = "not found"
            continue
        status = version.job.status.value
        found[str(record.id)] = "ok" if status == "succeeded" else status
    return found


def _remote_active_version(client: CoderClient, state: TemplateState) -> UUID | None:
    """Active version ID the server reports for the template, if it exists."""
    try:
        if state.template_id is not None:
            template = client.template(state.template_id)
        else:
            template = client.template_by_name(state.organization, state.template_name)
    except APIError as e:
        if not is_not_found(e):
            raise
        logger.warning("Template %s not found remotely", state.template_name)
        return None
    return template.active_version_id


def status(
    remote: bool = typer.Option(
        False,
        "--remote",
        help="Check recorded versions and the active version against the server",
    ),
) -> None:
    """Show the checkpoint of the managed template."""
    ctx = get_output_context()

    try:
        project = load_project()
        template = project.config.require_template()
        state = load_state(project.project_dir, template.name)
        remote_status: dict[str, str] = {}
        remote_active: UUID | None = None
        if remote and state is not None:
            with CoderClient.from_config(project.config.coder) as client:
                remote_status = _check_remote(client, state)
                remote_active = _remote_active_version(client, state)
    except TmplsyncError as e:
        ctx.diagnostic(e)
        raise typer.Exit(e.exit_code) from None

    if state is None:
        ctx.result(
            {"template": template.name, "template_id": None, "versions": []},
            f"Template [bold]{template.name}[/bold] has not been applied yet",
        )
        return

    if ctx.json_mode:
        versions: list[dict[str, Any]] = []
        for content_hash, records in state.last_versions.items():
            for record in records:
                entry: dict[str, Any] = {
                    "hash": content_hash,
                    "id": str(record.id),
                    "name": record.name,
                    "active": record.active,
                    "tf_vars": record.tf_vars,
                }
                if remote:
                    entry["remote"] = remote_status.get(str(record.id))
                versions.append(entry)
        payload: dict[str, Any] = {
            "template": state.template_name,
            "template_id": str(state.template_id) if state.template_id else None,
            "organization": state.organization,
            "updated_at": state.updated_at.isoformat(),
            "versions": versions,
        }
        if remote:
            payload["remote_active_version_id"] = str(remote_active) if remote_active else None
        ctx.print_json(payload)
        return

    ctx.console.print(
        f"Template [bold]{state.template_name}[/bold] ({state.template_id}) "
        f"in organization {state.organization}"
    )
    ctx.console.print(f"Last applied: {state.updated_at:%Y-%m-%d %H:%M:%S}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Hash")
    table.add_column("Name")
    table.add_column("ID")
    table.add_column("Active")
    if remote:
        table.add_column("Remote")
    for content_hash, records in state.last_versions.items():
        for record in records:
            row = [
                content_hash[:12],
                record.name,
                str(record.id),
                "yes" if record.active else "",
            ]
            if remote:
                value = remote_status.get(str(record.id), "")
                row.append(value if value == "ok" else f"[yellow]{value}[/yellow]")
            table.add_row(*row)
    ctx.console.print(table)

    missing = [vid for vid, value in remote_status.items() if value == "not found"]
    if missing:
        ctx.warning(f"{len(missing)} recorded version(s) no longer exist remotely")

    recorded = state.active_record()
    if remote and recorded is not None and remote_active != recorded.id:
        ctx.warning(
            f"Remote active version {remote_active} differs from the recorded one ({recorded.id})"
        )
