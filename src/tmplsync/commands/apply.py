"""Apply command implementation."""

import typer

from ..core import apply_plan, load_project, project_lock, save_state
from ..errors import ConfigurationError, TmplsyncError
from ..output import get_output_context
from ..services import CoderClient
from .plan import compute_plan, render_plan


def apply(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Apply without asking for confirmation",
    ),
) -> None:
    """Create, rename and activate versions to match the configuration."""
    ctx = get_output_context()

    try:
        project = load_project()
        template = project.config.require_template()
    except TmplsyncError as e:
        ctx.diagnostic(e)
        raise typer.Exit(e.exit_code) from None

    try:
        with project_lock(project.project_dir, template.name, "apply"):
            plan = compute_plan(project)
            if not ctx.json_mode:
                render_plan(ctx, plan)

            if ctx.dry_run:
                ctx.result(plan.to_summary(), "[cyan][DRY RUN][/cyan] No changes applied")
                return
            if not plan.has_changes:
                ctx.result(plan.to_summary())
                return
            if project.config.coder.get_token() is None:
                raise ConfigurationError(
                    f"no session token: set the {project.config.coder.token_env} variable"
                )
            if not yes and not ctx.json_mode and not typer.confirm("Apply these changes?"):
                ctx.print("Aborted")
                raise typer.Exit(1)

            with CoderClient.from_config(project.config.coder) as client:
                state = apply_plan(
                    plan, template, client, project.config.engine.max_job_retries
                )
            path = save_state(project.project_dir, state)
    except TmplsyncError as e:
        ctx.diagnostic(e)
        raise typer.Exit(e.exit_code) from None

    ctx.success(
        f"Applied {template.name}; active version: {plan.active_version.name}",
        data={
            "template_id": str(state.template_id),
            "active_version_id": str(plan.active_version.id),
            "checkpoint": str(path),
            "plan": plan.to_summary(),
        },
    )
