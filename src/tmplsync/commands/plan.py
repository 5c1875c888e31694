"""Plan command implementation."""

import typer
from rich.table import Table

from ..core import Project, load_project, load_state, plan_template
from ..errors import TmplsyncError
from ..models import Plan, VersionAction
from ..output import OutputContext, get_output_context

ACTION_STYLES = {
    VersionAction.CREATE: "green",
    VersionAction.RENAME: "yellow",
    VersionAction.KEEP: "dim",
}


def compute_plan(project: Project) -> Plan:
    """Run a planning pass for the project's declared template."""
    template = project.config.require_template()
    state = load_state(project.project_dir, template.name)
    return plan_template(
        template,
        project.config.engine,
        project.root,
        state,
        organization=project.config.coder.organization,
    )


def render_plan(ctx: OutputContext, plan: Plan) -> None:
    """Print a plan as a table, or as JSON in --json mode."""
    if ctx.json_mode:
        ctx.print_json(plan.to_summary())
        return

    if plan.creating:
        ctx.console.print(f"Template [bold]{plan.template_name}[/bold] will be created")
    else:
        ctx.console.print(f"Template [bold]{plan.template_name}[/bold] ({plan.template_id})")

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Name")
    table.add_column("ID")
    table.add_column("Directory")
    table.add_column("Active")
    for version in plan.versions:
        action = plan.action_for(version)
        table.add_row(
            str(version.index + 1),
            f"[{ACTION_STYLES[action]}]{action.value}[/]",
            version.name or "(generated)",
            str(version.id) if version.id else "(new)",
            str(version.definition.directory),
            "yes" if version.active else "",
        )
    ctx.console.print(table)

    if plan.needs_activation:
        ctx.console.print(f"{plan.active_version.label} will be marked active")
    if not plan.has_changes:
        ctx.console.print("[green]No changes. Remote versions match the configuration.[/green]")


def plan() -> None:
    """Show which versions would be created, renamed and activated."""
    ctx = get_output_context()

    try:
        project = load_project()
        result = compute_plan(project)
    except TmplsyncError as e:
        ctx.diagnostic(e)
        raise typer.Exit(e.exit_code) from None

    render_plan(ctx, result)
