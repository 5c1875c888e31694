"""Init command implementation."""

from pathlib import Path

import typer

from ..config import write_config_template
from ..constants import CONFIG_FILE, PROJECT_DIR_NAME
from ..core import get_state_dir
from ..output import get_output_context


def init(
    template: str = typer.Option(
        "my-template",
        "--template",
        "-t",
        help="Template name to put in the generated config",
    ),
) -> None:
    """Initialize tmplsync in the current directory."""
    ctx = get_output_context()

    project_dir = Path.cwd() / PROJECT_DIR_NAME
    config_path = project_dir / CONFIG_FILE
    state_dir = get_state_dir(project_dir)

    if ctx.dry_run:
        ctx.console.print("[cyan][DRY RUN][/cyan] Would initialize tmplsync in this directory:")
        ctx.console.print(f"  Create directory: {project_dir}")
        ctx.console.print(f"  Create directory: {state_dir}")
        if not config_path.exists():
            ctx.console.print(f"  Create config: {config_path}")
        else:
            ctx.console.print(f"  Config already exists: {config_path}")
        return

    project_dir.mkdir(exist_ok=True)
    state_dir.mkdir(exist_ok=True)

    if not config_path.exists():
        write_config_template(project_dir, template)
        ctx.print(f"[green]Created config template:[/green] {config_path}")
    else:
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")

    ctx.success(
        "tmplsync initialized successfully!",
        data={"project_dir": str(project_dir), "config": str(config_path)},
    )
