"""tmplsync CLI: declarative template version management for Coder."""

import sys

import typer

from tmplsync import __version__

from .commands import apply, hash_cmd, init, plan, status
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tmplsync {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="tmplsync",
    help="Reconcile declared template versions against a Coder deployment",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview effects without applying changes",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
) -> None:
    """tmplsync - declarative template versions for Coder."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
        stream=sys.stderr,
        debug=debug,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output, dry_run=dry_run))


app.command()(init)
app.command("hash")(hash_cmd)
app.command()(plan)
app.command()(apply)
app.command()(status)


if __name__ == "__main__":
    app()
