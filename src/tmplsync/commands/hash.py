"""Hash command implementation."""

from pathlib import Path

import typer

from ..core import compute_directory_hash
from ..errors import TmplsyncError
from ..output import get_output_context


def hash_cmd(
    directories: list[Path] = typer.Argument(..., help="Version directories to fingerprint"),
) -> None:
    """Print the content hash of one or more version directories."""
    ctx = get_output_context()

    hashes: dict[str, str] = {}
    for directory in directories:
        try:
            hashes[str(directory)] = compute_directory_hash(directory)
        except TmplsyncError as e:
            ctx.diagnostic(e)
            raise typer.Exit(e.exit_code) from None

    if ctx.json_mode:
        ctx.print_json({"hashes": hashes})
        return
    for directory, content_hash in hashes.items():
        ctx.console.print(f"{content_hash}  {directory}", markup=False, highlight=False)
