"""Persistence of the per-template checkpoint.

The state file is the only record of which remote versions this tool
created and from what content. It is read before planning and replaced
atomically after a fully successful apply; a failed pass never touches it.
"""

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from ..errors import CheckpointError
from ..models import TemplateState
from .project_dir import get_state_dir

logger = logging.getLogger(__name__)


def state_path(project_dir: Path, template_name: str) -> Path:
    """Path of the state file for a template."""
    return get_state_dir(project_dir) / f"{template_name}.json"


def load_state(project_dir: Path, template_name: str) -> TemplateState | None:
    """Load a template's checkpoint.

    Args:
        project_dir: Path to .tmplsync directory
        template_name: Managed template name

    Returns:
        The stored state, or None before the first successful apply

    Raises:
        CheckpointError: If the state file exists but can't be read or parsed
    """
    path = state_path(project_dir, template_name)
    if not path.exists():
        return None
    try:
        state = TemplateState.model_validate_json(path.read_text())
    except (OSError, ValidationError) as e:
        raise CheckpointError(f"failed to read checkpoint {path}: {e}") from e
    if state.template_name != template_name:
        raise CheckpointError(
            f"checkpoint {path} belongs to template {state.template_name!r}, "
            f"not {template_name!r}"
        )
    return state


def save_state(project_dir: Path, state: TemplateState) -> Path:
    """Atomically replace a template's checkpoint.

    Args:
        project_dir: Path to .tmplsync directory
        state: State to persist

    Returns:
        Path to the written state file

    Raises:
        CheckpointError: If the file can't be written
    """
    path = state_path(project_dir, state.template_name)
    state.updated_at = datetime.now()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(state.model_dump_json(indent=2))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise CheckpointError(f"failed to write checkpoint {path}: {e}") from e
    logger.debug("Wrote checkpoint %s", path)
    return path
