"""Project directory utilities."""

from dataclasses import dataclass
from pathlib import Path

from ..config import TmplsyncConfig, load_config
from ..constants import PROJECT_DIR_NAME, STATE_DIR
from ..errors import ProjectNotFoundError


def find_project_root(start: Path | None = None) -> Path:
    """Find the nearest directory containing a .tmplsync directory.

    Args:
        start: Directory to start from (defaults to cwd)

    Returns:
        Project root path

    Raises:
        ProjectNotFoundError: If no parent directory holds a .tmplsync directory
    """
    start = (start or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if (candidate / PROJECT_DIR_NAME).is_dir():
            return candidate
    raise ProjectNotFoundError(
        f"no {PROJECT_DIR_NAME} directory found in {start} or its parents. "
        "Run 'tmplsync init' first."
    )


def get_project_dir(project_root: Path) -> Path:
    """Get .tmplsync directory path."""
    return project_root / PROJECT_DIR_NAME


def get_state_dir(project_dir: Path) -> Path:
    """Get directory holding per-template state files."""
    return project_dir / STATE_DIR


@dataclass
class Project:
    """A located tmplsync project and its loaded configuration."""

    root: Path
    config: TmplsyncConfig

    @property
    def project_dir(self) -> Path:
        return get_project_dir(self.root)


def load_project(start: Path | None = None) -> Project:
    """Locate the project and load its configuration.

    Raises:
        ProjectNotFoundError: If no project is found
        ConfigurationError: If config.toml is invalid
    """
    root = find_project_root(start)
    return Project(root=root, config=load_config(get_project_dir(root)))
