"""Discovery of Terraform variable files in a version directory."""

import json
from pathlib import Path

from ..errors import ConfigurationError
from ..models import Variable

DEFAULT_VARS_FILE = "terraform.tfvars.json"
AUTO_VARS_SUFFIX = ".auto.tfvars.json"


def discover_vars_files(directory: Path) -> list[Path]:
    """Find JSON variable files Terraform would load automatically.

    ``terraform.tfvars.json`` comes first, then ``*.auto.tfvars.json`` in
    name order. Only the top level of the directory is searched.
    """
    files = []
    default = directory / DEFAULT_VARS_FILE
    if default.is_file():
        files.append(default)
    files.extend(
        sorted(p for p in directory.iterdir() if p.is_file() and p.name.endswith(AUTO_VARS_SUFFIX))
    )
    return files


def parse_vars_file(path: Path) -> list[Variable]:
    """Parse a JSON variable file into variable values.

    Non-string values are passed on JSON-encoded, the way the server
    expects complex variable values.

    Raises:
        ConfigurationError: If the file can't be read or isn't a JSON object
    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"failed to parse variables file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"variables file {path} must contain a JSON object")
    return [
        Variable(name=name, value=value if isinstance(value, str) else json.dumps(value))
        for name, value in data.items()
    ]


def collect_variables(directory: Path, declared: list[Variable]) -> list[Variable]:
    """Variables from discovered files followed by the declared ones.

    Later values win on the server, so declared variables override file values.
    """
    variables: list[Variable] = []
    for path in discover_vars_files(directory):
        variables.extend(parse_vars_file(path))
    variables.extend(declared)
    return variables
