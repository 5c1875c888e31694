"""Configuration management for tmplsync."""

import os
import re
import tomllib
from pathlib import Path
from typing import Self

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .constants import (
    CONFIG_FILE,
    DEFAULT_TOKEN_ENV,
    HTTP_TIMEOUT,
    MAX_JOB_RETRIES,
)
from .errors import ConfigurationError
from .models import Variable

# Same rules the server applies to template and version names
TEMPLATE_NAME_RE = re.compile(r"^[a-zA-Z0-9]+(?:-[a-zA-Z0-9]+)*$")
TEMPLATE_NAME_MAX = 32
VERSION_NAME_RE = re.compile(r"^[a-zA-Z0-9]+(?:[_.-]{1}[a-zA-Z0-9]+)*$")
VERSION_NAME_MAX = 64


class CoderConfig(BaseModel):
    """Connection settings for the Coder deployment."""

    url: str = "http://localhost:3000"
    token_env: str = DEFAULT_TOKEN_ENV  # Environment variable holding the session token
    organization: str = "default"  # Organization name or ID
    timeout: float = Field(default=HTTP_TIMEOUT, gt=0)

    def get_token(self) -> str | None:
        """Read the session token from the configured environment variable."""
        return os.environ.get(self.token_env) or None


class EngineConfig(BaseModel):
    """Reconciliation engine options."""

    # Require recorded variables to equal the declared ones before reusing a version
    match_variables: bool = False
    max_job_retries: int = Field(default=MAX_JOB_RETRIES, ge=1)


class VersionConfig(BaseModel):
    """One declared template version."""

    directory: Path = Field(description="Content directory, relative to the project root")
    name: str | None = Field(default=None, description="Version name (generated if unset)")
    message: str | None = None
    active: bool | None = None
    tf_vars: list[Variable] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if len(v) > VERSION_NAME_MAX:
            raise ValueError(f"version name must be at most {VERSION_NAME_MAX} characters")
        if not VERSION_NAME_RE.match(v):
            raise ValueError("version names must be alphanumeric with underscores and dots")
        return v


class TemplateConfig(BaseModel):
    """The managed template and its declared versions."""

    name: str
    display_name: str | None = None
    description: str = ""
    icon: str = ""
    versions: list[VersionConfig] = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if len(v) > TEMPLATE_NAME_MAX or not TEMPLATE_NAME_RE.match(v):
            raise ValueError("template names must be alphanumeric with hyphens")
        return v

    @model_validator(mode="after")
    def validate_unique_version_names(self) -> Self:
        """Explicit version names must be unique within the template."""
        seen: set[str] = set()
        for version in self.versions:
            if version.name is None:
                continue
            if version.name in seen:
                raise ValueError(f"template version names must be unique: {version.name}")
            seen.add(version.name)
        return self


class TmplsyncConfig(BaseModel):
    """Root configuration for tmplsync."""

    coder: CoderConfig = Field(default_factory=CoderConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    template: TemplateConfig | None = None

    def require_template(self) -> TemplateConfig:
        """Return the declared template or fail with a configuration error."""
        if self.template is None:
            raise ConfigurationError("no [template] section in config.toml")
        return self.template


def load_config(project_dir: Path) -> TmplsyncConfig:
    """Load config from .tmplsync/config.toml.

    Args:
        project_dir: Path to .tmplsync directory

    Returns:
        Loaded configuration, or defaults if config.toml doesn't exist

    Raises:
        ConfigurationError: If the file is not valid TOML or fails validation
    """
    config_path = project_dir / CONFIG_FILE
    if not config_path.exists():
        return TmplsyncConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"failed to read {config_path}: {e}") from e
    try:
        return TmplsyncConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid {config_path}:\n{e}") from e


def write_config_template(project_dir: Path, template_name: str = "my-template") -> Path:
    """Write default config.toml template.

    Args:
        project_dir: Path to .tmplsync directory
        template_name: Name to put in the [template] section

    Returns:
        Path to the written config file
    """
    config_path = project_dir / CONFIG_FILE
    template = {
        "coder": {
            "url": "https://coder.example.com",
            "token_env": DEFAULT_TOKEN_ENV,
            "organization": "default",
        },
        "engine": {"match_variables": False, "max_job_retries": MAX_JOB_RETRIES},
        # Versions are listed oldest first; exactly one should be active.
        # Leave "name" unset to let the server generate one.
        "template": {
            "name": template_name,
            "display_name": template_name,
            "versions": [
                {
                    "directory": "template",
                    "active": True,
                    "tf_vars": [],
                },
            ],
        },
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
