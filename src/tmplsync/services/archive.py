"""Template bundle creation for upload."""

import io
import logging
import tarfile
from pathlib import Path

from ..constants import TEMPLATE_ARCHIVE_LIMIT
from ..errors import ConfigurationError
from .filesystem import list_files

logger = logging.getLogger(__name__)

# Local Terraform working files never belong in an uploaded template
EXCLUDED_DIRS = frozenset({".terraform", ".git"})
EXCLUDED_SUFFIXES = (".tfstate", ".tfstate.backup")


def _is_excluded(relative: Path) -> bool:
    if any(part in EXCLUDED_DIRS for part in relative.parts[:-1]):
        return True
    return relative.name.endswith(EXCLUDED_SUFFIXES)


def bundle_directory(directory: Path, limit: int = TEMPLATE_ARCHIVE_LIMIT) -> bytes:
    """Pack a version directory into an uncompressed tar bundle.

    Members are added in the same order the content hash uses, with paths
    relative to the directory.

    Args:
        directory: Version content directory
        limit: Maximum bundle size in bytes

    Returns:
        The tar archive bytes

    Raises:
        ConfigurationError: If the directory can't be read or the bundle is too large
    """
    buffer = io.BytesIO()
    try:
        with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as tar:
            for path in list_files(directory):
                relative = path.relative_to(directory)
                if _is_excluded(relative):
                    logger.debug("Skipping %s", relative)
                    continue
                tar.add(path, arcname=relative.as_posix(), recursive=False)
                if buffer.tell() > limit:
                    raise ConfigurationError(
                        f"template bundle for {directory} exceeds {limit} bytes"
                    )
    except OSError as e:
        raise ConfigurationError(f"failed to bundle {directory}: {e}") from e
    data = buffer.getvalue()
    logger.debug("Bundled %s (%d bytes)", directory, len(data))
    return data
