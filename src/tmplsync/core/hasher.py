"""Content fingerprinting for version directories."""

import hashlib
from pathlib import Path

from ..errors import ConfigurationError
from ..services.filesystem import list_files

CHUNK_SIZE = 64 * 1024


def compute_directory_hash(directory: Path) -> str:
    """Fingerprint every regular file under directory.

    File contents are fed, in sorted path order, into a single SHA-256.
    Names, directories and timestamps are not inputs.

    Args:
        directory: Version content directory

    Returns:
        Lowercase hex SHA-256 digest (64 characters)

    Raises:
        ConfigurationError: If the directory is missing or any file can't be read
    """
    if not directory.is_dir():
        raise ConfigurationError(
            f"failed to compute directory hash: {directory} is not a directory"
        )

    digest = hashlib.sha256()
    try:
        for path in list_files(directory):
            with open(path, "rb") as f:
                while chunk := f.read(CHUNK_SIZE):
                    digest.update(chunk)
    except OSError as e:
        raise ConfigurationError(f"failed to compute directory hash for {directory}: {e}") from e
    return digest.hexdigest()
