"""Common file system helpers."""

import os
from pathlib import Path


def list_files(directory: Path) -> list[Path]:
    """List regular files under directory in stable depth-first order.

    Entries are ordered by their path components, which matches a walk that
    visits each directory's entries sorted by name and descends as it goes.

    Args:
        directory: Root directory

    Returns:
        File paths, ordered the same way on every platform and every run

    Raises:
        OSError: If the directory or one of its subdirectories can't be listed
    """
    files: list[Path] = []

    def _raise(err: OSError) -> None:
        raise err

    for root, _dirs, names in os.walk(directory, onerror=_raise):
        base = Path(root)
        files.extend(base / name for name in names if (base / name).is_file())
    return sorted(files, key=lambda p: p.relative_to(directory).parts)
