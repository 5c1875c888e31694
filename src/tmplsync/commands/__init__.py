"""CLI command implementations for tmplsync.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .apply import apply
from .hash import hash_cmd
from .init import init
from .plan import plan
from .status import status

__all__ = [
    "apply",
    "hash_cmd",
    "init",
    "plan",
    "status",
]
