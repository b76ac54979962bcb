"""Thin wrappers over the operating system: processes and files."""

from .files import recreate_dir, sha256_file
from .process import ProcessError, Runner, run

__all__ = [
    "ProcessError",
    "Runner",
    "recreate_dir",
    "run",
    "sha256_file",
]
