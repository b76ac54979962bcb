"""Filesystem helpers."""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path

__all__ = ["recreate_dir", "sha256_file"]


def sha256_file(path: Path) -> str:
    """Hex SHA-256 digest of a file, read in 1 MiB chunks."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def recreate_dir(path: Path) -> None:
    """Remove `path` if present (file or tree) and create it empty."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
    path.mkdir(parents=True)
