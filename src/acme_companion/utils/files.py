"""File helpers for the dhparam contract."""

import hashlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import Union


PathLike = Union[str, Path]


def file_digest(path: PathLike) -> str:
    """SHA-256 of the full file content."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def temp_path_beside(target: PathLike) -> Path:
    """Reserve a temporary file in the target's directory.

    Living on the same filesystem as the target keeps os.replace atomic.
    """
    target = Path(target)
    fd, name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    os.close(fd)
    return Path(name)


def atomic_replace(source: PathLike, target: PathLike, mode: int = 0o644) -> None:
    """Move a complete file over the target in a single rename."""
    os.chmod(source, mode)
    os.replace(source, target)


def atomic_copy(source: PathLike, target: PathLike, mode: int = 0o644) -> None:
    """Copy source over target so readers see either old or new content."""
    tmp = temp_path_beside(target)
    try:
        shutil.copyfile(source, tmp)
        atomic_replace(tmp, target, mode)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
