"""Filesystem helpers for writing rendered output."""

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def write_bytes(path: PathLike, content: bytes) -> Path:
    """Write rendered bytes, creating missing parent directories first."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return target


__all__ = ["write_bytes"]
