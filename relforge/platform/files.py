"""Line-oriented file access for the files a release rewrites."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "read_lines", "write_lines"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``content`` in one rename.

    A crash mid-write leaves the previous file intact. File mode is kept.
    """
    mode = path.stat().st_mode & 0o7777 if path.exists() else None
    with tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        staged = Path(tmp.name)
        try:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            staged.unlink(missing_ok=True)
            raise
    try:
        if mode is not None:
            staged.chmod(mode)
        staged.replace(path)
    except BaseException:
        staged.unlink(missing_ok=True)
        raise


def read_lines(path: Path, *, encoding: str = "utf-8") -> list[str]:
    """Lines of ``path`` without terminators.

    Splits on ``\\n`` only and drops a trailing ``\\r``; a final newline does
    not yield an extra empty line.
    """
    text = path.read_text(encoding=encoding)
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def write_lines(path: Path, lines: list[str], *, encoding: str = "utf-8") -> None:
    """Atomically rewrite ``path``, every line newline-terminated."""
    atomic_write_text(path, "".join(f"{line}\n" for line in lines), encoding=encoding)
