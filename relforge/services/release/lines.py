"""Tracked-file line helpers shared by the mutators and the tag processor."""

from __future__ import annotations

from pathlib import Path

from relforge.core.result import Err, Ok, Result
from relforge.platform.files import read_lines, write_lines
from relforge.release.errors import ReleaseError

COMMENT_PREFIX = "#"


def is_active(line: str) -> bool:
    """True for data lines: not blank and not a ``#`` comment."""
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith(COMMENT_PREFIX)


def load_lines(path: Path) -> Result[list[str], ReleaseError]:
    try:
        return Ok(read_lines(path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="io",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )


def store_lines(path: Path, lines: tuple[str, ...]) -> Result[None, ReleaseError]:
    try:
        write_lines(path, list(lines))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io",
                message=f"failed to write {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(None)
