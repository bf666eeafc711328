"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from relforge.core.errors import ErrorCode
from relforge.output.console import ConsoleProtocol, Style
from relforge.release.errors import ReleaseError

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="TOML file with a [release] table (environment variables take precedence).",
    dir_okay=False,
)


def fail(error: ReleaseError, console: ConsoleProtocol, *, context: str | None = None) -> NoReturn:
    """Print a fatal release error and exit 1."""
    prefix = f"{context}: " if context else ""
    console.error(f"{prefix}[{error.kind}] {error.message}")
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(ErrorCode.FATAL))


def config_path(value: Path | None) -> Path | None:
    return value.expanduser() if value is not None else None
