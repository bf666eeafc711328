from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relforge.core.config import ReleaseConfig, load_config
from relforge.core.errors import ErrorCode
from relforge.core.result import Err
from relforge.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(
    config_file: Path | None = None,
    *,
    console: ConsoleProtocol | None = None,
) -> CLIContext:
    """Load configuration from the environment (and optional TOML file) or exit 1."""
    console = console or RichConsole()
    result = load_config(os.environ, file=config_file)
    if isinstance(result, Err):
        error = result.error
        console.error(f"invalid configuration: {error.message}")
        if error.path is not None:
            console.error(f"config file: {error.path}")
        raise typer.Exit(code=int(ErrorCode.FATAL))

    return CLIContext(config=result.value, console=console)
