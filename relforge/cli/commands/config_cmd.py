"""``relforge config``: validate and print the resolved configuration."""

from __future__ import annotations

from pathlib import Path

from relforge.cli.commands._helpers import CONFIG_OPTION, config_path
from relforge.cli.context import build_context


def show_config(config: Path | None = CONFIG_OPTION) -> None:
    """Validate configuration and print it (secrets masked)."""
    ctx = build_context(config_path(config))
    ctx.console.header("relforge configuration")
    for key, value in ctx.config.describe():
        ctx.console.print(f"{key}: {value}")
    ctx.console.success("configuration is valid")
