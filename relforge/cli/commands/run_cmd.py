"""``relforge run``: the full release pass."""

from __future__ import annotations

from pathlib import Path

from relforge.cli.commands._helpers import CONFIG_OPTION, config_path, fail
from relforge.cli.context import build_context
from relforge.core.result import Err
from relforge.output.console import Style
from relforge.services.release.orchestrator import run_release


def run(config: Path | None = CONFIG_OPTION) -> None:
    """Bump versions, push trunk, fork the release branch and push tags."""
    ctx = build_context(config_path(config))
    console = ctx.console

    console.header("relforge run")
    for key, value in ctx.config.describe():
        console.print(f"  {key}: {value}", Style.DIM)

    result = run_release(ctx.config, console=console)
    if isinstance(result, Err):
        failure = result.error
        reached = failure.reached.value if failure.reached is not None else "start"
        fail(failure.error, console, context=f"release failed after {reached}")

    release = result.value
    console.header("release complete")
    if release.version is not None:
        console.print(f"version code: {release.version.old} -> {release.version.new}")
    if release.semver is not None:
        console.print(f"version line: {release.semver.new_line.strip()}")
    if release.branch is not None:
        console.print(f"release branch: {release.branch}")
    if release.tags is not None and release.tags.tags:
        console.print(f"tags: {', '.join(release.tags.tags)}")
