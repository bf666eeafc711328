"""``relforge preview``: show what a run would write, without writing."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from relforge.cli.commands._helpers import CONFIG_OPTION, config_path, fail
from relforge.cli.context import build_context
from relforge.core.result import Err
from relforge.output.console import Style
from relforge.services.release.preview import preview_release


def preview(config: Path | None = CONFIG_OPTION) -> None:
    """Render version code, version line, branch name and tags from the working tree."""
    ctx = build_context(config_path(config))
    console = ctx.console

    result = preview_release(ctx.config, now=datetime.now().astimezone())
    if isinstance(result, Err):
        fail(result.error, console, context="preview failed")

    plan = result.value
    console.header("relforge preview")
    console.print(f"{ctx.config.version_code_file}:{plan.version.line_index + 1}", Style.BOLD)
    console.print(f"  - {plan.version.old_line}", Style.DIM)
    console.print(f"  + {plan.version.new_line}")
    console.print(f"{ctx.config.tag_file}:{plan.semver.line_index + 1}", Style.BOLD)
    console.print(f"  - {plan.semver.old_line}", Style.DIM)
    console.print(f"  + {plan.semver.new_line}")
    console.print(f"release branch: {plan.branch}")
    if plan.tags:
        console.print(f"tags: {', '.join(plan.tags)}")
    else:
        console.print("tags: none", Style.DIM)
