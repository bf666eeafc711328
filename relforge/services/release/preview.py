"""Dry run of the file-level release steps.

Renders the version code, the semver line, the release branch name and the
tag list against the current working tree, without writing a file or touching
git.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from relforge.core.config import ReleaseConfig
from relforge.core.result import Err, Ok, Result
from relforge.release.errors import ReleaseError
from relforge.services.release.branch import render_branch_name
from relforge.services.release.lines import load_lines
from relforge.services.release.model import TagFileBump, VersionCodeBump
from relforge.services.release.tag_file import plan_tag_file_bump
from relforge.services.release.tags import pending_tags
from relforge.services.release.version_code import plan_version_code_bump
from relforge.template.engine import ActionTemplateRenderer, TemplateRenderer


@dataclass(frozen=True, slots=True)
class ReleasePreview:
    version: VersionCodeBump
    semver: TagFileBump
    branch: str
    tags: tuple[str, ...]


def preview_release(
    config: ReleaseConfig,
    *,
    now: datetime,
    renderer: TemplateRenderer | None = None,
) -> Result[ReleasePreview, ReleaseError]:
    renderer = renderer or ActionTemplateRenderer()

    version_lines = load_lines(config.version_code_path)
    if isinstance(version_lines, Err):
        return version_lines
    version = plan_version_code_bump(
        version_lines.value,
        pattern=config.version_code_regex,
        template=config.version_code_template,
        renderer=renderer,
    )
    if isinstance(version, Err):
        return version

    tag_lines = load_lines(config.tag_file_path)
    if isinstance(tag_lines, Err):
        return tag_lines
    semver = plan_tag_file_bump(tag_lines.value, template=config.tag_file_template, renderer=renderer)
    if isinstance(semver, Err):
        return semver

    branch = render_branch_name(config.release_branch_template, now=now, renderer=renderer)
    if isinstance(branch, Err):
        return branch

    tags = tuple(f"{base}{config.tag_name_suffix}" for base in pending_tags(semver.value.lines))
    return Ok(
        ReleasePreview(
            version=version.value,
            semver=semver.value,
            branch=branch.value,
            tags=tags,
        )
    )
