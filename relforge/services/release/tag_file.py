"""Tag file semver mutator.

The first active line (not blank, not a ``#`` comment) of the tag file holds
``MAJOR.MINOR.PATCH``. It is parsed into a SemverEntry, the tag file template
is rendered against it (``{{.Major}}.{{.Minor}}.{{inc .Patch}}``) and the whole
line is replaced by the output. Later active lines and all comments/blanks are
written back unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from relforge.core.result import Err, Ok, Result
from relforge.release.errors import ReleaseError
from relforge.services.release.lines import is_active, load_lines, store_lines
from relforge.services.release.model import SemverEntry, TagFileBump
from relforge.template.engine import TemplateError, TemplateRenderer

SEMVER_RE = re.compile(r"(?P<major>[0-9]+)\.(?P<minor>[0-9]+)\.(?P<patch>[0-9]+)")


def parse_semver(line: str) -> Result[SemverEntry, ReleaseError]:
    m = SEMVER_RE.search(line)
    if m is None:
        return Err(
            ReleaseError(
                kind="format",
                message=f"not a MAJOR.MINOR.PATCH version: {line.strip()!r}",
            )
        )
    try:
        return Ok(SemverEntry(int(m["major"]), int(m["minor"]), int(m["patch"])))
    except ValueError as e:
        return Err(ReleaseError(kind="format", message=f"invalid version number: {e}", hint=line))


def plan_tag_file_bump(
    lines: Sequence[str],
    *,
    template: str,
    renderer: TemplateRenderer,
) -> Result[TagFileBump, ReleaseError]:
    """Compute the semver line rewrite without touching disk."""
    index = next((i for i, line in enumerate(lines) if is_active(line)), None)
    if index is None:
        return Err(ReleaseError(kind="no_match", message="tag file has no version line"))

    line = lines[index]
    entry = parse_semver(line)
    if isinstance(entry, Err):
        return entry

    try:
        rendered = renderer.render(template, entry.value)
    except TemplateError as e:
        return Err(ReleaseError(kind="parse", message=f"tag file template failed: {e}", hint=template))

    new_line = rendered.rstrip("\r\n")
    if "\n" in new_line:
        return Err(
            ReleaseError(
                kind="parse",
                message="tag file template must render a single line",
                hint=template,
            )
        )

    new_lines = list(lines)
    new_lines[index] = new_line
    return Ok(
        TagFileBump(
            line_index=index,
            entry=entry.value,
            old_line=line,
            new_line=new_line,
            lines=tuple(new_lines),
        )
    )


def bump_tag_file(
    path: Path,
    *,
    template: str,
    renderer: TemplateRenderer,
) -> Result[TagFileBump, ReleaseError]:
    """Rewrite the semver line of the tag file at ``path``.

    Returns:
        Ok(TagFileBump) once the file is written
        Err(ReleaseError) with kind "no_match", "format" or "parse"; the file is untouched
    """
    lines = load_lines(path)
    if isinstance(lines, Err):
        return lines

    plan = plan_tag_file_bump(lines.value, template=template, renderer=renderer)
    if isinstance(plan, Err):
        return plan

    stored = store_lines(path, plan.value.lines)
    if isinstance(stored, Err):
        return stored
    return plan
