"""Version code mutator.

Finds the line of a tracked file that matches the configured regex, takes the
first run of digits on it as the current version code, renders the version
template with that integer (``{{add . 1}}``) and writes the result back in
place of that digit run. Nothing else in the file changes, except that every
line ends up newline-terminated.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from relforge.core.result import Err, Ok, Result
from relforge.release.errors import ReleaseError
from relforge.services.release.lines import load_lines, store_lines
from relforge.services.release.model import VersionCodeBump
from relforge.template.engine import TemplateError, TemplateRenderer

_DIGITS_RE = re.compile(r"[0-9]+")


def plan_version_code_bump(
    lines: Sequence[str],
    *,
    pattern: str,
    template: str,
    renderer: TemplateRenderer,
) -> Result[VersionCodeBump, ReleaseError]:
    """Compute the version code rewrite without touching disk."""
    try:
        regex = re.compile(pattern, re.ASCII)
    except re.error as e:
        return Err(ReleaseError(kind="parse", message=f"invalid version code regex: {e}", hint=pattern))

    matches = [i for i, line in enumerate(lines) if regex.search(line)]
    if not matches:
        return Err(
            ReleaseError(
                kind="no_match",
                message=f"no line matches version code regex {pattern!r}",
            )
        )

    index = matches[0]
    line = lines[index]
    digits = _DIGITS_RE.search(line)
    if digits is None:
        return Err(
            ReleaseError(
                kind="parse",
                message=f"line {index + 1} has no version code",
                hint=line,
            )
        )
    old = int(digits.group())

    try:
        rendered = renderer.render(template, old)
    except TemplateError as e:
        return Err(ReleaseError(kind="parse", message=f"version code template failed: {e}", hint=template))

    try:
        new = int(rendered.strip())
    except ValueError:
        return Err(
            ReleaseError(
                kind="parse",
                message=f"version code template rendered a non-integer: {rendered!r}",
                hint=template,
            )
        )
    if new < 0:
        return Err(
            ReleaseError(
                kind="parse",
                message=f"version code must not be negative: {new}",
                hint=template,
            )
        )

    new_line = line[: digits.start()] + str(new) + line[digits.end() :]
    new_lines = list(lines)
    new_lines[index] = new_line
    return Ok(
        VersionCodeBump(
            line_index=index,
            old=old,
            new=new,
            old_line=line,
            new_line=new_line,
            lines=tuple(new_lines),
            extra_matches=tuple(matches[1:]),
        )
    )


def bump_version_code(
    path: Path,
    *,
    pattern: str,
    template: str,
    renderer: TemplateRenderer,
) -> Result[VersionCodeBump, ReleaseError]:
    """Rewrite the version code in ``path``.

    Returns:
        Ok(VersionCodeBump) once the file is written
        Err(ReleaseError) with kind "no_match" or "parse"; the file is untouched
    """
    lines = load_lines(path)
    if isinstance(lines, Err):
        return lines

    plan = plan_version_code_bump(lines.value, pattern=pattern, template=template, renderer=renderer)
    if isinstance(plan, Err):
        return plan

    stored = store_lines(path, plan.value.lines)
    if isinstance(stored, Err):
        return stored
    return plan
