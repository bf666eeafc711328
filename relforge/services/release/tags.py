"""Tag processor.

Every active line of the tag file after the version line is a pending tag
base-name. Each gets the configured suffix, is created as an annotated tag at
HEAD, and is then pushed with an explicit ``refs/tags/X:refs/tags/X`` refspec.

A tag that already exists locally is skipped with a warning (re-runs are
idempotent); it is still pushed. A push that finds the remote already up to
date counts as success.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from relforge.core.config import Identity
from relforge.core.result import Err, Ok, Result
from relforge.git.repository import PushOutcome, Repository
from relforge.output.console import ConsoleProtocol, Style
from relforge.release.errors import ReleaseError
from relforge.services.release.lines import is_active, load_lines
from relforge.services.release.model import TagReport


def pending_tags(lines: Sequence[str]) -> list[str]:
    """Tag base-names in file order; the first active line is the version, not a tag."""
    active = [line.strip() for line in lines if is_active(line)]
    return active[1:]


def read_pending_tags(path: Path) -> Result[list[str], ReleaseError]:
    lines = load_lines(path)
    if isinstance(lines, Err):
        return lines
    return Ok(pending_tags(lines.value))


def process_tags(
    repo: Repository,
    *,
    tag_file: Path,
    suffix: str,
    remote: str,
    identity: Identity,
    console: ConsoleProtocol,
) -> Result[TagReport, ReleaseError]:
    """Create and push one tag per pending base-name in ``tag_file``."""
    pending = read_pending_tags(tag_file)
    if isinstance(pending, Err):
        return pending
    if not pending.value:
        console.print("no pending tags", Style.DIM)
        return Ok(TagReport())

    names = [f"{base}{suffix}" for base in pending.value]
    created: list[str] = []
    existing: list[str] = []

    for name in names:
        console.command(f"git tag -a {name}")
        result = repo.create_tag(name, identity=identity)
        if isinstance(result, Err):
            e = result.error
            if e.kind == "tag_exists":
                console.warning(f"tag {name} already exists locally, skipping")
                existing.append(name)
                continue
            return Err(
                ReleaseError(
                    kind="vcs",
                    message=f"error creating tag {name}",
                    hint=e.message,
                )
            )
        created.append(name)

    pushed: list[str] = []
    up_to_date: list[str] = []
    for name in names:
        console.command(f"git push {remote} refs/tags/{name}")
        result = repo.push_tag(name, remote=remote)
        match result:
            case Ok(PushOutcome.UP_TO_DATE):
                up_to_date.append(name)
            case Ok(_):
                pushed.append(name)
            case Err(e):
                return Err(
                    ReleaseError(
                        kind="vcs",
                        message=f"unable to push tag {name}",
                        hint=e.message,
                    )
                )

    return Ok(
        TagReport(
            created=tuple(created),
            existing=tuple(existing),
            pushed=tuple(pushed),
            up_to_date=tuple(up_to_date),
        )
    )
