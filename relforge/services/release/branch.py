from __future__ import annotations

import re
from datetime import datetime

from relforge.core.config import Identity
from relforge.core.result import Err, Ok, Result
from relforge.git.repository import Repository
from relforge.output.console import ConsoleProtocol
from relforge.release.errors import ReleaseError
from relforge.template.engine import TemplateError, TemplateRenderer

DIVERGE_MESSAGE = "diverge from master"

# Characters git check-ref-format refuses anywhere in a ref.
_FORBIDDEN_RE = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def is_valid_branch_name(name: str) -> bool:
    """Apply ``git check-ref-format --branch`` rules without running git."""
    if not name or name == "@" or name.startswith("-"):
        return False
    if name.startswith("/") or name.endswith("/") or name.endswith("."):
        return False
    if ".." in name or "//" in name or "@{" in name:
        return False
    if _FORBIDDEN_RE.search(name):
        return False
    for component in name.split("/"):
        if component.startswith(".") or component.endswith(".lock"):
            return False
    return True


def render_branch_name(
    template: str,
    *,
    now: datetime,
    renderer: TemplateRenderer,
) -> Result[str, ReleaseError]:
    """Render the release branch name for ``now`` (``release/{{.Year}}-w{{Week .}}``)."""
    try:
        name = renderer.render(template, now).strip()
    except TemplateError as e:
        return Err(ReleaseError(kind="parse", message=f"release branch template failed: {e}", hint=template))

    if not is_valid_branch_name(name):
        return Err(
            ReleaseError(
                kind="parse",
                message=f"release branch template rendered an invalid branch name: {name!r}",
                hint=template,
            )
        )
    return Ok(name)


def fork_release_branch(
    repo: Repository,
    branch: str,
    *,
    identity: Identity,
    now: datetime,
    console: ConsoleProtocol,
    message: str = DIVERGE_MESSAGE,
) -> Result[str, ReleaseError]:
    """Create ``branch`` at HEAD, switch to it and record an empty marker commit.

    The marker commit makes the release branch differ from the trunk at the ref
    level before any content changes land on it.
    """
    if repo.branch_exists(branch):
        return Err(
            ReleaseError(
                kind="vcs",
                message=f"release branch {branch} already exists",
                hint="the release for this period was already cut",
            )
        )

    console.command(f"git checkout -b {branch}")
    created = repo.create_branch(branch)
    if isinstance(created, Err):
        e = created.error
        return Err(
            ReleaseError(
                kind="vcs",
                message=f"unable to checkout release branch {branch}",
                hint=e.message,
            )
        )

    console.command(f"git commit --allow-empty -m {message!r}")
    committed = repo.commit(message, identity=identity, when=now, allow_empty=True)
    if isinstance(committed, Err):
        e = committed.error
        return Err(
            ReleaseError(
                kind="vcs",
                message="unable to create diverge commit",
                hint=e.message,
            )
        )

    return Ok(branch)
