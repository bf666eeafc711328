"""Git repository abstraction.

``Repository`` is the narrow version-control interface the release services
consume: clone, checkout, stage, commit, branch, tag, push. Every operation
shells out to ``git`` and returns a Result.

Usage:
    repo = Repository(Path("/path/to/repo"), env=git_environment(creds, os.environ))

    match repo.push_branch("master", remote="origin"):
        case Ok(PushOutcome.UP_TO_DATE):
            print("nothing to push")
        case Ok(_):
            print("pushed")
        case Err(e):
            print(f"push failed: {e.message}")

Two conditions are named rather than inferred from git's message text:
``GitError.kind == "tag_exists"`` when creating a tag whose ref is already
present, and ``PushOutcome.UP_TO_DATE`` when every pushed ref was already
current on the remote.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Literal

from relforge.core.config import Identity
from relforge.core.result import Err, Ok, Result
from relforge.platform.process import ProcessError
from relforge.platform.process import run as run_process

__all__ = [
    "GitError",
    "GitErrorKind",
    "PushOutcome",
    "Repository",
]

GitErrorKind = Literal["failed", "tag_exists"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push")
        message: Error message
        returncode: Process return code
        kind: "tag_exists" for duplicate local tags, "failed" otherwise
    """

    command: str
    message: str
    returncode: int = 1
    kind: GitErrorKind = "failed"


class PushOutcome(Enum):
    PUSHED = "pushed"
    UP_TO_DATE = "up_to_date"


class Repository:
    """Git working tree at ``path``.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        """Initialize repository.

        Args:
            path: Path to repository root (containing .git)
            env: Environment for every git call (auth, identity); inherits if None
        """
        self.path = path
        self._env = env

    @classmethod
    def clone(
        cls,
        url: str,
        path: Path,
        *,
        branch: str,
        remote: str = "origin",
        env: Mapping[str, str] | None = None,
    ) -> Result[Repository, GitError]:
        """Clone ``branch`` of ``url`` into ``path`` (tags included)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        result = run_process(
            ["git", "clone", "--branch", branch, "--origin", remote, url, str(path)],
            cwd=path.parent,
            env=env,
        )
        if isinstance(result, Err):
            return Err(_error("clone", result.error, "clone failed"))
        return Ok(cls(path, env=env))

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def head(self) -> Result[str, GitError]:
        """Commit SHA of HEAD."""
        result = self._run(["rev-parse", "HEAD"])
        if isinstance(result, Err):
            return Err(_error("rev-parse", result.error, "cannot resolve HEAD"))
        return Ok(result.value.strip())

    def checkout(self, branch: str) -> Result[None, GitError]:
        """Switch the working tree to an existing branch."""
        result = self._run(["checkout", branch])
        if isinstance(result, Err):
            return Err(_error("checkout", result.error, f"cannot checkout {branch}"))
        return Ok(None)

    def create_branch(self, branch: str) -> Result[None, GitError]:
        """Create ``branch`` at HEAD and switch the working tree to it."""
        result = self._run(["checkout", "-b", branch, "HEAD"])
        if isinstance(result, Err):
            return Err(_error("checkout -b", result.error, f"cannot create branch {branch}"))
        return Ok(None)

    def branch_exists(self, branch: str) -> bool:
        return isinstance(self._run(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"]), Ok)

    def tag_exists(self, tag: str) -> bool:
        return isinstance(self._run(["show-ref", "--verify", "--quiet", f"refs/tags/{tag}"]), Ok)

    def add_all(self) -> Result[None, GitError]:
        """Stage every change in the working tree."""
        result = self._run(["add", "-A"])
        if isinstance(result, Err):
            return Err(_error("add", result.error, "git add failed"))
        return Ok(None)

    def commit(
        self,
        message: str,
        *,
        identity: Identity,
        when: datetime | None = None,
        allow_empty: bool = False,
    ) -> Result[str, GitError]:
        """Record a commit authored and committed by ``identity``.

        Returns:
            Ok(sha) of the new commit, Err(GitError) on failure
        """
        args = ["commit", "--no-verify", "-m", message]
        if allow_empty:
            args.append("--allow-empty")
        result = self._run(args, extra_env=_identity_env(identity, when))
        if isinstance(result, Err):
            return Err(_error("commit", result.error, "git commit failed"))
        return self.head()

    def create_tag(
        self,
        tag: str,
        *,
        identity: Identity,
        message: str | None = None,
    ) -> Result[None, GitError]:
        """Create an annotated tag at HEAD.

        Returns:
            Ok(None) on success
            Err(GitError(kind="tag_exists")) if ``refs/tags/<tag>`` already exists
            Err(GitError) on any other failure
        """
        if self.tag_exists(tag):
            return Err(
                GitError(
                    command="tag",
                    message=f"tag already exists: {tag}",
                    kind="tag_exists",
                )
            )
        result = self._run(
            ["tag", "-a", tag, "-m", message or tag, "HEAD"],
            extra_env=_identity_env(identity, None),
        )
        if isinstance(result, Err):
            return Err(_error("tag", result.error, f"cannot create tag {tag}"))
        return Ok(None)

    def push_branch(self, branch: str, *, remote: str) -> Result[PushOutcome, GitError]:
        return self.push(f"refs/heads/{branch}:refs/heads/{branch}", remote=remote)

    def push_tag(self, tag: str, *, remote: str) -> Result[PushOutcome, GitError]:
        return self.push(f"refs/tags/{tag}:refs/tags/{tag}", remote=remote)

    def push(self, refspec: str, *, remote: str) -> Result[PushOutcome, GitError]:
        """Push one refspec and report whether anything changed on the remote."""
        result = self._run(["push", "--porcelain", remote, refspec])
        if isinstance(result, Err):
            return Err(_error("push", result.error, f"cannot push {refspec}"))
        rejected = [line for line in result.value.splitlines() if line.startswith("!\t")]
        if rejected:
            return Err(GitError(command="push", message=rejected[0].replace("\t", " ")))
        return Ok(parse_push_porcelain(result.value))

    def _run(
        self, args: list[str], *, extra_env: Mapping[str, str] | None = None
    ) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        env: Mapping[str, str] | None = self._env
        if extra_env:
            env = {**(self._env if self._env is not None else os.environ), **extra_env}
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, env=env)


def parse_push_porcelain(output: str) -> PushOutcome:
    """Classify ``git push --porcelain`` output.

    Ref lines look like ``<flag>\\t<from>:<to>\\t<summary>``; flag ``=`` means
    the ref was already up to date. No ref lines at all also means nothing moved.
    """
    flags = [
        line[0]
        for line in output.splitlines()
        if "\t" in line and line[:1] in {" ", "+", "-", "*", "=", "!"}
    ]
    if all(flag == "=" for flag in flags):
        return PushOutcome.UP_TO_DATE
    return PushOutcome.PUSHED


def _identity_env(identity: Identity, when: datetime | None) -> dict[str, str]:
    env = {
        "GIT_AUTHOR_NAME": identity.name,
        "GIT_AUTHOR_EMAIL": identity.email,
        "GIT_COMMITTER_NAME": identity.name,
        "GIT_COMMITTER_EMAIL": identity.email,
    }
    if when is not None:
        stamp = when.isoformat()
        env["GIT_AUTHOR_DATE"] = stamp
        env["GIT_COMMITTER_DATE"] = stamp
    return env


def _error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )
