"""Git binding used by the release services.

- Repository: clone/checkout/commit/branch/tag/push on one working tree
- git_environment: credentials -> environment for git subprocesses
"""

from relforge.git.auth import basic_auth_header, git_environment
from relforge.git.repository import (
    GitError,
    GitErrorKind,
    PushOutcome,
    Repository,
    parse_push_porcelain,
)

__all__ = [
    "GitError",
    "GitErrorKind",
    "PushOutcome",
    "Repository",
    "basic_auth_header",
    "git_environment",
    "parse_push_porcelain",
]
