"""Remote authentication for git subprocesses.

Credentials never appear on a git command line:

- SSH keys are selected through ``GIT_SSH_COMMAND``.
- HTTP basic auth is injected as an ``http.extraHeader`` through the
  ``GIT_CONFIG_COUNT`` / ``GIT_CONFIG_KEY_n`` / ``GIT_CONFIG_VALUE_n``
  environment protocol (git >= 2.31), so nothing is written to ``.git/config``.
"""

from __future__ import annotations

import base64
import shlex
from collections.abc import Mapping

from relforge.core.config import Credentials, HttpCredentials, SshCredentials

__all__ = ["basic_auth_header", "git_environment"]


def basic_auth_header(username: str, token: str) -> str:
    raw = f"{username}:{token}".encode("utf-8")
    return "Authorization: Basic " + base64.b64encode(raw).decode("ascii")


def git_environment(credentials: Credentials, base: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``base`` extended so git authenticates with ``credentials``."""
    env = dict(base)
    # Fail instead of hanging on an interactive username/password prompt.
    env["GIT_TERMINAL_PROMPT"] = "0"

    match credentials:
        case SshCredentials(key_path=key_path):
            env["GIT_SSH_COMMAND"] = " ".join(
                [
                    "ssh",
                    "-i",
                    shlex.quote(str(key_path)),
                    "-o",
                    "IdentitiesOnly=yes",
                    "-o",
                    "StrictHostKeyChecking=accept-new",
                ]
            )
        case HttpCredentials(username=username, token=token):
            index = int(env.get("GIT_CONFIG_COUNT", "0") or "0")
            env["GIT_CONFIG_COUNT"] = str(index + 1)
            env[f"GIT_CONFIG_KEY_{index}"] = "http.extraHeader"
            env[f"GIT_CONFIG_VALUE_{index}"] = basic_auth_header(username, token)

    return env
