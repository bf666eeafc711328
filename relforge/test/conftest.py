from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

from relforge.core.config import Identity, ReleaseConfig, SshCredentials

ReleaseConfigFactory = Callable[..., ReleaseConfig]

SEED_IDENTITY = Identity(name="Seed", email="seed@example.com")


@pytest.fixture
def make_release_config(tmp_path: Path) -> ReleaseConfigFactory:
    """Build a ReleaseConfig rooted in tmp_path; keyword arguments override fields."""
    key = tmp_path / "id_test"
    key.write_text("not a real key\n", encoding="utf-8")

    def factory(**overrides: object) -> ReleaseConfig:
        values: dict[str, object] = {
            "source_dir": tmp_path / "src",
            "clone_url": "git@example.com:acme/app.git",
            "credentials": SshCredentials(key_path=key),
            "version_code_file": "/app/build.gradle",
            "version_code_regex": r"versionCode [0-9]+",
            "version_code_template": "{{add . 1}}",
            "tag_file": "tags.txt",
            "tag_file_template": "{{.Major}}.{{.Minor}}.{{inc .Patch}}",
            "tag_name_suffix": "-rc1",
            "release_branch_template": "release/{{.Year}}-w{{Week .}}",
            "trunk_branch": "master",
        }
        values.update(overrides)
        return ReleaseConfig(**values)  # type: ignore[arg-type]

    return factory


@dataclass(frozen=True, slots=True)
class GitRemote:
    """A bare repository seeded with one commit on ``master``."""

    bare: Path
    env: dict[str, str]

    def git(self, *args: str) -> str:
        proc = subprocess.run(
            ["git", "--git-dir", str(self.bare), *args],
            env=self.env,
            capture_output=True,
            text=True,
            check=True,
        )
        return proc.stdout

    def show(self, ref: str, path: str) -> str:
        return self.git("show", f"{ref}:{path}")

    def refs(self) -> set[str]:
        out = self.git("for-each-ref", "--format=%(refname)")
        return set(out.split())


def _isolated_git_env(tmp_path: Path) -> dict[str, str]:
    empty = tmp_path / "gitconfig"
    empty.write_text("", encoding="utf-8")
    env = dict(os.environ)
    env["GIT_CONFIG_GLOBAL"] = str(empty)
    env["GIT_CONFIG_NOSYSTEM"] = "1"
    env["GIT_TERMINAL_PROMPT"] = "0"
    for key in list(env):
        if key.startswith("GIT_CONFIG_KEY_") or key.startswith("GIT_CONFIG_VALUE_"):
            del env[key]
    env.pop("GIT_CONFIG_COUNT", None)
    return env


@pytest.fixture
def git_env(tmp_path: Path) -> dict[str, str]:
    """Environment for git that ignores the user's global and system config."""
    if shutil.which("git") is None:
        pytest.skip("git not available")
    return _isolated_git_env(tmp_path)


@pytest.fixture
def seed_remote(tmp_path: Path, git_env: dict[str, str]) -> Callable[[dict[str, str]], GitRemote]:
    """Create a bare remote whose ``master`` holds the given files."""

    def factory(files: dict[str, str]) -> GitRemote:
        bare = tmp_path / "remote.git"
        work = tmp_path / "seed"
        work.mkdir()

        def git(*args: str, cwd: Path = work) -> None:
            subprocess.run(["git", *args], cwd=cwd, env=git_env, capture_output=True, check=True)

        git("init", "--bare", str(bare), cwd=tmp_path)
        git("init")
        git("symbolic-ref", "HEAD", "refs/heads/master")
        for rel, content in files.items():
            target = work / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        git("add", "-A")
        git(
            "-c",
            f"user.name={SEED_IDENTITY.name}",
            "-c",
            f"user.email={SEED_IDENTITY.email}",
            "commit",
            "-m",
            "seed",
        )
        git("push", str(bare), "refs/heads/master:refs/heads/master")
        return GitRemote(bare=bare, env=git_env)

    return factory
