"""Typed release configuration.

Configuration comes from CI step inputs (environment variables) and,
optionally, a ``relforge.toml`` file with a ``[release]`` table. Environment
variables win over the file. Every required setting must be present before
any repository mutation happens.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import Table, as_table, lookup_str

__all__ = [
    "ConfigError",
    "Credentials",
    "HttpCredentials",
    "Identity",
    "ReleaseConfig",
    "SshCredentials",
    "load_config",
]

DEFAULT_REMOTE = "origin"
DEFAULT_IDENTITY_NAME = "Bitrise"
DEFAULT_IDENTITY_EMAIL = "bitrise@bitrise.io"
DEFAULT_VERSION_COMMIT_MESSAGE = "[skip ci] Update Version Code"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration is missing or invalid."""

    message: str
    key: str | None = None
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class _Setting:
    """One configuration key: TOML name, environment name, and parsing flags."""

    name: str
    env: str
    required: bool = True
    # Templates, regexes and the suffix are whitespace sensitive.
    raw: bool = False
    allow_empty: bool = False


_SETTINGS: tuple[_Setting, ...] = (
    _Setting("source_dir", "BITRISE_SOURCE_DIR"),
    _Setting("clone_url", "git_repo_url"),
    _Setting("ssh_key_path", "ssh_key_save_path", required=False),
    _Setting("http_username", "git_http_username", required=False),
    _Setting("http_access_token", "git_http_access_token", required=False),
    _Setting("version_code_file", "version_code_file"),
    _Setting("version_code_regex", "version_code_regex", raw=True),
    _Setting("version_code_template", "version_code_template", raw=True),
    _Setting("tag_file", "tag_file"),
    _Setting("tag_file_template", "tag_file_template", raw=True),
    _Setting("tag_name_suffix", "tag_name_suffix", raw=True, allow_empty=True),
    _Setting("release_branch_template", "release_branch_template", raw=True),
    _Setting("trunk_branch", "trunk_branch"),
    _Setting("remote", "git_remote", required=False),
    _Setting("committer_name", "committer_name", required=False),
    _Setting("committer_email", "committer_email", required=False),
    _Setting("version_commit_message", "version_commit_message", required=False),
)


@dataclass(frozen=True, slots=True)
class SshCredentials:
    """Private key used through ``GIT_SSH_COMMAND``."""

    key_path: Path


@dataclass(frozen=True, slots=True)
class HttpCredentials:
    """HTTP basic auth material (username + access token)."""

    username: str
    token: str = field(repr=False)


Credentials = SshCredentials | HttpCredentials


@dataclass(frozen=True, slots=True)
class Identity:
    """Author/committer identity used for every commit relforge records."""

    name: str = DEFAULT_IDENTITY_NAME
    email: str = DEFAULT_IDENTITY_EMAIL

    def signature(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Everything a release run needs. Passed explicitly to every component."""

    source_dir: Path
    clone_url: str
    credentials: Credentials
    version_code_file: str
    version_code_regex: str
    version_code_template: str
    tag_file: str
    tag_file_template: str
    tag_name_suffix: str
    release_branch_template: str
    trunk_branch: str
    remote: str = DEFAULT_REMOTE
    identity: Identity = field(default_factory=Identity)
    version_commit_message: str = DEFAULT_VERSION_COMMIT_MESSAGE

    @property
    def version_code_path(self) -> Path:
        return _join_source(self.source_dir, self.version_code_file)

    @property
    def tag_file_path(self) -> Path:
        return _join_source(self.source_dir, self.tag_file)

    def describe(self) -> list[tuple[str, str]]:
        """Key/value pairs for display. Secrets are masked."""
        match self.credentials:
            case SshCredentials(key_path=key_path):
                auth = f"ssh key {key_path}"
            case HttpCredentials(username=username):
                auth = f"http basic ({username}, token ****)"
        return [
            ("source_dir", str(self.source_dir)),
            ("clone_url", self.clone_url),
            ("auth", auth),
            ("remote", self.remote),
            ("trunk_branch", self.trunk_branch),
            ("version_code_file", self.version_code_file),
            ("version_code_regex", self.version_code_regex),
            ("version_code_template", self.version_code_template),
            ("tag_file", self.tag_file),
            ("tag_file_template", self.tag_file_template),
            ("tag_name_suffix", repr(self.tag_name_suffix)),
            ("release_branch_template", self.release_branch_template),
            ("identity", self.identity.signature()),
            ("version_commit_message", self.version_commit_message),
        ]


def _join_source(source_dir: Path, relative: str) -> Path:
    # CI inputs are often written as "/app/build.gradle" meaning "inside the checkout".
    return source_dir / relative.lstrip("/")


def _is_http_url(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def _parse_toml(path: Path) -> Result[Table, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_table(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    table = as_table(data.get("release"))
    if table is None:
        return Err(ConfigError("Missing [release] table", path=path))
    return Ok(table)


def _collect(
    environ: Mapping[str, str], file_values: Mapping[str, object]
) -> Result[dict[str, str], ConfigError]:
    values: dict[str, str] = {}
    for setting in _SETTINGS:
        sources: list[Mapping[str, object]] = [
            {setting.name: environ[setting.env]} if setting.env in environ else {},
            file_values,
        ]
        for source in sources:
            value = lookup_str(source, setting.name, strip=not setting.raw)
            if value is None:
                continue
            if value == "" and not setting.allow_empty:
                continue
            values[setting.name] = value
            break

        if setting.required and setting.name not in values:
            return Err(
                ConfigError(
                    f"missing required setting: {setting.env} ({setting.name})",
                    key=setting.name,
                )
            )
    return Ok(values)


def _credentials(values: Mapping[str, str]) -> Result[Credentials, ConfigError]:
    if _is_http_url(values["clone_url"]):
        username = values.get("http_username")
        token = values.get("http_access_token")
        if username is None or token is None:
            return Err(
                ConfigError(
                    "http clone URL requires git_http_username and git_http_access_token",
                    key="http_access_token" if username else "http_username",
                )
            )
        return Ok(HttpCredentials(username=username, token=token))

    key = values.get("ssh_key_path")
    if key is None:
        return Err(
            ConfigError("ssh clone URL requires ssh_key_save_path", key="ssh_key_path")
        )
    key_path = Path(key).expanduser()
    if not key_path.is_file():
        return Err(ConfigError(f"ssh key not found: {key_path}", key="ssh_key_path"))
    return Ok(SshCredentials(key_path=key_path))


def load_config(
    environ: Mapping[str, str], *, file: Path | None = None
) -> Result[ReleaseConfig, ConfigError]:
    """Build a ReleaseConfig from environment variables and an optional TOML file.

    Args:
        environ: Environment mapping (usually ``os.environ``).
        file: Optional TOML file with a ``[release]`` table.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) naming the first bad setting.
    """
    file_values: Table = {}
    if file is not None:
        parsed = _parse_toml(file)
        if isinstance(parsed, Err):
            return parsed
        file_values = parsed.value

    collected = _collect(environ, file_values)
    if isinstance(collected, Err):
        return collected
    values = collected.value

    try:
        re.compile(values["version_code_regex"])
    except re.error as e:
        return Err(ConfigError(f"invalid version_code_regex: {e}", key="version_code_regex"))

    credentials = _credentials(values)
    if isinstance(credentials, Err):
        return credentials

    return Ok(
        ReleaseConfig(
            source_dir=Path(values["source_dir"]).expanduser(),
            clone_url=values["clone_url"],
            credentials=credentials.value,
            version_code_file=values["version_code_file"],
            version_code_regex=values["version_code_regex"],
            version_code_template=values["version_code_template"],
            tag_file=values["tag_file"],
            tag_file_template=values["tag_file_template"],
            tag_name_suffix=values["tag_name_suffix"],
            release_branch_template=values["release_branch_template"],
            trunk_branch=values["trunk_branch"],
            remote=values.get("remote", DEFAULT_REMOTE),
            identity=Identity(
                name=values.get("committer_name", DEFAULT_IDENTITY_NAME),
                email=values.get("committer_email", DEFAULT_IDENTITY_EMAIL),
            ),
            version_commit_message=values.get(
                "version_commit_message", DEFAULT_VERSION_COMMIT_MESSAGE
            ),
        )
    )
