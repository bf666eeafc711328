"""Tests for relforge.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relforge.core.config import (
    ConfigError,
    HttpCredentials,
    Identity,
    SshCredentials,
    load_config,
)
from relforge.core.errors import ErrorCode
from relforge.core.result import Err, Ok


@pytest.fixture
def ssh_key(tmp_path: Path) -> Path:
    key = tmp_path / "id_ed25519"
    key.write_text("key\n", encoding="utf-8")
    return key


@pytest.fixture
def environ(tmp_path: Path, ssh_key: Path) -> dict[str, str]:
    return {
        "BITRISE_SOURCE_DIR": str(tmp_path / "src"),
        "git_repo_url": "git@github.com:acme/app.git",
        "ssh_key_save_path": str(ssh_key),
        "version_code_file": "/app/build.gradle",
        "version_code_regex": r"versionCode [0-9]+",
        "version_code_template": "{{add . 1}}",
        "tag_file": "tags.txt",
        "tag_file_template": "{{.Major}}.{{.Minor}}.{{inc .Patch}}",
        "tag_name_suffix": "-rc1",
        "release_branch_template": "release/{{.Year}}-w{{Week .}}",
        "trunk_branch": "master",
    }


class TestLoadFromEnvironment:
    def test_complete_environment(self, environ: dict[str, str], ssh_key: Path, tmp_path: Path) -> None:
        result = load_config(environ)

        assert isinstance(result, Ok)
        config = result.value
        assert config.source_dir == tmp_path / "src"
        assert config.credentials == SshCredentials(key_path=ssh_key)
        assert config.trunk_branch == "master"
        assert config.tag_name_suffix == "-rc1"

    def test_defaults(self, environ: dict[str, str]) -> None:
        result = load_config(environ)

        assert isinstance(result, Ok)
        config = result.value
        assert config.remote == "origin"
        assert config.identity == Identity("Bitrise", "bitrise@bitrise.io")
        assert config.version_commit_message == "[skip ci] Update Version Code"

    def test_optional_overrides(self, environ: dict[str, str]) -> None:
        environ |= {
            "git_remote": "upstream",
            "committer_name": "Release Bot",
            "committer_email": "bot@example.com",
            "version_commit_message": "chore: bump",
        }
        result = load_config(environ)

        assert isinstance(result, Ok)
        config = result.value
        assert config.remote == "upstream"
        assert config.identity.signature() == "Release Bot <bot@example.com>"
        assert config.version_commit_message == "chore: bump"

    def test_tracked_paths_are_inside_source_dir(self, environ: dict[str, str], tmp_path: Path) -> None:
        result = load_config(environ)

        assert isinstance(result, Ok)
        assert result.value.version_code_path == tmp_path / "src" / "app" / "build.gradle"
        assert result.value.tag_file_path == tmp_path / "src" / "tags.txt"

    @pytest.mark.parametrize(
        "env_name, key",
        [
            ("BITRISE_SOURCE_DIR", "source_dir"),
            ("git_repo_url", "clone_url"),
            ("version_code_regex", "version_code_regex"),
            ("tag_name_suffix", "tag_name_suffix"),
            ("trunk_branch", "trunk_branch"),
        ],
    )
    def test_missing_required_setting(self, environ: dict[str, str], env_name: str, key: str) -> None:
        del environ[env_name]

        result = load_config(environ)

        assert isinstance(result, Err)
        assert result.error.key == key
        assert env_name in result.error.message

    def test_blank_required_setting_is_missing(self, environ: dict[str, str]) -> None:
        environ["trunk_branch"] = "   "

        result = load_config(environ)

        assert isinstance(result, Err)
        assert result.error.key == "trunk_branch"

    def test_empty_suffix_is_allowed(self, environ: dict[str, str]) -> None:
        environ["tag_name_suffix"] = ""

        result = load_config(environ)

        assert isinstance(result, Ok)
        assert result.value.tag_name_suffix == ""

    def test_templates_are_not_stripped(self, environ: dict[str, str]) -> None:
        environ["version_code_template"] = " {{add . 1}} "

        result = load_config(environ)

        assert isinstance(result, Ok)
        assert result.value.version_code_template == " {{add . 1}} "

    def test_invalid_regex(self, environ: dict[str, str]) -> None:
        environ["version_code_regex"] = "versionCode ("

        result = load_config(environ)

        assert isinstance(result, Err)
        assert result.error.key == "version_code_regex"


class TestCredentials:
    def test_ssh_key_must_exist(self, environ: dict[str, str], tmp_path: Path) -> None:
        environ["ssh_key_save_path"] = str(tmp_path / "missing")

        result = load_config(environ)

        assert isinstance(result, Err)
        assert result.error.key == "ssh_key_path"
        assert "not found" in result.error.message

    def test_ssh_url_requires_key(self, environ: dict[str, str]) -> None:
        del environ["ssh_key_save_path"]

        result = load_config(environ)

        assert isinstance(result, Err)
        assert result.error.key == "ssh_key_path"

    def test_http_url_uses_basic_auth(self, environ: dict[str, str]) -> None:
        del environ["ssh_key_save_path"]
        environ |= {
            "git_repo_url": "https://github.com/acme/app.git",
            "git_http_username": "ci",
            "git_http_access_token": "s3cret",
        }

        result = load_config(environ)

        assert isinstance(result, Ok)
        assert result.value.credentials == HttpCredentials(username="ci", token="s3cret")

    def test_http_url_requires_token(self, environ: dict[str, str]) -> None:
        environ |= {
            "git_repo_url": "https://github.com/acme/app.git",
            "git_http_username": "ci",
        }

        result = load_config(environ)

        assert isinstance(result, Err)
        assert result.error.key == "http_access_token"

    def test_token_is_never_displayed(self, environ: dict[str, str]) -> None:
        environ |= {
            "git_repo_url": "https://github.com/acme/app.git",
            "git_http_username": "ci",
            "git_http_access_token": "s3cret",
        }

        result = load_config(environ)

        assert isinstance(result, Ok)
        assert "s3cret" not in repr(result.value)
        assert all("s3cret" not in value for _, value in result.value.describe())


class TestLoadFromFile:
    def test_file_supplies_missing_settings(self, environ: dict[str, str], tmp_path: Path) -> None:
        del environ["trunk_branch"]
        del environ["tag_name_suffix"]
        config_file = tmp_path / "relforge.toml"
        config_file.write_text(
            '[release]\ntrunk_branch = "develop"\ntag_name_suffix = ""\n',
            encoding="utf-8",
        )

        result = load_config(environ, file=config_file)

        assert isinstance(result, Ok)
        assert result.value.trunk_branch == "develop"
        assert result.value.tag_name_suffix == ""

    def test_environment_wins_over_file(self, environ: dict[str, str], tmp_path: Path) -> None:
        config_file = tmp_path / "relforge.toml"
        config_file.write_text('[release]\ntrunk_branch = "develop"\n', encoding="utf-8")

        result = load_config(environ, file=config_file)

        assert isinstance(result, Ok)
        assert result.value.trunk_branch == "master"

    def test_missing_file(self, environ: dict[str, str], tmp_path: Path) -> None:
        missing = tmp_path / "nope.toml"

        result = load_config(environ, file=missing)

        assert isinstance(result, Err)
        assert result.error.path == missing
        assert "not found" in result.error.message

    def test_invalid_toml(self, environ: dict[str, str], tmp_path: Path) -> None:
        config_file = tmp_path / "relforge.toml"
        config_file.write_text("[release\n", encoding="utf-8")

        result = load_config(environ, file=config_file)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_release_table_required(self, environ: dict[str, str], tmp_path: Path) -> None:
        config_file = tmp_path / "relforge.toml"
        config_file.write_text('trunk_branch = "develop"\n', encoding="utf-8")

        result = load_config(environ, file=config_file)

        assert isinstance(result, Err)
        assert result.error == ConfigError("Missing [release] table", path=config_file)


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert int(ErrorCode.OK) == 0
        assert int(ErrorCode.FATAL) == 1
        assert int(ErrorCode.USAGE) == 2

    def test_str(self) -> None:
        assert str(ErrorCode.FATAL) == "fatal"
