"""Tests for the version code mutator."""

from __future__ import annotations

from pathlib import Path

import pytest

from relforge.core.result import Err, Ok
from relforge.services.release.version_code import bump_version_code, plan_version_code_bump
from relforge.template.engine import ActionTemplateRenderer

RENDERER = ActionTemplateRenderer()
REGEX = r"versionCode [0-9]+"


def _plan(lines: list[str], *, pattern: str = REGEX, template: str = "{{add . 1}}"):
    return plan_version_code_bump(lines, pattern=pattern, template=template, renderer=RENDERER)


class TestPlan:
    def test_increments_matching_line(self) -> None:
        result = _plan(["android {", "    versionCode 41", "}"])

        assert isinstance(result, Ok)
        bump = result.value
        assert (bump.old, bump.new) == (41, 42)
        assert bump.line_index == 1
        assert bump.new_line == "    versionCode 42"
        assert bump.lines == ("android {", "    versionCode 42", "}")

    def test_only_first_digit_run_is_replaced(self) -> None:
        result = _plan(["versionCode 7 // build 7"])

        assert isinstance(result, Ok)
        assert result.value.new_line == "versionCode 8 // build 7"

    def test_only_first_matching_line_is_changed(self) -> None:
        result = _plan(["versionCode 1", "x", "versionCode 5"])

        assert isinstance(result, Ok)
        assert result.value.lines == ("versionCode 2", "x", "versionCode 5")
        assert result.value.extra_matches == (2,)

    def test_digit_width_may_grow(self) -> None:
        result = _plan(["versionCode 99"])

        assert isinstance(result, Ok)
        assert result.value.new_line == "versionCode 100"

    def test_leading_zeros_are_parsed_as_decimal(self) -> None:
        result = _plan(["versionCode 0099"])

        assert isinstance(result, Ok)
        assert result.value.old == 99
        assert result.value.new_line == "versionCode 100"

    def test_template_with_whitespace_output(self) -> None:
        result = _plan(["versionCode 41"], template=" {{add . 10}}\n")

        assert isinstance(result, Ok)
        assert result.value.new == 51

    def test_no_match(self) -> None:
        result = _plan(["versionName 1.2.3"])

        assert isinstance(result, Err)
        assert result.error.kind == "no_match"

    def test_matching_line_without_digits(self) -> None:
        result = _plan(["versionCode = BUILD"], pattern=r"versionCode")

        assert isinstance(result, Err)
        assert result.error.kind == "parse"

    def test_invalid_regex(self) -> None:
        result = _plan(["versionCode 1"], pattern="versionCode (")

        assert isinstance(result, Err)
        assert result.error.kind == "parse"

    @pytest.mark.parametrize("template", ["{{add .}}", "v{{.}}", "{{sub . 100}}"])
    def test_bad_template_output(self, template: str) -> None:
        result = _plan(["versionCode 41"], template=template)

        assert isinstance(result, Err)
        assert result.error.kind == "parse"


class TestBump:
    def test_rewrites_file(self, tmp_path: Path) -> None:
        target = tmp_path / "build.gradle"
        target.write_text("versionCode 41\n", encoding="utf-8")

        result = bump_version_code(target, pattern=REGEX, template="{{add . 1}}", renderer=RENDERER)

        assert isinstance(result, Ok)
        assert target.read_text(encoding="utf-8") == "versionCode 42\n"

    def test_other_lines_untouched(self, tmp_path: Path) -> None:
        target = tmp_path / "build.gradle"
        target.write_text("# versionName 1.0\n\nversionCode 41\nminSdk 21", encoding="utf-8")

        bump_version_code(target, pattern=REGEX, template="{{add . 1}}", renderer=RENDERER)

        assert target.read_text(encoding="utf-8") == "# versionName 1.0\n\nversionCode 42\nminSdk 21\n"

    def test_failure_leaves_file_untouched(self, tmp_path: Path) -> None:
        target = tmp_path / "build.gradle"
        target.write_text("versionCode 41", encoding="utf-8")

        result = bump_version_code(target, pattern=REGEX, template="{{nope .}}", renderer=RENDERER)

        assert isinstance(result, Err)
        assert target.read_text(encoding="utf-8") == "versionCode 41"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = bump_version_code(tmp_path / "nope", pattern=REGEX, template="{{add . 1}}", renderer=RENDERER)

        assert isinstance(result, Err)
        assert result.error.kind == "io"
