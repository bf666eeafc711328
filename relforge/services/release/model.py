from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class SemverEntry:
    """MAJOR.MINOR.PATCH from the first active line of the tag file.

    Templates see it as ``.Major``, ``.Minor``, ``.Patch``.
    """

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, slots=True)
class VersionCodeBump:
    """Planned (or applied) rewrite of the version code line."""

    line_index: int
    old: int
    new: int
    old_line: str
    new_line: str
    lines: tuple[str, ...]
    # Indexes of further lines that also matched; left untouched.
    extra_matches: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class TagFileBump:
    """Planned (or applied) rewrite of the tag file's semver line."""

    line_index: int
    entry: SemverEntry
    old_line: str
    new_line: str
    lines: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TagReport:
    created: tuple[str, ...] = ()
    # Already present locally; skipped at creation, still pushed.
    existing: tuple[str, ...] = ()
    pushed: tuple[str, ...] = ()
    up_to_date: tuple[str, ...] = ()

    @property
    def tags(self) -> tuple[str, ...]:
        return self.pushed + self.up_to_date
