"""Error types for the release bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "config",
    "parse",
    "no_match",
    "format",
    "vcs",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    ``kind`` classifies the failure:

    - config: missing/invalid required setting (raised before any mutation)
    - parse: regex, template, or integer parsing failed
    - no_match: an expected pattern is absent from a tracked file
    - format: a matched line does not hold the expected structure
    - vcs: clone/checkout/commit/branch/tag/push failed
    - io: a tracked file could not be read or written
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
