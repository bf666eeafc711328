"""Release bounded context: shared error taxonomy."""

from __future__ import annotations

from relforge.release.errors import ReleaseError, ReleaseErrorKind

__all__ = ["ReleaseError", "ReleaseErrorKind"]
