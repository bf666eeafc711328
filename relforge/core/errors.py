"""Process exit codes.

A release run is all-or-nothing: any fatal error at any stage exits with
``FATAL``. ``USAGE`` mirrors the code typer/click use for bad arguments.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. Values are stable."""

    OK = 0
    FATAL = 1
    USAGE = 2

    def __str__(self) -> str:
        return self.name.lower()
