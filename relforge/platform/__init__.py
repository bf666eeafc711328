"""Platform abstraction layer: processes and files."""

from .files import atomic_write_text, read_lines, write_lines
from .process import NOT_STARTED, ProcessError, redact_url, run

__all__ = [
    # files
    "atomic_write_text",
    "read_lines",
    "write_lines",
    # process
    "NOT_STARTED",
    "ProcessError",
    "redact_url",
    "run",
]
