"""Console output for release runs.

Services report through ``ConsoleProtocol`` and never touch a backend
directly. ``RichConsole`` is used by the CLI; ``MockConsole`` records output
for tests.

Two streams: ``error`` writes to stderr, everything else to stdout. Git
invocations are echoed with ``command`` so a CI log shows exactly what ran.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Styles a message can be printed with."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()
    COMMAND = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Styled progress output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def command(self, text: str) -> None:
        """Echo a command about to run (``$ git push ...``)."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None:
        """Report a failure on stderr."""
        ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


def _theme() -> dict[str, str]:
    return {
        str(Style.SUCCESS): "green",
        str(Style.ERROR): "red bold",
        str(Style.WARNING): "yellow",
        str(Style.INFO): "cyan",
        str(Style.DIM): "dim",
        str(Style.BOLD): "bold",
        str(Style.HEADER): "blue bold",
        str(Style.COMMAND): "dim",
    }


class RichConsole:
    """Console backed by Rich, with a theme keyed by ``Style`` names."""

    def __init__(self, *, out: Console | None = None, err: Console | None = None) -> None:
        # Rich is only needed once something is printed for real.
        from rich.console import Console
        from rich.theme import Theme

        theme = Theme(_theme())
        self._out = out or Console(theme=theme, highlight=False)
        self._err = err or Console(theme=theme, stderr=True, highlight=False)

    def _emit(self, label: str, style: Style, message: str) -> None:
        from rich.text import Text

        line = Text.assemble((label, str(style)), " ", message)
        target = self._err if style is Style.ERROR else self._out
        target.print(line)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if style is Style.DEFAULT:
            self._out.print(message, markup=False)
        else:
            self._out.print(message, style=str(style), markup=False)

    def command(self, text: str) -> None:
        self._out.print(f"$ {text}", style=str(Style.COMMAND), markup=False)

    def success(self, message: str) -> None:
        self._emit("OK", Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._emit("error:", Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._emit("warning:", Style.WARNING, message)

    def info(self, message: str) -> None:
        self._emit("info:", Style.INFO, message)

    def header(self, message: str) -> None:
        self._out.print()
        self._out.print(message, style=str(Style.HEADER), markup=False)

    def newline(self) -> None:
        self._out.print()


@dataclass(frozen=True, slots=True)
class OutputRecord:
    """One captured MockConsole line."""

    message: str
    style: Style


@dataclass
class MockConsole:
    """Captures output in memory for assertions."""

    outputs: list[OutputRecord] = field(default_factory=list)

    def _record(self, message: str, style: Style) -> None:
        self.outputs.append(OutputRecord(message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def command(self, text: str) -> None:
        self._record(f"$ {text}", Style.COMMAND)

    def success(self, message: str) -> None:
        self._record(f"OK {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._record(f"info: {message}", Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    @property
    def commands(self) -> list[str]:
        """Echoed commands, without the ``$ `` prompt."""
        return [o.message.removeprefix("$ ") for o in self.outputs if o.style is Style.COMMAND]

    def has_error(self) -> bool:
        return any(o.style is Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style is Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """All records whose message contains ``substring``."""
        return [o for o in self.outputs if substring in o.message]
