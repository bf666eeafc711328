"""Ok/Err values returned by every release step.

Steps never raise for expected failures (bad input file, rejected push);
they hand back ``Err`` and the orchestrator decides what stops the run::

    match bump_version_code(path, pattern=..., template=..., renderer=...):
        case Ok(bump):
            console.success(f"version code {bump.old} -> {bump.new}")
        case Err(error):
            console.error(error.pretty())
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def map_err(self, f: Callable[..., F]) -> Ok[T]:
        return self


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Translate the error, e.g. a ``GitError`` into a ``ReleaseError``."""
        return Err(f(self.error))


Result = Union[Ok[T], Err[E]]
