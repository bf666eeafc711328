"""One-way state machine runner.

Each handler performs exactly one transition and either advances to a new
state or finishes. The first error stops the machine; earlier transitions are
never undone.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from relforge.core.result import Err, Ok, Result
from relforge.release.errors import ReleaseError

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class StepAdvance(Generic[S]):
    state: S


@dataclass(frozen=True, slots=True)
class StepFinish:
    pass


@dataclass(frozen=True, slots=True)
class StepFailure(Generic[S]):
    """The state the machine was in when a handler failed, plus the error."""

    state: S
    error: ReleaseError


StepOutcome = StepAdvance[S] | StepFinish
StepHandler = Callable[[S], Result[StepOutcome[S], ReleaseError]]
OnTransition = Callable[[S, S], None]
GetStep = Callable[[S], str]


FINISH = StepFinish()


def advance(state: S) -> StepAdvance[S]:
    return StepAdvance(state=state)


def run_state_machine(
    *,
    initial_state: S,
    get_step: GetStep[S],
    handlers: Mapping[str, StepHandler[S]],
    on_transition: OnTransition[S] | None = None,
) -> Result[S, StepFailure[S]]:
    """Drive ``initial_state`` through ``handlers`` until one finishes or fails.

    Returns:
        Ok(final_state) when a handler returns FINISH
        Err(StepFailure) with the last reached state and the originating error
    """
    current = initial_state

    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            return Err(
                StepFailure(
                    state=current,
                    error=ReleaseError(kind="config", message=f"unknown release step: {step}"),
                )
            )

        outcome = handler(current)
        if isinstance(outcome, Err):
            return Err(StepFailure(state=current, error=outcome.error))

        if isinstance(outcome.value, StepFinish):
            return Ok(current)

        previous, current = current, outcome.value.state
        if on_transition is not None:
            on_transition(previous, current)
