"""Match and step outcome variants.

A `MatchOutcome` describes how a step was resolved against the step
registry. A `StepOutcome` describes what happened when the step was
executed, and is what the output sink receives for every step.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

from loco_cucumber.models import SchemaModel

if TYPE_CHECKING:
    from .features import Step

#: Exact handlers receive the scenario state and the step.
type ExactHandler = Callable[[Any, 'Step'], Any]

#: Pattern handlers additionally receive the captured groups,
#: where index 0 is the whole match.
type PatternHandler = Callable[[Any, list[str], 'Step'], Any]


class ExactMatch(SchemaModel):
    """Step resolved by its literal text."""

    kind: Literal['exact'] = 'exact'
    handler: Callable[..., Any]

    def invoke(self, state: Any, step: 'Step') -> Any:  # noqa: ANN401
        """Call the handler for a step."""
        return self.handler(state, step)


class PatternMatch(SchemaModel):
    """Step resolved by a regular expression."""

    kind: Literal['pattern'] = 'pattern'
    handler: Callable[..., Any]
    captured: tuple[str, ...]

    def invoke(self, state: Any, step: 'Step') -> Any:  # noqa: ANN401
        """Call the handler with the captured groups."""
        return self.handler(state, list(self.captured), step)


class NoMatch(SchemaModel):
    """No handler is registered for a step."""

    kind: Literal['none'] = 'none'


type MatchOutcome = ExactMatch | PatternMatch | NoMatch


class Passed(SchemaModel):
    """The handler returned normally."""

    status: Literal['passed'] = 'passed'


class Failed(SchemaModel):
    """The handler raised an exception.

    Carries the failure message, the Python source location where the
    exception was raised, and the console output captured while the
    handler was running.
    """

    status: Literal['failed'] = 'failed'

    message: str
    location: str | None = None

    stdout: bytes = b''
    stderr: bytes = b''


class Skipped(SchemaModel):
    """The step was skipped, explicitly or by the skip cascade."""

    status: Literal['skipped'] = 'skipped'


class Unimplemented(SchemaModel):
    """No handler matched the step."""

    status: Literal['unimplemented'] = 'unimplemented'


type StepOutcome = Passed | Failed | Skipped | Unimplemented
