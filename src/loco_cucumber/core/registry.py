"""Step registry and step matcher.

A `Steps` registry holds user step handlers in six bags: one bag of
exact (literal text) handlers and one bag of pattern (regular
expression) handlers for each step role.

Registries are built once before a run, may be combined (later
registries override earlier ones on identical keys), and are read-only
while scenarios execute.

Resolution order is fixed:
- an exact handler registered for the step text always wins;
- otherwise the first pattern, in registration order, that matches
  anywhere in the step text is used.
"""

from collections.abc import Callable, Iterable, Iterator
from functools import wraps
from logging import getLogger
from re import Pattern, error as RegexError  # noqa: N812
from re import compile as regexp
from typing import TYPE_CHECKING, Any, Literal

from loco_cucumber.errors import ConfigError
from loco_cucumber.models import SchemaModel
from loco_cucumber.names import StepRole
from loco_cucumber.schema import ExactMatch, NoMatch, PatternMatch

if TYPE_CHECKING:
    from loco_cucumber.schema import ExactHandler, MatchOutcome, PatternHandler, Step

logger = getLogger(__name__)

#: Kind of a registered handler, as reported by `Steps.describe`.
type HandlerKind = Literal['exact', 'pattern']

#: Converter applied to a captured group of a typed pattern handler.
type Converter = Callable[[str], Any]


class PatternStep(SchemaModel):
    """A pattern handler together with its compiled expression.

    The source text is the identity of the entry: two registrations
    with the same source text refer to the same bag slot.
    """

    source: str
    pattern: Pattern[str]
    handler: Callable[..., Any]


def typed(handler: Callable[..., Any], types: tuple['Converter', ...]) -> 'PatternHandler':
    """Wrap a handler taking converted arguments into a pattern handler.

    The resulting handler converts captures 1..N with the given
    converters in order and calls `handler(state, *values, step)`.

    Args:
        handler: Function accepting the state, one argument per
            converter, and the step.
        types: Converters applied to the captured groups.

    Returns:
        Pattern handler suitable for `Steps.register_pattern`.
    """
    @wraps(handler)
    def runner(state: Any, matches: list[str], step: 'Step') -> Any:  # noqa: ANN401
        arguments = []
        for index, converter in enumerate(types, start=1):
            if index >= len(matches):
                raise ValueError(
                    f'Missing argument {index} for type '
                    f'{getattr(converter, '__name__', converter)!s}',
                )
            value = matches[index]
            try:
                arguments.append(converter(value))
            except (TypeError, ValueError) as base:
                raise ValueError(
                    f'Failed to parse argument {index} {value!r} to type '
                    f'{getattr(converter, '__name__', converter)!s}',
                ) from base

        return handler(state, *arguments, step)

    return runner


class Steps[W]:
    """Registry of step handlers for a state type `W`.

    Handlers are registered either through the explicit
    `register_exact` / `register_pattern` methods or through the
    `given`, `when` and `then` decorators.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self.exact: dict[StepRole, dict[str, ExactHandler]] = {
            role: {} for role in StepRole
        }
        self.patterns: dict[StepRole, dict[str, PatternStep]] = {
            role: {} for role in StepRole
        }

    def register_exact(self, role: StepRole, text: str, handler: 'ExactHandler') -> None:
        """Register a handler for a literal step text.

        Args:
            role: Step role the handler applies to.
            text: Exact step text.
            handler: Callable receiving the state and the step.
        """
        logger.debug('Registering %s step %r', role, text)
        self.exact[StepRole(role)][text] = handler

    def register_pattern(self, role: StepRole, source: str, handler: 'PatternHandler') -> None:
        """Register a handler for steps matching a regular expression.

        Args:
            role: Step role the handler applies to.
            source: Regular expression source text.
            handler: Callable receiving the state, the captured groups
                and the step.

        Raises:
            ConfigError: If the source is not a valid regular expression.
        """
        try:
            pattern = regexp(source)

        except RegexError as base:
            raise ConfigError(f'{source!r} is not a valid regular expression: {base}') from base

        logger.debug('Registering %s pattern %r', role, source)
        self.patterns[StepRole(role)][source] = PatternStep(
            source=source,
            pattern=pattern,
            handler=handler,
        )

    def step(self, role: StepRole, text: str, *, regex: bool = False,
             types: Iterable['Converter'] | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Build a decorator registering the decorated function.

        Args:
            role: Step role the handler applies to.
            text: Step text, or a regular expression if `regex` is set.
            regex: Whether `text` is a regular expression.
            types: Converters for captured groups. Implies `regex`.
                The decorated function then receives converted values
                instead of the list of captures.

        Returns:
            Decorator returning the function unchanged.

        Raises:
            ConfigError: If a regular expression is invalid.
        """
        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            if types is not None:
                self.register_pattern(role, text, typed(handler, tuple(types)))
            elif regex:
                self.register_pattern(role, text, handler)
            else:
                self.register_exact(role, text, handler)
            return handler

        return decorator

    def given(self, text: str, *, regex: bool = False,
              types: Iterable['Converter'] | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a `Given` step handler. See `step`."""
        return self.step(StepRole.GIVEN, text, regex=regex, types=types)

    def when(self, text: str, *, regex: bool = False,
             types: Iterable['Converter'] | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a `When` step handler. See `step`."""
        return self.step(StepRole.WHEN, text, regex=regex, types=types)

    def then(self, text: str, *, regex: bool = False,
             types: Iterable['Converter'] | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a `Then` step handler. See `step`."""
        return self.step(StepRole.THEN, text, regex=regex, types=types)

    @classmethod
    def combine(cls, registries: Iterable['Steps[W]']) -> 'Steps[W]':
        """Merge registries into a new one.

        Bags are merged pairwise in sequence order; on identical keys
        the later registry wins.

        Args:
            registries: Registries to merge.

        Returns:
            A new registry containing every handler.
        """
        combined: Steps[W] = cls()

        for registry in registries:
            for role in StepRole:
                combined.exact[role].update(registry.exact[role])
                combined.patterns[role].update(registry.patterns[role])

        return combined

    def resolve(self, step: 'Step') -> 'MatchOutcome':
        """Resolve a step to its handler.

        Args:
            step: Step to resolve.

        Returns:
            `ExactMatch` if the step text is registered literally,
            `PatternMatch` for the first matching pattern (captures
            start with the whole match, groups that did not participate
            are empty strings), `NoMatch` otherwise.
        """
        if (handler := self.exact[step.role].get(step.text)) is not None:
            return ExactMatch(handler=handler)

        for entry in self.patterns[step.role].values():
            if match := entry.pattern.search(step.text):
                logger.debug('Step %r matched pattern %r', step.text, entry.source)
                return PatternMatch(
                    handler=entry.handler,
                    captured=(match.group(0), *match.groups(default='')),
                )

        logger.debug('No handler for %s step %r', step.role, step.text)
        return NoMatch()

    def describe(self) -> Iterator[tuple[StepRole, HandlerKind, str]]:
        """Iterate over every registered handler key.

        Yields:
            Tuples of role, handler kind, and literal text or pattern source.
        """
        for role in StepRole:
            for text in self.exact[role]:
                yield role, 'exact', text
            for source in self.patterns[role]:
                yield role, 'pattern', source

    def __len__(self) -> int:
        """Number of registered handlers."""
        return sum(
            len(self.exact[role]) + len(self.patterns[role])
            for role in StepRole
        )
