"""Console output renderer.

Prints features, rules, scenarios and step results as they are reported,
with failure details (message, location, failing step, captured output)
and a final summary of scenario and step counts.
"""

from collections import Counter
from os import linesep
from typing import TYPE_CHECKING

from click import echo, style

from loco_cucumber.errors import ErrorContext, ErrorFormatter
from loco_cucumber.schema import Failed, Passed, Skipped, Unimplemented

from .base import OutputVisitor

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path
    from typing import TextIO

    from loco_cucumber.errors import FeatureParseError
    from loco_cucumber.schema import Feature, Rule, Scenario, Step, StepOutcome

INDENT = '  '

#: Symbol and color used to render each step outcome.
RESULT_STYLES: dict[type, tuple[str, str]] = {
    Passed: ('✔', 'green'),
    Failed: ('✘', 'red'),
    Skipped: ('-', 'cyan'),
    Unimplemented: ('?', 'yellow'),
}


class DefaultOutput(OutputVisitor):
    """Human-readable console output.

    Attributes:
        file: Stream receiving the output, standard output by default.
        color: Force (`True`) or disable (`False`) ANSI styling;
            `None` lets click decide from the stream.
        scenarios: Scenario counts by status.
        steps: Step counts by status.
    """

    def __init__(self, file: 'TextIO | None' = None, color: bool | None = None) -> None:
        """Initialize the renderer."""
        self.file = file
        self.color = color

        self.features = 0
        self.parse_errors = 0
        self.scenarios: Counter[str] = Counter()
        self.steps: Counter[str] = Counter()

        self._depth = 0
        self._path: 'Path | None' = None
        self._status = 'passed'

    def echo(self, message: str = '', **styles: 'str | bool') -> None:
        """Write a line, styled with click."""
        echo(style(message, **styles) if styles else message, file=self.file, color=self.color)  # type: ignore[arg-type]

    def visit_feature(self, feature: 'Feature', path: 'Path') -> None:
        """Print the feature header."""
        self.features += 1
        self._depth = 1
        self._path = path

        self.echo(style(f'Feature: {feature.name}', bold=True) + style(f'  # {path}', dim=True))

    def visit_feature_end(self, feature: 'Feature') -> None:  # noqa: ARG002
        """Separate features by a blank line."""
        self.echo()

    def visit_feature_error(self, path: 'Path', error: 'FeatureParseError') -> None:
        """Print a parse failure."""
        self.parse_errors += 1

        self.echo(f'Failed to parse {path}', fg='red', bold=True)
        self.echo(f'{error}', fg='red')
        self.echo()

    def visit_rule(self, rule: 'Rule') -> None:
        """Print the rule header and indent its scenarios."""
        self.echo(f'{INDENT}Rule: {rule.name}', bold=True)
        self._depth = 2

    def visit_rule_end(self, rule: 'Rule') -> None:  # noqa: ARG002
        """Restore the feature-level indentation."""
        self._depth = 1

    def visit_scenario(self, rule: 'Rule | None', scenario: 'Scenario') -> None:  # noqa: ARG002
        """Print the scenario header."""
        self._status = 'passed'

        self.echo(f'{INDENT * self._depth}{scenario.keyword}: {scenario.name}', bold=True)

    def visit_scenario_skipped(self, rule: 'Rule | None', scenario: 'Scenario') -> None:  # noqa: ARG002
        """Mark the scenario as skipped unless it already failed."""
        if self._status != 'failed':
            self._status = 'skipped'

    def visit_scenario_end(self, rule: 'Rule | None', scenario: 'Scenario',  # noqa: ARG002
                           example: 'Sequence[str] | None') -> None:
        """Print the example row, if any, and count the scenario."""
        if example is not None:
            cells = ' | '.join(example)
            self.echo(f'{INDENT * (self._depth + 1)}Example: | {cells} |', dim=True)

        self.scenarios[self._status] += 1

    def visit_step_result(self, rule: 'Rule | None', scenario: 'Scenario',  # noqa: ARG002
                          step: 'Step', result: 'StepOutcome') -> None:
        """Print a step line and failure details."""
        self.steps[result.status] += 1
        if isinstance(result, Failed):
            self._status = result.status

        symbol, color = RESULT_STYLES[type(result)]
        self.echo(f'{INDENT * (self._depth + 1)}{symbol} {step}', fg=color)

        if isinstance(result, Failed):
            self.echo(self.format_failure(step, result, self._path), fg='red')

    def visit_finish(self) -> None:
        """Print the run summary."""
        self.echo(self.summary(), bold=True)

    @staticmethod
    def format_failure(step: 'Step', result: Failed, path: 'Path | None' = None) -> str:
        """Render a failed step with its location and captured output."""
        element: dict[str, object] = {'step': f'{step}'}
        if step.table is not None:
            element['table'] = [list(row) for row in step.table.rows]
        if step.docstring is not None:
            element['docstring'] = step.docstring

        error_context = ErrorContext(
            filename=f'{path}' if path is not None else None,
            origin=result.location,
            stdout=result.stdout,
            stderr=result.stderr,
            element=element,
        )
        if step.location is not None:
            error_context['line_num'] = step.location.line

        return ErrorFormatter.format(f'{INDENT * 2}{result.message}', error_context)

    def summary(self) -> str:
        """Scenario and step counts of the run."""
        def counts(counter: 'Counter[str]') -> str:
            total = sum(counter.values())
            parts = ', '.join(
                f'{counter[status]} {status}'
                for status in ('passed', 'failed', 'skipped', 'unimplemented')
                if counter[status]
            )
            return f'{total} ({parts})' if parts else f'{total}'

        lines = [
            f'{self.features} features',
            f'{counts(self.scenarios)} scenarios',
            f'{counts(self.steps)} steps',
        ]
        if self.parse_errors:
            lines.append(f'{self.parse_errors} parse errors')

        return linesep.join(lines)
