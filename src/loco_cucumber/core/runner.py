"""Scenario execution and run orchestration.

This module defines the execution model for parsed features:
- each scenario (or each example row of an outline) runs with a freshly
  constructed state, its feature and rule background steps first;
- every step handler runs inside the isolation boundary, so a failing
  step is reported instead of aborting the run;
- once a step fails, is unimplemented, or asks to be skipped, every
  later step of the scenario is reported as skipped without running.

Everything runs sequentially, in document and table order.
"""

from functools import partial
from itertools import chain
from logging import getLogger
from typing import TYPE_CHECKING

from loco_cucumber.errors import SKIP_MESSAGE, ErrorContext, FeatureParseError, StateConstructionError
from loco_cucumber.output import OutputVisitor
from loco_cucumber.schema import Failed, NoMatch, Passed, Skipped, Unimplemented
from loco_cucumber.settings import RunSettings

from .capture import Err, isolate
from .filters import ScenarioFilter
from .outline import interpolate
from .parser import FeatureParser

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
    from pathlib import Path

    from loco_cucumber.schema import Feature, Rule, Scenario, Step, StepOutcome

    from .filters import Hook
    from .registry import Steps

logger = getLogger(__name__)


class Runner[W]:
    """Executor of features against a step registry.

    Attributes:
        steps: Registry resolving steps to handlers.
        world: Zero-argument factory of the per-scenario state.
        before: Hooks called with the scenario before its state exists.
        after: Hooks called with the scenario after its last step.
        settings: Run settings (filters, output suppression).
        output: Sink receiving progress notifications.
        parser: Feature parser used by `run`.
    """

    def __init__(self, steps: 'Steps[W]', world: 'Callable[[], W]', *,  # noqa: PLR0913
                 before: 'Sequence[Hook]' = (),
                 after: 'Sequence[Hook]' = (),
                 settings: RunSettings | None = None,
                 output: OutputVisitor | None = None,
                 parser: FeatureParser | None = None) -> None:
        """Initialize a runner."""
        self.steps = steps
        self.world = world

        self.before = tuple(before)
        self.after = tuple(after)

        self.settings = settings or RunSettings()
        self.output = output or OutputVisitor()
        self.parser = parser or FeatureParser()

        self.filter = ScenarioFilter(self.settings.tag, self.settings.name)

    def run_step(self, world: W, step: 'Step') -> 'StepOutcome':
        """Resolve and execute a single step.

        Args:
            world: Scenario state passed to the handler.
            step: Concrete step to execute.

        Returns:
            `Unimplemented` if no handler matches, `Passed` if the handler
            returns, `Skipped` if it raised the skip sentinel, `Failed`
            with the failure details and captured output otherwise.
        """
        match = self.steps.resolve(step)
        if isinstance(match, NoMatch):
            return Unimplemented()

        isolated = isolate(
            self.settings.suppress_output,
            partial(match.invoke, world, step),
        )

        outcome = isolated.outcome
        if not isinstance(outcome, Err):
            return Passed()

        if outcome.message == SKIP_MESSAGE:
            return Skipped()

        return Failed(
            message=outcome.message,
            location=outcome.location,
            stdout=isolated.stdout,
            stderr=isolated.stderr,
        )

    def build_world(self, scenario: 'Scenario') -> W:
        """Construct the state of a scenario.

        Raises:
            StateConstructionError: If the state factory fails. This
                error is fatal to the whole run.
        """
        isolated = isolate(self.settings.suppress_output, self.world)

        outcome = isolated.outcome
        if isinstance(outcome, Err):
            logger.error('State construction failed for scenario %r at %s',
                         scenario.name, outcome.location)
            raise StateConstructionError(
                f'Failed to construct the state of scenario {scenario.name!r}: {outcome.message}',
                context=ErrorContext(
                    origin=outcome.location,
                    stdout=isolated.stdout,
                    stderr=isolated.stderr,
                ),
            ) from outcome.error

        return outcome.value

    @staticmethod
    def collect_steps(feature: 'Feature', rule: 'Rule | None',
                      scenario: 'Scenario') -> 'Iterator[Step]':
        """Background steps followed by the scenario steps."""
        return chain(
            feature.background,
            rule.background if rule is not None else (),
            scenario.steps,
        )

    def run_scenario(self, feature: 'Feature', rule: 'Rule | None',
                     scenario: 'Scenario', example: 'Sequence[str] | None' = None) -> bool:
        """Run a scenario, or one example row of an outline.

        Args:
            feature: Feature owning the scenario.
            rule: Rule owning the scenario, if any.
            scenario: Scenario to run.
            example: Example row values for outlines.

        Returns:
            True unless a step failed. Unimplemented and skipped steps
            do not fail a scenario.

        Raises:
            StateConstructionError: If the state cannot be constructed.
        """
        self.output.visit_scenario(rule, scenario)

        for hook in self.before:
            hook(scenario)

        world = self.build_world(scenario)

        is_success = True
        is_skipping = False

        for outline_step in self.collect_steps(feature, rule, scenario):
            step = outline_step
            if example is not None and scenario.examples is not None:
                step = interpolate(outline_step, scenario.examples.header, example)

            self.output.visit_step(rule, scenario, step)

            if is_skipping:
                self.output.visit_step_result(rule, scenario, step, Skipped())
                continue

            result = self.run_step(world, step)
            self.output.visit_step_result(rule, scenario, step, result)

            if isinstance(result, Failed):
                is_success = False
                is_skipping = True

            elif not isinstance(result, Passed):
                is_skipping = True
                self.output.visit_scenario_skipped(rule, scenario)

        for hook in self.after:
            hook(scenario)

        self.output.visit_scenario_end(rule, scenario, example)

        logger.debug('Scenario %r %s', scenario.name, 'passed' if is_success else 'failed')
        return is_success

    def run_scenarios(self, feature: 'Feature', rule: 'Rule | None',
                      scenarios: 'Iterable[Scenario]') -> bool:
        """Run the selected scenarios of a feature or rule.

        Outlines run once per example row, each row with its own state.

        Returns:
            True if every executed scenario and example row succeeded.
        """
        is_success = True

        for scenario in scenarios:
            if not self.filter.includes(scenario):
                logger.debug('Scenario %r is filtered out', scenario.name)
                continue

            if scenario.examples is not None:
                for example in scenario.examples.rows:
                    if not self.run_scenario(feature, rule, scenario, example):
                        is_success = False

            elif not self.run_scenario(feature, rule, scenario):
                is_success = False

        return is_success

    def run_feature(self, feature: 'Feature', path: 'Path') -> bool:
        """Run the top-level scenarios and the rules of a feature."""
        self.output.visit_feature(feature, path)

        is_success = self.run_scenarios(feature, None, feature.scenarios)

        for rule in feature.rules:
            self.output.visit_rule(rule)
            if not self.run_scenarios(feature, rule, rule.scenarios):
                is_success = False
            self.output.visit_rule_end(rule)

        self.output.visit_feature_end(feature)

        return is_success

    def run(self, paths: 'Iterable[Path]') -> bool:
        """Run every feature file.

        Parse failures are reported and fail the run, but the remaining
        files still run.

        Args:
            paths: Sorted feature file paths.

        Returns:
            True if every file parsed and every scenario succeeded.

        Raises:
            StateConstructionError: If a scenario state cannot be built.
            OSError: If a feature file cannot be read.
        """
        self.output.visit_start()

        is_success = True

        for path in paths:
            try:
                feature = self.parser.parse_file(path)

            except FeatureParseError as error:
                logger.warning('Failed to parse %s', path)
                self.output.visit_feature_error(path, error)
                is_success = False
                continue

            if not self.run_feature(feature, path):
                is_success = False

        self.output.visit_finish()

        return is_success
