"""Base output sink."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from loco_cucumber.errors import FeatureParseError
    from loco_cucumber.schema import Feature, Rule, Scenario, Step, StepOutcome


class OutputVisitor:
    """Base output sink ignoring every notification.

    Subclasses override the notifications they are interested in.
    """

    def visit_start(self) -> None:
        """The run starts."""

    def visit_feature(self, feature: 'Feature', path: 'Path') -> None:
        """A feature file was parsed and its scenarios are about to run."""

    def visit_feature_end(self, feature: 'Feature') -> None:
        """Every scenario of a feature has run."""

    def visit_feature_error(self, path: 'Path', error: 'FeatureParseError') -> None:
        """A feature file could not be parsed."""

    def visit_rule(self, rule: 'Rule') -> None:
        """The scenarios of a rule are about to run."""

    def visit_rule_end(self, rule: 'Rule') -> None:
        """Every scenario of a rule has run."""

    def visit_scenario(self, rule: 'Rule | None', scenario: 'Scenario') -> None:
        """A scenario (or one example row of an outline) starts."""

    def visit_scenario_end(self, rule: 'Rule | None', scenario: 'Scenario',
                           example: 'Sequence[str] | None') -> None:
        """A scenario (or one example row of an outline) ended."""

    def visit_scenario_skipped(self, rule: 'Rule | None', scenario: 'Scenario') -> None:
        """The remaining steps of a scenario will be skipped."""

    def visit_step(self, rule: 'Rule | None', scenario: 'Scenario', step: 'Step') -> None:
        """A step starts."""

    def visit_step_result(self, rule: 'Rule | None', scenario: 'Scenario',
                          step: 'Step', result: 'StepOutcome') -> None:
        """A step produced its outcome."""

    def visit_finish(self) -> None:
        """The run finished."""
