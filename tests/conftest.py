"""Tests configurations and fixtures."""

from importlib.metadata import EntryPoint, EntryPoints
from typing import TYPE_CHECKING, Any

import pytest

from loco_cucumber.output import OutputVisitor

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

if TYPE_CHECKING:
    from loco_cucumber.core import Steps
    from loco_cucumber.errors import FeatureParseError
    from loco_cucumber.schema import Feature, Rule, Scenario, Step, StepOutcome


class RecordingOutput(OutputVisitor):
    """Output sink recording every notification as a tuple."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []

    def visit_start(self) -> None:
        self.events.append(('start',))

    def visit_feature(self, feature: 'Feature', path: 'Path') -> None:
        self.events.append(('feature', feature.name))

    def visit_feature_end(self, feature: 'Feature') -> None:
        self.events.append(('feature_end', feature.name))

    def visit_feature_error(self, path: 'Path', error: 'FeatureParseError') -> None:
        self.events.append(('feature_error', path.name))

    def visit_rule(self, rule: 'Rule') -> None:
        self.events.append(('rule', rule.name))

    def visit_rule_end(self, rule: 'Rule') -> None:
        self.events.append(('rule_end', rule.name))

    def visit_scenario(self, rule: 'Rule | None', scenario: 'Scenario') -> None:
        self.events.append(('scenario', scenario.name))

    def visit_scenario_end(self, rule: 'Rule | None', scenario: 'Scenario',
                           example: 'Sequence[str] | None') -> None:
        self.events.append(('scenario_end', scenario.name, tuple(example) if example else None))

    def visit_scenario_skipped(self, rule: 'Rule | None', scenario: 'Scenario') -> None:
        self.events.append(('scenario_skipped', scenario.name))

    def visit_step(self, rule: 'Rule | None', scenario: 'Scenario', step: 'Step') -> None:
        self.events.append(('step', step.text))

    def visit_step_result(self, rule: 'Rule | None', scenario: 'Scenario',
                          step: 'Step', result: 'StepOutcome') -> None:
        self.events.append(('result', step.text, result))

    def visit_finish(self) -> None:
        self.events.append(('finish',))

    @property
    def results(self) -> list['StepOutcome']:
        """Step outcomes in reporting order."""
        return [event[2] for event in self.events if event[0] == 'result']

    @property
    def statuses(self) -> list[str]:
        """Step outcome statuses in reporting order."""
        return [result.status for result in self.results]


@pytest.fixture
def output() -> RecordingOutput:
    """Provide a fresh recording output sink."""
    return RecordingOutput()


@pytest.fixture
def write_feature(tmp_path: 'Path') -> 'Callable[[str, str], Path]':
    """Provide a factory writing feature files into a temporary directory.

    Returns:
        A callable accepting a file name and contents and returning
        the path of the written file.
    """
    def write(name: str, contents: str) -> 'Path':
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding='utf-8')
        return path

    return write


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of step registries in the `loco_cucumber.steps` group.
    """
    def patch(*registries: 'Steps[Any] | object', raises: Exception | None = None) -> 'MockType':
        """Patch `entry_points` with a controlled registry configuration.

        Args:
            registries: Objects to be returned by `EntryPoint.load()`.
                If empty, no entry points are registered.
            raises: Exception to raise when `EntryPoint.load()` is called.

        Returns:
            A mock patch object replacing `importlib.metadata.entry_points`.
        """
        entrypoints = []
        for registry in registries:
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'loco_cucumber.steps'
            ep.name = 'tests'
            ep.value = 'tests.examples.steps:steps'
            ep.load.return_value = registry
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch
