"""Data structures exchanged between the parser, the runner and outputs.

Defines immutable Pydantic models for the parsed feature tree and for
the outcomes of step resolution and step execution.
"""

from .features import Examples, Feature, Location, Rule, Scenario, Step, Table
from .outcomes import (
    ExactHandler,
    ExactMatch,
    Failed,
    MatchOutcome,
    NoMatch,
    Passed,
    PatternHandler,
    PatternMatch,
    Skipped,
    StepOutcome,
    Unimplemented,
)

__all__ = (
    'ExactHandler',
    'ExactMatch',
    'Examples',
    'Failed',
    'Feature',
    'Location',
    'MatchOutcome',
    'NoMatch',
    'Passed',
    'PatternHandler',
    'PatternMatch',
    'Rule',
    'Scenario',
    'Skipped',
    'Step',
    'StepOutcome',
    'Table',
    'Unimplemented',
)
