"""Gherkin feature runner with Python step handlers.

The `loco_cucumber` package executes Gherkin features (backgrounds,
scenarios, rules and scenario outlines) against step handlers registered
in Python, and reports passed, failed, skipped and unimplemented steps
without stopping the run on the first failure.

Key features:
- exact-text and regular-expression step matching, with typed arguments;
- per-scenario state, constructed fresh for every scenario and example row;
- failure isolation with captured console output for every step;
- tag and name filtering of scenarios, tag-gated before and after hooks.
"""

from .app import Cucumber
from .core import Steps, hook
from .errors import skip
from .names import StepRole
from .output import DefaultOutput, OutputVisitor
from .settings import RunSettings

__all__ = (
    'Cucumber',
    'DefaultOutput',
    'OutputVisitor',
    'RunSettings',
    'StepRole',
    'Steps',
    'hook',
    'skip',
)
