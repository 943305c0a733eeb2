"""Core runtime: step registry, isolation, interpolation, filtering, execution.

The primary public entry points are `Steps`, which collects step handlers,
and `Runner`, which executes parsed features against a registry and
reports through an output sink.
"""

from .capture import Isolated, isolate
from .discovery import discover_features
from .filters import ScenarioFilter, hook, tag_rule_applies
from .loader import StepsLoader, load_object
from .outline import interpolate
from .parser import FeatureParser
from .registry import Steps
from .runner import Runner

__all__ = (
    'FeatureParser',
    'Isolated',
    'Runner',
    'ScenarioFilter',
    'Steps',
    'StepsLoader',
    'discover_features',
    'hook',
    'interpolate',
    'isolate',
    'load_object',
    'tag_rule_applies',
)
