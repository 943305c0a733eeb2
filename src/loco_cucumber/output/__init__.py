"""Output sinks notified by the runner.

The runner reports progress exclusively through an `OutputVisitor`.
Notifications are delivered synchronously, in execution order:

- `visit_start` once per run;
- per feature file: `visit_feature` or `visit_feature_error`;
- `visit_rule` / `visit_rule_end` around the scenarios of each rule;
- per scenario (per example row of an outline): `visit_scenario`,
  then `visit_step` and `visit_step_result` for each step,
  `visit_scenario_skipped` once when the skip cascade begins,
  and `visit_scenario_end`;
- `visit_feature_end` after the last rule of a feature;
- `visit_finish` once at the very end.
"""

from .base import OutputVisitor
from .default import DefaultOutput

__all__ = (
    'DefaultOutput',
    'OutputVisitor',
)

