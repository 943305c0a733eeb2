"""Scenario selection and hook gating by tags and names.

Two unrelated mechanisms live here:
- `ScenarioFilter` decides which scenarios take part in a run. Omitted
  scenarios are not reported at all.
- `tag_rule_applies` and the `hook` decorator decide whether a before or
  after hook fires for a scenario.

Tag rules are deliberately simple: `and` and `or` words are ignored and
every other word must be a tag of the scenario.

A scenario without a tag set is never excluded by tags: it passes any tag
filter and every hook tag rule applies to it.
"""

from functools import wraps
from typing import TYPE_CHECKING

from loco_cucumber.names import normalize_tag

if TYPE_CHECKING:
    from collections.abc import Callable
    from re import Pattern

    from loco_cucumber.schema import Scenario

#: Words of a tag rule that are skipped by the evaluator.
RULE_KEYWORDS = frozenset({'and', 'or'})

type Hook = Callable[['Scenario'], object]


class ScenarioFilter:
    """Scenario inclusion filter.

    Attributes:
        tag: Single tag a scenario must carry, if set.
        name: Pattern a scenario name must match (search), if set.
    """

    def __init__(self, tag: str | None = None, name: 'Pattern[str] | None' = None) -> None:
        """Initialize a filter.

        Args:
            tag: Required tag. A leading `@` is ignored.
            name: Compiled scenario name pattern.
        """
        self.tag = normalize_tag(tag) if tag else None
        self.name = name

    def includes(self, scenario: 'Scenario') -> bool:
        """Whether a scenario takes part in the run."""
        if self.tag is not None and scenario.tags is not None and self.tag not in scenario.tags:
            return False

        return not (self.name is not None and not self.name.search(scenario.name))


def tag_rule_applies(scenario: 'Scenario', rule: str) -> bool:
    """Evaluate a hook tag rule against a scenario.

    Args:
        scenario: Scenario about to run.
        rule: Whitespace-separated tags, optionally joined by `and` / `or`.

    Returns:
        True if every tag of the rule is carried by the scenario.
        An empty rule and an untagged scenario always apply.
    """
    if scenario.tags is None:
        return True

    tags = set(scenario.tags)

    return all(
        normalize_tag(token) in tags
        for token in rule.split()
        if token not in RULE_KEYWORDS
    )


def hook(rule: str = '') -> 'Callable[[Hook], Hook]':
    """Gate a before or after hook by a tag rule.

    Example:
        >>> @hook('@database and @slow')
        ... def reset_database(scenario):
        ...     ...

    Args:
        rule: Tag rule evaluated by `tag_rule_applies`.

    Returns:
        Decorator producing a hook that only runs for matching scenarios.
    """
    def decorator(function: 'Hook') -> 'Hook':
        @wraps(function)
        def gated(scenario: 'Scenario') -> object:
            if tag_rule_applies(scenario, rule):
                return function(scenario)
            return None

        return gated

    return decorator
