"""Step roles and tag naming rules.

This module defines the closed set of step roles recognized by the
runner and the normalization applied to scenario tags.

The rules defined here are shared by the feature parser, the scenario
filter, and the hook tag-rule evaluator, so that a tag written as
`@smoke` in a feature file, on the command line, or in a hook rule
always compares equal to `smoke`.
"""

from enum import StrEnum

#: Prefix marking a tag in Gherkin sources.
TAG_PREFIX = '@'


class StepRole(StrEnum):
    """Role of a step inside a scenario.

    The set is fixed: Gherkin conjunctions (`And`, `But`, `*`) are not
    roles and inherit the role of the preceding step at parse time.
    """

    GIVEN = 'Given'
    WHEN = 'When'
    THEN = 'Then'


def normalize_tag(value: str) -> str:
    """Strip surrounding whitespace and a single leading `@` from a tag.

    Args:
        value: Tag as written by a user or a feature file.

    Returns:
        Tag name suitable for equality comparison.
    """
    value = value.strip()
    if value.startswith(TAG_PREFIX):
        return value[len(TAG_PREFIX):]

    return value
