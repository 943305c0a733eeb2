"""Tests for the Gherkin feature parser adapter."""

from pathlib import Path
from textwrap import dedent

import pytest

from loco_cucumber.core import FeatureParser
from loco_cucumber.errors import FeatureParseError
from loco_cucumber.names import StepRole
from loco_cucumber.schema import Location, Table

FEATURE = dedent('''\
    @web @smoke
    Feature: Shopping cart
      Items can be added and removed.

      Background:
        Given an empty cart

      @fast
      Scenario: Adding an item
        Given a product
        And another product
        But no discount
        When I add it
        And I check out
        Then the cart has 2 items
        * it is saved

      Scenario: Adding with details
        Given these products:
          | name  | price |
          | apple | 1     |
        Then the receipt reads:
          """
          apple 1
          """

      Scenario Outline: Adding many
        When I add <count> items
        Then the cart has <count> items

        Examples: small
          | count |
          | 1     |
          | 2     |

        Examples: large
          | count |
          | 100   |

      @rules
      Rule: Coupons
        Background:
          Given a coupon

        Scenario: Applying a coupon
          When I apply it
''')


@pytest.fixture
def parser() -> FeatureParser:
    """Shared parser instance."""
    return FeatureParser()


def test_parse_feature_tree(parser: FeatureParser) -> None:
    """Features, backgrounds, scenarios and rules are converted."""
    feature = parser.parse(FEATURE, 'cart.feature')

    assert feature.name == 'Shopping cart'
    assert feature.description == 'Items can be added and removed.'
    assert feature.tags == ('web', 'smoke')
    assert feature.path == Path('cart.feature')
    assert feature.location == Location(line=2, column=1)

    assert [step.text for step in feature.background] == ['an empty cart']
    assert [scenario.name for scenario in feature.scenarios] == [
        'Adding an item',
        'Adding with details',
        'Adding many',
    ]
    assert [scenario.tags for scenario in feature.scenarios] == [('fast',), None, None]

    (rule,) = feature.rules
    assert rule.name == 'Coupons'
    assert rule.tags == ('rules',)
    assert [step.text for step in rule.background] == ['a coupon']
    assert [scenario.name for scenario in rule.scenarios] == ['Applying a coupon']


def test_parse_conjunction_roles(parser: FeatureParser) -> None:
    """Conjunction steps inherit the role of the previous step."""
    scenario = parser.parse(FEATURE).scenarios[0]

    assert scenario.tags == ('fast',)
    assert [(step.role, step.text) for step in scenario.steps] == [
        (StepRole.GIVEN, 'a product'),
        (StepRole.GIVEN, 'another product'),
        (StepRole.GIVEN, 'no discount'),
        (StepRole.WHEN, 'I add it'),
        (StepRole.WHEN, 'I check out'),
        (StepRole.THEN, 'the cart has 2 items'),
        (StepRole.THEN, 'it is saved'),
    ]
    assert f'{scenario.steps[1]}' == 'And another product'


def test_parse_leading_conjunction(parser: FeatureParser) -> None:
    """A conjunction without a previous step is a Given step."""
    feature = parser.parse(dedent('''\
        Feature: Leading
          Scenario: Starts with and
            And something
            Then done
    '''))

    assert [step.role for step in feature.scenarios[0].steps] == [StepRole.GIVEN, StepRole.THEN]


def test_parse_step_arguments(parser: FeatureParser) -> None:
    """Data tables and docstrings are attached to their steps."""
    given, then = parser.parse(FEATURE).scenarios[1].steps

    assert given.table == Table(rows=(('name', 'price'), ('apple', '1')))
    assert given.docstring is None
    assert given.location is not None

    assert then.table is None
    assert then.docstring == 'apple 1'


def test_parse_outline_examples(parser: FeatureParser) -> None:
    """Examples blocks of an outline are merged."""
    outline = parser.parse(FEATURE).scenarios[2]

    assert outline.keyword == 'Scenario Outline'
    assert outline.examples is not None
    assert outline.examples.header == ('count',)
    assert outline.examples.rows == (('1',), ('2',), ('100',))


def test_parse_examples_header_mismatch(parser: FeatureParser) -> None:
    """Examples blocks with different headers are rejected."""
    content = dedent('''\
        Feature: Mismatch
          Scenario Outline: Broken
            Given <a>

            Examples:
              | a |
              | 1 |

            Examples:
              | b |
              | 2 |
    ''')

    with pytest.raises(FeatureParseError, match=r'must share the same header') as error:
        parser.parse(content, 'mismatch.feature')

    assert error.value.context is not None
    assert error.value.context['line_num'] == 9


def test_parse_error_location(parser: FeatureParser) -> None:
    """Gherkin syntax errors keep their file and position."""
    with pytest.raises(FeatureParseError) as error:
        parser.parse('hello\n', 'broken.feature')

    assert error.value.context is not None
    assert error.value.context['filename'] == 'broken.feature'
    assert error.value.context['line_num'] == 1
    assert "got 'hello'" in error.value.message
    assert 'in "broken.feature", line 1' in f'{error.value}'


def test_parse_empty_document(parser: FeatureParser) -> None:
    """Documents without a feature are rejected."""
    with pytest.raises(FeatureParseError, match=r'^Document does not contain a feature'):
        parser.parse('# only a comment\n')


def test_parse_file(parser: FeatureParser, tmp_path: Path) -> None:
    """Files are read as UTF-8 and keep their path."""
    path = tmp_path / 'unicode.feature'
    path.write_text('Feature: Café\n  Scenario: Crème\n    Given brûlée\n', encoding='utf-8')

    feature = parser.parse_file(path)

    assert feature.name == 'Café'
    assert feature.path == path
    assert feature.scenarios[0].steps[0].text == 'brûlée'


def test_parse_missing_file(parser: FeatureParser, tmp_path: Path) -> None:
    """Unreadable files raise an OS error."""
    with pytest.raises(OSError):  # noqa: PT011
        parser.parse_file(tmp_path / 'missing.feature')


def test_parse_file_invalid_encoding(parser: FeatureParser, tmp_path: Path) -> None:
    """Files that are not UTF-8 text are parse errors."""
    path = tmp_path / 'latin.feature'
    path.write_bytes(b'Feature: \xff\xfe')

    with pytest.raises(FeatureParseError, match=r'^Feature file is not valid UTF-8: invalid start byte') as error:
        parser.parse_file(path)

    assert error.value.context is not None
    assert error.value.context['filename'] == f'{path}'
    assert isinstance(error.value.__cause__, UnicodeDecodeError)
