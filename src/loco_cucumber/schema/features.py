"""Read-only feature tree consumed by the runner.

Defines immutable Pydantic models describing a parsed feature file:
the feature itself, its background, rules, scenarios, scenario outline
examples, and steps with their optional data tables and docstrings.

The runner never mutates these objects. Outline interpolation produces
modified copies of steps instead.
"""

from pathlib import Path  # noqa: TC003
from typing import Self

from pydantic import Field, model_validator

from loco_cucumber.models import SchemaModel
from loco_cucumber.names import StepRole  # noqa: TC001

type Cells = tuple[str, ...]
type Rows = tuple[Cells, ...]


class Location(SchemaModel):
    """Position of an element in its source file (1-based)."""

    line: int
    column: int | None = None


class Table(SchemaModel):
    """Data table attached to a step.

    The first row is conventionally a header, but the table does not
    enforce it: handlers decide how to read rows.
    """

    rows: Rows = ()

    @property
    def header(self) -> Cells:
        """First row of the table."""
        return self.rows[0] if self.rows else ()

    @property
    def body(self) -> Rows:
        """Every row after the header."""
        return self.rows[1:]


class Step(SchemaModel):
    """A single Given/When/Then instruction."""

    role: StepRole
    text: str

    keyword: str = Field(
        default='',
        description='Keyword as written in the source, e.g. `And `.',
    )

    table: Table | None = None
    docstring: str | None = None

    location: Location | None = None

    def __str__(self) -> str:
        """Render the step as it is written in a feature file."""
        keyword = (self.keyword or f'{self.role} ').strip()
        return f'{keyword} {self.text}'


class Examples(SchemaModel):
    """Parameter table of a scenario outline."""

    header: Cells
    rows: Rows = ()

    @model_validator(mode='after')
    def check_row_lengths(self) -> Self:
        """Ensure every row has a value for every header name."""
        for row in self.rows:
            if len(row) != len(self.header):
                raise ValueError(
                    f'Example row {list(row)!r} does not match '
                    f'header {list(self.header)!r}',
                )

        return self


class Scenario(SchemaModel):
    """A scenario or scenario outline."""

    name: str
    keyword: str = 'Scenario'
    description: str = ''

    tags: tuple[str, ...] | None = Field(
        default=None,
        description='Tags of the scenario, `None` when it carries no tag set.',
    )
    steps: tuple[Step, ...] = ()
    examples: Examples | None = None

    location: Location | None = None


class Rule(SchemaModel):
    """Named grouping of scenarios within a feature."""

    name: str
    description: str = ''

    tags: tuple[str, ...] = ()
    background: tuple[Step, ...] = ()
    scenarios: tuple[Scenario, ...] = ()

    location: Location | None = None


class Feature(SchemaModel):
    """Top-level Gherkin feature of a file."""

    name: str
    description: str = ''

    tags: tuple[str, ...] = ()
    background: tuple[Step, ...] = ()
    scenarios: tuple[Scenario, ...] = ()
    rules: tuple[Rule, ...] = ()

    path: Path | None = None
    location: Location | None = None
