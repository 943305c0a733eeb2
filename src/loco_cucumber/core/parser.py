"""Gherkin feature parser integration.

This module adapts the official Cucumber Gherkin parser to the runner's
immutable feature tree.

The adapter is responsible for:
- resolving conjunction steps (`And`, `But`, `*`) to the role of the
  preceding step;
- stripping the `@` prefix from tags;
- flattening outline `Examples` blocks into a single example table;
- converting Gherkin parser errors into `FeatureParseError`.
"""

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gherkin.errors import ParserError
from gherkin.parser import Parser
from pydantic import ValidationError

from loco_cucumber.errors import ErrorContext, FeatureParseError
from loco_cucumber.names import StepRole, normalize_tag
from loco_cucumber.schema import Examples, Feature, Location, Rule, Scenario, Step, Table

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = getLogger(__name__)

#: Gherkin keyword types mapped to step roles.
#: `Conjunction` and `Unknown` keywords inherit the previous role.
KEYWORD_ROLES = {
    'Context': StepRole.GIVEN,
    'Action': StepRole.WHEN,
    'Outcome': StepRole.THEN,
}

type Node = dict[str, Any]


class FeatureParser:
    """Parser producing `Feature` trees from Gherkin sources.

    A parser instance is stateless between calls and may be reused for
    any number of documents.
    """

    def parse(self, content: str, path: 'Path | str | None' = None) -> Feature:
        """Parse a Gherkin document.

        Args:
            content: Feature file text.
            path: Optional path of the document, used for reporting.

        Returns:
            The parsed feature.

        Raises:
            FeatureParseError: If the document is not valid Gherkin,
                contains no feature, or has inconsistent example tables.
        """
        try:
            document = Parser().parse(content)

        except ParserError as base:
            raise FeatureParseError.from_gherkin_error(base, path) from base

        feature = document.get('feature')
        if not feature:
            raise FeatureParseError(
                'Document does not contain a feature',
                context=ErrorContext(filename=f'{path}' if path is not None else None),
            )

        try:
            return self.build_feature(feature, path)

        except ValidationError as base:
            raise FeatureParseError(
                f'Invalid feature structure: {base.errors(include_url=False)[0]['msg']}',
                context=ErrorContext(filename=f'{path}' if path is not None else None),
            ) from base

    def parse_file(self, path: 'Path | str') -> Feature:
        """Read and parse a feature file.

        Args:
            path: Path of the feature file.

        Returns:
            The parsed feature.

        Raises:
            FeatureParseError: If the file is not UTF-8 text or not a valid
                feature.
            OSError: If the file cannot be read.
        """
        path = Path(path)
        logger.debug('Parsing feature file %s', path)

        with path.open('rt', encoding='utf-8') as content:
            try:
                source = content.read()

            except UnicodeDecodeError as base:
                raise FeatureParseError(
                    f'Feature file is not valid UTF-8: {base.reason} at byte {base.start}',
                    context=ErrorContext(filename=f'{path}'),
                ) from base

        return self.parse(source, path)

    def build_feature(self, node: Node, path: 'Path | str | None') -> Feature:
        """Convert a Gherkin feature node."""
        background: tuple[Step, ...] = ()
        scenarios: list[Scenario] = []
        rules: list[Rule] = []

        for child in node.get('children', ()):
            if 'background' in child:
                background = self.build_steps(child['background'].get('steps', ()))
            elif 'scenario' in child:
                scenarios.append(self.build_scenario(child['scenario'], path))
            elif 'rule' in child:
                rules.append(self.build_rule(child['rule'], path))

        return Feature(
            name=node.get('name', ''),
            description=node.get('description', '').strip(),
            tags=self.build_tags(node.get('tags', ())),
            background=background,
            scenarios=tuple(scenarios),
            rules=tuple(rules),
            path=Path(path) if path is not None else None,
            location=self.build_location(node),
        )

    def build_rule(self, node: Node, path: 'Path | str | None') -> Rule:
        """Convert a Gherkin rule node."""
        background: tuple[Step, ...] = ()
        scenarios: list[Scenario] = []

        for child in node.get('children', ()):
            if 'background' in child:
                background = self.build_steps(child['background'].get('steps', ()))
            elif 'scenario' in child:
                scenarios.append(self.build_scenario(child['scenario'], path))

        return Rule(
            name=node.get('name', ''),
            description=node.get('description', '').strip(),
            tags=self.build_tags(node.get('tags', ())),
            background=background,
            scenarios=tuple(scenarios),
            location=self.build_location(node),
        )

    def build_scenario(self, node: Node, path: 'Path | str | None') -> Scenario:
        """Convert a Gherkin scenario or scenario outline node."""
        return Scenario(
            name=node.get('name', ''),
            keyword=node.get('keyword', 'Scenario').strip(),
            description=node.get('description', '').strip(),
            tags=self.build_tags(node.get('tags', ())) or None,
            steps=self.build_steps(node.get('steps', ())),
            examples=self.build_examples(node.get('examples', ()), path),
            location=self.build_location(node),
        )

    def build_examples(self, nodes: 'Iterable[Node]', path: 'Path | str | None') -> Examples | None:
        """Merge the `Examples` blocks of an outline into one table.

        Raises:
            FeatureParseError: If the blocks declare different headers.
        """
        header: tuple[str, ...] | None = None
        rows: list[tuple[str, ...]] = []

        for node in nodes:
            if 'tableHeader' not in node:
                continue

            block_header = self.build_cells(node['tableHeader'])
            if header is None:
                header = block_header
            elif block_header != header:
                location = node.get('location', {})
                raise FeatureParseError(
                    'Examples blocks of an outline must share the same header',
                    context=ErrorContext(
                        filename=f'{path}' if path is not None else None,
                        line_num=location.get('line'),
                        column_num=location.get('column'),
                    ),
                )

            rows.extend(self.build_cells(row) for row in node.get('tableBody', ()))

        if header is None:
            return None

        return Examples(header=header, rows=tuple(rows))

    def build_steps(self, nodes: 'Iterable[Node]') -> tuple[Step, ...]:
        """Convert Gherkin step nodes, resolving conjunctions."""
        steps: list[Step] = []
        role = StepRole.GIVEN

        for node in nodes:
            role = KEYWORD_ROLES.get(node.get('keywordType', ''), role)

            table = None
            if data_table := node.get('dataTable'):
                table = Table(rows=tuple(
                    self.build_cells(row)
                    for row in data_table.get('rows', ())
                ))

            docstring = None
            if doc_string := node.get('docString'):
                docstring = doc_string.get('content', '')

            steps.append(Step(
                role=role,
                keyword=node.get('keyword', ''),
                text=node.get('text', ''),
                table=table,
                docstring=docstring,
                location=self.build_location(node),
            ))

        return tuple(steps)

    @staticmethod
    def build_cells(row: Node) -> tuple[str, ...]:
        """Extract cell values of a table row."""
        return tuple(cell.get('value', '') for cell in row.get('cells', ()))

    @staticmethod
    def build_tags(nodes: 'Iterable[Node]') -> tuple[str, ...]:
        """Extract tag names without the `@` prefix."""
        return tuple(normalize_tag(node['name']) for node in nodes)

    @staticmethod
    def build_location(node: Node) -> Location | None:
        """Extract the location of a node, if present."""
        if location := node.get('location'):
            return Location(line=location['line'], column=location.get('column'))

        return None
