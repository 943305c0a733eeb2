"""Scenario outline interpolation.

Rewrites `<name>` placeholders of an outline step into the values of one
example row. Replacements are applied in header order to the step text,
to every cell of its data table, and to its docstring.

Headers are applied one at a time in declaration order, so a value that
itself contains a `<name>` token of a later header is replaced again.
"""

from typing import TYPE_CHECKING

from loco_cucumber.schema import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from loco_cucumber.schema import Step


def _replace(text: str, replacements: 'Sequence[tuple[str, str]]') -> str:
    """Apply replacement pairs to a text in order."""
    for token, value in replacements:
        text = text.replace(token, value)

    return text


def interpolate(step: 'Step', header: 'Sequence[str]', row: 'Sequence[str]') -> 'Step':
    """Build a concrete step from an outline step and an example row.

    Args:
        step: Outline step, possibly containing `<name>` tokens.
        header: Example header names.
        row: Example values, one per header name.

    Returns:
        A copy of the step with every token replaced. A step without
        tokens is returned as an equal copy.

    Raises:
        ValueError: If the header and the row lengths differ.
    """
    if len(header) != len(row):
        raise ValueError(f'Example row {list(row)!r} does not match header {list(header)!r}')

    replacements = [
        (f'<{name}>', value)
        for name, value in zip(header, row, strict=True)
    ]

    update: dict[str, object] = {'text': _replace(step.text, replacements)}

    if step.table is not None:
        update['table'] = Table(rows=tuple(
            tuple(_replace(cell, replacements) for cell in cells)
            for cells in step.table.rows
        ))

    if step.docstring is not None:
        update['docstring'] = _replace(step.docstring, replacements)

    return step.model_copy(update=update)
