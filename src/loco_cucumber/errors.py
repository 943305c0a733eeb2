"""Core exception hierarchy.

This module defines base error and warning types used across the library
to report configuration and plugin loading issues, feature parsing
failures, and fatal runtime errors in a structured and extensible way.

It also defines the explicit-skip sentinel: a step handler may stop its
scenario without failing it by calling `skip()`.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, NoReturn, TypedDict

from yaml import dump

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from pathlib import Path
    from typing import Self

    from gherkin.errors import ParserError

#: Reserved failure message recognized as an explicit skip request.
SKIP_MESSAGE = 'cucumber test skipped'

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4

_MAPPINGS = (dict,)
_SCALARS = (str, bytes, int, float, bool)
_SEQUENCES = (list, tuple, set)


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values. Line and column numbers are 1-based, as reported
    by the Gherkin parser.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source file.
    line_num: int | None
    #: Column number in the source file.
    column_num: int | None

    #: Source location of the failing Python code (`file:line`).
    origin: str | None

    #: Console output captured while the failing code ran.
    stdout: bytes | None
    #: Console error output captured while the failing code ran.
    stderr: bytes | None

    #: Element (step, scenario) associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting runner errors.

    This formatter is responsible for producing human-readable
    error messages with optional source location, captured console
    output, and YAML-based snippets of the failing element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)
        message += cls.get_output_string(context, indent=FORMAT_INDENT)

        return message.rstrip()

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, line,
            column and the originating Python location when available.
        """
        indent = cls._ensure_indent(indent)

        message = ''
        filename = context.get('filename')
        if filename or context.get('line_num') is not None:
            message += f'{indent}in "{filename or FORMAT_FILENAME}"'
            if (line_num := context.get('line_num')) is not None:
                message += f', line {line_num}'
                if (column_num := context.get('column_num')) is not None:
                    message += f', column {column_num}'
            message += linesep

        if origin := context.get('origin'):
            message += f'{indent}raised at {origin}{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a YAML snippet of the failing element.

        Args:
            context: Error context containing element data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no element is available.
        """
        indent = cls._ensure_indent(indent)

        if element := context.get('element'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(element, indent)
            snippet += linesep
            return snippet

        return ''

    @classmethod
    def get_output_string(cls, context: ErrorContext, *,
                          indent: str | int | None = None) -> str:
        """Format captured console output.

        Args:
            context: Error context containing captured buffers.
            indent: Optional indentation (string or number of spaces).

        Returns:
            Labelled captured output blocks, or an empty string.
        """
        indent = cls._ensure_indent(indent)

        message = ''
        for label, key in (('Captured stdout', 'stdout'), ('Captured stderr', 'stderr')):
            if data := context.get(key):
                text = data.decode('utf-8', errors='replace')
                message += f'{indent}{label}:{linesep}'
                message += cls._make_indent(text, indent * 2)
                message += linesep

        return message

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, _SCALARS):
            return value

        if isinstance(value, _MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, _SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.

        Args:
            value: Original multi-line string.
            indent: Indentation prefix.

        Returns:
            Indented string.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input.

        Args:
            indent: Indentation as string or number of spaces.

        Returns:
            A string consisting of spaces or the provided string.
        """
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class PluginWarning(UserWarning):
    """Warning emitted for non-fatal plugin-related issues.

    This warning is used when a step registry plugin cannot be loaded,
    but the error does not prevent the run (relaxed mode).
    """


class CucumberError(Exception, ErrorFormatter):
    """Base exception for all loco-cucumber errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class ConfigError(CucumberError):
    """Error raised for invalid setup, before any scenario runs.

    Raised for step patterns that are not valid regular expressions,
    invalid run settings, and missing feature paths.
    """


class PluginError(CucumberError):
    """Error raised when a step registry cannot be loaded.

    Raised for malformed `module:attribute` references, failing imports,
    and entry points that do not provide a step registry (strict mode).
    """

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a plugin error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)


class FeatureParseError(CucumberError):
    """Error raised when a feature file is malformed.

    Parse errors are reported through the output and mark the run as
    failed, but never stop the run.
    """

    @classmethod
    def from_gherkin_error(cls, error: 'ParserError',
                           path: 'Path | str | None' = None) -> 'Self':
        """Create a parse error from a Gherkin parser failure.

        Composite errors are reduced to their first entry for location
        purposes; the message keeps every reported problem.

        Args:
            error: Exception raised by the Gherkin parser.
            path: Optional path of the parsed file.

        Returns:
            FeatureParseError carrying file, line and column.
        """
        first = error
        if nested := getattr(error, 'errors', None):
            first = nested[0]

        location = getattr(first, 'location', None) or {}

        error_context = ErrorContext(
            filename=f'{path}' if path is not None else None,
            line_num=location.get('line'),
            column_num=location.get('column'),
        )

        return cls(f'{error}', context=error_context)


class StateConstructionError(CucumberError):
    """Error raised when a scenario state (world) cannot be created.

    This failure is fatal: it propagates out of the runner and aborts
    every remaining scenario and feature file.
    """


class StepSkipped(Exception):  # noqa: N818
    """Failure raised by a step handler to skip the rest of its scenario."""

    def __init__(self) -> None:
        """Initialize with the reserved skip message."""
        super().__init__(SKIP_MESSAGE)


def skip() -> NoReturn:
    """Skip the current step and every remaining step of the scenario.

    Raises:
        StepSkipped: Always.
    """
    raise StepSkipped
