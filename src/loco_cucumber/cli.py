"""Command-line options shared by the `run` command and `Cucumber.main`."""

from logging import DEBUG, INFO, WARNING, basicConfig
from typing import TYPE_CHECKING, Any

from click import ClickException, Context, command, option, pass_context

from loco_cucumber.errors import CucumberError
from loco_cucumber.settings import RunSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from click import Command

    from loco_cucumber.app import Cucumber

LOG_LEVELS = (WARNING, INFO, DEBUG)


def settings_options[F: Callable[..., Any]](function: F) -> F:
    """Attach run settings options to a click command."""
    options = (
        option(
            '-f', '--features',
            default=None,
            help='Feature file, directory, or glob pattern to run instead of the default.',
        ),
        option(
            '-t', '--tag',
            default=None,
            help='Run only scenarios carrying this tag.',
        ),
        option(
            '-n', '--name',
            default=None,
            help='Run only scenarios whose name matches this regular expression.',
        ),
        option(
            '-s', '--suppress-output/--show-output',
            default=None,
            help='Hide console output of step handlers (still shown for failures).',
        ),
        option(
            '-v', '--verbose',
            count=True,
            help='Increase logging verbosity (repeat for debug).',
        ),
    )

    for decorator in reversed(options):
        function = decorator(function)

    return function


def execute(context: Context, app: 'Cucumber[Any]', *, verbose: int = 0,
            **overrides: Any) -> None:  # noqa: ANN401
    """Run an application with command-line overrides and exit.

    Exits with status 0 if the run succeeded and 1 otherwise.

    Raises:
        ClickException: If the run could not start or was aborted.
    """
    basicConfig(level=LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)])

    try:
        settings = RunSettings.resolve(**overrides)
        is_success = app.run(settings)

    except CucumberError as error:
        raise ClickException(f'{error}') from error

    context.exit(0 if is_success else 1)


def make_command(app: 'Cucumber[Any]') -> 'Command':
    """Build a standalone click command running an application."""
    @command(help='Run the feature files of this suite.')
    @settings_options
    @pass_context
    def run(context: Context, **options: Any) -> None:  # noqa: ANN401
        execute(context, app, **options)

    return run
