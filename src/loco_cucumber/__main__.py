"""Command-line interface of loco-cucumber.

`APP` arguments reference a `Cucumber` application object as
`module:attribute`, for example `tests.features.steps:app`.
"""

from typing import Any

from click import BadParameter, argument, echo, group, pass_context
from click import Context  # noqa: TC002

from loco_cucumber.app import Cucumber
from loco_cucumber.cli import execute, settings_options
from loco_cucumber.core import load_object
from loco_cucumber.errors import PluginError


def _load_app(reference: str) -> Cucumber[Any]:
    """Load an application object or report a bad `APP` argument."""
    try:
        app = load_object(reference)

    except PluginError as error:
        raise BadParameter(error.message, param_hint='APP') from error

    if not isinstance(app, Cucumber):
        raise BadParameter(f'{reference!r} is not a Cucumber application', param_hint='APP')

    return app


@group(help='Run Gherkin features against Python step handlers.')
def cli() -> None:
    """Root CLI group for loco-cucumber tools."""
    return None


@cli.command(
    name='run',
    help='Run the feature files of an application.',
)
@argument('app')
@settings_options
@pass_context
def run(context: Context, app: str, **options: Any) -> None:  # noqa: ANN401
    """Run an application."""
    execute(context, _load_app(app), **options)


@cli.command(
    name='steps',
    help='List the step handlers registered by an application.',
)
@argument('app')
def list_steps(app: str) -> None:
    """Print one line per registered step handler."""
    registry = _load_app(app).registry()

    for role, kind, key in registry.describe():
        echo(f'{role:<5} {kind:<7} {key}')


if __name__ == '__main__':
    cli()
