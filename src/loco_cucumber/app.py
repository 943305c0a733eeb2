"""Application object tying features, state, steps and hooks together.

A test suite declares one `Cucumber` object and either calls its `main`
method from a script or points the `loco-cucumber run` command at it:

    app = Cucumber(
        features='./features',
        world=MyWorld,
        steps=[basic.steps],
        setup=setup,
        before=[before_thing],
        after=[after_thing],
    )

    if __name__ == '__main__':
        app.main()
"""

from logging import getLogger
from typing import TYPE_CHECKING, Any, NoReturn

from loco_cucumber.core import Runner, Steps, StepsLoader, discover_features
from loco_cucumber.core.loader import as_steps
from loco_cucumber.output import DefaultOutput
from loco_cucumber.settings import RunSettings

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from loco_cucumber.core.filters import Hook
    from loco_cucumber.output import OutputVisitor

logger = getLogger(__name__)


class Cucumber[W]:
    """A runnable suite of features.

    Attributes:
        features: Default feature file, directory, or glob.
        world: Zero-argument factory of the per-scenario state.
        steps: Step registries, or callables returning registries.
            Later registries override earlier ones on identical steps.
        setup: Callable run once before the first feature.
        before: Hooks called with each scenario before it runs.
        after: Hooks called with each scenario after it ran.
        plugins: Whether registries published via entry points are
            combined before `steps`.
        strict: Whether plugin loading issues are errors.
    """

    def __init__(self, features: 'Path | str', world: 'Callable[[], W]',  # noqa: PLR0913
                 steps: 'Sequence[Steps[W] | Callable[[], Steps[W]]]' = (), *,
                 setup: 'Callable[[], Any] | None' = None,
                 before: 'Sequence[Hook]' = (),
                 after: 'Sequence[Hook]' = (),
                 plugins: bool = False,
                 strict: bool = False) -> None:
        """Initialize the application."""
        self.features = features
        self.world = world
        self.steps = tuple(steps)

        self.setup = setup
        self.before = tuple(before)
        self.after = tuple(after)

        self.plugins = plugins
        self.strict = strict

    def registry(self) -> Steps[W]:
        """Combine every step registry of the application.

        Raises:
            PluginError: If a registry cannot be loaded.
        """
        registries: list[Steps[Any]] = []
        if self.plugins:
            registries.extend(StepsLoader(strict=self.strict).load_plugins())

        registries.extend(
            as_steps(item, f'{getattr(item, '__qualname__', item)!s}')
            for item in self.steps
        )

        return Steps.combine(registries)

    def run(self, settings: RunSettings | None = None,
            output: 'OutputVisitor | None' = None) -> bool:
        """Discover and run every feature.

        Args:
            settings: Run settings, resolved from the environment if omitted.
            output: Output sink, a `DefaultOutput` if omitted.

        Returns:
            True if every feature parsed and every scenario succeeded.

        Raises:
            ConfigError: If the features path does not exist.
            PluginError: If a registry cannot be loaded.
            StateConstructionError: If a scenario state cannot be built.
        """
        settings = settings or RunSettings.resolve()

        paths = discover_features(self.features, settings.features)
        steps = self.registry()
        logger.info('Running %d feature files with %d step handlers', len(paths), len(steps))

        if self.setup is not None:
            self.setup()

        runner = Runner(
            steps,
            self.world,
            before=self.before,
            after=self.after,
            settings=settings,
            output=output or DefaultOutput(),
        )

        return runner.run(paths)

    def main(self, args: 'Sequence[str] | None' = None) -> NoReturn:
        """Run from the command line and exit with the run status.

        Args:
            args: Command-line arguments, `sys.argv[1:]` if omitted.
        """
        from loco_cucumber.cli import make_command  # noqa: PLC0415

        make_command(self).main(args=args)
        raise SystemExit(0)  # pragma: no cover
