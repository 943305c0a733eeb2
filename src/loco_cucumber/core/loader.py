"""Step registry discovery and loading.

Step registries may be published by installed packages through the
`loco_cucumber.steps` entry point group, and applications may be
referenced by `module:attribute` strings on the command line.

Plugins are loaded defensively: individual failures do not interrupt
loading unless strict mode is enabled. An entry point may reference
either a `Steps` registry or a zero-argument callable returning one.
"""

from importlib import import_module
from logging import getLogger
from typing import TYPE_CHECKING, Any
from warnings import warn

from loco_cucumber.errors import PluginError, PluginWarning

from .registry import Steps

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint

logger = getLogger(__name__)

#: Entry point group scanned for step registries.
ENTRYPOINT_GROUP = 'loco_cucumber.steps'


def load_object(reference: str) -> Any:  # noqa: ANN401
    """Import an object from a `module:attribute` reference.

    The attribute part may be dotted to reach nested attributes.

    Args:
        reference: Object reference, e.g. `tests.steps:app`.

    Returns:
        The referenced object.

    Raises:
        PluginError: If the reference is malformed or cannot be imported.
    """
    module_name, _, qualname = reference.partition(':')
    if not module_name or not qualname:
        raise PluginError(f'Invalid object reference {reference!r}, expected "module:attribute"')

    try:
        value = import_module(module_name)

    except ImportError as base:
        raise PluginError(f'Failed to import module {module_name!r}') from base

    for name in qualname.split('.'):
        try:
            value = getattr(value, name)

        except AttributeError as base:
            raise PluginError(f'Module {module_name!r} has no attribute {qualname!r}') from base

    return value


def as_steps(value: Any, source: str) -> Steps[Any]:  # noqa: ANN401
    """Coerce a registry or a registry factory into a registry.

    Args:
        value: `Steps` instance or callable returning one.
        source: Description of where the value comes from.

    Returns:
        The step registry.

    Raises:
        PluginError: If the value does not provide a registry.
    """
    if not isinstance(value, Steps) and callable(value):
        value = value()

    if not isinstance(value, Steps):
        raise PluginError(f'Object loaded from {source} is not a step registry')

    return value


class StepsLoader:
    """Loader of step registries published via entry points.

    Attributes:
        strict_mode: If True, any loading issue raises an error.
            If False, issues are emitted as warnings and loading continues.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize a loader."""
        self.strict_mode = strict

    def emit_plugin_issue(self, message: str,
                          entrypoint: 'EntryPoint | None' = None) -> Exception | None:
        """Emit a plugin warning or return the exception.

        Args:
            message: Warning message to emit.
            entrypoint: Entry point the issue relates to, if applicable.

        Returns:
            PluginError on strict mode, otherwise `None`
                with producing a PluginWarning.
        """
        if self.strict_mode:
            return PluginError(message, entrypoint=entrypoint)

        warn(message, category=PluginWarning, stacklevel=2)

        return None

    def load_plugin(self, entrypoint: 'EntryPoint') -> Steps[Any] | None:
        """Load a single step registry entry point.

        Args:
            entrypoint: Entry point describing the registry to load.

        Returns:
            The loaded registry, or `None` if loading failed in relaxed mode.

        Raises:
            PluginError: If any loading issue occurs on strict mode.
        """
        try:
            value = entrypoint.load()
            steps = as_steps(value, f'entrypoint {entrypoint.name!r}')

        except PluginError as base:
            if error := self.emit_plugin_issue(base.message, entrypoint):
                raise error from base
            return None

        except Exception as base:
            if error := self.emit_plugin_issue(
                f'Failed to load entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return None

        logger.debug('Loaded %d step handlers from %s', len(steps), entrypoint.value)
        return steps

    def load_plugins(self) -> list[Steps[Any]]:
        """Load every step registry published via entry points.

        Returns:
            Loaded registries, in entry point discovery order.

        Raises:
            PluginError: If any loading issue occurs on strict mode.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        registries = []
        for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP):
            if (steps := self.load_plugin(entrypoint)) is not None:
                registries.append(steps)

        return registries
