"""Run settings.

Settings are resolved from `LOCO_CUCUMBER_*` environment variables and
may be overridden by explicit values, typically command-line options.
"""

from re import Pattern  # noqa: TC003
from typing import Any, Self

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import SettingsConfigDict

from loco_cucumber.errors import ConfigError
from loco_cucumber.models import SettingsModel
from loco_cucumber.names import normalize_tag

ENV_PREFIX = 'LOCO_CUCUMBER_'


class RunSettings(SettingsModel):
    """Configuration of a single run."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        frozen=True,
        extra='ignore',
    )

    features: str | None = Field(
        default=None,
        title='Features override',
        description=(
            'Feature file, directory, or glob pattern replacing the '
            'application default features path.'
        ),
    )

    tag: str | None = Field(
        default=None,
        title='Tag filter',
        description=(
            'Run only scenarios carrying this tag. '
            'A leading `@` is ignored.'
        ),
    )

    name: Pattern[str] | None = Field(
        default=None,
        title='Name filter',
        description=(
            'Regular expression; run only scenarios whose name '
            'contains a match.'
        ),
    )

    suppress_output: bool = Field(
        default=False,
        title='Suppress output',
        description=(
            'Hide console output of step handlers. Output is still '
            'captured and shown for failing steps.'
        ),
    )

    @field_validator('tag')
    @classmethod
    def strip_tag(cls, value: str | None) -> str | None:
        """Normalize the tag filter."""
        if value is None:
            return None

        return normalize_tag(value) or None

    @classmethod
    def resolve(cls, **overrides: Any) -> Self:  # noqa: ANN401
        """Build settings from the environment and explicit overrides.

        Overrides set to `None` are ignored, so that absent command-line
        options keep environment values.

        Args:
            **overrides: Explicit setting values.

        Returns:
            Validated settings.

        Raises:
            ConfigError: If any value is invalid.
        """
        values = {
            key: value
            for key, value in overrides.items()
            if value is not None
        }

        try:
            return cls(**values)

        except ValidationError as base:
            details = base.errors(include_url=False, include_input=False)
            fields = ', '.join(
                '.'.join(f'{item}' for item in detail['loc'])
                for detail in details
            )
            raise ConfigError(f'Invalid settings ({fields}): {details[0]['msg']}') from base
