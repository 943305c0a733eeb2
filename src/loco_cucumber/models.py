"""Base Pydantic models for runner data structures.

This module defines the foundational model classes used by the feature
tree, match and step outcomes, and run settings. It enforces immutability
and strict schema validation so that parsed features cannot be altered
by the runner or by step handlers.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all runner data structures.

    Design principles enforced by this model:
        - Immutability: features, steps and outcomes cannot be modified
          after creation. Handlers receive the very objects reported to
          the output, so mutation would corrupt reports.
        - Strict schema validation: unknown or extra fields are rejected.

    Arbitrary types are allowed so that compiled patterns and handler
    callables can be carried by models.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Settings are resolved from the environment and may be overridden by
    explicit values (for example, command-line options).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unrelated environment variables are
          ignored.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
