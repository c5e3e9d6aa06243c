"""Base Pydantic models for engine elements.

This module defines the foundational model classes used by document
trees, concrete scenarios, support code options and runtime settings.
It enforces immutability so that parsed templates and materialized
scenarios can be shared safely between concurrently running scenarios.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all engine elements.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          Registries and templates are populated once and then shared
          read-only.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in options.

    All engine models inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class MessageModel(SchemaModel):
    """Base immutable model for Gherkin message trees.

    Document trees are produced by an external grammar parser in the
    Gherkin messages format. Such trees use camelCase keys and carry
    fields this engine does not consume, so unknown keys are ignored
    and both camelCase and snake_case names are accepted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unknown or extra fields are ignored,
          so the surrounding environment may contain unrelated variables.

    All runtime settings models inherit from this class.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
