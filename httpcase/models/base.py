"""Base model configuration for declarative suite definitions."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable base model that rejects unknown keys."""

    model_config = ConfigDict(frozen=True, extra="forbid")
