"""
Configuration Schemas for tooldeck.

Pydantic models for engine settings. Values come from TOOLDECK_*
environment variables (see settings.get_settings) or are passed
explicitly by the embedding application.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class EngineSettings(BaseModel):
    """
    Engine settings model.

    Used for type-safe settings access.
    """

    # Service identity
    service_name: str = "tooldeck"
    environment: str = "development"

    # Run creation
    strict_input_types: bool = Field(
        default=False,
        description="Check each Run input value against its Input's declared type",
    )

    # App defaults
    default_use_json_body: bool = Field(
        default=True,
        description="Body encoding for Apps that do not choose one explicitly",
    )

    # Observability
    log_events: bool = Field(default=True, description="Emit structured run lifecycle logs")

    class Config:
        extra = "ignore"
