"""
Settings factory.

Reads TOOLDECK_* environment variables once per process.
"""

from __future__ import annotations

import os
from functools import lru_cache

from .schemas import EngineSettings


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


@lru_cache()
def get_settings() -> EngineSettings:
    """
    Get engine settings from environment.

    Uses lru_cache for singleton pattern; call get_settings.cache_clear()
    after changing the environment (tests do).
    """
    return EngineSettings(
        # Service
        service_name=os.getenv("TOOLDECK_SERVICE_NAME", "tooldeck"),
        environment=os.getenv("TOOLDECK_ENVIRONMENT", "development"),
        # Run creation
        strict_input_types=_env_flag("TOOLDECK_STRICT_INPUT_TYPES", False),
        # App defaults
        default_use_json_body=_env_flag("TOOLDECK_DEFAULT_USE_JSON_BODY", True),
        # Observability
        log_events=_env_flag("TOOLDECK_LOG_EVENTS", True),
    )
