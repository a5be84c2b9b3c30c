"""
tooldeck Configuration

Environment-driven engine settings.
"""

from .schemas import EngineSettings
from .settings import get_settings

__all__ = [
    "EngineSettings",
    "get_settings",
]
