"""
tooldeck services.

Stateless operations that span more than one aggregate:

- conflicts: Resource/App key-namespace checks
- composer: Resource + App -> ExecutableHttpRequest
- substitution: {title} placeholder resolution
- runs: run preparation and outcome recording (import from
  tooldeck.services.runs)
"""

from .conflicts import (
    AppConflictSnapshot,
    ResourceConflictSnapshot,
    check_app_to_resource_conflicts,
    check_resource_to_app_conflicts,
)
from .composer import compose_executable_request, join_url
from .substitution import substitute

__all__ = [
    "AppConflictSnapshot",
    "ResourceConflictSnapshot",
    "check_app_to_resource_conflicts",
    "check_resource_to_app_conflicts",
    "compose_executable_request",
    "join_url",
    "substitute",
]
