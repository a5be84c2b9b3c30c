"""
Conflict Validator.

Keeps the Resource-level and App-level parameter namespaces disjoint.
For each category (URL parameters, headers, body) the keys a Resource
defines and the keys any App bound to it defines must never overlap,
so composing a request is plain concatenation.

The check runs on every mutation of either side:
    - App side: candidate App changes vs. the Resource snapshot
    - Resource side: candidate Resource changes vs. every bound App snapshot

Only keys are compared; values are irrelevant. The validator does not
load anything itself; callers pass pre-fetched snapshots.

Usage:
    result = check_resource_to_app_conflicts(
        resource.to_conflict_snapshot(),
        url_parameters=[("token", "xyz")],
    )
    if result.is_error:
        print(result.error.message)
        # App cannot override existing Resource values: URL parameters: token
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence
from uuid import UUID

from tooldeck.domain.errors import DomainError
from tooldeck.domain.result import Result

logger = logging.getLogger(__name__)

Pairs = Sequence[tuple[str, str]]


@dataclass(frozen=True, slots=True)
class ResourceConflictSnapshot:
    """Key-value collections of one Resource, as seen by its Apps."""

    url_parameters: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    body: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class AppConflictSnapshot:
    """Key-value collections of one App bound to the Resource being changed."""

    app_id: UUID | str
    url_parameters: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    body: tuple[tuple[str, str], ...] = ()


def find_key_conflicts(
    existing: Pairs | None,
    candidate: Pairs | None,
    label: str,
) -> str | None:
    """
    Intersect the key sets of two collections.

    Returns a "<label>: k1, k2" description of the overlap, or None when
    either side is absent or the keys are disjoint.
    """
    if existing is None or candidate is None:
        return None

    existing_keys = {key for key, _ in existing}
    candidate_keys = {key for key, _ in candidate}
    conflicts = sorted(existing_keys & candidate_keys)

    if not conflicts:
        return None
    return f"{label}: {', '.join(conflicts)}"


def check_resource_to_app_conflicts(
    resource: ResourceConflictSnapshot,
    url_parameters: Pairs | None = None,
    headers: Pairs | None = None,
    body: Pairs | None = None,
) -> Result[None]:
    """
    Check candidate App collections against the Resource's keys.

    Categories passed as None are not being changed and are skipped.
    """
    conflicts = _collect(
        [
            find_key_conflicts(resource.url_parameters, url_parameters, "URL parameters"),
            find_key_conflicts(resource.headers, headers, "Headers"),
            find_key_conflicts(resource.body, body, "Body parameters"),
        ]
    )

    if conflicts:
        message = f"App cannot override existing Resource values: {'; '.join(conflicts)}"
        logger.info(f"[conflicts] {message}")
        return Result.fail(DomainError.conflict(message))

    return Result.ok(None)


def check_app_to_resource_conflicts(
    apps: Iterable[AppConflictSnapshot],
    url_parameters: Pairs | None = None,
    headers: Pairs | None = None,
    body: Pairs | None = None,
) -> Result[None]:
    """
    Check candidate Resource collections against every bound App.

    Conflicts from all Apps are gathered into a single error naming each
    App and category.
    """
    conflicts: list[str] = []

    for app in apps:
        conflicts.extend(
            _collect(
                [
                    find_key_conflicts(
                        app.url_parameters, url_parameters, f"App {app.app_id} URL parameters"
                    ),
                    find_key_conflicts(app.headers, headers, f"App {app.app_id} Headers"),
                    find_key_conflicts(app.body, body, f"App {app.app_id} Body parameters"),
                ]
            )
        )

    if conflicts:
        message = f"Resource cannot override existing App values: {'; '.join(conflicts)}"
        logger.info(f"[conflicts] {message}")
        return Result.fail(DomainError.conflict(message))

    return Result.ok(None)


def _collect(found: list[str | None]) -> list[str]:
    return [item for item in found if item is not None]
