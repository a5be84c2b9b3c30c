"""
Resource aggregate.

A Resource is a reusable connection template shared by many Apps. It is
either an HTTP template (base URL plus default URL parameters, headers
and body) or a SQL connection; the two field sets are mutually
exclusive.

All operations are pure functions over Aggregate[Resource]. Validating
operations return a Result; each successful mutation returns a new
Aggregate with one event appended.

Usage:
    result = create_http(
        name="Users API",
        description="Internal users service",
        space_id=space_id,
        base_url="https://api.example.com/v1",
        headers=[("Authorization", "Bearer {token}")],
    )
    resource = result.unwrap()

    result = update_url_parameters(resource, [("page", "1")], bound_apps)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Sequence
from uuid import UUID, uuid4

from tooldeck.services.conflicts import (
    AppConflictSnapshot,
    ResourceConflictSnapshot,
    check_app_to_resource_conflicts,
)

from .aggregate import Aggregate
from .errors import DomainError
from .events import (
    FieldChange,
    ResourceCreated,
    ResourceDeleted,
    ResourceRestored,
    ResourceUpdated,
    _utc_now,
)
from .result import Result
from .values import (
    DatabaseConfig,
    KeyValuePair,
    ResourceKind,
    pairs_to_tuples,
    validate_base_url,
    validate_pairs,
    validate_resource_description,
    validate_resource_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HttpTemplate:
    """HTTP field set of a Resource."""

    base_url: str
    url_parameters: tuple[KeyValuePair, ...] = ()
    headers: tuple[KeyValuePair, ...] = ()
    body: tuple[KeyValuePair, ...] = ()


@dataclass(frozen=True, slots=True)
class Resource:
    """
    Resource state.

    Exactly one of http/database is set, matching kind.
    """

    id: UUID
    name: str
    description: str
    space_id: UUID
    kind: ResourceKind
    http: HttpTemplate | None = None
    database: DatabaseConfig | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_deleted: bool = False

    @property
    def base_url(self) -> str | None:
        return self.http.base_url if self.http else None

    @property
    def url_parameters(self) -> tuple[KeyValuePair, ...]:
        return self.http.url_parameters if self.http else ()

    @property
    def headers(self) -> tuple[KeyValuePair, ...]:
        return self.http.headers if self.http else ()

    @property
    def body(self) -> tuple[KeyValuePair, ...]:
        return self.http.body if self.http else ()


ResourceAggregate = Aggregate[Resource]

Pairs = Iterable[tuple[str, str]]


# =============================================================================
# Creation
# =============================================================================


def create_http(
    *,
    name: str,
    description: str,
    space_id: UUID,
    base_url: str,
    url_parameters: Pairs = (),
    headers: Pairs = (),
    body: Pairs = (),
    resource_id: UUID | None = None,
) -> Result[ResourceAggregate]:
    """Validate and create an HTTP Resource with a ResourceCreated event."""
    checks = _validate_identity(name, description)
    if checks.is_error:
        return Result.fail(checks.error)
    valid_name, valid_description = checks.value

    url_result = validate_base_url(base_url)
    if url_result.is_error:
        return Result.fail(url_result.error)

    collections = []
    for pairs in (url_parameters, headers, body):
        validated = validate_pairs(pairs)
        if validated.is_error:
            return Result.fail(validated.error)
        collections.append(validated.value)
    valid_params, valid_headers, valid_body = collections

    now = _utc_now()
    resource = Resource(
        id=resource_id or uuid4(),
        name=valid_name,
        description=valid_description,
        space_id=space_id,
        kind=ResourceKind.HTTP,
        http=HttpTemplate(
            base_url=url_result.value,
            url_parameters=valid_params,
            headers=valid_headers,
            body=valid_body,
        ),
        created_at=now,
        updated_at=now,
    )

    event = ResourceCreated(
        resource_id=resource.id,
        name=resource.name,
        description=resource.description,
        space_id=space_id,
        kind=ResourceKind.HTTP.value,
        base_url=resource.base_url,
        url_parameters=valid_params,
        headers=valid_headers,
        body=valid_body,
    )

    logger.debug(f"[resource] Created HTTP resource {resource.id} ({resource.name})")
    return Result.ok(Aggregate.create(resource, (event,)))


def create_sql(
    *,
    name: str,
    description: str,
    space_id: UUID,
    database: DatabaseConfig,
    resource_id: UUID | None = None,
) -> Result[ResourceAggregate]:
    """
    Create a SQL Resource.

    The DatabaseConfig is built (and validated) with DatabaseConfig.create.
    """
    checks = _validate_identity(name, description)
    if checks.is_error:
        return Result.fail(checks.error)
    valid_name, valid_description = checks.value

    if database is None:
        return Result.fail(DomainError.validation("SQL resource requires database settings"))

    now = _utc_now()
    resource = Resource(
        id=resource_id or uuid4(),
        name=valid_name,
        description=valid_description,
        space_id=space_id,
        kind=ResourceKind.SQL,
        database=database,
        created_at=now,
        updated_at=now,
    )

    event = ResourceCreated(
        resource_id=resource.id,
        name=resource.name,
        description=resource.description,
        space_id=space_id,
        kind=ResourceKind.SQL.value,
        database_name=database.database_name,
    )

    logger.debug(f"[resource] Created SQL resource {resource.id} ({resource.name})")
    return Result.ok(Aggregate.create(resource, (event,)))


def _validate_identity(name: str, description: str) -> Result[tuple[str, str]]:
    name_result = validate_resource_name(name)
    if name_result.is_error:
        return Result.fail(name_result.error)
    description_result = validate_resource_description(description)
    if description_result.is_error:
        return Result.fail(description_result.error)
    return Result.ok((name_result.value, description_result.value))


# =============================================================================
# Mutations
# =============================================================================


def update_name(resource: ResourceAggregate, new_name: str) -> Result[ResourceAggregate]:
    result = validate_resource_name(new_name)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change(resource, "name", result.value))


def update_description(
    resource: ResourceAggregate, new_description: str
) -> Result[ResourceAggregate]:
    result = validate_resource_description(new_description)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change(resource, "description", result.value))


def update_base_url(resource: ResourceAggregate, new_base_url: str) -> Result[ResourceAggregate]:
    guard = _require_kind(resource, ResourceKind.HTTP, "base URL")
    if guard.is_error:
        return Result.fail(guard.error)

    result = validate_base_url(new_base_url)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change_http(resource, "base_url", result.value))


def update_url_parameters(
    resource: ResourceAggregate,
    new_url_parameters: Pairs,
    bound_apps: Sequence[AppConflictSnapshot] = (),
) -> Result[ResourceAggregate]:
    """Replace the URL parameters after checking them against every bound App."""
    return _update_collection(resource, "url_parameters", new_url_parameters, bound_apps)


def update_headers(
    resource: ResourceAggregate,
    new_headers: Pairs,
    bound_apps: Sequence[AppConflictSnapshot] = (),
) -> Result[ResourceAggregate]:
    return _update_collection(resource, "headers", new_headers, bound_apps)


def update_body(
    resource: ResourceAggregate,
    new_body: Pairs,
    bound_apps: Sequence[AppConflictSnapshot] = (),
) -> Result[ResourceAggregate]:
    return _update_collection(resource, "body", new_body, bound_apps)


def update_database_config(
    resource: ResourceAggregate, new_config: DatabaseConfig
) -> Result[ResourceAggregate]:
    guard = _require_kind(resource, ResourceKind.SQL, "database settings")
    if guard.is_error:
        return Result.fail(guard.error)
    if new_config is None:
        return Result.fail(DomainError.validation("SQL resource requires database settings"))
    return Result.ok(_change(resource, "database", new_config))


def mark_for_deletion(resource: ResourceAggregate) -> ResourceAggregate:
    """Soft-delete the Resource."""
    state = resource.state
    event = ResourceDeleted(resource_id=state.id, name=state.name)
    return resource.evolve(event, is_deleted=True, updated_at=_utc_now())


def restore(
    resource: ResourceAggregate, new_name: str | None = None
) -> Result[ResourceAggregate]:
    """
    Undo a soft delete, optionally renaming the Resource.

    Renaming on restore lets callers resolve a name clash with a Resource
    created while this one was deleted.
    """
    state = resource.state
    if not state.is_deleted:
        return Result.fail(DomainError.invalid_operation("Resource is not deleted"))

    final_name = state.name
    if new_name is not None:
        name_result = validate_resource_name(new_name)
        if name_result.is_error:
            return Result.fail(name_result.error)
        final_name = name_result.value

    event = ResourceRestored(resource_id=state.id, name=final_name)
    return Result.ok(
        resource.evolve(event, name=final_name, is_deleted=False, updated_at=_utc_now())
    )


def to_conflict_snapshot(resource: Resource | ResourceAggregate) -> ResourceConflictSnapshot:
    """Key collections Apps bound to this Resource must not collide with."""
    state = resource.state if isinstance(resource, Aggregate) else resource
    return ResourceConflictSnapshot(
        url_parameters=pairs_to_tuples(state.url_parameters),
        headers=pairs_to_tuples(state.headers),
        body=pairs_to_tuples(state.body),
    )


# =============================================================================
# Helpers
# =============================================================================


def _require_kind(resource: ResourceAggregate, kind: ResourceKind, what: str) -> Result[None]:
    if resource.state.kind != kind:
        return Result.fail(
            DomainError.invalid_operation(
                f"Cannot update {what} on a {resource.state.kind.value} resource"
            )
        )
    return Result.ok(None)


def _update_collection(
    resource: ResourceAggregate,
    field_name: str,
    new_pairs: Pairs,
    bound_apps: Sequence[AppConflictSnapshot],
) -> Result[ResourceAggregate]:
    label = field_name.replace("_", " ")
    guard = _require_kind(resource, ResourceKind.HTTP, label)
    if guard.is_error:
        return Result.fail(guard.error)

    validated = validate_pairs(new_pairs)
    if validated.is_error:
        return Result.fail(validated.error)

    conflict = check_app_to_resource_conflicts(
        bound_apps, **{field_name: pairs_to_tuples(validated.value)}
    )
    if conflict.is_error:
        return Result.fail(conflict.error)

    return Result.ok(_change_http(resource, field_name, validated.value))


def _change(resource: ResourceAggregate, field_name: str, new_value: object) -> ResourceAggregate:
    state = resource.state
    event = ResourceUpdated(
        resource_id=state.id,
        changes=(FieldChange(field_name, getattr(state, field_name), new_value),),
    )
    return resource.evolve(event, **{field_name: new_value, "updated_at": _utc_now()})


def _change_http(
    resource: ResourceAggregate, field_name: str, new_value: object
) -> ResourceAggregate:
    state = resource.state
    old_http = state.http
    new_http = replace(old_http, **{field_name: new_value})
    event = ResourceUpdated(
        resource_id=state.id,
        changes=(FieldChange(field_name, getattr(old_http, field_name), new_value),),
    )
    return resource.evolve(event, http=new_http, updated_at=_utc_now())
