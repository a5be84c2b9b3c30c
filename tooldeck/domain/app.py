"""
App aggregate.

An App is a named, parameterized action bound to exactly one HTTP
Resource. It declares the Inputs a Run must supply and its own URL
parameters, headers and body, which add to (never override) the
Resource's collections.

Every change to the App's key collections is checked against a snapshot
of its Resource, so the two key namespaces stay disjoint.

Usage:
    result = create(
        name="Get user",
        folder_id=folder_id,
        resource=resource.state,
        http_method="GET",
        inputs=[Input.create("id", InputType.integer(), required=True).unwrap()],
        url_path="/users/{id}",
    )
    app = result.unwrap()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable
from uuid import UUID, uuid4

from tooldeck.services.conflicts import (
    AppConflictSnapshot,
    ResourceConflictSnapshot,
    check_resource_to_app_conflicts,
)

from .aggregate import Aggregate
from .errors import DomainError
from .events import AppCreated, AppDeleted, AppUpdated, FieldChange, _utc_now
from .inputs import Input, validate_inputs
from .resource import Resource, to_conflict_snapshot
from .result import Result
from .values import (
    HttpMethod,
    KeyValuePair,
    ResourceKind,
    pairs_to_tuples,
    validate_app_name,
    validate_pairs,
    validate_url_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class App:
    """App state."""

    id: UUID
    name: str
    folder_id: UUID
    resource_id: UUID
    http_method: HttpMethod
    inputs: tuple[Input, ...] = ()
    url_path: str | None = None
    url_parameters: tuple[KeyValuePair, ...] = ()
    headers: tuple[KeyValuePair, ...] = ()
    body: tuple[KeyValuePair, ...] = ()
    use_json_body: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_deleted: bool = False

    def find_input(self, title: str) -> Input | None:
        for item in self.inputs:
            if item.title == title:
                return item
        return None


AppAggregate = Aggregate[App]

Pairs = Iterable[tuple[str, str]]


def create(
    *,
    name: str,
    folder_id: UUID,
    resource: Resource,
    http_method: str | HttpMethod,
    inputs: Iterable[Input] = (),
    url_path: str | None = None,
    url_parameters: Pairs = (),
    headers: Pairs = (),
    body: Pairs = (),
    use_json_body: bool = True,
    app_id: UUID | None = None,
) -> Result[AppAggregate]:
    """
    Validate and create an App bound to an HTTP Resource.

    Checks, in order: name, Resource kind, HTTP method, inputs, URL path,
    key-value pairs, then key conflicts with the Resource.
    """
    name_result = validate_app_name(name)
    if name_result.is_error:
        return Result.fail(name_result.error)

    if resource.kind != ResourceKind.HTTP:
        return Result.fail(
            DomainError.invalid_operation("Apps can only be bound to HTTP resources")
        )

    method_result = HttpMethod.from_string(http_method)
    if method_result.is_error:
        return Result.fail(method_result.error)

    inputs_result = validate_inputs(inputs)
    if inputs_result.is_error:
        return Result.fail(inputs_result.error)

    path_result = validate_url_path(url_path)
    if path_result.is_error:
        return Result.fail(path_result.error)

    collections = []
    for pairs in (url_parameters, headers, body):
        validated = validate_pairs(pairs)
        if validated.is_error:
            return Result.fail(validated.error)
        collections.append(validated.value)
    valid_params, valid_headers, valid_body = collections

    conflict = check_resource_to_app_conflicts(
        to_conflict_snapshot(resource),
        url_parameters=pairs_to_tuples(valid_params),
        headers=pairs_to_tuples(valid_headers),
        body=pairs_to_tuples(valid_body),
    )
    if conflict.is_error:
        return Result.fail(conflict.error)

    now = _utc_now()
    app = App(
        id=app_id or uuid4(),
        name=name_result.value,
        folder_id=folder_id,
        resource_id=resource.id,
        http_method=method_result.value,
        inputs=inputs_result.value,
        url_path=path_result.value,
        url_parameters=valid_params,
        headers=valid_headers,
        body=valid_body,
        use_json_body=use_json_body,
        created_at=now,
        updated_at=now,
    )

    event = AppCreated(
        app_id=app.id,
        name=app.name,
        folder_id=folder_id,
        resource_id=resource.id,
        http_method=app.http_method.value,
        inputs=app.inputs,
        url_path=app.url_path,
        url_parameters=valid_params,
        headers=valid_headers,
        body=valid_body,
    )

    logger.debug(f"[app] Created app {app.id} ({app.name}) on resource {resource.id}")
    return Result.ok(Aggregate.create(app, (event,)))


# =============================================================================
# Mutations
# =============================================================================


def update_name(app: AppAggregate, new_name: str) -> Result[AppAggregate]:
    result = validate_app_name(new_name)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change(app, "name", result.value))


def update_inputs(app: AppAggregate, new_inputs: Iterable[Input]) -> Result[AppAggregate]:
    result = validate_inputs(new_inputs)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change(app, "inputs", result.value))


def update_url_path(app: AppAggregate, new_url_path: str | None) -> Result[AppAggregate]:
    result = validate_url_path(new_url_path)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change(app, "url_path", result.value))


def update_http_method(app: AppAggregate, new_method: str) -> Result[AppAggregate]:
    result = HttpMethod.from_string(new_method)
    if result.is_error:
        return Result.fail(result.error)
    return Result.ok(_change(app, "http_method", result.value))


def update_url_parameters(
    app: AppAggregate,
    new_url_parameters: Pairs,
    resource_snapshot: ResourceConflictSnapshot,
) -> Result[AppAggregate]:
    """Replace the URL parameters after checking them against the Resource."""
    return _update_collection(app, "url_parameters", new_url_parameters, resource_snapshot)


def update_headers(
    app: AppAggregate,
    new_headers: Pairs,
    resource_snapshot: ResourceConflictSnapshot,
) -> Result[AppAggregate]:
    return _update_collection(app, "headers", new_headers, resource_snapshot)


def update_body(
    app: AppAggregate,
    new_body: Pairs,
    resource_snapshot: ResourceConflictSnapshot,
) -> Result[AppAggregate]:
    return _update_collection(app, "body", new_body, resource_snapshot)


def move_to_folder(app: AppAggregate, folder_id: UUID) -> AppAggregate:
    return _change(app, "folder_id", folder_id)


def mark_for_deletion(app: AppAggregate) -> AppAggregate:
    """Soft-delete the App."""
    event = AppDeleted(app_id=app.state.id)
    return app.evolve(event, is_deleted=True, updated_at=_utc_now())


def to_conflict_snapshot(app: App | AppAggregate) -> AppConflictSnapshot:
    """Key collections the bound Resource must not collide with."""
    state = app.state if isinstance(app, Aggregate) else app
    return AppConflictSnapshot(
        app_id=state.id,
        url_parameters=pairs_to_tuples(state.url_parameters),
        headers=pairs_to_tuples(state.headers),
        body=pairs_to_tuples(state.body),
    )


# =============================================================================
# Helpers
# =============================================================================


def _update_collection(
    app: AppAggregate,
    field_name: str,
    new_pairs: Pairs,
    resource_snapshot: ResourceConflictSnapshot,
) -> Result[AppAggregate]:
    validated = validate_pairs(new_pairs)
    if validated.is_error:
        return Result.fail(validated.error)

    conflict = check_resource_to_app_conflicts(
        resource_snapshot, **{field_name: pairs_to_tuples(validated.value)}
    )
    if conflict.is_error:
        return Result.fail(conflict.error)

    return Result.ok(_change(app, field_name, validated.value))


def _change(app: AppAggregate, field_name: str, new_value: object) -> AppAggregate:
    state = app.state
    event = AppUpdated(
        app_id=state.id,
        changes=(FieldChange(field_name, getattr(state, field_name), new_value),),
    )
    return app.evolve(event, **{field_name: new_value, "updated_at": _utc_now()})
