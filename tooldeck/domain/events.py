"""
Domain events for tooldeck aggregates.

Events are immutable records appended to an Aggregate by each mutation.
The persistence collaborator stores them in order, exactly once per
state transition; to_dict() gives the serializable form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from .values import KeyValuePair, RunStatus


def _utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


def _serialize(value: Any) -> Any:
    if isinstance(value, KeyValuePair):
        return {"key": value.key, "value": value.value}
    if isinstance(value, (tuple, list)):
        return [_serialize(item) for item in value]
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """
    Base class for all domain events.

    Every event has a unique id and the UTC time it occurred.
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utc_now)

    @property
    def event_type(self) -> str:
        """Event type name for logging and storage."""
        return self.__class__.__name__

    def _payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            **{key: _serialize(value) for key, value in self._payload().items()},
        }

    def __repr__(self) -> str:
        return f"{self.event_type}(id={str(self.event_id)[:8]}...)"


@dataclass(frozen=True, slots=True)
class FieldChange:
    """A single field update recorded inside an *Updated event."""

    field: str
    old_value: Any
    new_value: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "old_value": _serialize(self.old_value),
            "new_value": _serialize(self.new_value),
        }


# =============================================================================
# Resource Events
# =============================================================================


@dataclass(frozen=True, kw_only=True, slots=True)
class ResourceCreated(DomainEvent):
    resource_id: UUID
    name: str
    description: str
    space_id: UUID
    kind: str
    base_url: str | None = None
    url_parameters: tuple[KeyValuePair, ...] = ()
    headers: tuple[KeyValuePair, ...] = ()
    body: tuple[KeyValuePair, ...] = ()
    database_name: str | None = None

    def _payload(self) -> dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "name": self.name,
            "description": self.description,
            "space_id": self.space_id,
            "kind": self.kind,
            "base_url": self.base_url,
            "url_parameters": self.url_parameters,
            "headers": self.headers,
            "body": self.body,
            "database_name": self.database_name,
        }


@dataclass(frozen=True, kw_only=True, slots=True)
class ResourceUpdated(DomainEvent):
    resource_id: UUID
    changes: tuple[FieldChange, ...] = ()

    def _payload(self) -> dict[str, Any]:
        return {"resource_id": self.resource_id, "changes": self.changes}


@dataclass(frozen=True, kw_only=True, slots=True)
class ResourceDeleted(DomainEvent):
    resource_id: UUID
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"resource_id": self.resource_id, "name": self.name}


@dataclass(frozen=True, kw_only=True, slots=True)
class ResourceRestored(DomainEvent):
    resource_id: UUID
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"resource_id": self.resource_id, "name": self.name}


# =============================================================================
# App Events
# =============================================================================


@dataclass(frozen=True, kw_only=True, slots=True)
class AppCreated(DomainEvent):
    app_id: UUID
    name: str
    folder_id: UUID
    resource_id: UUID
    http_method: str
    inputs: tuple[Any, ...] = ()
    url_path: str | None = None
    url_parameters: tuple[KeyValuePair, ...] = ()
    headers: tuple[KeyValuePair, ...] = ()
    body: tuple[KeyValuePair, ...] = ()

    def _payload(self) -> dict[str, Any]:
        return {
            "app_id": self.app_id,
            "name": self.name,
            "folder_id": self.folder_id,
            "resource_id": self.resource_id,
            "http_method": self.http_method,
            "inputs": self.inputs,
            "url_path": self.url_path,
            "url_parameters": self.url_parameters,
            "headers": self.headers,
            "body": self.body,
        }


@dataclass(frozen=True, kw_only=True, slots=True)
class AppUpdated(DomainEvent):
    app_id: UUID
    changes: tuple[FieldChange, ...] = ()

    def _payload(self) -> dict[str, Any]:
        return {"app_id": self.app_id, "changes": self.changes}


@dataclass(frozen=True, kw_only=True, slots=True)
class AppDeleted(DomainEvent):
    app_id: UUID

    def _payload(self) -> dict[str, Any]:
        return {"app_id": self.app_id}


# =============================================================================
# Run Events
# =============================================================================


@dataclass(frozen=True, kw_only=True, slots=True)
class RunCreated(DomainEvent):
    run_id: UUID
    app_id: UUID
    input_values: tuple[Any, ...] = ()

    def _payload(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "app_id": self.app_id,
            "input_values": self.input_values,
        }


@dataclass(frozen=True, kw_only=True, slots=True)
class RunStatusChanged(DomainEvent):
    run_id: UUID
    old_status: RunStatus
    new_status: RunStatus

    def _payload(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
        }
