"""
tooldeck domain model.

Immutable state, event-sourced aggregates and Result-returning
operations for Resources, Apps and Runs.

Aggregate operations live as functions in their modules:

    from tooldeck.domain import app, resource, run

    resource_agg = resource.create_http(...).unwrap()
    app_agg = app.create(resource=resource_agg.state, ...).unwrap()
    run_agg = run.create(app_agg.state, {"id": "42"}).unwrap()
"""

from .errors import DomainError, ErrorKind, InvariantViolation, UnwrapError
from .result import Result, collect
from .aggregate import Aggregate, get_uncommitted_events, mark_committed
from .values import (
    DatabaseAuthScheme,
    DatabaseConfig,
    DatabaseEngine,
    HttpMethod,
    KeyValuePair,
    ResourceKind,
    RunStatus,
)
from .inputs import Input, InputKind, InputType, RadioOption
from .events import (
    AppCreated,
    AppDeleted,
    AppUpdated,
    DomainEvent,
    FieldChange,
    ResourceCreated,
    ResourceDeleted,
    ResourceRestored,
    ResourceUpdated,
    RunCreated,
    RunStatusChanged,
)
from .request import ExecutableHttpRequest
from .resource import HttpTemplate, Resource
from .app import App
from .run import Run, RunInputValue

__all__ = [
    # Errors and results
    "DomainError",
    "ErrorKind",
    "InvariantViolation",
    "UnwrapError",
    "Result",
    "collect",
    # Aggregate
    "Aggregate",
    "get_uncommitted_events",
    "mark_committed",
    # Values
    "DatabaseAuthScheme",
    "DatabaseConfig",
    "DatabaseEngine",
    "HttpMethod",
    "KeyValuePair",
    "ResourceKind",
    "RunStatus",
    "Input",
    "InputKind",
    "InputType",
    "RadioOption",
    # Events
    "DomainEvent",
    "FieldChange",
    "ResourceCreated",
    "ResourceUpdated",
    "ResourceDeleted",
    "ResourceRestored",
    "AppCreated",
    "AppUpdated",
    "AppDeleted",
    "RunCreated",
    "RunStatusChanged",
    # Entities
    "ExecutableHttpRequest",
    "HttpTemplate",
    "Resource",
    "App",
    "Run",
    "RunInputValue",
]
