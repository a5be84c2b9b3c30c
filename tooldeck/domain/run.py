"""
Run lifecycle.

A Run is one execution attempt of an App with concrete input values.
Its status only moves forward:

    Pending ──► Running ──► Success
       │           ├──────► Failure
       │           └──────► InvalidConfiguration
       └──────────────────► InvalidConfiguration

Terminal states accept no further transition. Every transition appends
a RunStatusChanged event; an illegal transition returns an
InvalidOperation error and leaves the Run as it was.

Usage:
    run = create(app, [RunInputValue("id", "42")]).unwrap()
    run = compose_executable_request_from_app_and_resource(run, app, resource).unwrap()
    run = mark_as_running(run).unwrap()

    # ... external orchestrator performs the call ...

    run = mark_as_success(run, response_text).unwrap()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping
from uuid import UUID, uuid4

from tooldeck.services.composer import compose_executable_request
from tooldeck.services.substitution import substitute

from .aggregate import Aggregate
from .app import App
from .errors import DomainError
from .events import RunCreated, RunStatusChanged, _utc_now
from .request import ExecutableHttpRequest
from .resource import Resource
from .result import Result
from .values import RunStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunInputValue:
    """A concrete value supplied for one of the App's Inputs."""

    title: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "value": self.value}


@dataclass(frozen=True, slots=True)
class Run:
    """
    Run state.

    Attributes:
        id: Run identifier
        app_id: App being executed
        status: Current lifecycle status
        input_values: Validated input values, in the order supplied
        executable_request: Resolved request, set by composition only
        response: Captured response on success
        error_message: Captured error on failure or invalid configuration
        started_at: When the Run entered Running
        completed_at: When the Run reached a terminal state
        created_at: When the Run was created
    """

    id: UUID
    app_id: UUID
    status: RunStatus = RunStatus.PENDING
    input_values: tuple[RunInputValue, ...] = ()
    executable_request: ExecutableHttpRequest | None = None
    response: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def input_mapping(self) -> dict[str, str]:
        return {item.title: item.value for item in self.input_values}

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


RunAggregate = Aggregate[Run]

InputValues = (
    Iterable[RunInputValue]
    | Iterable[tuple[str, str]]
    | Iterable[Mapping[str, str]]
    | Mapping[str, str]
)


def _normalize_input_values(input_values: InputValues) -> tuple[RunInputValue, ...]:
    if isinstance(input_values, Mapping):
        return tuple(RunInputValue(title, value) for title, value in input_values.items())
    normalized = []
    for item in input_values:
        if isinstance(item, RunInputValue):
            normalized.append(item)
        elif isinstance(item, Mapping):
            # {"title": ..., "value": ...}, the serialized RunInputValue shape
            normalized.append(RunInputValue(item["title"], item["value"]))
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            title, value = item
            normalized.append(RunInputValue(title, value))
        else:
            raise TypeError(f"Unsupported run input value: {item!r}")
    return tuple(normalized)


def _validate_input_values(
    app: App,
    input_values: tuple[RunInputValue, ...],
    validate_types: bool,
) -> Result[tuple[RunInputValue, ...]]:
    declared = {item.title: item for item in app.inputs}
    provided = [item.title for item in input_values]

    missing = [item.title for item in app.inputs if item.required and item.title not in provided]
    if missing:
        return Result.fail(
            DomainError.validation(f"Missing required inputs: {', '.join(missing)}")
        )

    undeclared = [title for title in provided if title not in declared]
    if undeclared:
        return Result.fail(
            DomainError.validation(f"Invalid inputs not defined in app: {', '.join(undeclared)}")
        )

    duplicates = sorted({title for title in provided if provided.count(title) > 1})
    if duplicates:
        return Result.fail(
            DomainError.validation(f"Duplicate input values: {', '.join(duplicates)}")
        )

    if validate_types:
        for item in input_values:
            checked = declared[item.title].type.validate_value(item.value)
            if checked.is_error:
                return Result.fail(
                    DomainError.validation(
                        f"Invalid value for input '{item.title}': {checked.error.message}"
                    )
                )

    return Result.ok(input_values)


def create(
    app: App,
    input_values: InputValues,
    *,
    validate_types: bool = False,
    run_id: UUID | None = None,
) -> Result[RunAggregate]:
    """
    Validate input values against the App's schema and create a Pending Run.

    Every required Input must have a value and every value must match a
    declared Input. With validate_types, each value is also checked
    against its Input's type.

    A title supplied more than once is a validation error ("Duplicate
    input values: ..."), checked after the missing and undeclared
    checks. Earlier stored Runs were built by letting the last value for
    a title win; this function no longer accepts such input.

    input_values may be a mapping, (title, value) pairs, RunInputValues
    or {"title": ..., "value": ...} dicts. Any other item shape raises
    TypeError.
    """
    normalized = _normalize_input_values(input_values)
    validated = _validate_input_values(app, normalized, validate_types)
    if validated.is_error:
        logger.info(f"[run] Rejected run for app {app.id}: {validated.error.message}")
        return Result.fail(validated.error)

    run = Run(
        id=run_id or uuid4(),
        app_id=app.id,
        status=RunStatus.PENDING,
        input_values=validated.value,
        created_at=_utc_now(),
    )
    event = RunCreated(run_id=run.id, app_id=app.id, input_values=run.input_values)

    logger.debug(f"[run] Created run {run.id} for app {app.id}")
    return Result.ok(Aggregate.create(run, (event,)))


def compose_executable_request_from_app_and_resource(
    run: RunAggregate,
    app: App,
    resource: Resource,
) -> Result[RunAggregate]:
    """
    Compose the request and substitute the Run's input values into it.

    This is preparation, not a transition: the status is unchanged and
    no event is appended.
    """
    if run.state.is_terminal:
        return Result.fail(
            DomainError.invalid_operation(
                f"Cannot compose a request for a run in status {run.state.status}"
            )
        )

    composed = compose_executable_request(resource, app)
    if composed.is_error:
        return Result.fail(composed.error)

    resolved = substitute(composed.value, run.state.input_mapping)
    return Result.ok(run.with_state(executable_request=resolved))


# =============================================================================
# Status transitions
# =============================================================================


def _transition(run: RunAggregate, target: RunStatus, **changes: Any) -> Result[RunAggregate]:
    current = run.state.status
    if not current.can_transition_to(target):
        return Result.fail(
            DomainError.invalid_operation(f"Cannot transition run from {current} to {target}")
        )

    event = RunStatusChanged(run_id=run.state.id, old_status=current, new_status=target)
    logger.debug(f"[run] Run {run.state.id}: {current} -> {target}")
    return Result.ok(run.evolve(event, status=target, **changes))


def mark_as_running(run: RunAggregate) -> Result[RunAggregate]:
    return _transition(run, RunStatus.RUNNING, started_at=_utc_now())


def mark_as_success(run: RunAggregate, response: str) -> Result[RunAggregate]:
    return _transition(run, RunStatus.SUCCESS, response=response, completed_at=_utc_now())


def mark_as_failure(run: RunAggregate, error_message: str) -> Result[RunAggregate]:
    return _transition(
        run, RunStatus.FAILURE, error_message=error_message, completed_at=_utc_now()
    )


def mark_as_invalid_configuration(run: RunAggregate, error_message: str) -> Result[RunAggregate]:
    """Resolve a Run whose setup failed before any external call."""
    return _transition(
        run,
        RunStatus.INVALID_CONFIGURATION,
        error_message=error_message,
        completed_at=_utc_now(),
    )
