"""
Run preparation flow.

Ties the run lifecycle together for an orchestrator:

    1. prepare_run: validate inputs, compose and resolve the request
    2. start_run: mark the Run as Running just before the external call
    3. record_outcome: record the call's response or error

Input validation errors are returned as errors and no Run exists.
Setup failures after the Run exists (missing Resource, composition
errors) resolve the Run to InvalidConfiguration instead, so that the
attempt is still recorded.

Usage:
    result = prepare_run(app, resource, {"id": "42"})
    if result.is_error:
        return result.error

    run = result.value
    if run.state.status == RunStatus.PENDING:
        run = start_run(run).unwrap()
        request = run.state.executable_request.to_httpx_request()
        ...
        run = record_outcome(run, response=response.text).unwrap()
"""

from __future__ import annotations

import logging

from tooldeck.config import EngineSettings, get_settings
from tooldeck.domain import run as run_lifecycle
from tooldeck.domain.app import App
from tooldeck.domain.errors import DomainError
from tooldeck.domain.resource import Resource
from tooldeck.domain.result import Result
from tooldeck.domain.run import InputValues, RunAggregate
from tooldeck.observability import RunLogger

logger = logging.getLogger(__name__)

RESOURCE_NOT_FOUND_MESSAGE = "Associated resource not found"


def _run_logger(settings: EngineSettings, run_logger: RunLogger | None) -> RunLogger:
    if run_logger is not None:
        return run_logger
    return RunLogger(service_name=settings.service_name, enabled=settings.log_events)


def prepare_run(
    app: App,
    resource: Resource | None,
    input_values: InputValues,
    settings: EngineSettings | None = None,
    run_logger: RunLogger | None = None,
) -> Result[RunAggregate]:
    """
    Create a Run and resolve its request.

    Returns:
        - error when the input values do not match the App's schema
        - an InvalidConfiguration Run when resource is None or
          composition fails
        - otherwise a Pending Run carrying its ExecutableHttpRequest
    """
    settings = settings or get_settings()
    run_logger = _run_logger(settings, run_logger)

    created = run_lifecycle.create(
        app, input_values, validate_types=settings.strict_input_types
    )
    if created.is_error:
        run_logger.run_rejected(app.id, created.error)
        return created

    run = created.value
    run_logger.run_created(run.state)

    if resource is None:
        logger.warning(f"[runs] Run {run.state.id}: resource {app.resource_id} not found")
        return _resolve_invalid(run, RESOURCE_NOT_FOUND_MESSAGE, run_logger)

    composed = run_lifecycle.compose_executable_request_from_app_and_resource(run, app, resource)
    if composed.is_error:
        logger.warning(f"[runs] Run {run.state.id}: {composed.error}")
        return _resolve_invalid(run, composed.error.message, run_logger)

    run_logger.request_composed(composed.value.state)
    return composed


def start_run(run: RunAggregate, run_logger: RunLogger | None = None) -> Result[RunAggregate]:
    """Mark a prepared Run as Running."""
    if run.state.executable_request is None:
        return Result.fail(
            DomainError.invalid_operation("Cannot start a run without a composed request")
        )

    old_status = run.state.status
    result = run_lifecycle.mark_as_running(run)
    if result.is_ok and run_logger is not None:
        run_logger.status_changed(result.value.state, old_status)
    return result


def record_outcome(
    run: RunAggregate,
    response: str | None = None,
    error: str | None = None,
    run_logger: RunLogger | None = None,
) -> Result[RunAggregate]:
    """
    Record the external call's result on a Running Run.

    An error message resolves the Run to Failure; otherwise it resolves
    to Success with the response (empty string when there was no body).
    """
    if error is not None:
        result = run_lifecycle.mark_as_failure(run, error)
    else:
        result = run_lifecycle.mark_as_success(run, response if response is not None else "")

    if result.is_ok and run_logger is not None:
        run_logger.run_completed(result.value.state)
    return result


def _resolve_invalid(
    run: RunAggregate, message: str, run_logger: RunLogger
) -> Result[RunAggregate]:
    resolved = run_lifecycle.mark_as_invalid_configuration(run, message)
    if resolved.is_ok:
        run_logger.run_completed(resolved.value.state)
    return resolved
