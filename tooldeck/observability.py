"""
Observability for tooldeck.

Structured logging for the run lifecycle and an in-memory audit trail of
committed domain events.

Design Philosophy:
- Structured logging by default (JSON-formatted, on stdlib logging)
- Events are the audit record; the trail only collects their dict form
- Nothing here changes domain behaviour; it only observes it
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Protocol

if TYPE_CHECKING:
    from tooldeck.domain.aggregate import Aggregate
    from tooldeck.domain.errors import DomainError
    from tooldeck.domain.events import DomainEvent
    from tooldeck.domain.run import Run

logger = logging.getLogger(__name__)


# =============================================================================
# Log Levels
# =============================================================================


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# =============================================================================
# Structured Logger Protocol
# =============================================================================


class StructuredLogger(Protocol):
    """
    Protocol for structured logging implementations.

    Structured loggers emit logs as key-value pairs rather than
    plain strings.
    """

    def debug(self, message: str, **context: Any) -> None: ...

    def info(self, message: str, **context: Any) -> None: ...

    def warning(self, message: str, **context: Any) -> None: ...

    def error(self, message: str, **context: Any) -> None: ...


# =============================================================================
# JSON Logger Implementation
# =============================================================================


@dataclass
class JSONLogger:
    """
    Structured logger that outputs JSON-formatted logs.

    Each log entry includes:
    - timestamp (ISO 8601)
    - level
    - message
    - context fields
    - optional correlation_id

    Example output:
        {"timestamp": "2026-01-02T10:30:00+00:00", "level": "info",
         "message": "Run created", "run_id": "...", "app_id": "..."}
    """

    name: str = "tooldeck"
    correlation_id: str | None = None
    extra_context: dict[str, Any] = field(default_factory=dict)
    _python_logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._python_logger = logging.getLogger(self.name)

    def _log(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        record = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level.value,
            "message": message,
            **self.extra_context,
            **context,
        }

        if self.correlation_id:
            record["correlation_id"] = self.correlation_id

        log_method = getattr(self._python_logger, level.value)
        log_method(json.dumps(record, default=str))

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(LogLevel.ERROR, message, context)

    def with_context(self, **extra: Any) -> JSONLogger:
        """Create a new logger with additional context."""
        return JSONLogger(
            name=self.name,
            correlation_id=self.correlation_id,
            extra_context={**self.extra_context, **extra},
        )


# =============================================================================
# Run Logger
# =============================================================================


@dataclass
class RunLogger:
    """
    Logger for run lifecycle milestones.

    Example:
        run_logger = RunLogger(service_name="tooldeck")
        run_logger.run_created(run.state)
        run_logger.request_composed(run.state)
        run_logger.run_completed(run.state)
    """

    service_name: str = "tooldeck"
    enabled: bool = True
    inner: StructuredLogger | None = None

    def __post_init__(self) -> None:
        if self.inner is None:
            self.inner = JSONLogger(
                name="tooldeck.runs",
                extra_context={"service": self.service_name},
            )

    def run_created(self, run: Run) -> None:
        if not self.enabled:
            return
        self.inner.info(
            "Run created",
            run_id=str(run.id),
            app_id=str(run.app_id),
            input_titles=[item.title for item in run.input_values],
        )

    def run_rejected(self, app_id: Any, error: DomainError) -> None:
        if not self.enabled:
            return
        self.inner.warning(
            "Run rejected",
            app_id=str(app_id),
            error_kind=error.kind.value,
            error=error.message,
        )

    def request_composed(self, run: Run) -> None:
        if not self.enabled or run.executable_request is None:
            return
        request = run.executable_request
        # Header and body values can carry credentials; log keys only.
        self.inner.debug(
            "Request composed",
            run_id=str(run.id),
            http_method=request.http_method,
            base_url=request.base_url,
            url_parameter_keys=[key for key, _ in request.url_parameters],
            header_keys=[key for key, _ in request.headers],
            body_keys=[key for key, _ in request.body],
        )

    def status_changed(self, run: Run, old_status: Any) -> None:
        if not self.enabled:
            return
        self.inner.debug(
            "Run status changed",
            run_id=str(run.id),
            from_status=str(old_status),
            to_status=str(run.status),
        )

    def run_completed(self, run: Run) -> None:
        if not self.enabled:
            return
        context = {
            "run_id": str(run.id),
            "app_id": str(run.app_id),
            "status": str(run.status),
        }
        if run.started_at and run.completed_at:
            duration = (run.completed_at - run.started_at).total_seconds() * 1000
            context["duration_ms"] = round(duration, 2)

        if run.error_message is None:
            self.inner.info("Run completed", **context)
        else:
            self.inner.error("Run completed", error=run.error_message, **context)


# =============================================================================
# Event Audit Trail
# =============================================================================


@dataclass
class EventAuditTrail:
    """
    In-memory collector of committed domain events.

    Stands in for the event store in tests and local tooling. Events are
    kept in their to_dict() form, in the order they were recorded.

    Not suitable for production use.
    """

    entries: list[dict[str, Any]] = field(default_factory=list)
    max_entries: int = 1000

    def record(self, events: Iterable[DomainEvent]) -> int:
        """Append events in order; returns how many were recorded."""
        count = 0
        for event in events:
            self.entries.append(event.to_dict())
            count += 1

        # Prevent unbounded growth
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries :]

        return count

    def commit(self, aggregate: Aggregate[Any]) -> Aggregate[Any]:
        """Record an aggregate's uncommitted events and return it committed."""
        self.record(aggregate.get_uncommitted_events())
        return aggregate.mark_committed()

    def find_by_type(self, event_type: str) -> list[dict[str, Any]]:
        return [entry for entry in self.entries if entry["event_type"] == event_type]

    def find_by_entity(self, entity_id: Any) -> list[dict[str, Any]]:
        """All entries mentioning the id as resource_id, app_id or run_id."""
        target = str(entity_id)
        return [
            entry
            for entry in self.entries
            if target in (entry.get("resource_id"), entry.get("app_id"), entry.get("run_id"))
        ]

    def event_types(self) -> list[str]:
        return [entry["event_type"] for entry in self.entries]

    def clear(self) -> None:
        self.entries.clear()


__all__ = [
    "LogLevel",
    "StructuredLogger",
    "JSONLogger",
    "RunLogger",
    "EventAuditTrail",
]
