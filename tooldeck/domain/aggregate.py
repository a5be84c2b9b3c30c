"""
Event-sourced aggregate wrapper.

An Aggregate pairs immutable state with the ordered domain events that
have not been persisted yet. Mutations never touch an existing Aggregate;
they return a new one with the event appended.

Usage:
    agg = Aggregate.create(state, (created_event,))
    agg = agg.evolve(updated_event, name="New name")

    repository.save(agg.state, agg.uncommitted_events)
    agg = agg.mark_committed()
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Generic, Iterable, TypeVar

if TYPE_CHECKING:
    from .events import DomainEvent

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class Aggregate(Generic[S]):
    """
    Immutable state plus uncommitted events.

    Attributes:
        state: Current entity state (a frozen dataclass)
        uncommitted_events: Events produced since the last commit, oldest first
    """

    state: S
    uncommitted_events: tuple[DomainEvent, ...] = ()

    @classmethod
    def create(cls, state: S, events: Iterable[DomainEvent] = ()) -> Aggregate[S]:
        return cls(state=state, uncommitted_events=tuple(events))

    def get_uncommitted_events(self) -> tuple[DomainEvent, ...]:
        return self.uncommitted_events

    def mark_committed(self) -> Aggregate[S]:
        """Same state, empty event list."""
        return Aggregate(state=self.state, uncommitted_events=())

    def with_event(self, event: DomainEvent) -> Aggregate[S]:
        return Aggregate(state=self.state, uncommitted_events=(*self.uncommitted_events, event))

    def with_state(self, **changes: Any) -> Aggregate[S]:
        """Replace state fields without recording an event."""
        return Aggregate(
            state=replace(self.state, **changes),  # type: ignore[type-var]
            uncommitted_events=self.uncommitted_events,
        )

    def evolve(self, event: DomainEvent, **changes: Any) -> Aggregate[S]:
        """Replace state fields and append the event describing the change."""
        return Aggregate(
            state=replace(self.state, **changes),  # type: ignore[type-var]
            uncommitted_events=(*self.uncommitted_events, event),
        )


def get_uncommitted_events(aggregate: Aggregate[Any]) -> tuple[DomainEvent, ...]:
    return aggregate.uncommitted_events


def mark_committed(aggregate: Aggregate[S]) -> Aggregate[S]:
    return aggregate.mark_committed()
