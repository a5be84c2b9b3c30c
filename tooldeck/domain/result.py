"""
Result type for fallible domain operations.

Every validated operation returns a Result instead of raising:

    result = Run.create(app, input_values)

    if result.is_ok:
        run = result.value
    else:
        print(f"{result.error.kind}: {result.error.message}")

Results chain with bind() and map(), short-circuiting on the first error:

    result = (
        KeyValuePair.create("token", "abc")
        .map(lambda pair: (pair,))
        .bind(lambda pairs: check(pairs))
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from .errors import DomainError, UnwrapError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """
    Outcome of a fallible operation.

    Exactly one of value/error is meaningful; check is_ok first.
    Build instances with Result.ok() / Result.fail() rather than the
    constructor.
    """

    value: T | None = None
    error: DomainError | None = None

    @classmethod
    def ok(cls, value: T = None) -> Result[T]:
        return cls(value=value, error=None)

    @classmethod
    def fail(cls, error: DomainError) -> Result[T]:
        return cls(value=None, error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return the value, raising UnwrapError if this is a failure."""
        if self.error is not None:
            raise UnwrapError(self.error)
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return default if self.error is not None else self.value  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        if self.error is not None:
            return Result.fail(self.error)
        return Result.ok(fn(self.value))  # type: ignore[arg-type]

    def bind(self, fn: Callable[[T], Result[U]]) -> Result[U]:
        if self.error is not None:
            return Result.fail(self.error)
        return fn(self.value)  # type: ignore[arg-type]


def collect(results: Iterable[Result[T]]) -> Result[tuple[T, ...]]:
    """Gather values into a tuple, returning the first error encountered."""
    values: list[T] = []
    for result in results:
        if result.error is not None:
            return Result.fail(result.error)
        values.append(result.value)  # type: ignore[arg-type]
    return Result.ok(tuple(values))
