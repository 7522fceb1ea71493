"""
Typed result of a domain command.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from .exceptions import SchedulingError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a command.

    ``value`` is always usable: on success it is the updated value, on
    failure it is the value the command was applied to, unchanged.
    """
    value: T
    error: SchedulingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, prior: T, error: SchedulingError) -> "Outcome[T]":
        return cls(value=prior, error=error)

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value
