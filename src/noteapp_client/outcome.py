"""Single-fire operation outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import NotesClientError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Success-with-value or failure-with-error, never both."""

    value: T | None = None
    error: NotesClientError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: NotesClientError) -> Outcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return None if self.error is None else str(self.error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
