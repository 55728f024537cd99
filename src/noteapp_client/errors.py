"""Client fault taxonomy."""

from __future__ import annotations

from dataclasses import dataclass


class NotesClientError(RuntimeError):
    """Base class for every fault surfaced by the notes client."""


@dataclass(frozen=True, slots=True)
class TransportError(NotesClientError):
    """Raised when the request never produced an HTTP response."""

    method: str
    url: str
    reason: str

    def __str__(self) -> str:
        return f"Network error: {self.reason}"


@dataclass(frozen=True, slots=True)
class ServerError(NotesClientError):
    """Raised when the notes API returns a non-success response."""

    status_code: int
    method: str
    url: str
    response_text: str

    def __str__(self) -> str:
        return f"Error {self.status_code}: {self.response_text}"


@dataclass(frozen=True, slots=True)
class DecodeError(NotesClientError):
    """Raised when a response body does not have the expected shape."""

    method: str
    url: str
    reason: str

    def __str__(self) -> str:
        return f"Failed to parse response: {self.reason}"
