"""Error hierarchy raised by the Nakadi client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nakadi.models.event_type import Problem


class NakadiError(RuntimeError):
    """Base class for every failure surfaced by the client."""


class TransportError(NakadiError):
    """Network, timeout or authentication-token failure before a response arrived."""


class DecodeError(NakadiError):
    """Response body could not be decoded as the expected JSON payload."""


class RemoteError(NakadiError):
    """Non-success status returned by the remote service."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        detail: str = "",
        problem: Problem | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.problem = problem

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class NotFoundError(RemoteError):
    """The addressed resource does not exist upstream."""


class ConflictError(RemoteError):
    """The resource already exists or conflicts with the current state."""


class RetryExhaustedError(NakadiError):
    """Raised once the backoff budget is consumed without a successful attempt."""

    def __init__(self, last_error: Exception, *, attempts: int) -> None:
        super().__init__(f"{last_error} (gave up after {attempts} attempts)")
        self.last_error = last_error
        self.attempts = attempts


def remote_error_for_status(
    message: str,
    *,
    status_code: int,
    detail: str = "",
    problem: Problem | None = None,
) -> RemoteError:
    """Pick the most specific remote error class for a status code."""
    error_class: type[RemoteError] = RemoteError
    if status_code == 404:
        error_class = NotFoundError
    elif status_code == 409:
        error_class = ConflictError
    return error_class(message, status_code=status_code, detail=detail, problem=problem)
