"""Exponential backoff and the retry runner wrapped around outbound HTTP calls."""

from __future__ import annotations

import functools
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from nakadi.config import (
    DEFAULT_INITIAL_RETRY_INTERVAL,
    DEFAULT_MAX_ELAPSED_TIME,
    DEFAULT_MAX_RETRY_INTERVAL,
    RetryOptions,
)
from nakadi.errors import RemoteError, RetryExhaustedError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLIER = 2.0
DEFAULT_RANDOMIZATION_FACTOR = 0.5

type Clock = Callable[[], float]
type RandomSource = Callable[[], float]


class Backoff(Protocol):
    """Stateful sequence of wait intervals for a single call."""

    def next_backoff(self) -> float | None:
        """Return seconds to wait before the next attempt, or None to stop."""


class StopBackoff:
    """Backoff that never schedules another attempt."""

    def next_backoff(self) -> float | None:
        return None


class ExponentialBackoff:
    """Randomized exponential backoff bounded by a maximum elapsed time.

    Each call to :meth:`next_backoff` returns the current interval randomized
    by ``randomization_factor`` in both directions, then grows the current
    interval by ``multiplier`` up to ``max_interval``. Once the time elapsed
    since construction (or :meth:`reset`) plus the next wait would exceed
    ``max_elapsed_time`` the sequence stops. A ``max_elapsed_time`` of zero
    never stops.
    """

    def __init__(
        self,
        *,
        initial_interval: float,
        max_interval: float,
        max_elapsed_time: float,
        multiplier: float = DEFAULT_MULTIPLIER,
        randomization_factor: float = DEFAULT_RANDOMIZATION_FACTOR,
        clock: Clock = time.monotonic,
        random_source: RandomSource = random.random,
    ) -> None:
        if initial_interval <= 0:
            msg = "initial_interval must be positive"
            raise ValueError(msg)
        if max_interval < initial_interval:
            msg = "max_interval must not be smaller than initial_interval"
            raise ValueError(msg)
        if not 0 <= randomization_factor < 1:
            msg = "randomization_factor must be in [0, 1)"
            raise ValueError(msg)
        self.initial_interval = initial_interval
        self.max_interval = max_interval
        self.max_elapsed_time = max_elapsed_time
        self.multiplier = multiplier
        self.randomization_factor = randomization_factor
        self._clock = clock
        self._random = random_source
        self._current_interval = initial_interval
        self._started_at = clock()

    @property
    def current_interval(self) -> float:
        return self._current_interval

    def reset(self) -> None:
        self._current_interval = self.initial_interval
        self._started_at = self._clock()

    def elapsed(self) -> float:
        return self._clock() - self._started_at

    def next_backoff(self) -> float | None:
        elapsed = self.elapsed()
        delay = self._randomized(self._current_interval)
        self._increment()
        if self.max_elapsed_time > 0 and elapsed + delay > self.max_elapsed_time:
            return None
        return delay

    def _randomized(self, interval: float) -> float:
        delta = self.randomization_factor * interval
        low = interval - delta
        high = interval + delta
        return low + self._random() * (high - low)

    def _increment(self) -> None:
        if self._current_interval >= self.max_interval / self.multiplier:
            self._current_interval = self.max_interval
        else:
            self._current_interval *= self.multiplier


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Immutable factory for per-call backoff sequences."""

    enabled: bool = False
    initial_interval: float = DEFAULT_INITIAL_RETRY_INTERVAL
    max_interval: float = DEFAULT_MAX_RETRY_INTERVAL
    max_elapsed_time: float = DEFAULT_MAX_ELAPSED_TIME
    multiplier: float = DEFAULT_MULTIPLIER
    randomization_factor: float = DEFAULT_RANDOMIZATION_FACTOR
    clock: Clock = field(default=time.monotonic, repr=False, compare=False)
    random_source: RandomSource = field(default=random.random, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.enabled:
            return
        if self.initial_interval <= 0:
            msg = "initial_interval must be positive"
            raise ValueError(msg)
        if self.max_interval < self.initial_interval:
            msg = "max_interval must not be smaller than initial_interval"
            raise ValueError(msg)
        if self.max_elapsed_time < 0:
            msg = "max_elapsed_time must not be negative"
            raise ValueError(msg)
        if not 0 <= self.randomization_factor < 1:
            msg = "randomization_factor must be in [0, 1)"
            raise ValueError(msg)

    @classmethod
    def from_options(cls, options: RetryOptions | None = None) -> BackoffPolicy:
        """Build a policy; a maximum interval below the initial one is raised to it."""
        resolved = (options or RetryOptions()).with_defaults()
        initial_interval = float(resolved.initial_retry_interval or 0)
        return cls(
            enabled=resolved.retry,
            initial_interval=initial_interval,
            max_interval=max(float(resolved.max_retry_interval or 0), initial_interval),
            max_elapsed_time=float(resolved.max_elapsed_time or 0),
        )

    def new_backoff(self) -> Backoff:
        """Create a fresh sequence; never share the result between calls."""
        if not self.enabled:
            return StopBackoff()
        return ExponentialBackoff(
            initial_interval=self.initial_interval,
            max_interval=self.max_interval,
            max_elapsed_time=self.max_elapsed_time,
            multiplier=self.multiplier,
            randomization_factor=self.randomization_factor,
            clock=self.clock,
            random_source=self.random_source,
        )


def is_retryable(exc: Exception) -> bool:
    """Transport failures and 5xx/429 responses are transient."""
    if isinstance(exc, TransportError):
        return True
    if isinstance(exc, RemoteError):
        return exc.retryable
    return False


def retry[T](
    operation: Callable[[], T],
    policy: BackoffPolicy,
    *,
    retryable: Callable[[Exception], bool] = is_retryable,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "request",
) -> T:
    """Run ``operation`` until it succeeds or the policy gives up.

    With a disabled policy the operation runs once and its error propagates
    unchanged. With an enabled policy, exhausting the backoff raises
    :class:`RetryExhaustedError` chained to the last error.
    """
    backoff = policy.new_backoff()
    attempts = 0
    while True:
        attempts += 1
        try:
            return operation()
        except Exception as exc:
            if not retryable(exc):
                raise
            delay = backoff.next_backoff()
            if delay is None:
                if not policy.enabled:
                    raise
                logger.warning("%s failed after %d attempts: %s", description, attempts, exc)
                raise RetryExhaustedError(exc, attempts=attempts) from exc
            logger.warning(
                "%s failed on attempt %d (%s), retrying in %.3fs",
                description,
                attempts,
                exc,
                delay,
            )
            sleep(delay)


def retrying[**P, T](
    policy: BackoffPolicy,
    *,
    retryable: Callable[[Exception], bool] = is_retryable,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator form of :func:`retry`."""

    def decorate(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return retry(
                lambda: func(*args, **kwargs),
                policy,
                retryable=retryable,
                sleep=sleep,
                description=func.__name__,
            )

        return wrapper

    return decorate
