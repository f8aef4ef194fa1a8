"""Client and retry configuration."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace

DEFAULT_INITIAL_RETRY_INTERVAL = 0.01
DEFAULT_MAX_RETRY_INTERVAL = 10.0
DEFAULT_MAX_ELAPSED_TIME = 30.0
DEFAULT_CONNECTION_TIMEOUT = 30.0

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

type TokenProvider = Callable[[], str]


@dataclass(frozen=True, slots=True)
class RetryOptions:
    """Retry behaviour of the event type API.

    ``initial_retry_interval``, ``max_retry_interval`` and ``max_elapsed_time``
    are in seconds and only take effect when ``retry`` is enabled. Zero or
    unset values fall back to the defaults.
    """

    retry: bool = False
    initial_retry_interval: float | None = None
    max_retry_interval: float | None = None
    max_elapsed_time: float | None = None

    def with_defaults(self) -> RetryOptions:
        return replace(
            self,
            initial_retry_interval=self.initial_retry_interval
            or DEFAULT_INITIAL_RETRY_INTERVAL,
            max_retry_interval=self.max_retry_interval or DEFAULT_MAX_RETRY_INTERVAL,
            max_elapsed_time=self.max_elapsed_time or DEFAULT_MAX_ELAPSED_TIME,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RetryOptions:
        """Read ``NAKADI_RETRY`` and the ``NAKADI_*_RETRY_INTERVAL`` family."""
        env = os.environ if environ is None else environ
        return cls(
            retry=env.get("NAKADI_RETRY", "").strip().lower() in _TRUE_VALUES,
            initial_retry_interval=_seconds(env, "NAKADI_INITIAL_RETRY_INTERVAL"),
            max_retry_interval=_seconds(env, "NAKADI_MAX_RETRY_INTERVAL"),
            max_elapsed_time=_seconds(env, "NAKADI_MAX_ELAPSED_TIME"),
        ).with_defaults()


@dataclass(frozen=True, slots=True)
class ClientOptions:
    """Optional parameters of the HTTP client."""

    token_provider: TokenProvider | None = None
    connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientOptions:
        env = os.environ if environ is None else environ
        token = env.get("NAKADI_TOKEN", "").strip()
        timeout = _seconds(env, "NAKADI_CONNECTION_TIMEOUT")
        return cls(
            token_provider=(lambda: token) if token else None,
            connection_timeout=timeout or DEFAULT_CONNECTION_TIMEOUT,
        )


def nakadi_url_from_env(environ: Mapping[str, str] | None = None) -> str | None:
    env = os.environ if environ is None else environ
    url = env.get("NAKADI_URL", "").strip()
    return url or None


def _seconds(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        msg = f"{key} must be a number of seconds, got {raw!r}"
        raise ValueError(msg) from exc
    if value < 0:
        msg = f"{key} must not be negative, got {raw!r}"
        raise ValueError(msg)
    return value
