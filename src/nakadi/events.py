"""Event type management API."""

from __future__ import annotations

from urllib.parse import quote

from pydantic import TypeAdapter, ValidationError

from nakadi.client import Client
from nakadi.config import RetryOptions
from nakadi.core.backoff import BackoffPolicy
from nakadi.errors import DecodeError
from nakadi.models.event_type import EventType

_EVENT_TYPE_LIST = TypeAdapter(list[EventType])


class EventAPI:
    """Inspect and manage event types on a Nakadi instance."""

    def __init__(
        self,
        client: Client,
        options: RetryOptions | None = None,
        *,
        policy: BackoffPolicy | None = None,
    ) -> None:
        self._client = client
        self._policy = policy or BackoffPolicy.from_options(options)

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    def list(self) -> list[EventType]:
        """Return all registered event types."""
        context = "unable to request event types"
        body = self._client.get_json(self._policy, self._base_url(), context=context)
        if body is None:
            return []
        try:
            return _EVENT_TYPE_LIST.validate_python(body)
        except ValidationError as exc:
            msg = f"{context}: unable to decode response body: {exc}"
            raise DecodeError(msg) from exc

    def get(self, name: str) -> EventType:
        """Return one event type by name."""
        context = "unable to request event types"
        body = self._client.get_json(self._policy, self._url(name), context=context)
        try:
            return EventType.model_validate(body)
        except ValidationError as exc:
            msg = f"{context}: unable to decode response body: {exc}"
            raise DecodeError(msg) from exc

    def create(self, event_type: EventType) -> None:
        """Save a new event type."""
        self._client.post_json(
            self._policy,
            self._base_url(),
            event_type.to_payload(),
            context="unable to create event type",
        )

    def update(self, event_type: EventType) -> None:
        """Update an existing event type, addressed by its name."""
        self._client.put_json(
            self._policy,
            self._url(event_type.name),
            event_type.to_payload(),
            context="unable to update event type",
        )

    def delete(self, name: str) -> None:
        """Remove an event type."""
        self._client.delete(self._policy, self._url(name), context="unable to delete event type")

    def _base_url(self) -> str:
        return f"{self._client.nakadi_url}/event-types"

    def _url(self, name: str) -> str:
        if not name:
            msg = "event type name must not be empty"
            raise ValueError(msg)
        return f"{self._base_url()}/{quote(name, safe='')}"
