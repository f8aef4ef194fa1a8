"""Event type resource models exchanged with the Nakadi API."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventCategory(str, Enum):
    """Event categories understood by Nakadi."""

    UNDEFINED = "undefined"
    DATA = "data"
    BUSINESS = "business"


class PartitionStrategy(str, Enum):
    """Built-in partition strategies."""

    RANDOM = "random"
    USER_DEFINED = "user_defined"
    HASH = "hash"


class CompatibilityMode(str, Enum):
    """Schema evolution modes."""

    COMPATIBLE = "compatible"
    FORWARD = "forward"
    NONE = "none"


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)


class EventTypeSchema(_Payload):
    """Non optional description of the schema of an event type."""

    version: str | None = None
    type: str = "json_schema"
    schema_: str = Field(alias="schema")
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EventTypeStatistics(_Payload):
    """Throughput hints used by Nakadi to size an event type on creation."""

    messages_per_minute: int
    message_size: int
    read_parallelism: int
    write_parallelism: int


class EventTypeOptions(_Payload):
    """Additional tuning parameters."""

    retention_time: int = Field(description="Retention time in milliseconds.")


class EventType(_Payload):
    """A kind of event that can be processed by a Nakadi service."""

    name: str
    owning_application: str
    category: EventCategory | str
    enrichment_strategies: list[str] | None = None
    partition_strategy: PartitionStrategy | str | None = None
    compatibility_mode: CompatibilityMode | str | None = None
    schema_: EventTypeSchema = Field(alias="schema")
    partition_key_fields: list[str] = Field(default_factory=list)
    default_statistics: EventTypeStatistics | None = None
    options: EventTypeOptions | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, use_enum_values=True)

    def to_payload(self) -> dict[str, Any]:
        """Request body with unset optional fields and empty enrichments dropped."""
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not payload.get("enrichment_strategies"):
            payload.pop("enrichment_strategies", None)
        return payload


class Problem(_Payload):
    """Problem payload returned by Nakadi on failures."""

    type: str | None = None
    title: str | None = None
    status: int | None = None
    detail: str = ""
    instance: str | None = None
