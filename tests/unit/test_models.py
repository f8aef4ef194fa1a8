from __future__ import annotations

from datetime import UTC, datetime

from nakadi.models.event_type import (
    EventCategory,
    EventType,
    EventTypeSchema,
    PartitionStrategy,
    Problem,
)
from tests.support.nakadi_helpers import event_type_payload


def test_event_type_parses_full_payload() -> None:
    payload = event_type_payload(
        created_at="2026-01-01T10:00:00Z",
        updated_at="2026-01-02T10:00:00Z",
        unknown_field="ignored",
    )
    payload["schema"]["version"] = "1.0.0"

    event_type = EventType.model_validate(payload)

    assert event_type.name == "order.ORDER_RECEIVED"
    assert event_type.category == "business"
    assert event_type.schema_.version == "1.0.0"
    assert event_type.schema_.type == "json_schema"
    assert event_type.default_statistics is not None
    assert event_type.default_statistics.messages_per_minute == 1000
    assert event_type.options is not None
    assert event_type.options.retention_time == 345600000
    assert event_type.created_at == datetime(2026, 1, 1, 10, tzinfo=UTC)


def test_event_type_payload_omits_unset_optionals() -> None:
    event_type = EventType(
        name="order.ORDER_CANCELLED",
        owning_application="order-service",
        category=EventCategory.DATA,
        schema=EventTypeSchema(schema='{"type": "object"}'),
    )

    payload = event_type.to_payload()

    assert payload == {
        "name": "order.ORDER_CANCELLED",
        "owning_application": "order-service",
        "category": "data",
        "schema": {"type": "json_schema", "schema": '{"type": "object"}'},
        "partition_key_fields": [],
    }


def test_event_type_payload_omits_empty_enrichment_strategies() -> None:
    event_type = EventType.model_validate(event_type_payload("a", enrichment_strategies=[]))

    payload = event_type.to_payload()

    assert "enrichment_strategies" not in payload
    assert payload["partition_key_fields"] == event_type.partition_key_fields


def test_event_type_accepts_enum_members_and_plain_strings() -> None:
    from_enum = EventType(
        name="a",
        owning_application="app",
        category=EventCategory.BUSINESS,
        partition_strategy=PartitionStrategy.HASH,
        schema=EventTypeSchema(schema="{}"),
    )
    from_string = EventType(
        name="a",
        owning_application="app",
        category="business",
        partition_strategy="hash",
        schema=EventTypeSchema(schema="{}"),
    )

    assert from_enum.to_payload() == from_string.to_payload()


def test_problem_defaults_and_extra_fields() -> None:
    problem = Problem.model_validate({"title": "Conflict", "status": 409, "trace": "abc"})

    assert problem.detail == ""
    assert problem.status == 409
