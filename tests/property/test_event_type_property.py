import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nakadi.core.backoff import ExponentialBackoff
from nakadi.errors import NotFoundError
from nakadi.events import EventAPI
from nakadi.models.event_type import (
    EventType,
    EventTypeOptions,
    EventTypeSchema,
    EventTypeStatistics,
)
from tests.support.nakadi_helpers import FakeClock, FakeNakadi, make_client

_names = st.text(
    alphabet=st.characters(categories=("Ll", "Lu", "Nd"), include_characters="._-/"),
    min_size=1,
    max_size=40,
).filter(lambda name: name not in {".", ".."})
_words = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=12)
_counts = st.integers(min_value=0, max_value=10**6)

_event_types = st.builds(
    EventType,
    name=_names,
    owning_application=_words,
    category=st.sampled_from(["undefined", "data", "business"]),
    enrichment_strategies=st.one_of(st.none(), st.just(["metadata_enrichment"])),
    partition_strategy=st.one_of(st.none(), st.sampled_from(["random", "hash", "user_defined"])),
    compatibility_mode=st.one_of(st.none(), st.sampled_from(["compatible", "forward", "none"])),
    schema=st.builds(EventTypeSchema, schema=st.text(max_size=50)),
    partition_key_fields=st.lists(_words, max_size=3),
    default_statistics=st.one_of(
        st.none(),
        st.builds(
            EventTypeStatistics,
            messages_per_minute=_counts,
            message_size=_counts,
            read_parallelism=st.integers(min_value=1, max_value=64),
            write_parallelism=st.integers(min_value=1, max_value=64),
        ),
    ),
    options=st.one_of(st.none(), st.builds(EventTypeOptions, retention_time=_counts)),
)


@settings(max_examples=50, deadline=None)
@given(_event_types)
def test_create_then_get_returns_equivalent_event_type(event_type: EventType) -> None:
    api = EventAPI(make_client(FakeNakadi()))

    api.create(event_type)
    fetched = api.get(event_type.name)

    exclude = {"created_at", "updated_at"}
    assert fetched.model_dump(exclude=exclude) == event_type.model_dump(exclude=exclude)


@settings(max_examples=25, deadline=None)
@given(_event_types)
def test_delete_then_get_is_not_found(event_type: EventType) -> None:
    api = EventAPI(make_client(FakeNakadi()))
    api.create(event_type)

    api.delete(event_type.name)

    with pytest.raises(NotFoundError):
        api.get(event_type.name)


@given(
    initial=st.floats(min_value=0.05, max_value=5.0),
    ceiling=st.floats(min_value=1.0, max_value=4.0),
    budget=st.floats(min_value=0.5, max_value=60.0),
    jitter=st.floats(min_value=0.0, max_value=1.0),
)
def test_backoff_stays_bounded_and_respects_elapsed_budget(
    initial: float, ceiling: float, budget: float, jitter: float
) -> None:
    clock = FakeClock()
    max_interval = initial * ceiling
    backoff = ExponentialBackoff(
        initial_interval=initial,
        max_interval=max_interval,
        max_elapsed_time=budget,
        clock=clock,
        random_source=lambda: jitter,
    )

    waited = 0.0
    for _ in range(10_000):
        delay = backoff.next_backoff()
        if delay is None:
            break
        assert 0 < delay <= max_interval * 1.5 + 1e-9
        waited += delay
        clock.advance(delay)
    else:
        raise AssertionError("backoff never stopped")

    assert waited <= budget + 1e-9
