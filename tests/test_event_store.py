"""Tests for the in-memory event store."""

import threading

import pytest

from snowplow_tracker.emitter.store import InMemoryEventStore
from snowplow_tracker.errors import ConfigurationError


class TestAddEvent:
    def test_add_below_capacity(self, make_payload):
        store = InMemoryEventStore(capacity=5)

        for i in range(5):
            assert store.add_event(make_payload(i))
            assert store.size() == i + 1

    def test_add_at_capacity_fails(self, make_payload):
        store = InMemoryEventStore(capacity=2)
        store.add_event(make_payload(1))
        store.add_event(make_payload(2))

        assert not store.add_event(make_payload(3))
        assert store.size() == 2
        assert store.get_all_events() == [make_payload(1), make_payload(2)]

    def test_invalid_capacity(self):
        with pytest.raises(ConfigurationError):
            InMemoryEventStore(capacity=0)


class TestGetEventsBatch:
    def test_checkout_removes_from_pending(self, make_payload):
        store = InMemoryEventStore()
        for i in range(5):
            store.add_event(make_payload(i))

        batch = store.get_events_batch(3)

        assert list(batch.payloads) == [make_payload(0), make_payload(1), make_payload(2)]
        assert store.size() == 2
        assert store.in_flight_size() == 3

    def test_checkout_more_than_available(self, make_payload):
        store = InMemoryEventStore()
        store.add_event(make_payload(1))

        batch = store.get_events_batch(10)

        assert len(batch) == 1
        assert store.size() == 0

    def test_checkout_empty_store(self):
        store = InMemoryEventStore()

        batch = store.get_events_batch(10)

        assert batch.is_empty
        assert store.in_flight_batch_ids() == [batch.batch_id]

    def test_batch_ids_increase(self, make_payload):
        store = InMemoryEventStore()
        for i in range(3):
            store.add_event(make_payload(i))

        ids = [store.get_events_batch(1).batch_id for _ in range(3)]

        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_negative_count(self):
        store = InMemoryEventStore()
        with pytest.raises(ValueError):
            store.get_events_batch(-1)


class TestCleanup:
    def test_success_discards_batch(self, make_payload):
        store = InMemoryEventStore()
        for i in range(3):
            store.add_event(make_payload(i))
        batch = store.get_events_batch(2)

        evicted = store.cleanup_after_sending_attempt(True, batch.batch_id)

        assert evicted == []
        assert store.in_flight_batch_ids() == []
        assert store.size() + store.in_flight_size() == 1

    def test_failure_requeues_at_head_in_order(self, make_payload):
        store = InMemoryEventStore()
        for i in range(4):
            store.add_event(make_payload(i))
        batch = store.get_events_batch(2)

        store.cleanup_after_sending_attempt(False, batch.batch_id)

        assert store.get_all_events() == [make_payload(i) for i in range(4)]
        assert store.in_flight_size() == 0

    def test_failure_evicts_newest_when_full(self, make_payload):
        store = InMemoryEventStore(capacity=3)
        for i in range(3):
            store.add_event(make_payload(i))
        batch = store.get_events_batch(2)
        store.add_event(make_payload(3))
        store.add_event(make_payload(4))

        evicted = store.cleanup_after_sending_attempt(False, batch.batch_id)

        assert store.get_all_events() == [make_payload(0), make_payload(1), make_payload(2)]
        assert sorted(p["eid"] for p in evicted) == ["event-3", "event-4"]

    def test_cleanup_twice_is_noop(self, make_payload):
        store = InMemoryEventStore()
        store.add_event(make_payload(1))
        batch = store.get_events_batch(1)

        store.cleanup_after_sending_attempt(False, batch.batch_id)
        store.cleanup_after_sending_attempt(False, batch.batch_id)

        assert store.size() == 1

    def test_unknown_batch_id(self):
        store = InMemoryEventStore()
        assert store.cleanup_after_sending_attempt(True, 999) == []


def test_capacity_scenario(make_payload):
    a, b, c, d = (make_payload(i) for i in "abcd")
    store = InMemoryEventStore(capacity=3)

    assert store.add_event(a)
    assert store.add_event(b)
    assert store.add_event(c)
    assert not store.add_event(d)
    assert store.size() == 3

    batch = store.get_events_batch(1)
    assert list(batch.payloads) == [a]
    assert store.size() == 2

    store.cleanup_after_sending_attempt(False, batch.batch_id)
    assert store.get_all_events() == [a, b, c]
    assert store.size() == 3


def test_concurrent_checkout_and_cleanup(make_payload):
    store = InMemoryEventStore(capacity=1000)
    for i in range(500):
        store.add_event(make_payload(i))

    def worker(success: bool):
        for _ in range(50):
            batch = store.get_events_batch(3)
            store.cleanup_after_sending_attempt(success, batch.batch_id)

    threads = [threading.Thread(target=worker, args=(i % 2 == 0,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Nothing in flight, nothing duplicated
    assert store.in_flight_size() == 0
    remaining = store.get_all_events()
    assert len(remaining) == len(set(p["eid"] for p in remaining))
