"""Tests for optimistic apply, reconcile and rollback on the range cache."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from studio_calendar.data.cache.range_cache import RangeEventCache
from studio_calendar.domain import CalendarEventPayload
from studio_calendar.domain.errors import PersistenceError
from studio_calendar.services.mutations import (
    OptimisticMutationCoordinator,
    create_mutation,
    delete_mutation,
    moved_event,
    new_placeholder_id,
    optimistic_event,
    update_mutation,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def seeded(make_event, march, moment):
    cache = RangeEventCache()
    first = make_event(id="a", start_at=moment(3, 9), end_at=moment(3, 10))
    second = make_event(id="b", start_at=moment(4, 9), end_at=moment(4, 10))
    cache.put(march, (first, second))
    return cache, first, second


@pytest.fixture
def coordinator(seeded, deferred_runner):
    cache = seeded[0]
    return OptimisticMutationCoordinator(cache, deferred_runner, on_publish=MagicMock())


def _payload(moment, **overrides):
    values = dict(
        title="Newborn session",
        start_at="2025-03-05T15:00:00Z",
        end_at="2025-03-05T16:00:00Z",
        owner_user_id="u1",
    )
    values.update(overrides)
    return CalendarEventPayload(**values)


class TestOptimisticEvent:
    def test_placeholder_ids_are_marked_temporary(self, moment):
        placeholder = optimistic_event(_payload(moment), event_id=new_placeholder_id())
        assert placeholder.id.startswith("temp-")
        assert placeholder.is_placeholder is True
        assert placeholder.owner_user_id == "u1"

    def test_update_keeps_fields_the_payload_does_not_carry(self, make_event, moment):
        base = make_event(description="keep me", location="Loft")
        patched = optimistic_event(_payload(moment), event_id=base.id, base=base)
        assert patched.description == "keep me"
        assert patched.location == "Loft"
        assert patched.title == "Newborn session"


class TestCreate:
    def test_placeholder_is_visible_before_remote_returns(self, coordinator, seeded, march, deferred_runner, make_event, moment):
        cache, _, _ = seeded
        placeholder = optimistic_event(_payload(moment), event_id="temp-123")
        result = coordinator.mutate(march, create_mutation(placeholder, lambda: make_event(id="real-1")))
        assert [event.id for event in result] == ["a", "b", "temp-123"]
        assert cache.snapshot(march) is result
        assert coordinator.is_pending("temp-123")
        assert len(deferred_runner) == 1

    def test_success_swaps_placeholder_for_real_row(self, coordinator, seeded, march, deferred_runner, make_event, moment):
        cache, _, _ = seeded
        placeholder = optimistic_event(_payload(moment), event_id="temp-123")
        created = make_event(id="real-1", start_at=moment(5, 10), end_at=moment(5, 11))
        on_success = MagicMock()
        coordinator.mutate(march, create_mutation(placeholder, lambda: created), on_success=on_success)
        deferred_runner.release()
        assert [event.id for event in cache.snapshot(march)] == ["a", "b", "real-1"]
        on_success.assert_called_once_with(created)
        assert coordinator.pending == ()

    def test_refresh_during_create_does_not_duplicate(self, coordinator, seeded, march, deferred_runner, make_event, moment):
        cache, first, second = seeded
        placeholder = optimistic_event(_payload(moment), event_id="temp-123")
        created = make_event(id="real-1", start_at=moment(5, 10), end_at=moment(5, 11))
        coordinator.mutate(march, create_mutation(placeholder, lambda: created))
        cache.put(march, (first, second, created))
        deferred_runner.release()
        assert [event.id for event in cache.snapshot(march)] == ["a", "b", "real-1"]

    def test_failure_restores_exact_snapshot(self, coordinator, seeded, march, deferred_runner, moment):
        cache, _, _ = seeded
        before = cache.snapshot(march)
        on_error = MagicMock()
        placeholder = optimistic_event(_payload(moment), event_id="temp-123")
        coordinator.mutate(march, create_mutation(placeholder, MagicMock()), on_error=on_error)
        error = deferred_runner.fail(exc=PersistenceError("insert rejected"))
        assert cache.snapshot(march) == before
        assert all(event.id != "temp-123" for event in cache.snapshot(march))
        on_error.assert_called_once_with(error)

    def test_remote_exception_rolls_back(self, coordinator, seeded, march, deferred_runner, moment):
        cache, _, _ = seeded
        before = cache.snapshot(march)

        def explode():
            raise PersistenceError("network down")

        coordinator.mutate(march, create_mutation(optimistic_event(_payload(moment), event_id="temp-9"), explode))
        deferred_runner.release()
        assert cache.snapshot(march) == before


class TestUpdateAndDelete:
    def test_move_patches_row_then_reconciles(self, coordinator, seeded, march, deferred_runner, moment):
        cache, first, _ = seeded
        moved = moved_event(first, moment(6, 14), moment(6, 15), False)
        server_copy = moved_event(first, moment(6, 14), moment(6, 15, 30), False)
        coordinator.mutate(march, update_mutation(moved, lambda: server_copy, kind="move"))
        assert cache.find(march, "a").start_at == moment(6, 14)
        deferred_runner.release()
        assert cache.find(march, "a").end_at == moment(6, 15, 30)

    def test_failed_update_restores_row(self, coordinator, seeded, march, deferred_runner, moment):
        cache, first, _ = seeded
        before = cache.snapshot(march)
        coordinator.mutate(march, update_mutation(moved_event(first, moment(6, 14), moment(6, 15), False), MagicMock()))
        deferred_runner.fail()
        assert cache.snapshot(march) == before

    def test_delete_removes_row_immediately(self, coordinator, seeded, march, deferred_runner):
        cache, _, _ = seeded
        coordinator.mutate(march, delete_mutation("b", lambda: None))
        assert [event.id for event in cache.snapshot(march)] == ["a"]
        deferred_runner.release()
        assert [event.id for event in cache.snapshot(march)] == ["a"]

    def test_failed_delete_brings_row_back(self, coordinator, seeded, march, deferred_runner):
        cache, _, _ = seeded
        before = cache.snapshot(march)
        coordinator.mutate(march, delete_mutation("b", MagicMock()))
        deferred_runner.fail()
        assert cache.snapshot(march) == before


class TestInterleaving:
    def test_rollback_only_undoes_its_own_row(self, coordinator, seeded, march, deferred_runner, moment):
        cache, first, second = seeded
        coordinator.mutate(march, update_mutation(moved_event(first, moment(6, 14), moment(6, 15), False), MagicMock()))
        moved_b = moved_event(second, moment(7, 9), moment(7, 10), False)
        coordinator.mutate(march, update_mutation(moved_b, lambda: moved_b))

        deferred_runner.release(1)
        deferred_runner.fail(0)

        assert cache.find(march, "a") == first
        assert cache.find(march, "b").start_at == moment(7, 9)

    def test_publish_listener_sees_every_snapshot(self, coordinator, march, deferred_runner):
        coordinator.mutate(march, delete_mutation("a", lambda: None))
        deferred_runner.release()
        assert coordinator.on_publish.call_count == 2
