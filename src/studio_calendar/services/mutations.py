"""Apply-locally, persist-remotely, roll-back-on-failure for the event cache.

A :class:`Mutation` bundles three pieces: the optimistic patch applied to the
cached snapshot right away, the blocking remote call, and the reconciliation
that folds the authoritative result back into whatever the cache holds when
the call returns. :class:`OptimisticMutationCoordinator` is the only writer of
cached snapshots after the initial fetch.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import uuid4

from ..data.cache.range_cache import RangeEventCache, Snapshot, sort_events
from ..domain import CalendarEvent, CalendarEventPayload, VisibleRange, parse_datetime
from .ports import Runner

logger = logging.getLogger(__name__)

Patch = Callable[[Snapshot], Snapshot]
Reconcile = Callable[[Snapshot, Any], Snapshot]
PublishListener = Callable[[VisibleRange, Snapshot], None]


@dataclass(frozen=True)
class Mutation:
    kind: str
    event_id: str
    optimistic: Patch
    remote: Callable[[], Any]
    reconcile: Reconcile


@dataclass(frozen=True)
class PendingMutation:
    token: int
    kind: str
    event_id: str
    window: VisibleRange


def new_placeholder_id() -> str:
    return f"temp-{uuid4().hex[:12]}"


def optimistic_event(
    payload: CalendarEventPayload,
    *,
    event_id: str,
    base: Optional[CalendarEvent] = None,
    owner_user_id: Optional[str] = None,
    client_name: Optional[str] = None,
) -> CalendarEvent:
    """Build the row shown while ``payload`` is on its way to storage."""

    owner = payload.owner_user_id or owner_user_id or (base.owner_user_id if base else "")
    return CalendarEvent(
        id=event_id,
        title=payload.title,
        description=payload.description if payload.description is not None else (base.description if base else None),
        start_at=parse_datetime(payload.start_at),
        end_at=parse_datetime(payload.end_at),
        all_day=payload.all_day,
        owner_user_id=owner,
        client_id=payload.client_id,
        client_name=client_name,
        location=payload.location if payload.location is not None else (base.location if base else None),
        assignees=base.assignees if base else (),
        created_at=base.created_at if base else None,
        updated_at=base.updated_at if base else None,
    )


def _replace_row(snapshot: Snapshot, event_id: str, event: CalendarEvent) -> Snapshot:
    return tuple(event if item.id == event_id else item for item in snapshot)


def _without_row(snapshot: Snapshot, event_id: str) -> Snapshot:
    return tuple(item for item in snapshot if item.id != event_id)


def create_mutation(placeholder: CalendarEvent, remote: Callable[[], CalendarEvent]) -> Mutation:
    def reconcile(current: Snapshot, created: CalendarEvent) -> Snapshot:
        if any(item.id == created.id for item in current):
            # a refresh already brought the stored row in
            return _without_row(_replace_row(current, created.id, created), placeholder.id)
        if any(item.id == placeholder.id for item in current):
            return _replace_row(current, placeholder.id, created)
        return current + (created,)

    return Mutation(
        kind="create",
        event_id=placeholder.id,
        optimistic=lambda snapshot: snapshot + (placeholder,),
        remote=remote,
        reconcile=reconcile,
    )


def update_mutation(patched: CalendarEvent, remote: Callable[[], CalendarEvent], *, kind: str = "update") -> Mutation:
    return Mutation(
        kind=kind,
        event_id=patched.id,
        optimistic=lambda snapshot: _replace_row(snapshot, patched.id, patched),
        remote=remote,
        reconcile=lambda current, updated: _replace_row(current, patched.id, updated),
    )


def delete_mutation(event_id: str, remote: Callable[[], None]) -> Mutation:
    return Mutation(
        kind="delete",
        event_id=event_id,
        optimistic=lambda snapshot: _without_row(snapshot, event_id),
        remote=remote,
        reconcile=lambda current, _result: _without_row(current, event_id),
    )


class OptimisticMutationCoordinator:
    def __init__(self, cache: RangeEventCache, runner: Runner, *, on_publish: Optional[PublishListener] = None) -> None:
        self.cache = cache
        self.runner = runner
        self.on_publish = on_publish
        self._pending: Dict[int, PendingMutation] = {}
        self._tokens = itertools.count(1)

    @property
    def pending(self) -> Tuple[PendingMutation, ...]:
        return tuple(self._pending.values())

    def is_pending(self, event_id: str) -> bool:
        return any(item.event_id == event_id for item in self._pending.values())

    def mutate(
        self,
        window: VisibleRange,
        mutation: Mutation,
        *,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Snapshot:
        """Publish the optimistic snapshot for ``window`` and start the remote call.

        Returns the optimistic snapshot. The reconciled or rolled-back snapshot is
        published once the runner reports back.
        """

        before = self.cache.snapshot(window)
        optimistic = self._publish(window, mutation.optimistic(before))
        pending = PendingMutation(token=next(self._tokens), kind=mutation.kind, event_id=mutation.event_id, window=window)
        self._pending[pending.token] = pending
        logger.debug("Optimistic %s of %s published", mutation.kind, mutation.event_id)

        def done(result: Any) -> None:
            self._pending.pop(pending.token, None)
            self._publish(window, mutation.reconcile(self.cache.snapshot(window), result))
            if on_success:
                on_success(result)

        def fail(exc: Exception) -> None:
            self._pending.pop(pending.token, None)
            logger.error("Remote %s of %s failed, rolling back: %s", mutation.kind, mutation.event_id, exc)
            current = self.cache.snapshot(window)
            if current is optimistic:
                restored = before
            else:
                restored = self._restore_row(current, before, mutation.event_id)
            self._publish(window, restored)
            if on_error:
                on_error(exc)

        self.runner.submit(mutation.remote, on_success=done, on_error=fail)
        return optimistic

    def _publish(self, window: VisibleRange, snapshot: Snapshot) -> Snapshot:
        stored = self.cache.put(window, snapshot)
        if self.on_publish:
            self.on_publish(window, stored)
        return stored

    @staticmethod
    def _restore_row(current: Snapshot, before: Snapshot, event_id: str) -> Snapshot:
        # other mutations landed meanwhile: only undo this event's row
        previous = next((item for item in before if item.id == event_id), None)
        restored = _without_row(current, event_id)
        if previous is not None:
            restored = sort_events(restored + (previous,))
        return restored


def moved_event(event: CalendarEvent, start: datetime, end: datetime, all_day: bool) -> CalendarEvent:
    return replace(event, start_at=start, end_at=end, all_day=all_day)


__all__ = [
    "Mutation",
    "OptimisticMutationCoordinator",
    "PendingMutation",
    "create_mutation",
    "delete_mutation",
    "moved_event",
    "new_placeholder_id",
    "optimistic_event",
    "update_mutation",
]
