from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from ...domain import CalendarEvent, VisibleRange

Snapshot = Tuple[CalendarEvent, ...]


def sort_events(events: Iterable[CalendarEvent]) -> Snapshot:
    return tuple(sorted(events, key=lambda item: (item.start_at, item.id)))


@dataclass
class RangeEventCache:
    """Events keyed by the visible window they were fetched for.

    Windows are few per session, so entries are never evicted.
    """

    snapshots: Dict[Tuple[str, str], Snapshot] = field(default_factory=dict)

    def __contains__(self, window: VisibleRange) -> bool:
        return window.key in self.snapshots

    def get(self, window: VisibleRange) -> Optional[Snapshot]:
        return self.snapshots.get(window.key)

    def snapshot(self, window: VisibleRange) -> Snapshot:
        return self.snapshots.get(window.key, ())

    def put(self, window: VisibleRange, events: Iterable[CalendarEvent]) -> Snapshot:
        snapshot = tuple(events)
        self.snapshots[window.key] = snapshot
        return snapshot

    def find(self, window: VisibleRange, event_id: str) -> Optional[CalendarEvent]:
        for event in self.snapshot(window):
            if event.id == event_id:
                return event
        return None

    def discard(self, window: VisibleRange) -> None:
        self.snapshots.pop(window.key, None)

    def clear(self) -> None:
        self.snapshots.clear()
