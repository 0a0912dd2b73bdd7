from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ..domain import CalendarEvent


def find_conflicts(
    events: Optional[Iterable[CalendarEvent]],
    exclude_id: Optional[str],
    owner_user_id: Optional[str],
    proposed_start: datetime,
    proposed_end: datetime,
) -> List[CalendarEvent]:
    """Return the events of ``owner_user_id`` intersecting ``[proposed_start, proposed_end)``.

    Only the events handed in are consulted. An unknown owner never conflicts.
    """

    if not events or not owner_user_id:
        return []
    return [
        event
        for event in events
        if event.id != exclude_id
        and event.owner_user_id == owner_user_id
        and event.start_at < proposed_end
        and event.end_at > proposed_start
    ]


def has_overlap(
    events: Optional[Iterable[CalendarEvent]],
    exclude_id: Optional[str],
    owner_user_id: Optional[str],
    proposed_start: datetime,
    proposed_end: datetime,
) -> bool:
    return bool(find_conflicts(events, exclude_id, owner_user_id, proposed_start, proposed_end))


__all__ = ["find_conflicts", "has_overlap"]
