"""The closed set of events a calendar widget reports to the view controller.

Widgets translate their native callbacks into these values so the controller
never sees toolkit-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Union

from ..domain import CalendarEvent


def _noop() -> None:
    pass


@dataclass(frozen=True)
class ViewWindowChanged:
    start: datetime
    end: datetime
    view_type: str = ""
    title: str = ""


@dataclass(frozen=True)
class RangeSelected:
    start: datetime
    end: datetime
    all_day: bool = False


@dataclass(frozen=True)
class EventActivated:
    event_id: str


@dataclass(frozen=True)
class EventMoved:
    """A drop or resize that the widget has already drawn; ``revert`` undoes it."""

    event_id: str
    start: datetime
    end: datetime
    all_day: bool = False
    resized: bool = False
    revert: Callable[[], None] = field(default=_noop, compare=False)


WidgetEvent = Union[ViewWindowChanged, RangeSelected, EventActivated, EventMoved]


@dataclass(frozen=True)
class DisplayEvent:
    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool
    calendar_event: Optional[CalendarEvent] = field(default=None, compare=False)

    @classmethod
    def from_event(cls, event: CalendarEvent) -> "DisplayEvent":
        return cls(
            id=event.id,
            title=event.title,
            start=event.start_at,
            end=event.end_at,
            all_day=event.all_day,
            calendar_event=event,
        )


__all__ = [
    "DisplayEvent",
    "EventActivated",
    "EventMoved",
    "RangeSelected",
    "ViewWindowChanged",
    "WidgetEvent",
]
