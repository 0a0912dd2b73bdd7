"""Collaborator contracts consumed by the calendar services.

The Supabase repositories in :mod:`studio_calendar.data.repositories` implement
these; tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Protocol

from ..domain import (
    CalendarEvent,
    CalendarEventPayload,
    ClientOption,
    CreateTaskInput,
    CurrentUser,
    TaskRecord,
    UserSummary,
    VisibleRange,
)


class EventStore(Protocol):
    def fetch_events(self, window: VisibleRange) -> List[CalendarEvent]: ...

    def create_event(self, payload: CalendarEventPayload) -> CalendarEvent: ...

    def update_event(self, event_id: str, payload: CalendarEventPayload) -> CalendarEvent: ...

    def delete_event(self, event_id: str) -> None: ...


class ClientDirectory(Protocol):
    def list_clients(self) -> List[ClientOption]: ...


class UserDirectory(Protocol):
    def current_user(self) -> Optional[CurrentUser]: ...

    def list_assignable_users(self) -> List[UserSummary]: ...


class TaskStore(Protocol):
    def create_task(self, payload: CreateTaskInput) -> TaskRecord: ...


class Runner(Protocol):
    """Runs blocking work away from the UI loop and reports back through callbacks."""

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        **kwargs: Any,
    ) -> Any: ...


__all__ = ["ClientDirectory", "EventStore", "Runner", "TaskStore", "UserDirectory"]
