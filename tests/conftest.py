"""Shared fixtures: synchronous and hand-released runners plus in-memory stores.

Nothing here touches Qt or the network, so every test in this tree is a unit
test.
"""

from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

import pytest

from studio_calendar.config.settings import CalendarSettings
from studio_calendar.domain import (
    CalendarEvent,
    CalendarEventPayload,
    ClientOption,
    CreateTaskInput,
    CurrentUser,
    TaskRecord,
    UserSummary,
    VisibleRange,
    parse_datetime,
)
from studio_calendar.domain.errors import PersistenceError
from studio_calendar.services.calendar_view import CalendarViewController

TZ = ZoneInfo("America/Kentucky/Louisville")


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------


class InlineRunner:
    """Runs work immediately and reports back before ``submit`` returns."""

    def __init__(self) -> None:
        self.calls: List[Callable[..., Any]] = []

    def submit(self, fn, *args, on_success=None, on_error=None, **kwargs):
        self.calls.append(fn)
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            if on_error:
                on_error(exc)
        else:
            if on_success:
                on_success(result)


class _Job:
    def __init__(self, fn, args, kwargs, on_success, on_error) -> None:
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.on_success = on_success
        self.on_error = on_error

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", repr(self.fn))


class DeferredRunner:
    """Queues work until a test releases it, exposing in-flight state."""

    def __init__(self) -> None:
        self.jobs: List[_Job] = []

    def submit(self, fn, *args, on_success=None, on_error=None, **kwargs):
        self.jobs.append(_Job(fn, args, kwargs, on_success, on_error))

    def __len__(self) -> int:
        return len(self.jobs)

    def release(self, index: int = 0) -> Any:
        """Run the queued job at ``index`` and deliver its outcome."""

        job = self.jobs.pop(index)
        try:
            result = job.fn(*job.args, **job.kwargs)
        except Exception as exc:  # noqa: BLE001
            if job.on_error:
                job.on_error(exc)
            return exc
        if job.on_success:
            job.on_success(result)
        return result

    def fail(self, index: int = 0, exc: Optional[Exception] = None) -> Exception:
        """Deliver ``exc`` for the queued job at ``index`` without running it."""

        job = self.jobs.pop(index)
        error = exc or PersistenceError("backend unavailable")
        if job.on_error:
            job.on_error(error)
        return error

    def release_all(self) -> None:
        while self.jobs:
            self.release()


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeEventStore:
    def __init__(self, events: Optional[List[CalendarEvent]] = None) -> None:
        self.rows: Dict[str, CalendarEvent] = {event.id: event for event in events or []}
        self.ids = itertools.count(100)
        self.fetches: List[VisibleRange] = []
        self.created: List[CalendarEventPayload] = []
        self.updated: List[tuple[str, CalendarEventPayload]] = []
        self.deleted: List[str] = []
        self.fail_on: Dict[str, Exception] = {}

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def fetch_events(self, window: VisibleRange) -> List[CalendarEvent]:
        self._maybe_fail("fetch")
        self.fetches.append(window)
        return [
            event
            for event in self.rows.values()
            if event.start_at < window.end and event.end_at > window.start
        ]

    def create_event(self, payload: CalendarEventPayload) -> CalendarEvent:
        self._maybe_fail("create")
        self.created.append(payload)
        event = CalendarEvent(
            id=f"evt-{next(self.ids)}",
            title=payload.title,
            description=payload.description,
            start_at=parse_datetime(payload.start_at),
            end_at=parse_datetime(payload.end_at),
            all_day=payload.all_day,
            owner_user_id=payload.owner_user_id or "",
            client_id=payload.client_id,
            location=payload.location,
        )
        self.rows[event.id] = event
        return event

    def update_event(self, event_id: str, payload: CalendarEventPayload) -> CalendarEvent:
        self._maybe_fail("update")
        self.updated.append((event_id, payload))
        if event_id not in self.rows:
            raise PersistenceError("Event not found.")
        event = replace(
            self.rows[event_id],
            title=payload.title,
            description=payload.description,
            start_at=parse_datetime(payload.start_at),
            end_at=parse_datetime(payload.end_at),
            all_day=payload.all_day,
            client_id=payload.client_id,
            location=payload.location,
        )
        self.rows[event_id] = event
        return event

    def delete_event(self, event_id: str) -> None:
        self._maybe_fail("delete")
        self.deleted.append(event_id)
        self.rows.pop(event_id, None)


class FakeClientDirectory:
    def __init__(self, clients: Optional[List[ClientOption]] = None) -> None:
        self.clients = clients or []

    def list_clients(self) -> List[ClientOption]:
        return list(self.clients)


class FakeUserDirectory:
    def __init__(self, user: Optional[CurrentUser] = None, users: Optional[List[UserSummary]] = None) -> None:
        self.user = user
        self.users = users or []
        self.error: Optional[Exception] = None

    def current_user(self) -> Optional[CurrentUser]:
        return self.user

    def list_assignable_users(self) -> List[UserSummary]:
        if self.error:
            raise self.error
        return list(self.users)


class FakeTaskStore:
    def __init__(self) -> None:
        self.created: List[CreateTaskInput] = []
        self.error: Optional[Exception] = None

    def create_task(self, payload: CreateTaskInput) -> TaskRecord:
        if self.error:
            raise self.error
        self.created.append(payload)
        return TaskRecord(
            id=f"task-{len(self.created)}",
            title=payload.title,
            details=payload.details,
            assigned_to=payload.assigned_to,
            created_by=payload.created_by,
            event_id=payload.event_id,
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def at(day: int, hour: int, minute: int = 0, *, month: int = 3, year: int = 2025) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=TZ)


@pytest.fixture
def tz() -> ZoneInfo:
    return TZ


@pytest.fixture
def moment() -> Callable[..., datetime]:
    """Build aware datetimes in the studio timezone: ``moment(day, hour, minute)``."""

    return at


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    counter = itertools.count(1)

    def factory(**overrides: Any) -> CalendarEvent:
        values: Dict[str, Any] = {
            "id": f"e{next(counter)}",
            "title": "Portrait session",
            "start_at": at(10, 10),
            "end_at": at(10, 11),
            "owner_user_id": "u1",
        }
        values.update(overrides)
        return CalendarEvent(**values)

    return factory


@pytest.fixture
def inline_runner() -> InlineRunner:
    return InlineRunner()


@pytest.fixture
def deferred_runner() -> DeferredRunner:
    return DeferredRunner()


@pytest.fixture
def event_store() -> FakeEventStore:
    return FakeEventStore()


@pytest.fixture
def user_directory() -> FakeUserDirectory:
    return FakeUserDirectory(
        user=CurrentUser(id="u1", name="Avery"),
        users=[UserSummary(id="u1", name="Avery"), UserSummary(id="u2", email="sam@studio.test")],
    )


@pytest.fixture
def client_directory() -> FakeClientDirectory:
    return FakeClientDirectory([ClientOption(id="c1", name="Acme Weddings"), ClientOption(id="c2", name="Birch & Co")])


@pytest.fixture
def task_store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture
def calendar_settings() -> CalendarSettings:
    return CalendarSettings(
        timezone="America/Kentucky/Louisville",
        default_duration_minutes=60,
        toast_timeout_ms=3200,
    )


@pytest.fixture
def march() -> VisibleRange:
    return VisibleRange(start=at(1, 0), end=at(1, 0, month=4))


@pytest.fixture
def build_view(event_store, client_directory, user_directory, task_store, calendar_settings):
    """Return a factory producing a started controller over the in-memory stores."""

    def factory(runner, *, start: bool = True) -> CalendarViewController:
        view = CalendarViewController(
            events=event_store,
            clients=client_directory,
            users=user_directory,
            tasks=task_store,
            runner=runner,
            settings=calendar_settings,
            clock=lambda: at(10, 9),
        )
        if start:
            view.start()
        return view

    return factory
