"""Glue between the calendar widget and the scheduling services.

The controller owns the visible window, the range-keyed event cache and the
current toast. Widget callbacks arrive as :mod:`.widget_events` values through
:meth:`CalendarViewController.handle`; dialog submissions arrive through the
handlers it installs on :class:`EventFormController`.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional

from ..config.settings import CalendarSettings
from ..core.conflicts import has_overlap
from ..core.time_range import TimeRange
from ..data.cache.range_cache import RangeEventCache, Snapshot, sort_events
from ..domain import (
    CalendarEvent,
    CalendarEventPayload,
    ClientOption,
    CurrentUser,
    TaskRecord,
    ToastVariant,
    VisibleRange,
    to_iso_instant,
)
from ..domain.errors import CalendarError, ConflictError, PermissionDeniedError, describe_error
from .event_form import EventFormController, ErrorCallback, SuccessCallback
from .mutations import (
    OptimisticMutationCoordinator,
    create_mutation,
    delete_mutation,
    moved_event,
    new_placeholder_id,
    optimistic_event,
    update_mutation,
)
from .ports import ClientDirectory, EventStore, Runner, TaskStore, UserDirectory
from .task_assignment import TaskAssignmentBridge
from .widget_events import (
    DisplayEvent,
    EventActivated,
    EventMoved,
    RangeSelected,
    ViewWindowChanged,
    WidgetEvent,
)

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Unable to load events. Refresh to try again."
SAVING_MESSAGE = "This event is still saving. Try again in a moment."


@dataclass(frozen=True)
class Toast:
    id: int
    message: str
    variant: ToastVariant


def _ignore(_value: Any) -> None:
    pass


class CalendarViewController:
    def __init__(
        self,
        *,
        events: EventStore,
        clients: ClientDirectory,
        users: UserDirectory,
        tasks: TaskStore,
        runner: Runner,
        settings: CalendarSettings,
        cache: Optional[RangeEventCache] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.events_store = events
        self.clients = clients
        self.users = users
        self.runner = runner
        self.settings = settings
        self.tz = settings.tzinfo
        self.clock = clock or (lambda: datetime.now(self.tz))
        self.cache = cache if cache is not None else RangeEventCache()
        self.coordinator = OptimisticMutationCoordinator(self.cache, runner, on_publish=self._on_publish)
        self.form = EventFormController(submit_handler=self._submit_from_dialog, delete_handler=self._delete_from_dialog)
        self.assignment = TaskAssignmentBridge(
            tasks=tasks,
            users=users,
            runner=runner,
            tz=self.tz,
            on_assigned=self._on_task_assigned,
        )

        self.visible_range: Optional[VisibleRange] = None
        self.view_type = ""
        self.view_title = ""
        self.current_user: Optional[CurrentUser] = None
        self.client_options: List[ClientOption] = []
        self.is_loading = False
        self.load_error: Optional[str] = None
        self.toast: Optional[Toast] = None

        self.on_events_changed: Optional[Callable[[List[DisplayEvent]], None]] = None
        self.on_toast: Optional[Callable[[Toast], None]] = None
        self.on_state_changed: Optional[Callable[["CalendarViewController"], None]] = None
        self._toast_ids = itertools.count(1)

    # ------------------------------------------------------------------ boot

    def start(self) -> None:
        self.load_current_user()
        self.load_clients()

    def load_current_user(self) -> None:
        def done(user: Optional[CurrentUser]) -> None:
            self.current_user = user
            logger.info("Current user resolved: %s", user.id if user else "anonymous")
            self._state_changed()

        def fail(exc: Exception) -> None:
            logger.error("Unable to resolve current user: %s", exc)
            self.current_user = None
            self._state_changed()

        self.runner.submit(self.users.current_user, on_success=done, on_error=fail)

    def load_clients(self) -> None:
        def done(options: List[ClientOption]) -> None:
            self.client_options = list(options)
            self._state_changed()

        def fail(exc: Exception) -> None:
            logger.error("Unable to load clients: %s", exc)

        self.runner.submit(self.clients.list_clients, on_success=done, on_error=fail)

    # ------------------------------------------------------------------ visible window

    def handle(self, event: WidgetEvent) -> None:
        if isinstance(event, ViewWindowChanged):
            self.change_window(VisibleRange(start=event.start, end=event.end), view_type=event.view_type, title=event.title)
        elif isinstance(event, RangeSelected):
            self.select_range(event)
        elif isinstance(event, EventActivated):
            self.activate_event(event)
        elif isinstance(event, EventMoved):
            self.move_event(event)
        else:
            raise TypeError(f"Unsupported widget event: {event!r}")

    def change_window(self, window: VisibleRange, *, view_type: str = "", title: str = "") -> None:
        self.visible_range = window
        self.view_type = view_type or self.view_type
        self.view_title = title or self.view_title
        self.load_error = None
        if window in self.cache:
            logger.debug("Serving %s from cache", window.key)
            self._render()
            return
        self._fetch(window)

    def refresh(self) -> None:
        if self.visible_range is not None:
            self._fetch(self.visible_range)

    def _fetch(self, window: VisibleRange) -> None:
        self.is_loading = True
        self._state_changed()

        def done(events: List[CalendarEvent]) -> None:
            self.cache.put(window, sort_events(self._localize(event) for event in events))
            if window == self.visible_range:
                self.is_loading = False
                self.load_error = None
                self._render()
                self._state_changed()

        def fail(exc: Exception) -> None:
            logger.error("Failed to load events for %s: %s", window.key, exc)
            if window == self.visible_range:
                self.is_loading = False
                self.load_error = LOAD_ERROR_MESSAGE
                self._state_changed()

        self.runner.submit(self.events_store.fetch_events, window, on_success=done, on_error=fail)

    def events(self) -> Snapshot:
        if self.visible_range is None:
            return ()
        return self.cache.snapshot(self.visible_range)

    def find_event(self, event_id: str) -> Optional[CalendarEvent]:
        return next((event for event in self.events() if event.id == event_id), None)

    def display_events(self) -> List[DisplayEvent]:
        return [DisplayEvent.from_event(event) for event in self.events()]

    @property
    def pending_count(self) -> int:
        return len(self.coordinator.pending)

    def _localize(self, event: CalendarEvent) -> CalendarEvent:
        return replace(event, start_at=event.start_at.astimezone(self.tz), end_at=event.end_at.astimezone(self.tz))

    def _on_publish(self, window: VisibleRange, _snapshot: Snapshot) -> None:
        if window == self.visible_range:
            self._render()
        self._state_changed()

    def _render(self) -> None:
        if self.on_events_changed:
            self.on_events_changed(self.display_events())

    def _state_changed(self) -> None:
        if self.on_state_changed:
            self.on_state_changed(self)

    # ------------------------------------------------------------------ capability

    def can_edit(self, event: Optional[CalendarEvent]) -> bool:
        user = self.current_user
        if event is None or user is None:
            return False
        return event.owner_user_id == user.id or user.is_admin

    def allow(self, event_id: str) -> bool:
        """Pre-veto hook the widget consults before it visually commits a drag."""

        if self.coordinator.is_pending(event_id):
            return False
        return self.can_edit(self.find_event(event_id))

    # ------------------------------------------------------------------ widget callbacks

    def select_range(self, selection: RangeSelected) -> None:
        self._open_create(TimeRange(start=selection.start, end=selection.end, all_day=selection.all_day))

    def new_event(self, anchor: Optional[datetime] = None) -> None:
        start = anchor or self.clock()
        end = start + timedelta(minutes=self.settings.default_duration_minutes)
        self._open_create(TimeRange(start=start, end=end))

    def _open_create(self, initial: TimeRange) -> None:
        if self.current_user is None:
            self.notify("Sign in to create events.", ToastVariant.ERROR)
            return
        if self.form.is_open:
            self.form.close()
        self.form.open_create(initial)

    def activate_event(self, activation: EventActivated) -> None:
        event = self.find_event(activation.event_id)
        if event is None:
            return
        if self.form.is_open:
            self.form.close()
        self.form.open_edit(event, can_edit=self.can_edit(event))

    def move_event(self, move: EventMoved) -> None:
        event = self.find_event(move.event_id)
        if event is None:
            move.revert()
            return

        try:
            self._check_move(event, move)
        except CalendarError as exc:
            logger.info("Rejected move of %s: %s", event.id, exc)
            self.notify(str(exc), ToastVariant.ERROR)
            move.revert()
            return

        payload = CalendarEventPayload(
            title=event.title,
            description=event.description,
            start_at=to_iso_instant(move.start),
            end_at=to_iso_instant(move.end),
            all_day=move.all_day,
            owner_user_id=event.owner_user_id,
            client_id=event.client_id,
            location=event.location,
        )

        def fail(exc: Exception) -> None:
            move.revert()
            self.notify(describe_error(exc, "Unable to move event."), ToastVariant.ERROR)

        self.update_event(
            event.id,
            payload,
            on_success=_ignore,
            on_error=fail,
            patched=moved_event(event, move.start, move.end, move.all_day),
            kind="resize" if move.resized else "move",
        )

    def _check_move(self, event: CalendarEvent, move: EventMoved) -> None:
        if self.coordinator.is_pending(event.id):
            raise CalendarError(SAVING_MESSAGE)
        if not self.can_edit(event):
            raise PermissionDeniedError("You do not have permission to edit this event.")
        if has_overlap(self.events(), event.id, event.owner_user_id, move.start, move.end):
            raise ConflictError("Event overlaps with another event.")

    # ------------------------------------------------------------------ mutations

    def _active_window(self) -> VisibleRange:
        if self.visible_range is None:
            raise CalendarError("The calendar has not loaded yet.")
        return self.visible_range

    def _client_name(self, client_id: Optional[str], fallback: Optional[str] = None) -> Optional[str]:
        if not client_id:
            return None
        match = next((client.name for client in self.client_options if client.id == client_id), None)
        return match if match is not None else fallback

    def _submit_from_dialog(
        self,
        target: Optional[CalendarEvent],
        payload: CalendarEventPayload,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        if target is None:
            self.create_event(payload, on_success=on_success, on_error=on_error)
        else:
            self.update_event(target.id, payload, on_success=on_success, on_error=on_error)

    def _delete_from_dialog(self, target: CalendarEvent, on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        self.delete_event(target.id, on_success=on_success, on_error=on_error)

    def create_event(
        self,
        payload: CalendarEventPayload,
        *,
        on_success: SuccessCallback = _ignore,
        on_error: ErrorCallback = _ignore,
    ) -> None:
        if self.current_user is None:
            on_error(PermissionDeniedError("You must be signed in to create events."))
            return
        try:
            window = self._active_window()
        except CalendarError as exc:
            on_error(exc)
            return

        owned = payload.model_copy(update={"owner_user_id": self.current_user.id})
        placeholder = self._localize(
            optimistic_event(owned, event_id=new_placeholder_id(), client_name=self._client_name(owned.client_id))
        )

        def remote() -> CalendarEvent:
            return self._localize(self.events_store.create_event(owned))

        def done(created: CalendarEvent) -> None:
            self.notify("Event created.", ToastVariant.SUCCESS)
            on_success(created)

        self.coordinator.mutate(window, create_mutation(placeholder, remote), on_success=done, on_error=on_error)

    def update_event(
        self,
        event_id: str,
        payload: CalendarEventPayload,
        *,
        on_success: SuccessCallback = _ignore,
        on_error: ErrorCallback = _ignore,
        patched: Optional[CalendarEvent] = None,
        kind: str = "update",
    ) -> None:
        existing = self.find_event(event_id)
        if existing is None:
            on_error(CalendarError("Event not found."))
            return
        if self.coordinator.is_pending(event_id):
            on_error(CalendarError(SAVING_MESSAGE))
            return
        window = self._active_window()

        if patched is None:
            if payload.client_id is None:
                client_name = None
            else:
                client_name = self._client_name(payload.client_id, fallback=existing.client_name)
            patched = self._localize(optimistic_event(payload, event_id=event_id, base=existing, client_name=client_name))

        def remote() -> CalendarEvent:
            return self._localize(self.events_store.update_event(event_id, payload))

        def done(updated: CalendarEvent) -> None:
            self.notify("Event updated.", ToastVariant.SUCCESS)
            on_success(updated)

        self.coordinator.mutate(window, update_mutation(patched, remote, kind=kind), on_success=done, on_error=on_error)

    def delete_event(
        self,
        event_id: str,
        *,
        on_success: SuccessCallback = _ignore,
        on_error: ErrorCallback = _ignore,
    ) -> None:
        if self.coordinator.is_pending(event_id):
            on_error(CalendarError(SAVING_MESSAGE))
            return
        try:
            window = self._active_window()
        except CalendarError as exc:
            on_error(exc)
            return

        def remote() -> None:
            self.events_store.delete_event(event_id)

        def done(result: Any) -> None:
            self.notify("Event deleted.", ToastVariant.SUCCESS)
            on_success(result)

        def fail(exc: Exception) -> None:
            self.notify(describe_error(exc, "Unable to delete event."), ToastVariant.ERROR)
            on_error(exc)

        self.coordinator.mutate(window, delete_mutation(event_id, remote), on_success=done, on_error=fail)

    # ------------------------------------------------------------------ task assignment

    def open_assignment(self, event_id: Optional[str] = None) -> None:
        if event_id is None and self.form.target is not None:
            event_id = self.form.target.id
        self.assignment.open(event_id, current_user_id=self.current_user.id if self.current_user else None)

    def _on_task_assigned(self, _task: TaskRecord) -> None:
        self.notify("Task assigned.", ToastVariant.SUCCESS)
        self.refresh()

    # ------------------------------------------------------------------ toasts

    def notify(self, message: str, variant: ToastVariant) -> Toast:
        toast = Toast(id=next(self._toast_ids), message=message, variant=variant)
        self.toast = toast
        if self.on_toast:
            self.on_toast(toast)
        return toast

    def dismiss_toast(self, toast_id: int) -> None:
        if self.toast is not None and self.toast.id == toast_id:
            self.toast = None


__all__ = ["CalendarViewController", "LOAD_ERROR_MESSAGE", "SAVING_MESSAGE", "Toast"]
