"""State machine behind the create/edit event dialog.

The dialog is always in exactly one :class:`DialogState`. Field edits are only
accepted while a draft is open, and every time-range edit goes through
:mod:`studio_calendar.core.time_range` before it is stored, so the draft never
holds a range the normalizer would reject.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional

from ..core.time_range import (
    TimeRange,
    default_range,
    format_boundary,
    normalize,
    start_of_day,
    toggle_all_day,
    with_end_input,
    with_start_input,
)
from ..domain import CalendarEvent, CalendarEventPayload, to_iso_instant
from ..domain.errors import DraftValidationError, InvalidTransitionError, describe_error

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "Delete this event? This action cannot be undone."

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]
SubmitHandler = Callable[[Optional[CalendarEvent], CalendarEventPayload, SuccessCallback, ErrorCallback], None]
DeleteHandler = Callable[[CalendarEvent, SuccessCallback, ErrorCallback], None]
ConfirmPrompt = Callable[[str], bool]


class DialogState(str, Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"
    SUBMITTING = "submitting"
    DELETING = "deleting"


class DialogMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


_TRANSITIONS: Dict[DialogState, FrozenSet[DialogState]] = {
    DialogState.CLOSED: frozenset({DialogState.CREATING, DialogState.EDITING}),
    DialogState.CREATING: frozenset({DialogState.SUBMITTING, DialogState.CLOSED}),
    DialogState.EDITING: frozenset({DialogState.SUBMITTING, DialogState.DELETING, DialogState.CLOSED}),
    DialogState.SUBMITTING: frozenset({DialogState.CREATING, DialogState.EDITING, DialogState.CLOSED}),
    DialogState.DELETING: frozenset({DialogState.EDITING, DialogState.CLOSED}),
}

_DRAFT_STATES = frozenset({DialogState.CREATING, DialogState.EDITING})


def _blank_range() -> TimeRange:
    return default_range(datetime.now().astimezone())


@dataclass
class EventDraft:
    title: str = ""
    description: str = ""
    location: str = ""
    client_id: str = ""
    range: TimeRange = field(default_factory=_blank_range)
    error_message: Optional[str] = None

    @property
    def all_day(self) -> bool:
        return self.range.all_day

    @property
    def start_date(self) -> datetime:
        return self.range.start

    @property
    def end_date(self) -> datetime:
        return self.range.end


def validate_draft(draft: EventDraft, *, owner_user_id: Optional[str] = None) -> CalendarEventPayload:
    """Check ``draft`` and serialize it, raising :class:`DraftValidationError` on the first failure."""

    title = draft.title.strip()
    if not title:
        raise DraftValidationError("Title is required.")

    start, end = draft.range.start, draft.range.end
    if not start < end:
        if draft.all_day:
            raise DraftValidationError("End date must be after the start date.")
        raise DraftValidationError("End time must be after the start time.")

    description = draft.description.strip()
    location = draft.location.strip()
    return CalendarEventPayload(
        title=title,
        description=description or None,
        start_at=to_iso_instant(start_of_day(start) if draft.all_day else start),
        end_at=to_iso_instant(end),
        all_day=draft.all_day,
        owner_user_id=owner_user_id,
        client_id=draft.client_id or None,
        location=location or None,
    )


class EventFormController:
    def __init__(
        self,
        *,
        submit_handler: Optional[SubmitHandler] = None,
        delete_handler: Optional[DeleteHandler] = None,
        on_change: Optional[Callable[["EventFormController"], None]] = None,
    ) -> None:
        self.submit_handler = submit_handler
        self.delete_handler = delete_handler
        self.on_change = on_change
        self.state = DialogState.CLOSED
        self.draft = EventDraft()
        self.target: Optional[CalendarEvent] = None
        self.read_only = False
        self._origin = DialogState.CLOSED
        self._session = 0

    # ------------------------------------------------------------------ state

    @property
    def is_open(self) -> bool:
        return self.state is not DialogState.CLOSED

    @property
    def mode(self) -> DialogMode:
        return DialogMode.EDIT if self.target is not None else DialogMode.CREATE

    @property
    def is_saving(self) -> bool:
        return self.state is DialogState.SUBMITTING

    @property
    def is_deleting(self) -> bool:
        return self.state is DialogState.DELETING

    @property
    def start_input(self) -> str:
        return format_boundary(self.draft.range.start, self.draft.all_day)

    @property
    def end_input(self) -> str:
        return format_boundary(self.draft.range.display_end, self.draft.all_day)

    def _transition(self, target: DialogState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"Cannot move event dialog from {self.state.value} to {target.value}.")
        logger.debug("Event dialog %s -> %s", self.state.value, target.value)
        self.state = target

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)

    # ------------------------------------------------------------------ open / close

    def open_create(
        self,
        initial: Optional[TimeRange] = None,
        *,
        now: Optional[datetime] = None,
        can_edit: bool = True,
    ) -> None:
        self._transition(DialogState.CREATING)
        self._session += 1
        if initial is None:
            seeded = default_range(now or datetime.now().astimezone())
        else:
            seeded = normalize(initial)
        self.draft = EventDraft(range=seeded)
        self.target = None
        self.read_only = not can_edit
        self._notify()

    def open_edit(self, event: CalendarEvent, *, can_edit: bool) -> None:
        self._transition(DialogState.EDITING)
        self._session += 1
        start = start_of_day(event.start_at) if event.all_day else event.start_at
        end = start_of_day(event.end_at) if event.all_day else event.end_at
        self.draft = EventDraft(
            title=event.title,
            description=event.description or "",
            location=event.location or "",
            client_id=event.client_id or "",
            range=TimeRange(start=start, end=end, all_day=event.all_day),
        )
        self.target = event
        self.read_only = not can_edit
        self._notify()

    def close(self) -> None:
        if self.state in (DialogState.SUBMITTING, DialogState.DELETING):
            logger.info("Event dialog closed while %s; the request continues in the background", self.state.value)
        if self.state is not DialogState.CLOSED:
            self._transition(DialogState.CLOSED)
        self._session += 1
        self.draft = EventDraft()
        self.target = None
        self.read_only = False
        self._notify()

    # ------------------------------------------------------------------ field edits

    def _accepts_edits(self) -> bool:
        return self.state in _DRAFT_STATES and not self.read_only

    def _store(self, **changes: Any) -> bool:
        if not self._accepts_edits():
            return False
        for name, value in changes.items():
            setattr(self.draft, name, value)
        self.draft.error_message = None
        self._notify()
        return True

    def set_title(self, value: str) -> bool:
        return self._store(title=value)

    def set_description(self, value: str) -> bool:
        return self._store(description=value)

    def set_location(self, value: str) -> bool:
        return self._store(location=value)

    def set_client_id(self, value: Optional[str]) -> bool:
        return self._store(client_id=value or "")

    def set_all_day(self, all_day: bool) -> bool:
        return self._store(range=toggle_all_day(self.draft.range, all_day))

    def set_start_input(self, raw: str) -> bool:
        updated = with_start_input(self.draft.range, raw)
        if updated is None:
            return False
        return self._store(range=updated)

    def set_end_input(self, raw: str) -> bool:
        updated = with_end_input(self.draft.range, raw)
        if updated is None:
            return False
        return self._store(range=updated)

    def set_start(self, value: datetime) -> bool:
        return self.set_start_input(value.isoformat())

    def set_end(self, value: datetime) -> bool:
        return self.set_end_input(value.isoformat())

    # ------------------------------------------------------------------ submit / delete

    def submit(self) -> bool:
        """Validate the draft and hand its payload to the submit handler.

        Returns ``True`` when a request was started.
        """

        if self.state in (DialogState.SUBMITTING, DialogState.DELETING):
            return False
        if self.read_only:
            self.close()
            return False
        if self.state not in _DRAFT_STATES:
            raise InvalidTransitionError("Cannot submit a closed event dialog.")

        try:
            payload = validate_draft(self.draft)
        except DraftValidationError as exc:
            self.draft.error_message = str(exc)
            self._notify()
            return False

        if self.submit_handler is None:
            raise InvalidTransitionError("Event dialog has no submit handler.")

        self._origin = self.state
        self.draft.error_message = None
        self._transition(DialogState.SUBMITTING)
        self._notify()
        session = self._session

        def done(_result: Any) -> None:
            if session == self._session:
                self.close()

        def fail(exc: Exception) -> None:
            if session != self._session:
                return
            self._transition(self._origin)
            self.draft.error_message = describe_error(exc, "Unable to save event.")
            self._notify()

        self.submit_handler(self.target, payload, done, fail)
        return True

    def request_delete(self, confirm: ConfirmPrompt) -> bool:
        if self.state is not DialogState.EDITING or self.target is None or self.read_only:
            return False
        if self.delete_handler is None:
            return False
        if not confirm(DELETE_CONFIRMATION):
            return False

        self.draft.error_message = None
        self._transition(DialogState.DELETING)
        self._notify()
        session = self._session

        def done(_result: Any) -> None:
            if session == self._session:
                self.close()

        def fail(exc: Exception) -> None:
            if session != self._session:
                return
            self._transition(DialogState.EDITING)
            self.draft.error_message = describe_error(exc, "Unable to delete event.")
            self._notify()

        self.delete_handler(self.target, done, fail)
        return True


__all__ = [
    "DELETE_CONFIRMATION",
    "DialogMode",
    "DialogState",
    "EventDraft",
    "EventFormController",
    "validate_draft",
]
