"""Application services orchestrating data access and calendar behaviour."""

from __future__ import annotations

from .auth import AuthService
from .calendar_view import CalendarViewController, Toast
from .context import ServiceContext
from .event_form import DialogMode, DialogState, EventDraft, EventFormController, validate_draft
from .mutations import OptimisticMutationCoordinator
from .task_assignment import TaskAssignmentBridge, TaskDialogState, TaskDraft
from .widget_events import DisplayEvent, EventActivated, EventMoved, RangeSelected, ViewWindowChanged

__all__ = [
    "AuthService",
    "CalendarViewController",
    "DialogMode",
    "DialogState",
    "DisplayEvent",
    "EventActivated",
    "EventDraft",
    "EventFormController",
    "EventMoved",
    "OptimisticMutationCoordinator",
    "RangeSelected",
    "ServiceContext",
    "TaskAssignmentBridge",
    "TaskDialogState",
    "TaskDraft",
    "Toast",
    "ViewWindowChanged",
    "validate_draft",
]
