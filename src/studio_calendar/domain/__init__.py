"""Domain models for studio bookings and their follow-up tasks."""

from __future__ import annotations

from .enums import TaskPriority, TaskStatus, ToastVariant
from .models import (
    CalendarEvent,
    ClientOption,
    CurrentUser,
    EventAssignee,
    TaskRecord,
    UserSummary,
    VisibleRange,
    parse_datetime,
    to_iso_instant,
)
from .payloads import CalendarEventPayload, CreateTaskInput

__all__ = [
    "CalendarEvent",
    "CalendarEventPayload",
    "ClientOption",
    "CreateTaskInput",
    "CurrentUser",
    "EventAssignee",
    "TaskPriority",
    "TaskRecord",
    "TaskStatus",
    "ToastVariant",
    "UserSummary",
    "VisibleRange",
    "parse_datetime",
    "to_iso_instant",
]
