from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .enums import TaskPriority, TaskStatus


def parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported datetime value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_datetime(value: Any) -> Optional[datetime]:
    return parse_datetime(value) if value else None


def to_iso_instant(value: datetime) -> str:
    """Serialize ``value`` as a UTC ISO-8601 instant with a ``Z`` suffix."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class EventAssignee:
    user_id: str
    role: str = "assistant"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "EventAssignee":
        return cls(user_id=str(record["user_id"]), role=record.get("role") or "assistant")


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    id: str
    title: str
    start_at: datetime
    end_at: datetime
    all_day: bool = False
    owner_user_id: str = ""
    description: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    location: Optional[str] = None
    assignees: Tuple[EventAssignee, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_placeholder(self) -> bool:
        return self.id.startswith("temp-")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        client = record.get("client")
        if isinstance(client, list):
            client = client[0] if client else None
        assignees = tuple(
            EventAssignee.from_record(item) for item in (record.get("event_assignees") or []) if item
        )
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            description=record.get("description"),
            start_at=parse_datetime(record["start_at"]),
            end_at=parse_datetime(record["end_at"]),
            all_day=bool(record.get("all_day")),
            owner_user_id=str(record.get("owner_user_id") or ""),
            client_id=record.get("client_id"),
            client_name=(client or {}).get("name"),
            location=record.get("location"),
            assignees=assignees,
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class VisibleRange:
    """The ``[start, end)`` window the calendar widget currently renders."""

    start: datetime
    end: datetime

    @property
    def key(self) -> Tuple[str, str]:
        return (to_iso_instant(self.start), to_iso_instant(self.end))


@dataclass(frozen=True, slots=True)
class ClientOption:
    id: str
    name: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ClientOption":
        name = record.get("name")
        return cls(
            id=str(record["id"]),
            name=name if isinstance(name, str) and name else "Unnamed client",
        )


@dataclass(frozen=True, slots=True)
class UserSummary:
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.email or "Unknown user"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserSummary":
        name = record.get("name")
        email = record.get("email")
        return cls(
            id=str(record["id"]),
            name=name if isinstance(name, str) and name.strip() else None,
            email=email if isinstance(email, str) else None,
        )


@dataclass(frozen=True, slots=True)
class CurrentUser:
    id: str
    is_admin: bool = False
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CurrentUser":
        roles = record.get("roles")
        is_admin = record.get("role") == "admin" or (isinstance(roles, list) and "admin" in roles)
        return cls(
            id=str(record["id"]),
            is_admin=is_admin,
            name=record.get("name"),
            email=record.get("email"),
        )


@dataclass(slots=True)
class TaskRecord:
    id: str
    title: str
    assigned_to: str
    created_by: str
    details: Optional[str] = None
    status: TaskStatus = TaskStatus.OPEN
    priority: TaskPriority = TaskPriority.NORMAL
    due_at: Optional[datetime] = None
    event_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TaskRecord":
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            details=record.get("details"),
            status=TaskStatus(record.get("status") or TaskStatus.OPEN),
            priority=TaskPriority(record.get("priority") or TaskPriority.NORMAL),
            due_at=_optional_datetime(record.get("due_at")),
            created_by=str(record["created_by"]),
            assigned_to=str(record["assigned_to"]),
            event_id=record.get("event_id"),
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )
