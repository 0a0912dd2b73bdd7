from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import TaskPriority


class CalendarEventPayload(BaseModel):
    """Wire shape sent to event storage when creating or updating a booking."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = Field(default=None)
    start_at: str
    end_at: str
    all_day: bool = False
    owner_user_id: Optional[str] = Field(default=None)
    client_id: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)

    def to_wire(self) -> Dict[str, Any]:
        record = self.model_dump()
        if record["owner_user_id"] is None:
            record.pop("owner_user_id")
        return record


class CreateTaskInput(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    title: str
    details: Optional[str] = Field(default=None)
    due_at: Optional[str] = Field(default=None)
    priority: TaskPriority = TaskPriority.NORMAL
    assigned_to: str
    event_id: Optional[str] = Field(default=None)
    created_by: str

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump()
