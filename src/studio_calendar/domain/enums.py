from __future__ import annotations

from enum import Enum


class TaskPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class TaskStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"


class ToastVariant(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
