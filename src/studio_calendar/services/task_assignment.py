from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from enum import Enum
from typing import Callable, List, Optional

from ..core.time_range import parse_boundary_input
from ..domain import CreateTaskInput, TaskPriority, TaskRecord, UserSummary, to_iso_instant
from ..domain.errors import DraftValidationError, describe_error
from .ports import Runner, TaskStore, UserDirectory

logger = logging.getLogger(__name__)


class TaskDialogState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


@dataclass
class TaskDraft:
    title: str = ""
    details: str = ""
    due_at: str = ""
    priority: TaskPriority = TaskPriority.NORMAL
    assignee_id: str = ""
    error_message: Optional[str] = None


def build_task_input(
    draft: TaskDraft,
    *,
    event_id: Optional[str],
    current_user_id: Optional[str],
    tz: Optional[tzinfo] = None,
) -> CreateTaskInput:
    if not event_id:
        raise DraftValidationError("Save the event before assigning tasks.")
    if not current_user_id:
        raise DraftValidationError("You must be signed in to assign tasks.")
    if not draft.title.strip():
        raise DraftValidationError("Task title is required.")
    if not draft.assignee_id:
        raise DraftValidationError("Select an assignee.")

    due_at = None
    if draft.due_at.strip():
        parsed = parse_boundary_input(draft.due_at, False, tz=tz)
        if parsed is None:
            raise DraftValidationError("Enter a valid due date.")
        due_at = to_iso_instant(parsed)

    return CreateTaskInput(
        title=draft.title.strip(),
        details=draft.details.strip() or None,
        due_at=due_at,
        priority=draft.priority,
        assigned_to=draft.assignee_id,
        event_id=event_id,
        created_by=current_user_id,
    )


class TaskAssignmentBridge:
    """Dialog flow attaching a follow-up task to an event and its assignee list."""

    def __init__(
        self,
        *,
        tasks: TaskStore,
        users: UserDirectory,
        runner: Runner,
        tz: Optional[tzinfo] = None,
        on_assigned: Optional[Callable[[TaskRecord], None]] = None,
        on_change: Optional[Callable[["TaskAssignmentBridge"], None]] = None,
    ) -> None:
        self.tasks = tasks
        self.users = users
        self.runner = runner
        self.tz = tz
        self.on_assigned = on_assigned
        self.on_change = on_change
        self.state = TaskDialogState.CLOSED
        self.draft = TaskDraft()
        self.event_id: Optional[str] = None
        self.current_user_id: Optional[str] = None
        self.user_options: List[UserSummary] = []
        self.users_error: Optional[str] = None
        self._session = 0

    @property
    def is_open(self) -> bool:
        return self.state is not TaskDialogState.CLOSED

    @property
    def is_submitting(self) -> bool:
        return self.state is TaskDialogState.SUBMITTING

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)

    def open(self, event_id: Optional[str], *, current_user_id: Optional[str]) -> None:
        self._session += 1
        self.state = TaskDialogState.OPEN
        self.draft = TaskDraft()
        self.event_id = event_id
        self.current_user_id = current_user_id
        self._notify()
        self._load_users()

    def close(self) -> None:
        self._session += 1
        self.state = TaskDialogState.CLOSED
        self.draft = TaskDraft()
        self.event_id = None
        self._notify()

    def _load_users(self) -> None:
        session = self._session

        def done(users: List[UserSummary]) -> None:
            if session != self._session:
                return
            self.user_options = list(users)
            self.users_error = None
            self._notify()

        def fail(exc: Exception) -> None:
            if session != self._session:
                return
            logger.error("Failed to load assignable users: %s", exc)
            self.users_error = describe_error(exc, "Unable to load users.")
            self._notify()

        self.runner.submit(self.users.list_assignable_users, on_success=done, on_error=fail)

    def update(self, **changes: object) -> bool:
        if self.state is not TaskDialogState.OPEN:
            return False
        for name, value in changes.items():
            if not hasattr(self.draft, name) or name == "error_message":
                raise AttributeError(f"TaskDraft has no editable field {name!r}")
            if name == "priority":
                value = TaskPriority(value)
            setattr(self.draft, name, value)
        self._notify()
        return True

    def assign_to_me(self) -> bool:
        if not self.current_user_id:
            return False
        return self.update(assignee_id=self.current_user_id)

    def submit(self) -> bool:
        if self.state is not TaskDialogState.OPEN:
            return False
        try:
            payload = build_task_input(
                self.draft,
                event_id=self.event_id,
                current_user_id=self.current_user_id,
                tz=self.tz,
            )
        except DraftValidationError as exc:
            self.draft.error_message = str(exc)
            self._notify()
            return False

        self.state = TaskDialogState.SUBMITTING
        self.draft.error_message = None
        self._notify()
        session = self._session

        def done(task: TaskRecord) -> None:
            if session != self._session:
                return
            logger.info("Task %s assigned to %s for event %s", task.id, task.assigned_to, task.event_id)
            self.close()
            if self.on_assigned:
                self.on_assigned(task)

        def fail(exc: Exception) -> None:
            if session != self._session:
                return
            logger.error("Failed to assign task for event %s: %s", self.event_id, exc)
            self.state = TaskDialogState.OPEN
            self.draft.error_message = describe_error(exc, "Unable to assign task.")
            self._notify()

        self.runner.submit(self.tasks.create_task, payload, on_success=done, on_error=fail)
        return True


__all__ = ["TaskAssignmentBridge", "TaskDialogState", "TaskDraft", "build_task_input"]
