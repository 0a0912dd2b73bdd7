from __future__ import annotations

import logging
from dataclasses import dataclass

from ...domain import CreateTaskInput, TaskRecord
from ...domain.errors import PersistenceError
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)

_TASK_COLUMNS = "id, title, details, status, priority, due_at, created_by, assigned_to, event_id, created_at, updated_at"


@dataclass(slots=True)
class TaskRepository:
    gateway: SupabaseGateway
    table_name: str
    assignees_table: str

    def create_task(self, payload: CreateTaskInput) -> TaskRecord:
        record = payload.to_wire()
        rows = self.gateway.execute(self.gateway.table(self.table_name).insert(record), action="create task")
        if not rows:
            raise PersistenceError("Unable to create task.")
        task = TaskRecord.from_record(rows[0])

        if payload.event_id:
            assignee = {"event_id": payload.event_id, "user_id": payload.assigned_to, "role": "assistant"}
            query = self.gateway.table(self.assignees_table).upsert(assignee, on_conflict="event_id,user_id")
            self.gateway.execute(query, action="assign user to event")
            logger.info("Assigned user %s to event %s", payload.assigned_to, payload.event_id)
        return task
