from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ...domain import CalendarEvent, CalendarEventPayload, VisibleRange, to_iso_instant
from ...domain.errors import PersistenceError
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)

_EVENT_COLUMNS = (
    "id, title, description, start_at, end_at, all_day, owner_user_id, client_id, location, "
    "created_at, updated_at"
)


@dataclass(slots=True)
class EventRepository:
    gateway: SupabaseGateway
    table_name: str
    clients_table: str
    assignees_table: str

    def _select_clause(self) -> str:
        return (
            f"{_EVENT_COLUMNS}, client:{self.clients_table}(id, name), "
            f"{self.assignees_table}(user_id, role)"
        )

    def _to_event(self, record: dict) -> CalendarEvent:
        if self.assignees_table != "event_assignees" and self.assignees_table in record:
            record = {**record, "event_assignees": record.get(self.assignees_table)}
        return CalendarEvent.from_record(record)

    def fetch_events(self, window: VisibleRange) -> List[CalendarEvent]:
        query = (
            self.gateway.table(self.table_name)
            .select(self._select_clause())
            .lt("start_at", to_iso_instant(window.end))
            .gt("end_at", to_iso_instant(window.start))
            .order("start_at", desc=False)
        )
        rows = self.gateway.execute(query, action="load events")
        logger.debug("Fetched %d events for %s", len(rows), window.key)
        return [self._to_event(row) for row in rows]

    def fetch(self, event_id: str) -> Optional[CalendarEvent]:
        query = (
            self.gateway.table(self.table_name)
            .select(self._select_clause())
            .eq("id", event_id)
            .limit(1)
        )
        rows = self.gateway.execute(query, action="load event")
        return self._to_event(rows[0]) if rows else None

    def create_event(self, payload: CalendarEventPayload) -> CalendarEvent:
        query = self.gateway.table(self.table_name).insert(payload.to_wire())
        rows = self.gateway.execute(query, action="create event")
        if not rows:
            raise PersistenceError("Unable to create calendar event.")
        return self._reload(rows[0], fallback_message="Unable to create calendar event.")

    def update_event(self, event_id: str, payload: CalendarEventPayload) -> CalendarEvent:
        query = self.gateway.table(self.table_name).update(payload.to_wire()).eq("id", event_id)
        rows = self.gateway.execute(query, action="update event")
        if not rows:
            raise PersistenceError("Event not found.")
        return self._reload(rows[0], fallback_message="Unable to update calendar event.")

    def delete_event(self, event_id: str) -> None:
        query = self.gateway.table(self.table_name).delete().eq("id", event_id)
        self.gateway.execute(query, action="delete event")

    def _reload(self, row: dict, *, fallback_message: str) -> CalendarEvent:
        # writes do not embed the joined client and assignee columns
        event = self.fetch(str(row["id"]))
        if event is None:
            raise PersistenceError(fallback_message)
        return event
