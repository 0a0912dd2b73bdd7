"""Tests for the Supabase repositories against a mocked PostgREST query builder."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from supabase import PostgrestAPIError

from studio_calendar.config.settings import SupabaseSettings
from studio_calendar.data.repositories import ClientRepository, EventRepository, TaskRepository, UserRepository
from studio_calendar.data.supabase import SupabaseGateway, SupabaseNotInitializedError, SupabaseSessionMissingError
from studio_calendar.domain import CalendarEventPayload, CreateTaskInput, VisibleRange
from studio_calendar.domain.errors import PersistenceError

pytestmark = pytest.mark.unit

EVENT_ROW = {
    "id": "e1",
    "title": "Engagement shoot",
    "description": None,
    "start_at": "2025-03-10T14:00:00+00:00",
    "end_at": "2025-03-10T15:00:00+00:00",
    "all_day": False,
    "owner_user_id": "u1",
    "client_id": "c1",
    "location": "Park",
    "client": {"id": "c1", "name": "Acme Weddings"},
    "event_assignees": [{"user_id": "u2", "role": "assistant"}],
    "created_at": "2025-03-01T12:00:00Z",
    "updated_at": None,
}


@pytest.fixture
def gateway() -> MagicMock:
    return MagicMock(spec=SupabaseGateway)


@pytest.fixture
def events(gateway) -> EventRepository:
    return EventRepository(
        gateway=gateway,
        table_name="calendar_events",
        clients_table="clients",
        assignees_table="event_assignees",
    )


def _payload() -> CalendarEventPayload:
    return CalendarEventPayload(
        title="Engagement shoot",
        start_at="2025-03-10T14:00:00Z",
        end_at="2025-03-10T15:00:00Z",
        owner_user_id="u1",
        client_id="c1",
    )


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class TestGateway:
    def test_unconfigured_client_raises(self):
        gateway = SupabaseGateway(SupabaseSettings(url=None, anon_key=None))
        with pytest.raises(SupabaseNotInitializedError):
            gateway.ensure_client()

    def test_session_required_for_user_id(self):
        gateway = SupabaseGateway(SupabaseSettings(url=None, anon_key=None))
        with pytest.raises(SupabaseSessionMissingError):
            gateway.current_user_id()
        gateway.set_session(SimpleNamespace(user=SimpleNamespace(id="u1")))
        assert gateway.current_user_id() == "u1"

    def test_execute_normalizes_rows(self):
        gateway = SupabaseGateway(SupabaseSettings(url=None, anon_key=None))
        query = MagicMock()
        query.execute.return_value = SimpleNamespace(data={"id": "x"})
        assert gateway.execute(query, action="load thing") == [{"id": "x"}]
        query.execute.return_value = SimpleNamespace(data=None)
        assert gateway.execute(query, action="load thing") == []

    def test_execute_translates_api_errors(self):
        gateway = SupabaseGateway(SupabaseSettings(url=None, anon_key=None))
        query = MagicMock()
        query.execute.side_effect = PostgrestAPIError(
            {"message": "new row violates row-level security policy", "code": "42501", "hint": None, "details": None}
        )
        with pytest.raises(PersistenceError, match="row-level security"):
            gateway.execute(query, action="create event")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEventRepository:
    def test_fetch_events_queries_overlapping_window(self, events, gateway, moment):
        gateway.execute.return_value = [EVENT_ROW]
        window = VisibleRange(start=moment(1, 0), end=moment(1, 0, month=4))

        result = events.fetch_events(window)

        gateway.table.assert_called_once_with("calendar_events")
        select = gateway.table.return_value.select
        assert "client:clients(id, name)" in select.call_args.args[0]
        lt = select.return_value.lt
        lt.assert_called_once_with("start_at", "2025-04-01T04:00:00Z")
        gt = lt.return_value.gt
        gt.assert_called_once_with("end_at", "2025-03-01T05:00:00Z")
        gt.return_value.order.assert_called_once_with("start_at", desc=False)

        event = result[0]
        assert event.client_name == "Acme Weddings"
        assert event.assignees[0].user_id == "u2"
        assert event.created_at is not None

    def test_create_inserts_then_reloads(self, events, gateway):
        gateway.execute.side_effect = [[{"id": "e1"}], [EVENT_ROW]]
        created = events.create_event(_payload())
        gateway.table.return_value.insert.assert_called_once_with(_payload().to_wire())
        assert created.id == "e1"
        assert created.client_name == "Acme Weddings"

    def test_update_of_missing_row_raises(self, events, gateway):
        gateway.execute.return_value = []
        with pytest.raises(PersistenceError, match="Event not found."):
            events.update_event("ghost", _payload())

    def test_delete_filters_by_id(self, events, gateway):
        gateway.execute.return_value = []
        events.delete_event("e1")
        gateway.table.return_value.delete.return_value.eq.assert_called_once_with("id", "e1")

    def test_nested_client_list_is_flattened(self, events, gateway):
        gateway.execute.return_value = [{**EVENT_ROW, "client": [{"id": "c1", "name": "Listed"}]}]
        assert events.fetch("e1").client_name == "Listed"


# ---------------------------------------------------------------------------
# Clients, users, tasks
# ---------------------------------------------------------------------------


class TestDirectories:
    def test_clients_fall_back_to_unnamed(self, gateway):
        gateway.execute.return_value = [{"id": "c1", "name": "Acme"}, {"id": "c2", "name": None}]
        clients = ClientRepository(gateway=gateway, table_name="clients").list_clients()
        assert [client.name for client in clients] == ["Acme", "Unnamed client"]

    def test_current_user_detects_admin(self, gateway):
        gateway.current_user_id.return_value = "u1"
        gateway.execute.return_value = [{"id": "u1", "name": "Avery", "roles": ["staff", "admin"]}]
        user = UserRepository(gateway=gateway, table_name="users").current_user()
        assert user.is_admin is True
        assert user.name == "Avery"

    def test_current_user_without_session_is_none(self, gateway):
        gateway.current_user_id.side_effect = SupabaseSessionMissingError("no session")
        assert UserRepository(gateway=gateway, table_name="users").current_user() is None

    def test_current_user_falls_back_to_session_identity(self, gateway):
        gateway.current_user_id.return_value = "u1"
        gateway.execute.side_effect = PersistenceError("relation users does not exist")
        gateway.session.return_value = SimpleNamespace(user=SimpleNamespace(id="u1", email="avery@studio.test"))
        user = UserRepository(gateway=gateway, table_name="users").current_user()
        assert user.id == "u1"
        assert user.email == "avery@studio.test"
        assert user.is_admin is False

    def test_create_task_upserts_assignee(self, gateway):
        gateway.execute.side_effect = [
            [{"id": "t1", "title": "Send proofs", "created_by": "u1", "assigned_to": "u2", "event_id": "e1"}],
            [],
        ]
        payload = CreateTaskInput(title="Send proofs", assigned_to="u2", event_id="e1", created_by="u1")
        task = TaskRepository(gateway=gateway, table_name="tasks", assignees_table="event_assignees").create_task(payload)

        assert task.id == "t1"
        gateway.table.assert_any_call("event_assignees")
        gateway.table.return_value.upsert.assert_called_once_with(
            {"event_id": "e1", "user_id": "u2", "role": "assistant"},
            on_conflict="event_id,user_id",
        )
