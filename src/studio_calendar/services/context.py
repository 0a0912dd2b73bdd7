from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..data import RangeEventCache, SupabaseGateway
from ..data.repositories import ClientRepository, EventRepository, TaskRepository, UserRepository


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root sharing settings, the Supabase gateway, repositories and the event cache."""

    settings: AppSettings = field(default_factory=get_settings)
    gateway: SupabaseGateway = field(init=False)
    events: EventRepository = field(init=False)
    clients: ClientRepository = field(init=False)
    users: UserRepository = field(init=False)
    tasks: TaskRepository = field(init=False)
    cache: RangeEventCache = field(init=False)

    def __post_init__(self) -> None:
        storage = self.settings.storage
        self.gateway = SupabaseGateway(self.settings.supabase)
        self.cache = RangeEventCache()
        self.events = EventRepository(
            gateway=self.gateway,
            table_name=storage.events_table,
            clients_table=storage.clients_table,
            assignees_table=storage.assignees_table,
        )
        self.clients = ClientRepository(gateway=self.gateway, table_name=storage.clients_table)
        self.users = UserRepository(gateway=self.gateway, table_name=storage.users_table)
        self.tasks = TaskRepository(
            gateway=self.gateway,
            table_name=storage.tasks_table,
            assignees_table=storage.assignees_table,
        )
