from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    anon_key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.url:
            missing.append("SUPABASE_URL")
        if not self.anon_key:
            missing.append("SUPABASE_ANON_KEY")
        return missing


@dataclass(frozen=True)
class StorageSettings:
    events_table: str
    clients_table: str
    users_table: str
    tasks_table: str
    assignees_table: str


@dataclass(frozen=True)
class CalendarSettings:
    timezone: str
    default_duration_minutes: int
    toast_timeout_ms: int

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class UiSettings:
    app_name: str
    organization: str


@dataclass(frozen=True)
class AppSettings:
    supabase: SupabaseSettings
    storage: StorageSettings
    calendar: CalendarSettings
    ui: UiSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
    )

    storage = StorageSettings(
        events_table=os.getenv("STUDIO_EVENTS_TABLE", "calendar_events"),
        clients_table=os.getenv("STUDIO_CLIENTS_TABLE", "clients"),
        users_table=os.getenv("STUDIO_USERS_TABLE", "users"),
        tasks_table=os.getenv("STUDIO_TASKS_TABLE", "tasks"),
        assignees_table=os.getenv("STUDIO_ASSIGNEES_TABLE", "event_assignees"),
    )

    calendar = CalendarSettings(
        timezone=os.getenv("STUDIO_CALENDAR_TIMEZONE", "America/Kentucky/Louisville"),
        default_duration_minutes=_int_from_env("STUDIO_CALENDAR_DEFAULT_DURATION", 60),
        toast_timeout_ms=_int_from_env("STUDIO_CALENDAR_TOAST_MS", 3200),
    )

    ui = UiSettings(
        app_name=os.getenv("STUDIO_APP_NAME", "Studio Calendar"),
        organization=os.getenv("STUDIO_APP_ORG", "Studio"),
    )

    return AppSettings(supabase=supabase, storage=storage, calendar=calendar, ui=ui)
