"""Supabase adapters implementing the calendar collaborator ports."""

from __future__ import annotations

from .clients import ClientRepository
from .events import EventRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = ["ClientRepository", "EventRepository", "TaskRepository", "UserRepository"]
