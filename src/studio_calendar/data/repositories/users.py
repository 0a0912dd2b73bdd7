from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...domain import CurrentUser, UserSummary
from ...domain.errors import PersistenceError
from ..supabase import SupabaseGateway, SupabaseSessionMissingError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserRepository:
    gateway: SupabaseGateway
    table_name: str

    def current_user(self) -> Optional[CurrentUser]:
        try:
            user_id = self.gateway.current_user_id()
        except SupabaseSessionMissingError:
            return None

        query = (
            self.gateway.table(self.table_name)
            .select("id, name, email, role, roles")
            .eq("id", user_id)
            .limit(1)
        )
        try:
            rows = self.gateway.execute(query, action="load current user")
        except PersistenceError:
            logger.warning("Falling back to session identity for user %s", user_id)
            rows = []
        if not rows:
            session_user = getattr(self.gateway.session(), "user", None)
            return CurrentUser(id=user_id, email=getattr(session_user, "email", None))
        return CurrentUser.from_record(rows[0])

    def list_assignable_users(self) -> list[UserSummary]:
        query = self.gateway.table(self.table_name).select("id, name, email").order("name", desc=False)
        rows = self.gateway.execute(query, action="load users")
        return [UserSummary.from_record(row) for row in rows]
