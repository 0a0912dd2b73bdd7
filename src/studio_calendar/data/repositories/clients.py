from __future__ import annotations

from dataclasses import dataclass

from ...domain import ClientOption
from ..supabase import SupabaseGateway


@dataclass(slots=True)
class ClientRepository:
    gateway: SupabaseGateway
    table_name: str

    def list_clients(self) -> list[ClientOption]:
        query = self.gateway.table(self.table_name).select("id, name").order("name", desc=False)
        rows = self.gateway.execute(query, action="load clients")
        return [ClientOption.from_record(row) for row in rows]
