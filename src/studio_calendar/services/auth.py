from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .context import ServiceContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthService:
    context: ServiceContext

    def _client(self):
        return self.context.gateway.ensure_client()

    def sign_in_with_password(self, email: str, password: str) -> Any:
        response = self._client().auth.sign_in_with_password({"email": email, "password": password})
        session = getattr(response, "session", None)
        if session:
            self.set_session(session)
            logger.info("Signed in as %s", email)
        return response

    def set_session(self, session: Any) -> None:
        self.context.gateway.set_session(session)
        self.context.cache.clear()

    def is_signed_in(self) -> bool:
        return self.context.gateway.is_ready()

    def sign_out(self) -> None:
        try:
            self._client().auth.sign_out()
        finally:
            self.context.gateway.clear_session()
            self.context.cache.clear()
