# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""SessionFilter — loads and persists HTTP sessions via a session-id cookie."""

from __future__ import annotations

import uuid
from typing import Any

import structlog

from antiforgery.container.ordering import HIGHEST_PRECEDENCE, order
from antiforgery.core.config import Config
from antiforgery.session.session import HttpSession, SessionStore
from antiforgery.web.filters import OncePerRequestFilter
from antiforgery.web.ports.filter import CallNext

logger = structlog.get_logger("antiforgery.session")

_DEFAULT_COOKIE_NAME = "ANTIFORGERY_SESSION"
_DEFAULT_TTL = 1800  # 30 minutes
_DEFAULT_ATTRIBUTE = "session"


@order(HIGHEST_PRECEDENCE + 150)
class SessionFilter(OncePerRequestFilter):
    """Manages server-side sessions via a configurable cookie.

    Reads the session cookie from the incoming request, loads session data
    from the ``SessionStore``, attaches the ``HttpSession`` to
    ``request.state.<attribute>`` and persists changes after the response.
    The attribute name is what session-mode CSRF protection calls the
    session key.
    """

    def __init__(
        self,
        store: SessionStore,
        cookie_name: str = _DEFAULT_COOKIE_NAME,
        ttl: int = _DEFAULT_TTL,
        attribute: str = _DEFAULT_ATTRIBUTE,
    ) -> None:
        super().__init__()
        self._store = store
        self._cookie_name = cookie_name
        self._ttl = ttl
        self._attribute = attribute

    @classmethod
    def from_config(cls, config: Config, store: SessionStore) -> SessionFilter:
        """Build a filter from the ``antiforgery.session`` section."""
        return cls(
            store,
            cookie_name=str(config.get("antiforgery.session.cookie_name", _DEFAULT_COOKIE_NAME)),
            ttl=int(config.get("antiforgery.session.ttl", _DEFAULT_TTL)),
            attribute=str(config.get("antiforgery.csrf.session_key", _DEFAULT_ATTRIBUTE)),
        )

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        session = await self._load_or_create_session(request)
        setattr(request.state, self._attribute, session)

        try:
            response = await call_next(request)
        finally:
            await self._persist_session(session)

        if session.invalidated:
            response.delete_cookie(key=self._cookie_name)
        elif session.is_new:
            response.set_cookie(
                key=self._cookie_name,
                value=session.id,
                httponly=True,
                samesite="lax",
                max_age=self._ttl,
            )

        return response

    async def _load_or_create_session(self, request: Any) -> HttpSession:
        """Load an existing session from the store or create a new one."""
        session_id = request.cookies.get(self._cookie_name)

        if session_id:
            data = await self._store.get(session_id)
            if data is not None:
                return HttpSession(session_id, data)

        session = HttpSession(uuid.uuid4().hex, is_new=True)
        logger.debug("session_created", session_id=session.id)
        return session

    async def _persist_session(self, session: HttpSession) -> None:
        """Save or delete the session in the store based on its state."""
        if session.invalidated:
            await self._store.delete(session.id)
        elif session.modified:
            await self._store.save(session.id, session.get_data(), self._ttl)
