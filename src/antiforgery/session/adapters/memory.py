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
"""In-memory session store with TTL-based expiry."""

from __future__ import annotations

import asyncio
import time

from antiforgery.session.session import SessionData


class InMemorySessionStore:
    """Process-local session store for development and tests.

    Data is copied on save and on load, so a request only sees another
    request's changes after they have been persisted.
    """

    def __init__(self) -> None:
        self._store: dict[str, tuple[SessionData, float]] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> SessionData | None:
        """Return a copy of the session data, or ``None`` if missing or expired."""
        async with self._lock:
            entry = self._store.get(session_id)
            if entry is None:
                return None

            data, expires_at = entry
            if time.monotonic() > expires_at:
                del self._store[session_id]
                return None

            return dict(data)

    async def save(self, session_id: str, data: SessionData, ttl: int) -> None:
        """Store session data with a TTL in seconds."""
        async with self._lock:
            self._store[session_id] = (dict(data), time.monotonic() + ttl)

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            self._store.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._store)
