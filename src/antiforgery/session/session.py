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
"""HttpSession and SessionStore — the session bag session-mode CSRF keeps its secret in.

The CSRF secret lives under ``csrfSecret`` next to the application's own
attributes; keys starting with ``_`` are session metadata.
"""

from __future__ import annotations

import time
from collections.abc import Iterator, MutableMapping
from typing import Any, Protocol, runtime_checkable

from antiforgery.security.csrf.storage import SESSION_SECRET_FIELD

SessionData = dict[str, Any]
"""Raw persisted session: attributes, ``csrfSecret`` and ``_`` metadata."""


@runtime_checkable
class SessionStore(Protocol):
    """Persistence for :class:`HttpSession` data, keyed by session id.

    Calls may suspend on I/O; :class:`~antiforgery.session.filter.SessionFilter`
    awaits :meth:`get` before the CSRF filter reads ``csrfSecret`` and
    :meth:`save` after the response, so a secret minted during the request
    is stored with the rest of the bag.
    """

    async def get(self, session_id: str) -> SessionData | None:
        """Return the stored data, or ``None`` for an unknown or expired id."""
        ...

    async def save(self, session_id: str, data: SessionData, ttl: int) -> None:
        """Store *data* for *ttl* seconds."""
        ...

    async def delete(self, session_id: str) -> None: ...


class HttpSession(MutableMapping[str, Any]):
    """A session's attributes, usable as a plain mutable mapping.

    Keys starting with ``_`` are internal metadata and are hidden from
    iteration.  Any write marks the session as modified so that
    :class:`~antiforgery.session.filter.SessionFilter` persists it.
    """

    def __init__(
        self,
        session_id: str,
        data: SessionData | None = None,
        *,
        is_new: bool = False,
    ) -> None:
        self._id = session_id
        self._data: SessionData = dict(data) if data is not None else {}
        self._is_new = is_new
        self._invalidated = False
        self._modified = is_new

        now = time.time()
        self._data.setdefault("_created_at", now)
        self._data["_last_accessed"] = now

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def created_at(self) -> float:
        return float(self._data["_created_at"])

    @property
    def csrf_secret(self) -> str | None:
        """The session-mode CSRF secret, if one has been stored."""
        return self._data.get(SESSION_SECRET_FIELD)

    @property
    def invalidated(self) -> bool:
        return self._invalidated

    @property
    def modified(self) -> bool:
        return self._modified

    def __getitem__(self, name: str) -> Any:
        return self._data[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._data[name] = value
        self._modified = True

    def __delitem__(self, name: str) -> None:
        del self._data[name]
        self._modified = True

    def __iter__(self) -> Iterator[str]:
        return (k for k in self._data if not k.startswith("_"))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def invalidate(self) -> None:
        """Mark the session for deletion."""
        self._invalidated = True
        self._modified = True

    def get_data(self) -> SessionData:
        """Return the raw session data, metadata included."""
        return self._data

    def __repr__(self) -> str:
        return f"HttpSession(id={self._id!r}, keys={list(self)!r}, is_new={self._is_new})"
