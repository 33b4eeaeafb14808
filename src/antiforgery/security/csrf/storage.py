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
"""Secret storage — where a client's CSRF secret lives.

One storage variant is resolved per filter, at construction time:

* :class:`CookieStorage` — plain cookie, read from ``request.state.cookies``.
* :class:`SignedCookieStorage` — signed cookie, read from
  ``request.state.signed_cookies`` and signed with ``request.state.secret``.
* :class:`SessionStorage` — ``csrfSecret`` field of the session bag at
  ``request.state.<session_key>``.

The request-side bags are provided by collaborators that must run first
(:class:`~antiforgery.web.adapters.starlette.filters.cookie_parser_filter.CookieParserFilter`,
:class:`~antiforgery.session.filter.SessionFilter`).  A missing bag is a
wiring defect, reported by :meth:`SecretStorage.verify_configuration`.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, ClassVar, Protocol, runtime_checkable

from starlette.requests import Request
from starlette.responses import Response

from antiforgery.security.cookie_signature import sign_cookie
from antiforgery.security.csrf.options import CookieOptions, CsrfOptions

SESSION_SECRET_FIELD: str = "csrfSecret"
"""Session bag field holding the secret."""


@runtime_checkable
class SecretStorage(Protocol):
    """Locates, reads and persists the per-client secret."""

    #: ``True`` when :meth:`write_secret` needs the outgoing response.
    writes_response: ClassVar[bool]

    def verify_configuration(self, request: Request) -> bool:
        """Return ``False`` if the bag this storage needs is missing."""
        ...

    def read_secret(self, request: Request) -> str | None:
        """Return the stored secret, or ``None`` if the client has none yet."""
        ...

    def write_secret(self, request: Request, response: Response | None, secret: str) -> None:
        """Persist a newly created *secret*."""
        ...


def _state_attr(request: Request, name: str) -> Any:
    return getattr(request.state, name, None)


def _set_cookie(response: Response, cookie: CookieOptions, value: str) -> None:
    """Append a ``Set-Cookie`` header, keeping any already on *response*."""
    response.set_cookie(cookie.key, value, **cookie.serialize_options())


class CookieStorage:
    """Secret kept in a plain (unsigned) cookie."""

    writes_response: ClassVar[bool] = True
    bag_attribute: ClassVar[str] = "cookies"

    def __init__(self, cookie: CookieOptions) -> None:
        self.cookie = cookie

    def _bag(self, request: Request) -> Mapping[str, str] | None:
        return _state_attr(request, self.bag_attribute)

    def verify_configuration(self, request: Request) -> bool:
        return self._bag(request) is not None

    def read_secret(self, request: Request) -> str | None:
        bag = self._bag(request)
        if bag is None:
            return None
        return bag.get(self.cookie.key) or None

    def write_secret(self, request: Request, response: Response | None, secret: str) -> None:
        if response is None:
            raise ValueError(f"{type(self).__name__} needs a response to write the secret cookie")
        _set_cookie(response, self.cookie, self._cookie_value(request, secret))

    def _cookie_value(self, request: Request, secret: str) -> str:
        return secret

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.cookie.key!r}, path={self.cookie.path!r})"


class SignedCookieStorage(CookieStorage):
    """Secret kept in a cookie signed with the request's signing secret."""

    bag_attribute: ClassVar[str] = "signed_cookies"

    def verify_configuration(self, request: Request) -> bool:
        return super().verify_configuration(request) and bool(_state_attr(request, "secret"))

    def _cookie_value(self, request: Request, secret: str) -> str:
        return sign_cookie(secret, request.state.secret)


class SessionStorage:
    """Secret kept in the ``csrfSecret`` field of the session bag.

    The bag is mutated in place; persisting it is the session collaborator's
    job, so no response header is written.
    """

    writes_response: ClassVar[bool] = False

    def __init__(self, session_key: str = "session") -> None:
        self.session_key = session_key

    def _bag(self, request: Request) -> MutableMapping[str, Any] | None:
        return _state_attr(request, self.session_key)

    def verify_configuration(self, request: Request) -> bool:
        return self._bag(request) is not None

    def read_secret(self, request: Request) -> str | None:
        bag = self._bag(request)
        if bag is None:
            return None
        return bag.get(SESSION_SECRET_FIELD) or None

    def write_secret(self, request: Request, response: Response | None, secret: str) -> None:
        bag = self._bag(request)
        if bag is None:
            raise ValueError(f"No session bag at request.state.{self.session_key}")
        bag[SESSION_SECRET_FIELD] = secret

    def __repr__(self) -> str:
        return f"SessionStorage(session_key={self.session_key!r})"


def resolve_storage(options: CsrfOptions) -> SecretStorage:
    """Pick the storage variant described by *options*."""
    if options.is_session:
        return SessionStorage(options.session_key)
    if options.cookie.signed:
        return SignedCookieStorage(options.cookie)
    return CookieStorage(options.cookie)
