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
"""Validated CSRF options and their fluent builder.

Options are resolved once, when the filter is built, and never change
afterwards::

    options = (
        CsrfOptions.builder()
        .session("session")
        .salt_length(10)
        .ignore_methods("GET", "HEAD", "OPTIONS", "TRACE")
        .build()
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from antiforgery.kernel.exceptions import ValidationException
from antiforgery.security.csrf.extractors import ValueExtractor, default_value
from antiforgery.security.csrf.properties import CsrfProperties
from antiforgery.security.csrf.tokens import DEFAULT_SALT_LENGTH, DEFAULT_SECRET_LENGTH

if TYPE_CHECKING:
    from antiforgery.web.adapters.starlette.filters.csrf_filter import CsrfFilter

MiddlewareMode = Literal["cookie", "session"]

HTTP_METHODS: frozenset[str] = frozenset(
    {"GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD", "TRACE", "CONNECT"}
)

DEFAULT_IGNORE_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS"})
"""Methods that never require a token."""

_SAMESITE_VALUES = {"lax", "strict", "none"}


@dataclass(frozen=True)
class CookieOptions:
    """Where and how the secret cookie is written.

    ``key``, ``path`` and ``signed`` locate the secret; the remaining
    attributes are passed verbatim to the ``Set-Cookie`` serializer.
    An empty ``key`` or ``path`` falls back to ``_csrf`` and ``/``.
    """

    key: str = "_csrf"
    path: str = "/"
    signed: bool = False
    max_age: int | None = None
    expires: datetime | str | int | None = None
    domain: str | None = None
    secure: bool = False
    httponly: bool = False
    samesite: Literal["lax", "strict", "none"] | None = None

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", "_csrf")
        if not self.path:
            object.__setattr__(self, "path", "/")
        if self.samesite is not None:
            samesite = self.samesite.lower()
            if samesite not in _SAMESITE_VALUES:
                raise ValidationException(
                    f"Invalid cookie samesite value: {self.samesite!r}",
                    code="CSRF_INVALID_OPTIONS",
                    context={"samesite": self.samesite},
                )
            object.__setattr__(self, "samesite", samesite)

    def serialize_options(self) -> dict[str, Any]:
        """Keyword arguments for ``Response.set_cookie``."""
        return {
            "path": self.path,
            "max_age": self.max_age,
            "expires": self.expires,
            "domain": self.domain,
            "secure": self.secure,
            "httponly": self.httponly,
            "samesite": self.samesite,
        }


@dataclass(frozen=True)
class CsrfOptions:
    """Complete, validated configuration for one CSRF filter.

    Attributes:
        middleware: ``"cookie"`` keeps the secret in a cookie (signed when
            ``cookie.signed``); ``"session"`` keeps it in the session bag.
        cookie: Cookie location and attributes (cookie mode only).
        session_key: Name of the ``request.state`` attribute holding the
            session bag (session mode only).
        value: Extracts the candidate token from a request; may be sync or
            async.
        ignore_methods: Methods exempt from verification.
        salt_length: Salt characters per token.
        secret_length: Random bytes per secret.
    """

    middleware: MiddlewareMode = "cookie"
    cookie: CookieOptions = field(default_factory=CookieOptions)
    session_key: str = "session"
    value: ValueExtractor = default_value
    ignore_methods: frozenset[str] = DEFAULT_IGNORE_METHODS
    salt_length: int = DEFAULT_SALT_LENGTH
    secret_length: int = DEFAULT_SECRET_LENGTH

    def __post_init__(self) -> None:
        problems: list[str] = []

        if self.middleware not in ("cookie", "session"):
            problems.append(f"middleware must be 'cookie' or 'session', got {self.middleware!r}")
        if self.middleware == "session":
            if not self.session_key:
                problems.append("session_key must not be empty in session mode")
            if self.cookie.signed:
                problems.append("cookie.signed only applies to middleware='cookie'")
        if not callable(self.value):
            problems.append("value must be callable")
        if not _positive_int(self.salt_length):
            problems.append(f"salt_length must be a positive integer, got {self.salt_length!r}")
        if not _positive_int(self.secret_length):
            problems.append(f"secret_length must be a positive integer, got {self.secret_length!r}")

        methods = frozenset(m.upper() for m in self.ignore_methods)
        unknown = sorted(methods - HTTP_METHODS)
        if unknown:
            problems.append(f"unknown HTTP methods in ignore_methods: {', '.join(unknown)}")

        if problems:
            raise ValidationException(
                "Invalid CSRF options: " + "; ".join(problems),
                code="CSRF_INVALID_OPTIONS",
                context={"problems": problems},
            )
        object.__setattr__(self, "ignore_methods", methods)

    @property
    def is_session(self) -> bool:
        return self.middleware == "session"

    @staticmethod
    def builder() -> CsrfOptionsBuilder:
        """Start a fluent :class:`CsrfOptionsBuilder`."""
        return CsrfOptionsBuilder()

    @classmethod
    def from_properties(cls, props: CsrfProperties, value: ValueExtractor | None = None) -> CsrfOptions:
        """Convert bound :class:`CsrfProperties` into validated options."""
        cookie = props.cookie
        return cls(
            middleware=props.middleware,  # type: ignore[arg-type]
            cookie=CookieOptions(
                key=cookie.key,
                path=cookie.path,
                signed=cookie.signed,
                max_age=cookie.max_age,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.httponly,
                samesite=cookie.samesite,  # type: ignore[arg-type]
            ),
            session_key=props.session_key,
            value=value or default_value,
            ignore_methods=frozenset(props.ignore_methods),
            salt_length=props.salt_length,
            secret_length=props.secret_length,
        )


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class CsrfOptionsBuilder:
    """Fluent builder producing :class:`CsrfOptions`.

    Validation happens in :meth:`build`, so a half-configured builder never
    reaches a request.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._cookie = CookieOptions()

    def cookie(self, key: str = "_csrf", path: str = "/", **attributes: Any) -> CsrfOptionsBuilder:
        """Keep the secret in a plain cookie."""
        self._values["middleware"] = "cookie"
        self._cookie = CookieOptions(key=key, path=path, signed=False, **attributes)
        return self

    def signed_cookie(self, key: str = "_csrf", path: str = "/", **attributes: Any) -> CsrfOptionsBuilder:
        """Keep the secret in a cookie signed with the request's signing secret."""
        self._values["middleware"] = "cookie"
        self._cookie = CookieOptions(key=key, path=path, signed=True, **attributes)
        return self

    def session(self, session_key: str = "session") -> CsrfOptionsBuilder:
        """Keep the secret in the session bag at ``request.state.<session_key>``."""
        self._values["middleware"] = "session"
        self._values["session_key"] = session_key
        self._cookie = replace(self._cookie, signed=False)
        return self

    def value(self, extractor: ValueExtractor) -> CsrfOptionsBuilder:
        self._values["value"] = extractor
        return self

    def ignore_methods(self, *methods: str | Iterable[str]) -> CsrfOptionsBuilder:
        flat: list[str] = []
        for m in methods:
            flat.extend([m] if isinstance(m, str) else m)
        self._values["ignore_methods"] = frozenset(flat)
        return self

    def salt_length(self, length: int) -> CsrfOptionsBuilder:
        self._values["salt_length"] = length
        return self

    def secret_length(self, length: int) -> CsrfOptionsBuilder:
        self._values["secret_length"] = length
        return self

    def build(self) -> CsrfOptions:
        """Validate and return the options."""
        return CsrfOptions(cookie=self._cookie, **self._values)

    def build_filter(self, **filter_kwargs: Any) -> CsrfFilter:
        """Build the options and wrap them in a :class:`CsrfFilter`."""
        from antiforgery.web.adapters.starlette.filters.csrf_filter import CsrfFilter

        return CsrfFilter(self.build(), **filter_kwargs)
