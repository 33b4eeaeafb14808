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
"""CSRF configuration properties bound from ``antiforgery.csrf.*``.

Example ``antiforgery.yaml``::

    antiforgery:
      csrf:
        middleware: session
        salt_length: 10
        cookie:
          key: _csrf
          secure: true
"""

from __future__ import annotations

from dataclasses import dataclass, field

from antiforgery.core.config import config_properties


@dataclass
class CsrfCookieProperties:
    """Cookie attributes (antiforgery.csrf.cookie.*)."""

    key: str = "_csrf"
    path: str = "/"
    signed: bool = False
    max_age: int | None = None
    domain: str | None = None
    secure: bool = False
    httponly: bool = False
    samesite: str | None = None


@config_properties(prefix="antiforgery.csrf")
@dataclass
class CsrfProperties:
    """Configuration for CSRF protection (antiforgery.csrf.*)."""

    middleware: str = "cookie"
    session_key: str = "session"
    ignore_methods: list[str] = field(default_factory=lambda: ["GET", "HEAD", "OPTIONS"])
    salt_length: int = 8
    secret_length: int = 18
    cookie: CsrfCookieProperties = field(default_factory=CsrfCookieProperties)
