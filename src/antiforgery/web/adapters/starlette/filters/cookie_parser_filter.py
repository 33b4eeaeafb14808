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
"""CookieParserFilter — exposes plain and signed cookie bags on ``request.state``.

After this filter runs:

* ``request.state.cookies`` — plain cookies, as parsed by Starlette.
* ``request.state.signed_cookies`` — values of ``s:``-prefixed cookies whose
  signature verified against one of the configured secrets.
* ``request.state.secret`` — the first signing secret, or ``None``.

Signed cookies that fail verification appear in neither bag.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from starlette.requests import Request

from antiforgery.container.ordering import HIGHEST_PRECEDENCE, order
from antiforgery.core.config import Config
from antiforgery.security.cookie_signature import SIGNED_PREFIX, unsign_cookie
from antiforgery.web.filters import OncePerRequestFilter
from antiforgery.web.ports.filter import CallNext

logger = structlog.get_logger("antiforgery.cookies")


@order(HIGHEST_PRECEDENCE + 100)
class CookieParserFilter(OncePerRequestFilter):
    """Populates the cookie bags the CSRF filter reads its secret from.

    Args:
        secret: Signing secret, or a sequence of secrets to try in order
            (the first one is used for new signatures).  ``None`` disables
            signed cookies.
    """

    def __init__(self, secret: str | Sequence[str] | None = None) -> None:
        super().__init__()
        if secret is None:
            self._secrets: list[str] = []
        elif isinstance(secret, str):
            self._secrets = [secret]
        else:
            self._secrets = [s for s in secret if s]

    @classmethod
    def from_config(cls, config: Config) -> CookieParserFilter:
        """Build a filter from ``antiforgery.cookies.secret``."""
        return cls(config.get("antiforgery.cookies.secret"))

    @property
    def signing_enabled(self) -> bool:
        return bool(self._secrets)

    async def do_filter(self, request: Request, call_next: CallNext) -> Any:
        cookies: dict[str, str] = {}
        signed_cookies: dict[str, str] = {}

        for name, raw in request.cookies.items():
            if self._secrets and raw.startswith(SIGNED_PREFIX):
                value = unsign_cookie(raw, self._secrets)
                if value is None:
                    logger.debug("cookie_signature_invalid", cookie=name, path=request.url.path)
                else:
                    signed_cookies[name] = value
                continue
            cookies[name] = raw

        request.state.cookies = cookies
        request.state.signed_cookies = signed_cookies
        request.state.secret = self._secrets[0] if self._secrets else None
        return await call_next(request)
