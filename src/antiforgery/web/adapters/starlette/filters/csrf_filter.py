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
"""CsrfFilter — synchronizer-token CSRF protection.

For every request the filter:

1. checks that the storage backend for the configured mode is wired
   (otherwise raises :class:`CsrfConfigurationException`);
2. reads the client's secret, creating one if the client has none;
3. attaches ``request.state.csrf_token()``, which issues a fresh salted
   token on every call;
4. lets exempt methods (``GET``, ``HEAD``, ``OPTIONS`` by default) through;
5. otherwise extracts the submitted token and verifies it against the
   secret, answering with a rendered :class:`InvalidCsrfTokenException`
   (``403 invalid csrf token``) on failure.

A newly created secret is written to the session bag before the handler
runs, or appended as a ``Set-Cookie`` header on whatever response is
returned (including the 403).
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import structlog
from starlette.requests import Request
from starlette.responses import Response

from antiforgery.container.ordering import HIGHEST_PRECEDENCE, order
from antiforgery.core.config import Config
from antiforgery.kernel.exceptions import CsrfConfigurationException, InvalidCsrfTokenException
from antiforgery.security.csrf.extractors import TokenValue, ValueExtractor, first_value
from antiforgery.security.csrf.options import CsrfOptions
from antiforgery.security.csrf.properties import CsrfProperties
from antiforgery.security.csrf.storage import SecretStorage, resolve_storage
from antiforgery.security.csrf.tokens import Tokens
from antiforgery.web.adapters.starlette.errors import render_exception
from antiforgery.web.filters import OncePerRequestFilter
from antiforgery.web.ports.filter import CallNext

logger = structlog.get_logger("antiforgery.csrf")

INVALID_TOKEN_MESSAGE: str = "invalid csrf token"


@dataclass
class CsrfState:
    """Per-request CSRF state, stored at ``request.state.csrf``.

    Attributes:
        secret: The secret resolved (or created) for this request.
        minted: ``True`` if the secret was created during this request.
    """

    secret: str
    minted: bool = False


def issue_token(request: Request, state: CsrfState, storage: SecretStorage, tokens: Tokens) -> str:
    """Issue a token for the request's current secret.

    The secret is re-read from storage so that a session secret replaced
    later in the request cycle is honoured; the request's resolved secret
    is used when storage holds none (a cookie secret created this request).
    """
    secret = storage.read_secret(request) or state.secret
    return tokens.create(secret)


def csrf_token(request: Request) -> str:
    """Return a fresh CSRF token for *request*.

    Raises:
        CsrfConfigurationException: If no :class:`CsrfFilter` processed the
            request.
    """
    issuer = getattr(request.state, "csrf_token", None)
    if issuer is None:
        raise CsrfConfigurationException(
            "csrf_token() requires the request to pass through CsrfFilter",
            context={"path": request.url.path},
        )
    return issuer()


@order(HIGHEST_PRECEDENCE + 400)
class CsrfFilter(OncePerRequestFilter):
    """Verifies CSRF tokens on state-changing requests.

    Args:
        options: Validated options; defaults to cookie mode with the
            ``_csrf`` cookie.
        url_patterns: Restrict protection to these path globs.
        exclude_patterns: Never protect these path globs.
    """

    def __init__(
        self,
        options: CsrfOptions | None = None,
        *,
        url_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ) -> None:
        self._options = options or CsrfOptions()
        super().__init__(
            url_patterns=url_patterns,
            exclude_patterns=exclude_patterns,
            ignore_methods=self._options.ignore_methods,
        )
        self._storage = resolve_storage(self._options)
        self._tokens = Tokens(
            salt_length=self._options.salt_length,
            secret_length=self._options.secret_length,
        )

    @classmethod
    def from_config(cls, config: Config, value: ValueExtractor | None = None, **kwargs: Any) -> CsrfFilter:
        """Build a filter from the ``antiforgery.csrf`` configuration section."""
        props = config.bind(CsrfProperties)
        return cls(CsrfOptions.from_properties(props, value=value), **kwargs)

    @property
    def options(self) -> CsrfOptions:
        return self._options

    @property
    def storage(self) -> SecretStorage:
        return self._storage

    @property
    def tokens(self) -> Tokens:
        return self._tokens

    async def do_filter(self, request: Request, call_next: CallNext) -> Any:
        if not self._storage.verify_configuration(request):
            logger.error(
                "csrf_misconfigured",
                storage=repr(self._storage),
                path=request.url.path,
            )
            raise CsrfConfigurationException(context={"storage": repr(self._storage)})

        state = self._resolve_state(request)
        request.state.csrf = state
        request.state.csrf_token = functools.partial(issue_token, request, state, self._storage, self._tokens)

        if state.minted and not self._storage.writes_response:
            self._storage.write_secret(request, None, state.secret)

        response: Response
        if self.is_exempt_method(request):
            response = await call_next(request)
        else:
            candidate = first_value(await self._extract(request))
            if self._tokens.verify(state.secret, candidate):
                response = await call_next(request)
            else:
                logger.warning(
                    "csrf_token_rejected",
                    method=request.method,
                    path=request.url.path,
                    reason="missing" if not candidate else "mismatch",
                )
                response = render_exception(
                    InvalidCsrfTokenException(INVALID_TOKEN_MESSAGE, context={"path": request.url.path})
                )

        if state.minted and self._storage.writes_response:
            self._storage.write_secret(request, response, state.secret)

        return response

    def _resolve_state(self, request: Request) -> CsrfState:
        secret = self._storage.read_secret(request)
        if secret:
            return CsrfState(secret=secret)

        logger.debug("csrf_secret_created", storage=repr(self._storage), path=request.url.path)
        return CsrfState(secret=self._tokens.secret(), minted=True)

    async def _extract(self, request: Request) -> TokenValue:
        result = self._options.value(request)
        if inspect.isawaitable(result):
            result = await result
        return result
