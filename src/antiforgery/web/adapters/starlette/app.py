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
"""Starlette application factory with CSRF protection wired in."""

from __future__ import annotations

from collections.abc import Sequence

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from antiforgery.core.config import Config
from antiforgery.logging.structlog_adapter import LoggingPort, StructlogAdapter
from antiforgery.security.csrf.extractors import ValueExtractor
from antiforgery.security.csrf.options import CsrfOptions
from antiforgery.session.filter import SessionFilter
from antiforgery.session.session import SessionStore
from antiforgery.web.adapters.starlette.errors import antiforgery_exception_handler
from antiforgery.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from antiforgery.web.adapters.starlette.filters.cookie_parser_filter import CookieParserFilter
from antiforgery.web.adapters.starlette.filters.csrf_filter import CsrfFilter
from antiforgery.web.ports.filter import WebFilter


def create_app(
    routes: Sequence[BaseRoute] = (),
    *,
    csrf: CsrfFilter | CsrfOptions | None = None,
    cookie_parser: bool = True,
    cookie_secret: str | Sequence[str] | None = None,
    session_store: SessionStore | None = None,
    session_key: str | None = None,
    filters: Sequence[WebFilter] = (),
    debug: bool = False,
) -> Starlette:
    """Create a Starlette application protected by :class:`CsrfFilter`.

    Filter chain (ordered by ``@order``):
    - ``CookieParserFilter`` (unless ``cookie_parser=False``)
    - ``SessionFilter`` (when ``session_store`` is given)
    - ``CsrfFilter``
    - any extra ``filters``

    Antiforgery exceptions are rendered as plaintext, so a wiring defect
    answers ``500 misconfigured csrf``.
    """
    csrf_filter = csrf if isinstance(csrf, CsrfFilter) else CsrfFilter(csrf)

    chain: list[WebFilter] = [csrf_filter, *filters]
    if cookie_parser:
        chain.append(CookieParserFilter(cookie_secret))
    if session_store is not None:
        chain.append(
            SessionFilter(session_store, attribute=session_key or csrf_filter.options.session_key)
        )

    return Starlette(
        debug=debug,
        routes=list(routes),
        middleware=[Middleware(WebFilterChainMiddleware, filters=chain)],
        exception_handlers={Exception: antiforgery_exception_handler},
    )


def create_app_from_config(
    config: Config,
    routes: Sequence[BaseRoute] = (),
    *,
    session_store: SessionStore | None = None,
    value: ValueExtractor | None = None,
    filters: Sequence[WebFilter] = (),
    logging_port: LoggingPort | None = None,
    debug: bool = False,
) -> Starlette:
    """Create an application whose CSRF, cookie and session settings come from *config*.

    Logging is configured from ``antiforgery.logging`` through *logging_port*
    (a :class:`StructlogAdapter` unless another port is given).
    """
    (logging_port or StructlogAdapter()).configure(config)

    collaborators: list[WebFilter] = [CookieParserFilter.from_config(config)]
    if session_store is not None:
        collaborators.append(SessionFilter.from_config(config, session_store))

    return create_app(
        routes,
        csrf=CsrfFilter.from_config(config, value=value),
        cookie_parser=False,
        filters=[*collaborators, *filters],
        debug=debug,
    )
