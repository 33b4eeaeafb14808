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
"""Candidate-token extraction from inbound requests.

The default extractor looks, in order, at:

1. the ``_csrf`` field of a JSON or form body,
2. the ``_csrf`` query parameter,
3. the ``csrf-token``, ``xsrf-token``, ``x-csrf-token`` and ``x-xsrf-token``
   headers.

The first non-empty value wins.  When a source holds several values (a
repeated query parameter or header, or a JSON list) the first one is used.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

TOKEN_FIELD: str = "_csrf"
"""Body field and query parameter carrying the token."""

TOKEN_HEADERS: tuple[str, ...] = ("csrf-token", "xsrf-token", "x-csrf-token", "x-xsrf-token")
"""Request headers carrying the token, in lookup order."""

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

TokenValue = str | list[str] | None
ValueExtractor = Callable[[Request], Awaitable[TokenValue] | TokenValue]


def first_value(value: Any) -> str | None:
    """Collapse a possibly multi-valued candidate to a single string.

    Lists and tuples yield their first element; anything that is not a
    string yields ``None``.
    """
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value if isinstance(value, str) else None


async def body_value(request: Request) -> str | None:
    """Return ``_csrf`` from a JSON or form-encoded body, if present.

    The body is read through :meth:`Request.body` so the bytes stay cached
    on the request and can be replayed to the route handler.  The parsed
    form is closed before returning; a malformed form yields ``None``.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if not content_type:
        return None

    if content_type == "application/json" or content_type.endswith("+json"):
        raw = await request.body()
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except (ValueError, UnicodeDecodeError):
            return None
        if isinstance(payload, dict):
            return first_value(payload.get(TOKEN_FIELD))
        return None

    if content_type in _FORM_CONTENT_TYPES:
        await request.body()
        try:
            async with request.form() as form:
                values = [v for v in form.getlist(TOKEN_FIELD) if isinstance(v, str)]
        except (HTTPException, MultiPartException):
            # Unparseable form (e.g. multipart without a boundary) carries no token.
            return None
        return values[0] if values else None

    return None


def query_value(request: Request) -> str | None:
    values = request.query_params.getlist(TOKEN_FIELD)
    return values[0] if values else None


def header_value(request: Request) -> str | None:
    for name in TOKEN_HEADERS:
        values = request.headers.getlist(name)
        if values and values[0]:
            return values[0]
    return None


async def default_value(request: Request) -> str | None:
    """Default extractor: body, then query, then headers."""
    return (
        await body_value(request)
        or query_value(request)
        or header_value(request)
    )
