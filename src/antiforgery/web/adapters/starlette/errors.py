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
"""Exception handler — plaintext error responses for antiforgery exceptions.

CSRF failures are answered with short plaintext bodies (``invalid csrf
token``, ``misconfigured csrf``) rather than structured JSON, so that forms
and scripts can show them as-is.
"""

from __future__ import annotations

import structlog
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from antiforgery.kernel.exceptions import (
    AntiforgeryException,
    BusinessException,
    ForbiddenException,
    InfrastructureException,
    SecurityException,
    ValidationException,
)

logger = structlog.get_logger("antiforgery.web")

# Exception -> HTTP status code mapping (most specific first)
_STATUS_MAP: dict[type, int] = {
    ValidationException: 422,
    ForbiddenException: 403,
    SecurityException: 401,
    BusinessException: 400,
    InfrastructureException: 500,
}


def get_status_code(exc: Exception) -> int:
    """Map exception type to HTTP status code.

    Starlette ``HTTPException`` keeps its own status code.
    """
    if isinstance(exc, HTTPException):
        return exc.status_code
    for exc_type, status in _STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return status
    return 500


def render_exception(exc: AntiforgeryException) -> PlainTextResponse:
    """Plaintext response carrying *exc*'s message and mapped status."""
    return PlainTextResponse(str(exc), status_code=get_status_code(exc))


async def antiforgery_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Render *exc* as a plaintext response.

    Library exceptions keep their message, and ``HTTPException`` its
    detail; anything else becomes a generic ``Internal Server Error`` so
    internals are not disclosed.
    """
    if isinstance(exc, AntiforgeryException):
        response = render_exception(exc)
        logger.error(
            "antiforgery_error",
            path=request.url.path,
            status_code=response.status_code,
            code=exc.code or type(exc).__name__,
        )
        return response

    status = get_status_code(exc)
    if isinstance(exc, HTTPException):
        logger.warning("http_error", path=request.url.path, status_code=status, detail=exc.detail)
        return PlainTextResponse(str(exc.detail), status_code=status, headers=exc.headers)

    logger.error(
        "unhandled_error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return PlainTextResponse("Internal Server Error", status_code=status)
