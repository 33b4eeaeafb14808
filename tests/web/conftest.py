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
"""Shared routes for end-to-end CSRF tests."""

from __future__ import annotations

import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from antiforgery import csrf_token


async def _index(request: Request) -> JSONResponse:
    if request.method == "GET":
        return JSONResponse({"token": csrf_token(request)})
    return JSONResponse({"message": "hello"})


async def _echo(request: Request) -> JSONResponse:
    form = await request.form()
    return JSONResponse({"name": form.get("name"), "csrf": form.get("_csrf")})


async def _unprotected(request: Request) -> JSONResponse:
    return JSONResponse({"token": csrf_token(request)})


@pytest.fixture
def csrf_routes() -> list[Route]:
    """``/`` issues tokens on GET and answers ``hello`` otherwise."""
    return [
        Route("/", _index, methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]),
        Route("/echo", _echo, methods=["POST"]),
        Route("/public/token", _unprotected, methods=["GET"]),
    ]
