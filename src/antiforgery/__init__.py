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
"""antiforgery — CSRF protection for Starlette applications.

Quick start::

    from starlette.responses import JSONResponse
    from starlette.routing import Route

    from antiforgery import create_app, csrf_token

    async def form(request):
        return JSONResponse({"token": csrf_token(request)})

    app = create_app([Route("/", form, methods=["GET", "POST"])])
"""

from antiforgery.kernel.exceptions import CsrfConfigurationException, InvalidCsrfTokenException
from antiforgery.security.csrf import CookieOptions, CsrfOptions, Tokens
from antiforgery.web.adapters.starlette.app import create_app, create_app_from_config
from antiforgery.web.adapters.starlette.filters import CookieParserFilter, CsrfFilter, csrf_token

__version__ = "0.1.0"

__all__ = [
    "CookieOptions",
    "CookieParserFilter",
    "CsrfConfigurationException",
    "CsrfFilter",
    "CsrfOptions",
    "InvalidCsrfTokenException",
    "Tokens",
    "create_app",
    "create_app_from_config",
    "csrf_token",
]
