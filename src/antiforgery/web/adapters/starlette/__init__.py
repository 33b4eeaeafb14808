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
"""Starlette adapter — filter chain, exception handler and app factory."""

from antiforgery.web.adapters.starlette.app import create_app, create_app_from_config
from antiforgery.web.adapters.starlette.errors import antiforgery_exception_handler
from antiforgery.web.adapters.starlette.filter_chain import WebFilterChainMiddleware

__all__ = [
    "WebFilterChainMiddleware",
    "antiforgery_exception_handler",
    "create_app",
    "create_app_from_config",
]
