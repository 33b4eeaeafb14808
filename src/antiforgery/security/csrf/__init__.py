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
"""CSRF protection — token engine, secret storage and options."""

from antiforgery.security.csrf.options import CookieOptions, CsrfOptions, CsrfOptionsBuilder
from antiforgery.security.csrf.properties import CsrfCookieProperties, CsrfProperties
from antiforgery.security.csrf.storage import (
    CookieStorage,
    SecretStorage,
    SessionStorage,
    SignedCookieStorage,
    resolve_storage,
)
from antiforgery.security.csrf.tokens import (
    Tokens,
    create_token,
    new_secret,
    time_safe_compare,
    verify_token,
)

__all__ = [
    "CookieOptions",
    "CookieStorage",
    "CsrfCookieProperties",
    "CsrfOptions",
    "CsrfOptionsBuilder",
    "CsrfProperties",
    "SecretStorage",
    "SessionStorage",
    "SignedCookieStorage",
    "Tokens",
    "create_token",
    "new_secret",
    "resolve_storage",
    "time_safe_compare",
    "verify_token",
]
