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
"""Tests for wiring defects — they answer 500 instead of leaking tokens."""

from __future__ import annotations

from antiforgery import CsrfFilter, CsrfOptions, create_app
from antiforgery.testing import AntiforgeryTestClient


class TestMissingCollaborators:
    def test_cookie_mode_without_cookie_parser(self, csrf_routes):
        client = AntiforgeryTestClient(create_app(csrf_routes, cookie_parser=False))
        client.get("/").assert_status(500).assert_text("misconfigured csrf")

    def test_misconfiguration_reported_for_unsafe_methods(self, csrf_routes):
        client = AntiforgeryTestClient(create_app(csrf_routes, cookie_parser=False))
        client.post("/", json={"_csrf": "anything"}).assert_status(500).assert_text("misconfigured csrf")

    def test_no_secret_cookie_written_on_misconfiguration(self, csrf_routes):
        client = AntiforgeryTestClient(create_app(csrf_routes, cookie_parser=False))
        client.get("/").assert_cookie("_csrf", exists=False)

    def test_signed_mode_without_signing_secret(self, csrf_routes):
        options = CsrfOptions.builder().signed_cookie().build()
        client = AntiforgeryTestClient(create_app(csrf_routes, csrf=options))
        client.post("/").assert_status(500).assert_text("misconfigured csrf")

    def test_session_mode_without_session_store(self, csrf_routes):
        options = CsrfOptions.builder().session().build()
        client = AntiforgeryTestClient(create_app(csrf_routes, csrf=options))
        client.get("/").assert_status(500).assert_text("misconfigured csrf")

    def test_session_mode_with_mismatched_session_key(self, csrf_routes):
        from antiforgery.session.adapters.memory import InMemorySessionStore

        options = CsrfOptions.builder().session("web_session").build()
        app = create_app(csrf_routes, csrf=options, session_store=InMemorySessionStore(), session_key="session")
        client = AntiforgeryTestClient(app)
        client.get("/").assert_status(500).assert_text("misconfigured csrf")


class TestTokenOutsideFilter:
    def test_csrf_token_on_excluded_path(self, csrf_routes):
        csrf = CsrfFilter(exclude_patterns=["/public/*"])
        client = AntiforgeryTestClient(create_app(csrf_routes, csrf=csrf))

        response = client.get("/public/token").assert_status(500)

        assert "CsrfFilter" in response.text

    def test_excluded_path_skips_verification(self, csrf_routes):
        csrf = CsrfFilter(exclude_patterns=["/echo"])
        client = AntiforgeryTestClient(create_app(csrf_routes, csrf=csrf))

        client.post("/echo", data={"name": "hook"}).assert_status(200).assert_json_path("$.name", value="hook")
