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
"""Tests for secret storage variants — cookie, signed cookie and session."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from starlette.responses import Response

from antiforgery.security.cookie_signature import unsign_cookie
from antiforgery.security.csrf.options import CookieOptions, CsrfOptions
from antiforgery.security.csrf.storage import (
    SESSION_SECRET_FIELD,
    CookieStorage,
    SecretStorage,
    SessionStorage,
    SignedCookieStorage,
    resolve_storage,
)
from antiforgery.session.session import HttpSession

SIGNING_SECRET = "5ifqHE5eojYNf4p2AHFApUJpWTqgCe7e"


def _request(**state: Any) -> SimpleNamespace:
    return SimpleNamespace(state=SimpleNamespace(**state), url=SimpleNamespace(path="/"))


def _set_cookie_headers(response: Response) -> list[str]:
    return [v.decode("latin-1") for k, v in response.raw_headers if k == b"set-cookie"]


class TestResolveStorage:
    def test_cookie_mode(self) -> None:
        storage = resolve_storage(CsrfOptions())
        assert type(storage) is CookieStorage
        assert isinstance(storage, SecretStorage)

    def test_signed_cookie_mode(self) -> None:
        storage = resolve_storage(CsrfOptions(cookie=CookieOptions(signed=True)))
        assert type(storage) is SignedCookieStorage

    def test_session_mode(self) -> None:
        storage = resolve_storage(CsrfOptions(middleware="session", session_key="sess"))
        assert isinstance(storage, SessionStorage)
        assert storage.session_key == "sess"


class TestCookieStorage:
    def test_missing_cookie_bag_is_misconfigured(self) -> None:
        assert CookieStorage(CookieOptions()).verify_configuration(_request()) is False

    def test_empty_cookie_bag_is_configured(self) -> None:
        assert CookieStorage(CookieOptions()).verify_configuration(_request(cookies={})) is True

    def test_reads_configured_key(self) -> None:
        storage = CookieStorage(CookieOptions(key="xsrf"))
        assert storage.read_secret(_request(cookies={"xsrf": "abc", "_csrf": "zzz"})) == "abc"

    def test_missing_or_empty_secret_reads_as_none(self) -> None:
        storage = CookieStorage(CookieOptions())
        assert storage.read_secret(_request(cookies={})) is None
        assert storage.read_secret(_request(cookies={"_csrf": ""})) is None
        assert storage.read_secret(_request()) is None

    def test_write_appends_set_cookie(self) -> None:
        storage = CookieStorage(CookieOptions(path="/app", httponly=True, max_age=60))
        response = Response("ok")
        response.set_cookie("session", "s1")

        storage.write_secret(_request(cookies={}), response, "the-secret")

        headers = _set_cookie_headers(response)
        assert len(headers) == 2
        assert headers[0].startswith("session=s1")
        assert headers[1].startswith("_csrf=the-secret")
        assert "Path=/app" in headers[1]
        assert "HttpOnly" in headers[1]
        assert "Max-Age=60" in headers[1]

    def test_write_requires_response(self) -> None:
        with pytest.raises(ValueError):
            CookieStorage(CookieOptions()).write_secret(_request(cookies={}), None, "s")

    def test_uses_the_response(self) -> None:
        assert CookieStorage.writes_response is True


class TestSignedCookieStorage:
    def test_requires_signing_secret(self) -> None:
        storage = SignedCookieStorage(CookieOptions(signed=True))
        assert storage.verify_configuration(_request(signed_cookies={})) is False
        assert storage.verify_configuration(_request(signed_cookies={}, secret="")) is False
        assert storage.verify_configuration(_request(signed_cookies={}, secret=SIGNING_SECRET)) is True

    def test_requires_signed_cookie_bag(self) -> None:
        storage = SignedCookieStorage(CookieOptions(signed=True))
        assert storage.verify_configuration(_request(cookies={}, secret=SIGNING_SECRET)) is False

    def test_reads_from_signed_bag_only(self) -> None:
        storage = SignedCookieStorage(CookieOptions(signed=True))
        request = _request(cookies={"_csrf": "plain"}, signed_cookies={}, secret=SIGNING_SECRET)
        assert storage.read_secret(request) is None

        request = _request(cookies={}, signed_cookies={"_csrf": "verified"}, secret=SIGNING_SECRET)
        assert storage.read_secret(request) == "verified"

    def test_write_signs_with_s_prefix(self) -> None:
        storage = SignedCookieStorage(CookieOptions(signed=True))
        response = Response("ok")

        storage.write_secret(_request(signed_cookies={}, secret=SIGNING_SECRET), response, "abc123")

        (header,) = _set_cookie_headers(response)
        value = header.split(";", 1)[0].split("=", 1)[1]
        assert value.startswith("s:abc123.")
        assert unsign_cookie(value, [SIGNING_SECRET]) == "abc123"


class TestSessionStorage:
    def test_missing_session_is_misconfigured(self) -> None:
        assert SessionStorage().verify_configuration(_request()) is False

    def test_custom_session_key(self) -> None:
        storage = SessionStorage("websession")
        assert storage.verify_configuration(_request(websession={})) is True
        assert storage.verify_configuration(_request(session={})) is False

    def test_reads_csrf_secret_field(self) -> None:
        request = _request(session={SESSION_SECRET_FIELD: "from-session"})
        assert SessionStorage().read_secret(request) == "from-session"

    def test_write_mutates_plain_dict(self) -> None:
        bag: dict[str, Any] = {}
        SessionStorage().write_secret(_request(session=bag), None, "new-secret")
        assert bag == {"csrfSecret": "new-secret"}

    def test_write_mutates_http_session(self) -> None:
        session = HttpSession("sid")
        SessionStorage().write_secret(_request(session=session), Response("ok"), "new-secret")
        assert session["csrfSecret"] == "new-secret"
        assert session.modified is True

    def test_write_does_not_touch_response(self) -> None:
        response = Response("ok")
        SessionStorage().write_secret(_request(session={}), response, "new-secret")
        assert _set_cookie_headers(response) == []

    def test_does_not_use_the_response(self) -> None:
        assert SessionStorage.writes_response is False
