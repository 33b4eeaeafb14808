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
"""Tests for CsrfOptions validation, the options builder, and properties conversion."""

from __future__ import annotations

import pytest

from antiforgery.kernel.exceptions import ValidationException
from antiforgery.security.csrf.extractors import default_value
from antiforgery.security.csrf.options import CookieOptions, CsrfOptions, CsrfOptionsBuilder
from antiforgery.security.csrf.properties import CsrfCookieProperties, CsrfProperties
from antiforgery.web.adapters.starlette.filters.csrf_filter import CsrfFilter


class TestCsrfOptionsDefaults:
    def test_defaults(self) -> None:
        options = CsrfOptions()
        assert options.middleware == "cookie"
        assert options.cookie == CookieOptions(key="_csrf", path="/", signed=False)
        assert options.session_key == "session"
        assert options.ignore_methods == frozenset({"GET", "HEAD", "OPTIONS"})
        assert options.salt_length == 8
        assert options.secret_length == 18
        assert options.value is default_value
        assert options.is_session is False

    def test_options_are_frozen(self) -> None:
        options = CsrfOptions()
        with pytest.raises(AttributeError):
            options.salt_length = 4  # type: ignore[misc]

    def test_ignore_methods_are_uppercased(self) -> None:
        options = CsrfOptions(ignore_methods=frozenset({"get", "Trace"}))
        assert options.ignore_methods == frozenset({"GET", "TRACE"})


class TestCsrfOptionsValidation:
    def test_unknown_middleware(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            CsrfOptions(middleware="redis")  # type: ignore[arg-type]
        assert exc_info.value.code == "CSRF_INVALID_OPTIONS"

    @pytest.mark.parametrize("field", ["salt_length", "secret_length"])
    @pytest.mark.parametrize("bad", [0, -1, True, "8"])
    def test_lengths_must_be_positive_integers(self, field: str, bad: object) -> None:
        with pytest.raises(ValidationException):
            CsrfOptions(**{field: bad})  # type: ignore[arg-type]

    def test_unknown_http_method(self) -> None:
        with pytest.raises(ValidationException, match="FETCH"):
            CsrfOptions(ignore_methods=frozenset({"GET", "FETCH"}))

    def test_value_must_be_callable(self) -> None:
        with pytest.raises(ValidationException):
            CsrfOptions(value="_csrf")  # type: ignore[arg-type]

    def test_session_mode_needs_session_key(self) -> None:
        with pytest.raises(ValidationException):
            CsrfOptions(middleware="session", session_key="")

    def test_signed_cookie_rejected_in_session_mode(self) -> None:
        with pytest.raises(ValidationException, match="cookie.signed"):
            CsrfOptions(middleware="session", cookie=CookieOptions(signed=True))

    def test_all_problems_are_reported(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            CsrfOptions(salt_length=0, secret_length=0)
        assert len(exc_info.value.context["problems"]) == 2


class TestCookieOptions:
    def test_empty_key_and_path_fall_back_to_defaults(self) -> None:
        cookie = CookieOptions(key="", path="")
        assert cookie.key == "_csrf"
        assert cookie.path == "/"

    def test_samesite_omitted_by_default(self) -> None:
        assert CookieOptions().samesite is None

    def test_samesite_is_normalised(self) -> None:
        assert CookieOptions(samesite="Strict").samesite == "strict"  # type: ignore[arg-type]

    def test_invalid_samesite(self) -> None:
        with pytest.raises(ValidationException):
            CookieOptions(samesite="sometimes")  # type: ignore[arg-type]

    def test_serialize_options_pass_attributes_through(self) -> None:
        cookie = CookieOptions(domain="example.com", secure=True, httponly=True, max_age=3600)
        assert cookie.serialize_options() == {
            "path": "/",
            "max_age": 3600,
            "expires": None,
            "domain": "example.com",
            "secure": True,
            "httponly": True,
            "samesite": None,
        }


class TestCsrfOptionsBuilder:
    def test_builder_is_returned(self) -> None:
        assert isinstance(CsrfOptions.builder(), CsrfOptionsBuilder)

    def test_session_mode(self) -> None:
        options = CsrfOptions.builder().session("websession").salt_length(10).secret_length(30).build()
        assert options.middleware == "session"
        assert options.session_key == "websession"
        assert options.salt_length == 10
        assert options.secret_length == 30

    def test_signed_cookie_mode(self) -> None:
        options = CsrfOptions.builder().signed_cookie(key="xsrf", secure=True).build()
        assert options.middleware == "cookie"
        assert options.cookie.signed is True
        assert options.cookie.key == "xsrf"
        assert options.cookie.secure is True

    def test_session_after_signed_cookie_clears_signing(self) -> None:
        options = CsrfOptions.builder().signed_cookie().session().build()
        assert options.cookie.signed is False

    def test_ignore_methods_accepts_iterables(self) -> None:
        options = CsrfOptions.builder().ignore_methods(["GET", "HEAD"], "TRACE").build()
        assert options.ignore_methods == frozenset({"GET", "HEAD", "TRACE"})

    def test_custom_extractor(self) -> None:
        def extractor(request: object) -> str:
            return "token"

        assert CsrfOptions.builder().value(extractor).build().value is extractor

    def test_invalid_combination_fails_at_build(self) -> None:
        builder = CsrfOptions.builder().salt_length(0)
        with pytest.raises(ValidationException):
            builder.build()

    def test_build_filter(self) -> None:
        csrf_filter = CsrfOptions.builder().session().build_filter(exclude_patterns=["/health"])
        assert isinstance(csrf_filter, CsrfFilter)
        assert csrf_filter.options.is_session
        assert csrf_filter.exclude_patterns == ["/health"]


class TestFromProperties:
    def test_converts_all_fields(self) -> None:
        props = CsrfProperties(
            middleware="cookie",
            ignore_methods=["GET"],
            salt_length=12,
            secret_length=24,
            cookie=CsrfCookieProperties(key="xsrf", path="/api", signed=True, secure=True, samesite="strict"),
        )
        options = CsrfOptions.from_properties(props)
        assert options.ignore_methods == frozenset({"GET"})
        assert options.salt_length == 12
        assert options.secret_length == 24
        assert options.cookie.key == "xsrf"
        assert options.cookie.path == "/api"
        assert options.cookie.signed is True
        assert options.cookie.secure is True
        assert options.cookie.samesite == "strict"
        assert options.value is default_value

    def test_invalid_properties_are_rejected(self) -> None:
        with pytest.raises(ValidationException):
            CsrfOptions.from_properties(CsrfProperties(middleware="memcached"))
