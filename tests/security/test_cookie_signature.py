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
"""Tests for cookie value signing."""

from __future__ import annotations

from antiforgery.security.cookie_signature import (
    SIGNED_PREFIX,
    sign,
    sign_cookie,
    unsign,
    unsign_cookie,
)

SECRET = "5ifqHE5eojYNf4p2AHFApUJpWTqgCe7e"


class TestSign:
    def test_format_is_value_dot_signature(self) -> None:
        signed = sign("hello", SECRET)
        value, _, signature = signed.rpartition(".")
        assert value == "hello"
        assert signature
        assert "=" not in signature

    def test_round_trip(self) -> None:
        assert unsign(sign("hello", SECRET), SECRET) == "hello"

    def test_wrong_secret(self) -> None:
        assert unsign(sign("hello", SECRET), "another-secret") is None

    def test_tampered_value(self) -> None:
        _, _, signature = sign("hello", SECRET).rpartition(".")
        assert unsign(f"hellO.{signature}", SECRET) is None

    def test_unsigned_value(self) -> None:
        assert unsign("hello", SECRET) is None


class TestSignedCookies:
    def test_prefix(self) -> None:
        assert sign_cookie("abc", SECRET).startswith(SIGNED_PREFIX)

    def test_unsign_cookie(self) -> None:
        assert unsign_cookie(sign_cookie("abc", SECRET), [SECRET]) == "abc"

    def test_unsign_cookie_tries_each_secret(self) -> None:
        raw = sign_cookie("abc", "old-secret")
        assert unsign_cookie(raw, ["new-secret", "old-secret"]) == "abc"

    def test_unprefixed_cookie_is_not_signed(self) -> None:
        assert unsign_cookie(sign("abc", SECRET), [SECRET]) is None

    def test_no_secrets(self) -> None:
        assert unsign_cookie(sign_cookie("abc", SECRET), []) is None
