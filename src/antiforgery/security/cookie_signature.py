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
"""Cookie value signing — ``value.signature`` with HMAC-SHA256.

Signed cookies carry the ``s:`` prefix on the wire so that a cookie parser
can tell them apart from plain cookies::

    s:<value>.<base64url(hmac_sha256(secret, value))>
"""

from __future__ import annotations

import hashlib

from itsdangerous import BadSignature, Signer

SIGNED_PREFIX: str = "s:"
"""Prefix marking a signed cookie value."""


def _signer(secret: str | bytes) -> Signer:
    return Signer(secret, sep=".", key_derivation="none", digest_method=hashlib.sha256)


def sign(value: str, secret: str | bytes) -> str:
    """Sign *value* with *secret*, returning ``value.signature``."""
    return _signer(secret).sign(value).decode("utf-8")


def unsign(signed_value: str, secret: str | bytes) -> str | None:
    """Return the original value if *signed_value*'s signature is valid, else ``None``."""
    try:
        return _signer(secret).unsign(signed_value).decode("utf-8")
    except BadSignature:
        return None


def sign_cookie(value: str, secret: str | bytes) -> str:
    """Produce the full ``s:``-prefixed cookie value for *value*."""
    return SIGNED_PREFIX + sign(value, secret)


def unsign_cookie(raw: str, secrets: list[str]) -> str | None:
    """Verify an ``s:``-prefixed cookie against each of *secrets* in turn.

    Returns:
        The unsigned value, or ``None`` if *raw* is not signed or no secret
        validates it.
    """
    if not raw.startswith(SIGNED_PREFIX):
        return None
    signed_value = raw[len(SIGNED_PREFIX):]
    for secret in secrets:
        value = unsign(signed_value, secret)
        if value is not None:
            return value
    return None
