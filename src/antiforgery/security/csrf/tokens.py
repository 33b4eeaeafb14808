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
"""CSRF token engine — secrets, salted tokens and timing-safe verification.

A *secret* is a per-client random value kept by a storage backend.  A
*token* is derived from it on demand::

    token = salt + "-" + digest(salt + "-" + secret)

Because the salt changes on every call, any number of distinct tokens
verify against the same secret.  Nothing in this module performs I/O.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import random
import secrets
import string
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_SALT_LENGTH: int = 8
"""Number of base62 characters in a token's salt."""

DEFAULT_SECRET_LENGTH: int = 18
"""Number of random bytes in a secret (before encoding)."""

SALT_ALPHABET: str = string.ascii_uppercase + string.ascii_lowercase + string.digits
"""The 62-character alphabet salts are drawn from."""

TOKEN_SEPARATOR: str = "-"

_COMPARE_KEY_BYTES = 32


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------
def _urlsafe_b64(raw: bytes) -> str:
    """Base64-encode *raw*, strip ``=`` padding and map to the URL-safe alphabet."""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def new_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Generate a new secret from *length* cryptographically secure bytes.

    Returns:
        The URL-safe base64 encoding of the bytes, without padding.
    """
    return _urlsafe_b64(secrets.token_bytes(length))


def random_base62(length: int = DEFAULT_SALT_LENGTH) -> str:
    """Generate a quick, non-cryptographic salt of *length* characters.

    The salt only needs to vary the token hash; it is not secret material.
    """
    return "".join(random.choice(SALT_ALPHABET) for _ in range(length))


def hash_digest(value: str) -> str:
    """SHA-1 digest of *value*'s ASCII bytes, as unpadded URL-safe base64."""
    return _urlsafe_b64(hashlib.sha1(value.encode("ascii", "replace")).digest())


def time_safe_compare(a: Any, b: Any) -> bool:
    """Compare two values without leaking where they first differ.

    Both inputs are passed through HMAC-SHA256 under a fresh random key, so
    the comparison always runs over two fixed-length digests.

    Returns:
        ``True`` if ``str(a) == str(b)``; ``False`` otherwise.  Never raises.
    """
    key = secrets.token_bytes(_COMPARE_KEY_BYTES)
    a_mac = hmac.new(key, str(a).encode("utf-8", "surrogatepass"), hashlib.sha256).digest()
    b_mac = hmac.new(key, str(b).encode("utf-8", "surrogatepass"), hashlib.sha256).digest()

    if len(a_mac) != len(b_mac):
        return False

    return hmac.compare_digest(a_mac, b_mac)


# ---------------------------------------------------------------------------
# Token operations
# ---------------------------------------------------------------------------
def tokenize(secret: str, salt: str) -> str:
    """Build the token for *secret* using the given *salt*."""
    return salt + TOKEN_SEPARATOR + hash_digest(salt + TOKEN_SEPARATOR + secret)


def create_token(secret: str, salt_length: int = DEFAULT_SALT_LENGTH) -> str:
    """Create a fresh token for *secret* with a new random salt."""
    return tokenize(secret, random_base62(salt_length))


def verify_token(secret: str | None, token: Any) -> bool:
    """Check that *token* was derived from *secret*.

    Returns ``False`` for an empty secret, an empty or non-string token, or
    a token without a ``-`` separator.
    """
    if not secret or not token or not isinstance(token, str):
        return False

    index = token.find(TOKEN_SEPARATOR)
    if index == -1:
        return False

    expected = tokenize(secret, token[:index])
    return time_safe_compare(token, expected)


class Tokens:
    """Token engine bound to fixed salt and secret lengths.

    Attributes:
        salt_length: Characters of salt in each issued token.
        secret_length: Random bytes in each generated secret.
    """

    __slots__ = ("salt_length", "secret_length")

    def __init__(
        self,
        salt_length: int = DEFAULT_SALT_LENGTH,
        secret_length: int = DEFAULT_SECRET_LENGTH,
    ) -> None:
        self.salt_length = salt_length
        self.secret_length = secret_length

    def secret(self) -> str:
        """Generate a new secret."""
        return new_secret(self.secret_length)

    def create(self, secret: str) -> str:
        """Issue a token for *secret*."""
        return create_token(secret, self.salt_length)

    def verify(self, secret: str | None, token: Any) -> bool:
        """Verify *token* against *secret*."""
        return verify_token(secret, token)

    def __repr__(self) -> str:
        return f"Tokens(salt_length={self.salt_length}, secret_length={self.secret_length})"
