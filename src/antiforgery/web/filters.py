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
"""OncePerRequestFilter — base class for filters in the antiforgery chain.

Two independent switches decide how much of a filter runs for a request:

* **path patterns** (``url_patterns`` / ``exclude_patterns``) skip the
  filter entirely through :meth:`should_not_filter`;
* **exempt methods** (``ignore_methods``) are reported by
  :meth:`is_exempt_method`.  The filter still runs, so it can prepare
  request state, but leaves its check out.  The CSRF filter uses this for
  ``GET``, ``HEAD`` and ``OPTIONS``: secrets are still minted and tokens
  still issued, only verification is skipped.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable
from fnmatch import fnmatch
from typing import Any

from antiforgery.web.ports.filter import CallNext


def _matches(path: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch(path, p) for p in patterns)


class OncePerRequestFilter(abc.ABC):
    """Abstract base class for :class:`WebFilter` implementations.

    Patterns and methods may be declared as class attributes or passed to
    ``__init__``; constructor values override the class defaults for that
    instance only.

    Attributes:
        url_patterns: Path globs the filter applies to; empty means all.
        exclude_patterns: Path globs the filter never applies to, checked
            after ``url_patterns``.
        ignore_methods: HTTP methods whose check is skipped.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []
    ignore_methods: frozenset[str] = frozenset()

    def __init__(
        self,
        *,
        url_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
        ignore_methods: Iterable[str] | None = None,
    ) -> None:
        if url_patterns is not None:
            self.url_patterns = list(url_patterns)
        if exclude_patterns is not None:
            self.exclude_patterns = list(exclude_patterns)
        if ignore_methods is not None:
            self.ignore_methods = frozenset(m.upper() for m in ignore_methods)

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` if the request path is outside this filter's patterns."""
        path: str = request.url.path
        if self.url_patterns and not _matches(path, self.url_patterns):
            return True
        return bool(self.exclude_patterns) and _matches(path, self.exclude_patterns)

    def is_exempt_method(self, request: Any) -> bool:
        """Return ``True`` if the request method is in ``ignore_methods``."""
        return request.method.upper() in self.ignore_methods

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Run the filter.  Call ``await call_next(request)`` to continue the chain."""
        ...
