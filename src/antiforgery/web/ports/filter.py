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
"""WebFilter protocol — framework-agnostic filter interface.

Request and response are typed as ``Any`` so that Starlette types stay in
the adapter layer.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Protocol, runtime_checkable

# The next callable in the filter chain.
# Concrete type: Callable[[Request], Coroutine[Any, Any, Response]]
CallNext = Callable[..., Coroutine[Any, Any, Any]]


@runtime_checkable
class WebFilter(Protocol):
    """Protocol for HTTP request/response filters.

    Filters run in ``@order`` sequence inside a single
    ``WebFilterChainMiddleware``.  A filter may populate ``request.state``
    for the filters after it (the cookie parser and session filter do this
    for the CSRF filter), delegate to ``call_next``, or answer directly.
    """

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Execute this filter's logic and return the HTTP response."""
        ...

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` to skip this filter for the given request."""
        ...
