"""Unified exception hierarchy for antiforgery.

All library exceptions inherit from AntiforgeryException, so a host can
catch one base class or target the specific subclasses.

Categories:
- BusinessException: invalid options and other caller mistakes
- SecurityException: rejected requests (bad or missing CSRF token)
- InfrastructureException: wiring defects such as a missing cookie bag
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class AntiforgeryException(Exception):
    """Base exception for all antiforgery errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CSRF_INVALID_TOKEN").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(AntiforgeryException):
    """Caller mistakes detected before any request is processed."""


class ValidationException(BusinessException):
    """Option or input validation failures."""


# =============================================================================
# Security Exceptions
# =============================================================================


class SecurityException(AntiforgeryException):
    """Requests refused for security reasons."""


class ForbiddenException(SecurityException):
    """The caller is not allowed to perform the operation."""


class InvalidCsrfTokenException(ForbiddenException):
    """The submitted CSRF token is missing, malformed or does not match."""

    def __init__(self, message: str = "invalid csrf token", context: dict | None = None) -> None:
        super().__init__(message, code="CSRF_INVALID_TOKEN", context=context)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(AntiforgeryException):
    """Deployment and wiring defects; never retried."""


class CsrfConfigurationException(InfrastructureException):
    """The storage backend required by the configured mode is unavailable.

    Raised when, for example, no cookie parser ran before the CSRF filter, or
    signed cookies are requested but no signing secret is present.
    """

    def __init__(self, message: str = "misconfigured csrf", context: dict | None = None) -> None:
        super().__init__(message, code="CSRF_MISCONFIGURED", context=context)
