"""
Domain exceptions.

Typed exceptions for explicit error handling. Bulk source calls downgrade
ExternalServiceError to empty results; strict barcode lookups let it
propagate to the HTTP boundary.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    """

    pass


# ═══════════════════════════════════════════════════════════
# VALIDATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(DomainError):
    """
    Input validation failed.

    Raised when:
    - Search query missing or blank
    - Barcode contains no digits
    - Unknown source name requested
    - Uploaded image rejected by the format gates

    Example:
        >>> raise ValidationError("Query parameter is required")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    Upstream data source unavailable.

    Base class for all external service errors.

    Raised when:
    - Network error
    - Non-2xx status
    - Undecodable response body

    Example:
        >>> raise ExternalServiceError("USDA API error: 502")
    """

    pass


class RateLimitError(ExternalServiceError):
    """
    API rate limit exceeded.

    Raised when:
    - Upstream answers 429
    - Local token bucket would wait too long

    Example:
        >>> raise RateLimitError("USDA rate limit: 1000 requests/hour")
    """

    pass


class TimeoutError(ExternalServiceError):  # noqa: A001
    """
    API call timed out.

    Example:
        >>> raise TimeoutError("OpenFoodFacts timeout after 10s")
    """

    pass


class ServiceUnavailableError(ExternalServiceError):
    """
    Upstream answered with a server error (5xx).

    Example:
        >>> raise ServiceUnavailableError("OpenFoodFacts API error: 503")
    """

    pass
