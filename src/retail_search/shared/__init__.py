"""
Shared building blocks for Retail Search.

Provides:
- Unified exception hierarchy
- Async utilities (rate limiting, deadline guard)
"""

from .async_utils import (
    # Rate limiting
    RateLimiter,
    # Deadlines
    run_with_deadline,
)
from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    ExternalLookupError,
    InvalidFeedbackError,
    InvalidLocationError,
    InvalidQueryError,
    # Base
    RetailSearchError,
    # Source errors
    SourceError,
    SourceTimeoutError,
    # Validation errors
    ValidationError,
)

__all__ = [
    # Exceptions
    "RetailSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "ValidationError",
    "InvalidQueryError",
    "InvalidFeedbackError",
    "InvalidLocationError",
    "SourceError",
    "SourceTimeoutError",
    "ExternalLookupError",
    "ConfigurationError",
    # Async utilities
    "RateLimiter",
    "run_with_deadline",
]
