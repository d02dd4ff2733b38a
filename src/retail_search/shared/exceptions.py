"""
Unified Exception Hierarchy for Retail Search.

Exception Hierarchy:
    RetailSearchError (base)
    ├── ValidationError
    │   ├── InvalidQueryError
    │   ├── InvalidFeedbackError
    │   └── InvalidLocationError
    ├── SourceError
    │   └── SourceTimeoutError
    ├── ExternalLookupError
    └── ConfigurationError

Propagation rules:
    - SourceError is always contained by the orchestrator and recorded in
      the failing source's result slot.
    - ValidationError always reaches the caller.
    - ExternalLookupError is logged and replaced by a permissive fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, can continue
    ERROR = auto()        # Failed but can retry
    CRITICAL = auto()     # Cannot continue
    TRANSIENT = auto()    # Temporary, may succeed later


class ErrorCategory(Enum):
    """Categories for error classification."""
    VALIDATION = "validation"
    SOURCE = "source"
    LOOKUP = "lookup"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context attached to an error."""
    operation: str | None = None
    source: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class RetailSearchError(Exception):
    """
    Base exception for all Retail Search errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    """

    __slots__ = ('context', 'severity', 'category', 'retryable')

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.SOURCE,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.source:
            result["source"] = self.context.source
        if self.context.operation:
            result["operation"] = self.context.operation
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        return result


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(RetailSearchError):
    """Malformed input rejected before any processing."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )
        self.field_name = field_name


class InvalidQueryError(ValidationError):
    """Raised when a search query cannot be built."""

    def __init__(
        self,
        reason: str,
        *,
        field_name: str | None = None,
        value: Any = None,
    ) -> None:
        ctx = ErrorContext(
            operation="build_query",
            input_value=value,
            suggestion="Provide a non-empty description, a valid budget and a confidence in [0, 1]",
        )
        super().__init__(f"Invalid query: {reason}", field_name=field_name, context=ctx)


class InvalidFeedbackError(ValidationError):
    """Raised when a feedback event fails validation."""

    def __init__(
        self,
        reason: str,
        *,
        field_name: str | None = None,
        value: Any = None,
    ) -> None:
        ctx = ErrorContext(operation="submit_feedback", input_value=value)
        super().__init__(reason, field_name=field_name, context=ctx)


class InvalidLocationError(ValidationError):
    """Raised when a location code fails format or lookup validation."""

    def __init__(
        self,
        location_code: Any,
        reason: str = "Location code must be a 6-digit number",
    ) -> None:
        ctx = ErrorContext(
            operation="validate_location",
            input_value=location_code,
            suggestion="Use a 6-digit postal code such as '110001'",
        )
        super().__init__(f"{reason}: {location_code!r}", field_name="location_code", context=ctx)
        self.location_code = location_code


# =============================================================================
# Source Errors
# =============================================================================

class SourceError(RetailSearchError):
    """An individual source failed to produce items."""

    def __init__(
        self,
        source: str,
        message: str = "Search failed",
        *,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            f"{source}: {message}",
            context=ErrorContext(operation="fetch", source=source),
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.SOURCE,
            retryable=retryable,
        )
        self.source = source
        self.reason = message


class SourceTimeoutError(SourceError):
    """A source did not settle before its deadline."""

    def __init__(self, source: str, timeout: float) -> None:
        super().__init__(source, f"Search timeout after {timeout:g}s")
        self.severity = ErrorSeverity.TRANSIENT
        self.timeout = timeout


# =============================================================================
# Lookup / Configuration Errors
# =============================================================================

class ExternalLookupError(RetailSearchError):
    """The delivery-lookup dependency could not be reached or understood."""

    def __init__(
        self,
        message: str = "Location lookup unavailable",
        *,
        service: str = "postal-lookup",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"{service}: {message}",
            context=context,
            severity=ErrorSeverity.TRANSIENT,
            category=ErrorCategory.LOOKUP,
            retryable=True,
        )


class ConfigurationError(RetailSearchError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )
