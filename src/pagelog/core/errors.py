"""
Structured error types for pagelog.

Every failure raised by pagelog carries a category, a retryable flag, a
structured context, and the underlying cause, so that a failed write in
the request-recording path shows up in operator logs with enough detail to
act on.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different concerns
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry metadata for structured logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       PagelogError                           │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError        ValidationError      DatabaseError       │
        │  (CONFIG)           (VALIDATION)         (DATABASE)          │
        │                          │                    │              │
        │                     PayloadError        RecordWriteError     │
        │                                                              │
        │  NotificationError                                           │
        │  (SUBSCRIBER)                                                │
        └─────────────────────────────────────────────────────────────┘

Usage:
    from pagelog.core.errors import RecordWriteError

    try:
        session.commit()
    except SQLAlchemyError as e:
        raise RecordWriteError("insert failed", cause=e).with_context(
            event_name="request.completed",
        )

Tags:
    error-handling, exception-hierarchy, error-context, pagelog, observability

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        DATABASE: Connection failures, constraint violations, rejected inserts
        VALIDATION: Payload fields of the wrong type
        CONFIG: Invalid settings or composition mistakes
        SUBSCRIBER: A notification subscriber raised
        INTERNAL: Bugs, unexpected state
    """

    DATABASE = "DATABASE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    SUBSCRIBER = "SUBSCRIBER"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        event_name: Name of the event being handled (e.g. ``request.completed``)
        event_id: Unique id of the event being handled
        transaction_id: Request/transaction correlation id
        subscription_id: Notifier subscription that failed
        path: Request path, when the error relates to an HTTP cycle
        metadata: Additional key-value pairs
    """

    event_name: str | None = None
    event_id: str | None = None
    transaction_id: str | None = None
    subscription_id: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["event_name", "event_id", "transaction_id", "subscription_id", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class PagelogError(Exception):
    """
    Base exception for all pagelog errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    their domain sensible defaults.

    Examples:
        >>> error = PagelogError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(transaction_id="abc").context.transaction_id
        'abc'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> PagelogError:
        """
        Add context to this error (fluent API).

        Usage:
            raise RecordWriteError("Failed").with_context(
                event_name="request.completed",
                transaction_id="4f1c...",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(PagelogError):
    """Invalid settings or composition (e.g. a listener registered twice)."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# VALIDATION
# =============================================================================


class ValidationError(PagelogError):
    """Data failed validation."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class PayloadError(ValidationError):
    """An event payload carried a value of the wrong type."""

    pass


# =============================================================================
# DATABASE
# =============================================================================


class DatabaseError(PagelogError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class RecordWriteError(DatabaseError):
    """The durable store refused or failed to persist a record."""

    pass


# =============================================================================
# NOTIFICATIONS
# =============================================================================


class NotificationError(PagelogError):
    """
    One or more subscribers raised while an event was being delivered.

    Every subscriber still received the event; ``failures`` lists each
    ``(subscription_id, exception)`` pair in delivery order and the first
    failure is chained as ``__cause__``.
    """

    default_category = ErrorCategory.SUBSCRIBER
    default_retryable = False

    def __init__(
        self,
        message: str,
        failures: list[tuple[str, Exception]],
        **kwargs: Any,
    ):
        if failures and "cause" not in kwargs:
            kwargs["cause"] = failures[0][1]
        super().__init__(message, **kwargs)
        self.failures = failures

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["failures"] = [
            {"subscription_id": sub_id, "error": repr(exc)} for sub_id, exc in self.failures
        ]
        return result


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "PagelogError",
    "ConfigError",
    "ValidationError",
    "PayloadError",
    "DatabaseError",
    "RecordWriteError",
    "NotificationError",
]
