"""
Custom exceptions for the stock event calendar.

Provides domain-specific exceptions with clear error messages and
support for structured error handling.
"""

from typing import Optional, Dict, Any


class StockCalError(Exception):
    """Base exception for all calendar errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Database Errors
# ============================================================================

class DatabaseError(StockCalError):
    """Database operation failed."""
    pass


class RecordNotFoundError(DatabaseError):
    """Database record not found (or not owned by the caller)."""
    pass


class DuplicateRecordError(DatabaseError):
    """Attempted to create a duplicate record."""
    pass


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(StockCalError):
    """Data validation failed."""
    pass


class InvalidVoteError(ValidationError):
    """Vote value is not one of yes, no, no_comment."""
    pass


class InvalidDateError(ValidationError):
    """Calendar date is not a valid YYYY-MM-DD string."""
    pass


class FixedDateEventError(ValidationError):
    """Fixed-date events cannot be dragged or placed."""
    pass


# ============================================================================
# Calendar interaction errors
# ============================================================================

class InvalidDragTransitionError(StockCalError):
    """Drag-and-drop action is not allowed from the current state."""
    pass


# ============================================================================
# Rate Limiting Errors
# ============================================================================

class RateLimitError(StockCalError):
    """Rate limit exceeded."""

    def __init__(self, message: str, retry_after: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

