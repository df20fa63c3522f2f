"""
Exception Definitions - Custom exceptions for Pattern Responder
===============================================================

This module defines the custom exceptions used throughout the application.
Only configuration problems and invalid pattern submissions reach the
caller; pattern source failures are recovered inside the matcher.
"""


class ResponderError(Exception):
    """
    Base exception for all Pattern Responder errors.

    All custom exceptions in this application inherit from this base class,
    allowing for easy catching of all application-specific errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(ResponderError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Invalid configuration values
    - Configuration parsing errors
    - Unreadable configuration files
    """
    pass


class PatternSourceError(ResponderError):
    """
    Pattern source errors.

    Raised when a pattern file is missing, unreadable, cannot be parsed,
    or does not have the expected ``{"categories": [...]}`` shape.
    The matcher catches this and falls back to an empty collection.
    """
    pass


class PatternValidationError(ResponderError):
    """
    Invalid pattern record.

    Raised when a record is missing its pattern or template text, or
    carries a confidence outside [0, 1]. Skipped with a warning while
    loading; propagated to callers of ``add_pattern``.
    """
    pass
