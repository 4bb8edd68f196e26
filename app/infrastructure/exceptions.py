"""
Custom Exceptions for VocabWorld

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class VocabWorldError(Exception):
    """Base exception for all VocabWorld errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(VocabWorldError):
    """Raised when input validation fails."""
    pass


class DatabaseError(VocabWorldError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class DuplicateError(DatabaseError):
    """Raised when attempting to create a duplicate resource."""
    pass


class ExternalServiceError(VocabWorldError):
    """Raised when an upstream provider (B2, Azure, Supabase Auth) fails."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if provider:
            details["provider"] = provider
        if status_code:
            details["upstream_status"] = status_code
        super().__init__(message, details, original_error)


class ServiceUnavailableError(ExternalServiceError):
    """Raised when a provider is not configured or refuses authorization."""
    pass


class ConfigurationError(VocabWorldError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
