"""
Custom exceptions for the academic registry.
"""

from typing import Optional, Any, Dict


class RegistryError(Exception):
    """Base exception for all registry errors."""

    error_code = "REGISTRY_ERROR"
    http_status = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def to_response(self) -> Dict[str, Any]:
        """Convert to the REST error envelope."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class NotAuthorizedError(RegistryError):
    """Raised when the caller is not the actor allowed to perform an operation."""
    error_code = "NOT_AUTHORIZED"
    http_status = 403


class NotFoundError(RegistryError):
    """Raised when a referenced institution, course, discipline or student is absent."""
    error_code = "NOT_FOUND"
    http_status = 404


class AlreadyExistsError(RegistryError):
    """Raised when attempting to create a duplicate entity, grade or grant."""
    error_code = "ALREADY_EXISTS"
    http_status = 409


class NotEnrolledError(RegistryError):
    """Raised when a grade or transcript needs an enrollment that does not exist."""
    error_code = "NOT_ENROLLED"
    http_status = 409


class ConfigurationError(RegistryError):
    """Raised when configuration is invalid."""
    error_code = "CONFIGURATION_ERROR"


class EventSourcingError(RegistryError):
    """Raised when the notification journal cannot be read or written."""
    error_code = "EVENT_SOURCING_ERROR"
