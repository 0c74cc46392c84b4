"""
Custom exceptions for the records platform.
"""

from typing import Optional, Any, Dict


class RecordsException(Exception):
    """Base exception for all records-related errors."""

    error_code: Optional[str] = None

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}


class NotFoundError(RecordsException):
    """Raised when a referenced student or course does not exist."""
    error_code = "NOT_FOUND"


class InvalidStateError(RecordsException):
    """Raised when a student is not active at registration time."""
    error_code = "INVALID_STATE"


class FacultyMismatchError(RecordsException):
    """Raised when student and course belong to different faculties."""
    error_code = "FACULTY_MISMATCH"


class CapacityExceededError(RecordsException):
    """Raised when a course has reached its maximum number of students."""
    error_code = "CAPACITY_EXCEEDED"


class DuplicateRegistrationError(RecordsException):
    """Raised when a student is already registered for a course."""
    error_code = "DUPLICATE_REGISTRATION"


class NotRegisteredError(RecordsException):
    """Raised when grading a student who is not registered for the course."""
    error_code = "NOT_REGISTERED"


class TerminalStateError(RecordsException):
    """Raised when changing the status of a graduated or expelled student."""
    error_code = "TERMINAL_STATE"


class ValidationError(RecordsException):
    """Raised when input data validation fails."""
    error_code = "VALIDATION_ERROR"


class ConfigurationError(RecordsException):
    """Raised when configuration is invalid."""
    error_code = "CONFIGURATION_ERROR"
