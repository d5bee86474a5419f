"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Every exception carries a stable
``error_type`` so callers can branch on the kind of failure rather than on
the message text.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    error_type = "application_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""

    error_type = "domain_error"


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""

    error_type = "repository_error"


class ValidationException(DomainException):
    """Exception for validation errors."""

    error_type = "validation"


class InvalidTransitionException(ValidationException):
    """Raised when a ticket status change is not in the transition table."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change ticket status from {current} to {requested}",
            {"current_status": current, "requested_status": requested}
        )


class ForbiddenException(DomainException):
    """Exception for role, ownership or tier-eligibility violations."""

    error_type = "forbidden"


class ConflictException(DomainException):
    """Exception when a write collides with existing state."""

    error_type = "conflict"


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    error_type = "not_found"

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""

    error_type = "configuration_error"


class AuthenticationException(ApplicationException):
    """Exception when a request carries no usable actor identity."""

    error_type = "unauthenticated"
