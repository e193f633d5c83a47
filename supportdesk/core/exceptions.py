"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries (HTTP routes and the event
channel).
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class TransientIOException(RepositoryException):
    """
    The ticket store could not be reached.

    Never retried here: appends are not idempotent, so the retry policy
    belongs to the caller.
    """


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

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


class UnauthorizedException(DomainException):
    """Actor is outside the tenant scope of the resource, or unauthenticated."""


class ForbiddenException(DomainException):
    """Actor is authenticated but its role does not allow the action."""

    def __init__(self, action: str, role: Optional[str] = None, details: Optional[dict] = None):
        self.action = action
        self.role = role
        message = f"Role '{role}' may not {action}" if role else f"Not allowed to {action}"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""
