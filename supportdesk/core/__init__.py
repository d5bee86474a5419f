"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from supportdesk.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    InvalidTransitionException,
    ForbiddenException,
    ConflictException,
    ResourceNotFoundException,
    ConfigurationException,
    AuthenticationException,
)
from supportdesk.core.clock import Clock, utcnow, ensure_utc

__all__ = [
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "InvalidTransitionException",
    "ForbiddenException",
    "ConflictException",
    "ResourceNotFoundException",
    "ConfigurationException",
    "AuthenticationException",
    "Clock",
    "utcnow",
    "ensure_utc",
]
