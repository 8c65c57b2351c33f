"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core account workflow: registration with a
one-time email code, code verification and login. It defines its own
port interfaces for infrastructure abstraction.
"""

from .auth import AuthService
from .exceptions import (
    AlreadyVerified,
    AuthError,
    CodeExpired,
    CodeInvalid,
    DuplicateEmail,
    EmailDeliveryError,
    InternalFailure,
    InvalidCredentials,
    NotFound,
    NotificationFailure,
    UnverifiedAccount,
    ValidationError,
)
from .ports import EmailSender, RegistrationResult, Role, UserAccount, UserIdentity, UserRepository

__all__ = [
    "AlreadyVerified",
    "AuthError",
    "AuthService",
    "CodeExpired",
    "CodeInvalid",
    "DuplicateEmail",
    "EmailDeliveryError",
    "EmailSender",
    "InternalFailure",
    "InvalidCredentials",
    "NotFound",
    "NotificationFailure",
    "RegistrationResult",
    "Role",
    "UnverifiedAccount",
    "UserAccount",
    "UserIdentity",
    "UserRepository",
    "ValidationError",
]
