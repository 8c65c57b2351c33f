"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the account data model and the interfaces (ports)
that the domain requires from infrastructure. Adapters implement these
protocols through structural subtyping.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class Role(str, Enum):
    """Account role. Stored as data only; no permissions are derived from it."""

    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class UserAccount:
    """
    Persistent user account record.

    Invariants:
    - verification_code and code_expiry are both set or both None
    - a verified account has no pending code
    """

    id: str
    role: Role
    email: str
    password_hash: str
    created_at: datetime
    is_verified: bool = False
    verification_code: str | None = None
    code_expiry: datetime | None = None

    def __post_init__(self) -> None:
        if (self.verification_code is None) != (self.code_expiry is None):
            raise ValueError("verification_code and code_expiry must be set together")
        if self.is_verified and self.verification_code is not None:
            raise ValueError("verified account cannot hold a pending code")


@dataclass(frozen=True)
class UserIdentity:
    """Minimal identity projection returned on login."""

    id: str
    email: str
    role: Role


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a successful registration."""

    user_id: str


class UserRepository(Protocol):
    """Port interface for account persistence."""

    def create_account(
        self,
        role: Role,
        email: str,
        password_hash: str,
        code: str,
        code_expiry: datetime,
    ) -> UserAccount | None:
        """
        Atomically create an unverified account with a pending code.

        Args:
            role: Account role
            email: Normalized email address
            password_hash: bcrypt hashed password
            code: 6-digit verification code
            code_expiry: Absolute expiry of the code

        Returns:
            The created account, or None if the email is already taken
        """
        ...

    def find_by_email(self, email: str) -> UserAccount | None:
        """Return the account for a normalized email, if any."""
        ...

    def find_by_id(self, user_id: str) -> UserAccount | None:
        """Return the account with this identifier, if any."""
        ...

    def mark_verified(self, user_id: str) -> bool:
        """
        Set is_verified and clear the pending code.

        Only applies to an unverified account. Returns False when no row
        matched (unknown id or already verified).
        """
        ...

    def delete_account(self, user_id: str) -> bool:
        """Delete an account. Returns False if it did not exist."""
        ...

    def ping(self) -> None:
        """Raise if the store is unreachable."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            code: 6-digit verification code

        Raises:
            EmailDeliveryError: If the message could not be delivered
        """
        ...
