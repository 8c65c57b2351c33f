"""
Domain exceptions - Semantic error types for the account workflow.

Every caller-facing error carries a ``message`` that is safe to return
to clients. Internal detail travels only through exception chaining
and server-side logs.
"""


class AuthError(Exception):
    """Base class for account workflow domain errors."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Required input missing or malformed."""

    default_message = "All fields are required"


class DuplicateEmail(AuthError):
    """An account already exists for the normalized email."""

    default_message = "Email already exists"


class NotificationFailure(AuthError):
    """Verification code could not be delivered; the account was rolled back."""

    default_message = "Failed to send verification email"


class NotFound(AuthError):
    """Referenced account does not exist."""

    default_message = "User not found"


class AlreadyVerified(AuthError):
    """Verification requested for an account that is already verified."""

    default_message = "Email already verified"


class CodeInvalid(AuthError):
    """Submitted code does not match the pending code."""

    default_message = "Invalid verification code"


class CodeExpired(AuthError):
    """Pending code matched but its expiry has passed."""

    default_message = "Verification code has expired"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    default_message = "Invalid email or password"


class UnverifiedAccount(AuthError):
    """Credentials belong to an account whose email is not yet verified."""

    default_message = "Please verify your email before logging in"


class InternalFailure(AuthError):
    """Storage or unexpected fault. Detail is logged, never returned."""

    default_message = "An internal error occurred"


class EmailDeliveryError(Exception):
    """Raised by EmailSender adapters when a message cannot be delivered."""

    pass
