"""
Auth domain service - Registration, email verification and login.

Account Lifecycle
=================

    (none) --register--> UNVERIFIED --verify_code--> VERIFIED
                             |
                             +--notification failure--> (deleted)

Registration is a two-phase operation:

1. Claim: validate input, hash the password and tentatively create an
   unverified account holding a pending one-time code.
2. Deliver or compensate: send the code. If delivery fails the account
   is deleted again so no unreachable, unverifiable record survives.

The compensating delete is not a transaction. A verify_code call racing
with a rollback on the same account can observe the record briefly;
that window is bounded by the email sender timeout and is accepted.

Login keeps unknown-email and wrong-password failures identical
(InvalidCredentials) to resist account enumeration. UnverifiedAccount
is the one deliberate exception: it only fires for a real account.
"""

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import bcrypt

from .exceptions import (
    AlreadyVerified,
    AuthError,
    DuplicateEmail,
    InternalFailure,
    InvalidCredentials,
    NotFound,
    NotificationFailure,
    UnverifiedAccount,
    ValidationError,
)
from .ports import EmailSender, RegistrationResult, Role, UserAccount, UserIdentity, UserRepository
from .verification import CODE_TTL, check_code, code_expiry, generate_code

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# bcrypt ignores (or rejects) input beyond 72 bytes
_MAX_PASSWORD_BYTES = 72

_DUMMY_PASSWORD = b"dummy_password_for_timing_safety"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _internal_guard(operation: str) -> Iterator[None]:
    """Turn unexpected faults into InternalFailure, logging full detail."""
    try:
        yield
    except AuthError:
        raise
    except Exception as exc:
        logger.exception("Unexpected failure during %s", operation)
        raise InternalFailure() from exc


@dataclass
class AuthService:
    """
    Domain service for account registration, verification and login.

    Collaborators are injected so tests can substitute doubles for the
    store, the email channel and the clock.
    """

    repository: UserRepository
    email_sender: EmailSender
    bcrypt_rounds: int = 10
    code_ttl: timedelta = CODE_TTL
    clock: Callable[[], datetime] = field(default=_utcnow)
    _dummy_hash: bytes | None = field(default=None, init=False, repr=False, compare=False)

    def register(self, role: str | None, email: str | None, password: str | None) -> RegistrationResult:
        """
        Register a new unverified account and email it a one-time code.

        Args:
            role: "admin" or "user"
            email: Email address (will be normalized)
            password: Plaintext password (will be hashed)

        Returns:
            RegistrationResult holding the new account id

        Raises:
            ValidationError: Missing or malformed input
            DuplicateEmail: Email already registered
            NotificationFailure: Code delivery failed, account rolled back
            InternalFailure: Storage or unexpected fault
        """
        with _internal_guard("registration"):
            account, code = self._claim(role, email, password)
            self._deliver_or_compensate(account, code)
            logger.info("Registered account %s", account.id)
            return RegistrationResult(user_id=account.id)

    def verify_code(self, user_id: str | None, code: str | None) -> None:
        """
        Confirm email ownership with the pending one-time code.

        Raises:
            ValidationError: Missing input
            NotFound: Unknown account
            AlreadyVerified: Account already verified
            CodeInvalid: Code mismatch (state untouched)
            CodeExpired: Code matched after expiry (state untouched)
            InternalFailure: Storage or unexpected fault
        """
        with _internal_guard("verification"):
            if not user_id or not code:
                raise ValidationError("User id and code are required")

            account = self.repository.find_by_id(user_id)
            if account is None:
                raise NotFound()
            if account.is_verified:
                raise AlreadyVerified()

            check_code(account.verification_code, code, account.code_expiry, self.clock())

            if not self.repository.mark_verified(account.id):
                # Lost a race with another verify or with a registration rollback
                if self.repository.find_by_id(account.id) is None:
                    raise NotFound()
                raise AlreadyVerified()
            logger.info("Verified account %s", account.id)

    def login(self, email: str | None, password: str | None) -> UserIdentity:
        """
        Authenticate with email and password.

        Raises:
            ValidationError: Missing input
            InvalidCredentials: Unknown email or wrong password
            UnverifiedAccount: Correct account, email not yet verified
            InternalFailure: Storage or unexpected fault
        """
        with _internal_guard("login"):
            if not email or not password:
                raise ValidationError("Please provide both email and password")

            account = self.repository.find_by_email(self._normalize_email(email))
            if account is None:
                self._check_password(password, self._dummy_password_hash())
                raise InvalidCredentials()

            if not account.is_verified:
                raise UnverifiedAccount()

            if not self._check_password(password, account.password_hash.encode()):
                raise InvalidCredentials()

            return UserIdentity(id=account.id, email=account.email, role=account.role)

    def _claim(
        self, role: str | None, email: str | None, password: str | None
    ) -> tuple[UserAccount, str]:
        """Phase one: validate input and tentatively create the account."""
        if not role or not email or not password:
            raise ValidationError("All fields are required")

        try:
            parsed_role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role") from None

        normalized_email = self._normalize_email(email)
        if not _EMAIL_RE.match(normalized_email):
            raise ValidationError("Invalid email format")
        if len(password.encode()) > _MAX_PASSWORD_BYTES:
            raise ValidationError("Password is too long")

        if self.repository.find_by_email(normalized_email) is not None:
            raise DuplicateEmail()

        code = generate_code()
        expiry = code_expiry(self.clock(), self.code_ttl)
        password_hash = self._hash_password(password)

        account = self.repository.create_account(
            parsed_role, normalized_email, password_hash, code, expiry
        )
        if account is None:
            # Concurrent registration won the unique constraint
            raise DuplicateEmail()
        return account, code

    def _deliver_or_compensate(self, account: UserAccount, code: str) -> None:
        """Phase two: send the code, or delete the account if that fails."""
        try:
            self.email_sender.send_verification_code(account.email, code)
        except Exception as exc:
            logger.error("Verification email to account %s failed: %s", account.id, exc)
            try:
                self.repository.delete_account(account.id)
            except Exception as rollback_exc:
                logger.exception(
                    "Rollback of account %s failed; record left unverified", account.id
                )
                raise InternalFailure() from rollback_exc
            logger.info("Rolled back account %s", account.id)
            raise NotificationFailure() from exc

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode()

    def _dummy_password_hash(self) -> bytes:
        """
        Hash compared against when the email is unknown.

        Built at the service's own cost factor so an unknown-email login
        takes as long as a wrong-password one.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                _DUMMY_PASSWORD, bcrypt.gensalt(rounds=self.bcrypt_rounds)
            )
        return self._dummy_hash

    def _check_password(self, password: str, password_hash: bytes) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash)
        except ValueError:
            # Oversized or malformed input never matches
            return False

