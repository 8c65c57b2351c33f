"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory account repository
- Email sender test doubles
- Controllable clock
- Auth service wired to the doubles
"""

from datetime import datetime, timedelta, timezone

import pytest

from authflow.adapters.repository.memory import InMemoryUserRepository
from authflow.domain.auth import AuthService
from authflow.domain.exceptions import EmailDeliveryError

# bcrypt minimum cost; keeps the suite fast. Production cost is covered separately.
TEST_BCRYPT_ROUNDS = 4


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class RecordingEmailSender:
    """Email sender double that remembers every code it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_verification_code(self, email: str, code: str) -> None:
        self.sent.append((email, code))

    def last_code(self) -> str:
        return self.sent[-1][1]


class FailingEmailSender:
    """Email sender double whose delivery always fails."""

    def __init__(self) -> None:
        self.attempts = 0

    def send_verification_code(self, email: str, code: str) -> None:
        self.attempts += 1
        raise EmailDeliveryError("relay unreachable")


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def service(
    repository: InMemoryUserRepository, email_sender: RecordingEmailSender, clock: FrozenClock
) -> AuthService:
    return AuthService(
        repository=repository,
        email_sender=email_sender,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        clock=clock,
    )


@pytest.fixture
def failing_email_sender() -> FailingEmailSender:
    return FailingEmailSender()


@pytest.fixture
def failing_service(
    repository: InMemoryUserRepository, failing_email_sender: FailingEmailSender, clock: FrozenClock
) -> AuthService:
    """Auth service whose email delivery always fails."""
    return AuthService(
        repository=repository,
        email_sender=failing_email_sender,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        clock=clock,
    )
