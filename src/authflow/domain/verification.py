"""
Verification workflow - One-time code generation and checking.

Codes are 6-digit numeric strings drawn from the operating system CSPRNG.
Expiry is stored as an absolute timestamp, never as a duration.
"""

import secrets
from datetime import datetime, timedelta

from .exceptions import CodeExpired, CodeInvalid

CODE_TTL = timedelta(minutes=10)

_CODE_MIN = 100000
_CODE_MAX = 999999


def generate_code() -> str:
    """Return a uniformly random code in [100000, 999999]."""
    return str(_CODE_MIN + secrets.randbelow(_CODE_MAX - _CODE_MIN + 1))


def code_expiry(now: datetime, ttl: timedelta = CODE_TTL) -> datetime:
    """Absolute expiry for a code generated at ``now``."""
    return now + ttl


def check_code(stored: str, submitted: str, expiry: datetime, now: datetime) -> None:
    """
    Validate a submitted code against the pending one.

    The code comparison runs first, so a wrong code is reported as
    CodeInvalid even after expiry.

    Raises:
        CodeInvalid: submitted does not exactly equal stored
        CodeExpired: codes match but now is past expiry
    """
    if not secrets.compare_digest(stored.encode(), submitted.encode()):
        raise CodeInvalid()
    if now > expiry:
        raise CodeExpired()
