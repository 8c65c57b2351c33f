"""
In-memory repository adapter - Implements UserRepository protocol.

Process-local storage for development and tests. A single lock guards
both indexes so create_account is atomic with respect to the email
uniqueness check, mirroring the database UNIQUE constraint.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from authflow.domain.ports import Role, UserAccount


class InMemoryUserRepository:
    """Implements UserRepository protocol with dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[str, UserAccount] = {}
        self._id_by_email: dict[str, str] = {}

    def create_account(
        self,
        role: Role,
        email: str,
        password_hash: str,
        code: str,
        code_expiry: datetime,
    ) -> UserAccount | None:
        with self._lock:
            if email in self._id_by_email:
                return None
            account = UserAccount(
                id=str(uuid.uuid4()),
                role=role,
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
                verification_code=code,
                code_expiry=code_expiry,
            )
            self._by_id[account.id] = account
            self._id_by_email[email] = account.id
            return account

    def find_by_email(self, email: str) -> UserAccount | None:
        with self._lock:
            user_id = self._id_by_email.get(email)
            return self._by_id.get(user_id) if user_id is not None else None

    def find_by_id(self, user_id: str) -> UserAccount | None:
        with self._lock:
            return self._by_id.get(user_id)

    def mark_verified(self, user_id: str) -> bool:
        with self._lock:
            account = self._by_id.get(user_id)
            if account is None or account.is_verified:
                return False
            self._by_id[user_id] = replace(
                account, is_verified=True, verification_code=None, code_expiry=None
            )
            return True

    def delete_account(self, user_id: str) -> bool:
        with self._lock:
            account = self._by_id.pop(user_id, None)
            if account is None:
                return False
            del self._id_by_email[account.email]
            return True

    def ping(self) -> None:
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
