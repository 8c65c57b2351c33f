"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Atomicity:
- Email uniqueness is enforced by the UNIQUE constraint on
  ``user_accounts.email``. ``create_account`` uses
  ``INSERT ... ON CONFLICT (email) DO NOTHING`` so concurrent registrations
  for the same address yield exactly one row, never an exception.
- ``mark_verified`` is a single conditional UPDATE
  (``WHERE is_verified = FALSE``), so two concurrent verifications
  cannot both succeed.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path

from psycopg_pool import ConnectionPool

from authflow.domain.ports import Role, UserAccount

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_COLUMNS = (
    "id, role, email, password_hash, is_verified, verification_code, code_expiry, created_at"
)


def _parse_id(user_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


def _row_to_account(row: tuple) -> UserAccount:
    return UserAccount(
        id=str(row[0]),
        role=Role(row[1]),
        email=row[2],
        password_hash=row[3],
        is_verified=row[4],
        verification_code=row[5],
        code_expiry=row[6],
        created_at=row[7],
    )


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create_account(
        self,
        role: Role,
        email: str,
        password_hash: str,
        code: str,
        code_expiry: datetime,
    ) -> UserAccount | None:
        """
        Insert an unverified account with a pending code.

        Returns:
            The created account, or None if the email already exists
        """
        sql = f"""
            INSERT INTO user_accounts (role, email, password_hash, is_verified, verification_code, code_expiry)
            VALUES (%s, %s, %s, FALSE, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (role.value, email, password_hash, code, code_expiry))
            row = cursor.fetchone()
            conn.commit()

        return _row_to_account(row) if row is not None else None

    def find_by_email(self, email: str) -> UserAccount | None:
        sql = f"SELECT {_COLUMNS} FROM user_accounts WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        return _row_to_account(row) if row is not None else None

    def find_by_id(self, user_id: str) -> UserAccount | None:
        """Look up by id. Malformed ids are reported as not found."""
        parsed = _parse_id(user_id)
        if parsed is None:
            return None

        sql = f"SELECT {_COLUMNS} FROM user_accounts WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (parsed,))
            row = cursor.fetchone()

        return _row_to_account(row) if row is not None else None

    def mark_verified(self, user_id: str) -> bool:
        """
        Verify the account and clear its pending code in one statement.

        Returns:
            True if an unverified row was updated
        """
        parsed = _parse_id(user_id)
        if parsed is None:
            return False

        sql = """
            UPDATE user_accounts
            SET is_verified = TRUE, verification_code = NULL, code_expiry = NULL
            WHERE id = %s AND is_verified = FALSE
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (parsed,))
            conn.commit()
            return cursor.rowcount == 1

    def delete_account(self, user_id: str) -> bool:
        parsed = _parse_id(user_id)
        if parsed is None:
            return False

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM user_accounts WHERE id = %s", (parsed,))
            conn.commit()
            return cursor.rowcount == 1

    def ping(self) -> None:
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    if not MIGRATIONS_DIR.exists():
        logger.warning("Migrations directory not found: %s", MIGRATIONS_DIR)
        return

    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
