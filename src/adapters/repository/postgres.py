"""
PostgreSQL repository adapter - Implements RecordStore protocol.

This module provides the PostgreSQL implementation of the domain's
record store port using psycopg3 with raw SQL.

Uniqueness of the identity key (discord_id, student_code, gmail) is enforced
by a composite UNIQUE constraint. Candidate lookup and insert are separate
statements, so two concurrent registrations can both see no candidates; the
loser of the race gets a DuplicateKeyError from insert().
"""

import logging
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import DuplicateKeyError, PersistenceError
from src.domain.models import RegistrationRecord

logger = logging.getLogger(__name__)


class PostgresRecordStore:
    """
    Implements RecordStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_candidates(
        self, gmail: str, discord_id: str, student_code: str
    ) -> list[RegistrationRecord]:
        """
        Find every registration sharing at least one identifying field.

        Ordered by insertion time so reports list the oldest record first.

        Raises:
            PersistenceError: If the query fails
        """
        sql = """
            SELECT discord_id, student_code, gmail, full_name, base, created_at
            FROM registrations
            WHERE gmail = %s OR discord_id = %s OR student_code = %s
            ORDER BY created_at, id
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (gmail, discord_id, student_code))
                rows = cursor.fetchall()
        except psycopg.Error as e:
            logger.error("Candidate lookup failed: %s", e)
            raise PersistenceError(str(e)) from e

        return [
            RegistrationRecord(
                discord_id=row[0],
                student_code=row[1],
                gmail=row[2],
                full_name=row[3],
                base=row[4],
                created_at=row[5],
            )
            for row in rows
        ]

    def insert(self, record: RegistrationRecord) -> None:
        """
        Persist a registration; created_at is set by the database.

        Raises:
            DuplicateKeyError: If the identity key is already stored
            PersistenceError: For any other database failure
        """
        sql = """
            INSERT INTO registrations (discord_id, student_code, gmail, full_name, base, created_at)
            VALUES (%s, %s, %s, %s, %s, NOW())
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(
                    sql,
                    (
                        record.discord_id,
                        record.student_code,
                        record.gmail,
                        record.full_name,
                        record.base,
                    ),
                )
                conn.commit()
        except errors.UniqueViolation as e:
            raise DuplicateKeyError(str(e)) from e
        except psycopg.Error as e:
            logger.error("Insert failed for %s: %s", record.discord_id, e)
            raise PersistenceError(str(e)) from e


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
