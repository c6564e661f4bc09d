"""Repository adapters - Database implementations."""

from .postgres import PostgresRecordStore, run_migrations

__all__ = ["PostgresRecordStore", "run_migrations"]
