"""
Cleaned (silver) store writer.

Writes one entity kind's cleaned snapshot as a full replace: existing rows
are deleted and the new generation inserted inside a single transaction,
so readers see either the previous or the new snapshot, never a mix.
"""

from typing import Protocol, Sequence

import psycopg
from psycopg import sql

from src.core.models import EntityKind, SilverRecord
from src.observability.logger import get_logger
from src.warehouse.connection import DatabaseConnectionPool
from src.warehouse.silver_tables import SILVER_TABLES, qualified_table

logger = get_logger(__name__)


class StoreWriteError(RuntimeError):
    """Raised when the cleaned snapshot for an entity kind cannot be written."""

    def __init__(self, kind: EntityKind, message: str):
        self.kind = kind
        super().__init__(f"[{kind.value}] cleaned write failed: {message}")


class CleanedStore(Protocol):
    """Anything that can atomically replace a kind's cleaned rows."""

    def replace_all(self, kind: EntityKind, records: Sequence[SilverRecord]) -> int:
        ...


class PostgresSilverWriter:
    """
    Full-replace writer for silver tables in PostgreSQL.
    """

    def __init__(self, pool: DatabaseConnectionPool, schema: str = "silver"):
        """
        Initialize silver writer.

        Args:
            pool: Database connection pool
            schema: Database schema holding the silver tables
        """
        self.pool = pool
        self.schema = schema

    def replace_all(self, kind: EntityKind, records: Sequence[SilverRecord]) -> int:
        """
        Replace every row of a kind's silver table.

        Args:
            kind: Entity kind whose table is replaced
            records: Complete cleaned snapshot

        Returns:
            Number of records written

        Raises:
            StoreWriteError: If the delete or insert fails; the transaction
                is rolled back and the previous rows stay in place
        """
        table = SILVER_TABLES[kind]
        target = qualified_table(self.schema, kind)
        insert = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            target,
            sql.SQL(", ").join(sql.Identifier(name) for name in table.column_names),
            sql.SQL(", ").join(sql.Placeholder() * len(table.columns)),
        )
        rows = [
            tuple(getattr(record, field) for field in table.fields)
            for record in records
        ]

        try:
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        cur.execute(sql.SQL("DELETE FROM {}").format(target))
                        if rows:
                            cur.executemany(insert, rows)
        except psycopg.Error as e:
            raise StoreWriteError(kind, str(e)) from e

        logger.debug(f"Replaced {table.name} with {len(rows)} rows")
        return len(rows)
