"""Database schema and connection management for SQLite."""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Sequence, Tuple

from common.logging_config import get_logger
from registry.exceptions import StoreError

logger = get_logger(__name__)


class Database:
    """
    Handle on the registry's SQLite database.

    A single instance is created at startup and passed to every repository.
    Each operation opens its own connection, so the handle may be shared
    across executor threads.
    """

    def __init__(self, path: str):
        self.path = str(path)

    def init_schema(self) -> None:
        """
        Create tables and indexes if they don't exist.
        """
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        with self.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS datasets (
                    dataset_id TEXT PRIMARY KEY,
                    uploader TEXT NOT NULL,
                    published INTEGER NOT NULL DEFAULT 0,
                    title TEXT,
                    description TEXT,
                    author_ids TEXT NOT NULL DEFAULT '[]',
                    chunk_ids TEXT NOT NULL DEFAULT '[]',
                    keywords TEXT NOT NULL DEFAULT '[]'
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS chunks (
                    chunk_id TEXT PRIMARY KEY,
                    dataset_id TEXT NOT NULL,
                    file_ids TEXT NOT NULL DEFAULT '[]',
                    blob_store_id TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS files (
                    file_id TEXT PRIMARY KEY,
                    chunk_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    path TEXT NOT NULL,
                    size INTEGER NOT NULL DEFAULT 0
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS authors (
                    author_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_datasets_uploader ON datasets(uploader)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_datasets_published ON datasets(published)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_chunks_dataset ON chunks(dataset_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_chunks_blob ON chunks(blob_store_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_files_chunk ON files(chunk_id)")

            conn.commit()

        logger.info(f"Database schema ready at {self.path}")

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.

        Any sqlite3 error raised inside the block is rolled back and
        re-raised as StoreError.
        """
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open database: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database operation failed: {e}", exc_info=True)
            raise StoreError(f"Database operation failed: {e}") from e
        finally:
            conn.close()

    def ping(self) -> bool:
        with self.connection() as conn:
            conn.execute("SELECT 1").fetchone()
        return True


def to_json(values: Sequence[Any]) -> str:
    return json.dumps(list(values), ensure_ascii=False)


def from_json(raw: str) -> List[Any]:
    if not raw:
        return []
    return json.loads(raw)


def in_clause(column: str, values: Sequence[Any]) -> Tuple[str, List[Any]]:
    """
    Build a set-membership predicate.

    An empty set yields a predicate that matches nothing.
    """
    values = list(values)
    if not values:
        return "0", []
    placeholders = ", ".join("?" for _ in values)
    return f"{column} IN ({placeholders})", values


def where_sql(clauses: List[str]) -> str:
    if not clauses:
        return ""
    return " WHERE " + " AND ".join(clauses)
