"""Author repository for database operations."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from common.logging_config import get_logger
from registry.database import Database, in_clause, where_sql

logger = get_logger(__name__)


@dataclass
class Author:
    author_id: str
    name: str


@dataclass(frozen=True)
class AuthorFilter:
    ids: Optional[Sequence[str]] = None


class AuthorRepository:
    def __init__(self, database: Database):
        self.database = database

    def find(self, author_filter: AuthorFilter) -> List[Author]:
        clauses = []
        params = []
        if author_filter.ids is not None:
            clause, params = in_clause("author_id", author_filter.ids)
            clauses.append(clause)

        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT author_id, name FROM authors{where_sql(clauses)} ORDER BY rowid", params)
            return [Author(author_id=row["author_id"], name=row["name"]) for row in cursor.fetchall()]

    def insert(self, author: Author) -> bool:
        """
        Insert an author record.

        Returns:
            False if an author with the same ID already exists
        """
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR IGNORE INTO authors (author_id, name) VALUES (?, ?)",
                (author.author_id, author.name)
            )
            conn.commit()
            if cursor.rowcount == 0:
                logger.warning(f"Author id collision [author_id={author.author_id}]")
                return False
            return True
