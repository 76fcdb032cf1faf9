"""File repository for database operations."""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from common.logging_config import get_logger
from registry.database import Database, in_clause, where_sql
from registry.exceptions import StoreError

logger = get_logger(__name__)


@dataclass
class File:
    file_id: str
    chunk_id: str
    name: str
    path: str
    size: int = 0


@dataclass(frozen=True)
class FileFilter:
    ids: Optional[Sequence[str]] = None
    chunk_ids: Optional[Sequence[str]] = None

    def is_empty(self) -> bool:
        return self.ids is None and self.chunk_ids is None


def _build_filter(file_filter: FileFilter) -> Tuple[str, List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []

    if file_filter.ids is not None:
        clause, values = in_clause("file_id", file_filter.ids)
        clauses.append(clause)
        params.extend(values)
    if file_filter.chunk_ids is not None:
        clause, values = in_clause("chunk_id", file_filter.chunk_ids)
        clauses.append(clause)
        params.extend(values)

    return where_sql(clauses), params


class FileRepository:
    def __init__(self, database: Database):
        self.database = database

    def find(self, file_filter: FileFilter) -> List[File]:
        where, params = _build_filter(file_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT file_id, chunk_id, name, path, size FROM files{where} ORDER BY rowid", params)
            rows = cursor.fetchall()

            return [
                File(
                    file_id=row["file_id"],
                    chunk_id=row["chunk_id"],
                    name=row["name"],
                    path=row["path"],
                    size=row["size"],
                )
                for row in rows
            ]

    def insert(self, file: File) -> bool:
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO files (file_id, chunk_id, name, path, size)
                VALUES (?, ?, ?, ?, ?)
                """,
                (file.file_id, file.chunk_id, file.name, file.path, file.size)
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete(self, file_filter: FileFilter) -> int:
        if file_filter.is_empty():
            raise StoreError("Refusing to delete files without a filter")

        where, params = _build_filter(file_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM files{where}", params)
            conn.commit()
            logger.info(f"Deleted {cursor.rowcount} file(s)")
            return cursor.rowcount
