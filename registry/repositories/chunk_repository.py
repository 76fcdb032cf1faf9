"""Chunk repository for database operations."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from common.logging_config import get_logger
from registry.database import Database, from_json, in_clause, to_json, where_sql
from registry.exceptions import StoreError

logger = get_logger(__name__)


@dataclass(frozen=True)
class StorageIds:
    blob_store_id: str


@dataclass
class Chunk:
    chunk_id: str
    dataset_id: str
    storage_ids: StorageIds
    file_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChunkFilter:
    chunk_id: Optional[str] = None
    ids: Optional[Sequence[str]] = None
    dataset_id: Optional[str] = None
    storage_id: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.chunk_id is None
            and self.ids is None
            and self.dataset_id is None
            and self.storage_id is None
        )


def _build_filter(chunk_filter: ChunkFilter) -> Tuple[str, List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []

    if chunk_filter.chunk_id is not None:
        clauses.append("chunk_id = ?")
        params.append(chunk_filter.chunk_id)
    if chunk_filter.ids is not None:
        clause, values = in_clause("chunk_id", chunk_filter.ids)
        clauses.append(clause)
        params.extend(values)
    if chunk_filter.dataset_id is not None:
        clauses.append("dataset_id = ?")
        params.append(chunk_filter.dataset_id)
    if chunk_filter.storage_id is not None:
        clauses.append("blob_store_id = ?")
        params.append(str(chunk_filter.storage_id))

    return where_sql(clauses), params


class ChunkRepository:
    def __init__(self, database: Database):
        self.database = database

    def find(self, chunk_filter: ChunkFilter) -> List[Chunk]:
        where, params = _build_filter(chunk_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT chunk_id, dataset_id, file_ids, blob_store_id FROM chunks{where} ORDER BY rowid",
                params
            )
            rows = cursor.fetchall()

            return [
                Chunk(
                    chunk_id=row["chunk_id"],
                    dataset_id=row["dataset_id"],
                    storage_ids=StorageIds(blob_store_id=row["blob_store_id"]),
                    file_ids=from_json(row["file_ids"]),
                )
                for row in rows
            ]

    def insert(self, chunk: Chunk) -> bool:
        logger.debug(f"Creating chunk [chunk_id={chunk.chunk_id}] [dataset_id={chunk.dataset_id}]")
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO chunks (chunk_id, dataset_id, file_ids, blob_store_id)
                VALUES (?, ?, ?, ?)
                """,
                (chunk.chunk_id, chunk.dataset_id, to_json(chunk.file_ids), str(chunk.storage_ids.blob_store_id))
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete(self, chunk_filter: ChunkFilter) -> int:
        if chunk_filter.is_empty():
            raise StoreError("Refusing to delete chunks without a filter")

        where, params = _build_filter(chunk_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM chunks{where}", params)
            conn.commit()
            logger.info(f"Deleted {cursor.rowcount} chunk(s)")
            return cursor.rowcount
