"""Dataset repository for database operations."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from common.logging_config import get_logger
from registry.database import Database, from_json, in_clause, to_json, where_sql
from registry.exceptions import StoreError

logger = get_logger(__name__)

_COLUMNS = "dataset_id, uploader, published, title, description, author_ids, chunk_ids, keywords"


@dataclass
class Dataset:
    dataset_id: str
    uploader: str
    published: bool = False
    title: Optional[str] = None
    description: Optional[str] = None
    author_ids: List[str] = field(default_factory=list)
    chunk_ids: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DatasetFilter:
    """
    Selection of datasets.

    Unset fields do not constrain the result. ``ids`` is a set-membership
    test; ``search`` matches any of its terms against title, description
    and keywords.
    """
    dataset_id: Optional[str] = None
    ids: Optional[Sequence[str]] = None
    uploader: Optional[str] = None
    published: Optional[bool] = None
    search: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.dataset_id is None
            and self.ids is None
            and self.uploader is None
            and self.published is None
            and not (self.search or "").split()
        )


@dataclass(frozen=True)
class DatasetPatch:
    published: Optional[bool] = None
    title: Optional[str] = None
    description: Optional[str] = None
    author_ids: Optional[Sequence[str]] = None
    keywords: Optional[Sequence[str]] = None


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _build_filter(dataset_filter: DatasetFilter) -> Tuple[str, List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []

    if dataset_filter.dataset_id is not None:
        clauses.append("dataset_id = ?")
        params.append(dataset_filter.dataset_id)

    if dataset_filter.ids is not None:
        clause, values = in_clause("dataset_id", dataset_filter.ids)
        clauses.append(clause)
        params.extend(values)

    if dataset_filter.uploader is not None:
        clauses.append("uploader = ?")
        params.append(dataset_filter.uploader)

    if dataset_filter.published is not None:
        clauses.append("published = ?")
        params.append(1 if dataset_filter.published else 0)

    terms = dataset_filter.search.split() if dataset_filter.search else []
    if dataset_filter.search is not None and not terms:
        # Search text without terms matches nothing.
        clauses.append("0")
    elif terms:
        term_clauses = []
        for term in terms:
            pattern = f"%{_escape_like(term)}%"
            term_clauses.append(
                "(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\' OR keywords LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        clauses.append("(" + " OR ".join(term_clauses) + ")")

    return where_sql(clauses), params


def _row_to_dataset(row) -> Dataset:
    return Dataset(
        dataset_id=row["dataset_id"],
        uploader=row["uploader"],
        published=bool(row["published"]),
        title=row["title"],
        description=row["description"],
        author_ids=from_json(row["author_ids"]),
        chunk_ids=from_json(row["chunk_ids"]),
        keywords=from_json(row["keywords"]),
    )


class DatasetRepository:
    def __init__(self, database: Database):
        self.database = database

    def find(self, dataset_filter: DatasetFilter) -> List[Dataset]:
        where, params = _build_filter(dataset_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM datasets{where} ORDER BY rowid", params)
            return [_row_to_dataset(row) for row in cursor.fetchall()]

    def insert(self, dataset: Dataset) -> bool:
        logger.debug(f"Creating dataset [dataset_id={dataset.dataset_id}] [uploader={dataset.uploader}]")
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT OR IGNORE INTO datasets ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    dataset.dataset_id,
                    dataset.uploader,
                    1 if dataset.published else 0,
                    dataset.title,
                    dataset.description,
                    to_json(dataset.author_ids),
                    to_json(dataset.chunk_ids),
                    to_json(dataset.keywords),
                )
            )
            conn.commit()
            return cursor.rowcount > 0

    def update(self, dataset_filter: DatasetFilter, patch: DatasetPatch) -> bool:
        """
        Apply patch to every matching dataset in a single statement.

        Returns:
            True if at least one dataset matched
        """
        if dataset_filter.is_empty():
            raise StoreError("Refusing to update datasets without a filter")

        assignments: List[str] = []
        values: List[Any] = []
        if patch.published is not None:
            assignments.append("published = ?")
            values.append(1 if patch.published else 0)
        if patch.title is not None:
            assignments.append("title = ?")
            values.append(patch.title)
        if patch.description is not None:
            assignments.append("description = ?")
            values.append(patch.description)
        if patch.author_ids is not None:
            assignments.append("author_ids = ?")
            values.append(to_json(patch.author_ids))
        if patch.keywords is not None:
            assignments.append("keywords = ?")
            values.append(to_json(patch.keywords))

        if not assignments:
            raise StoreError("Dataset patch has no fields to set")

        where, params = _build_filter(dataset_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"UPDATE datasets SET {', '.join(assignments)}{where}", values + params)
            conn.commit()
            logger.debug(f"Updated {cursor.rowcount} dataset(s)")
            return cursor.rowcount > 0

    def delete(self, dataset_filter: DatasetFilter) -> int:
        if dataset_filter.is_empty():
            raise StoreError("Refusing to delete datasets without a filter")

        where, params = _build_filter(dataset_filter)
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM datasets{where}", params)
            conn.commit()
            logger.info(f"Deleted {cursor.rowcount} dataset(s)")
            return cursor.rowcount
