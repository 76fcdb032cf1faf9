"""Schema validation tests to prevent SQL query mismatches."""

import inspect
import re
import sqlite3

import pytest

from registry.repositories import author_repository, chunk_repository, dataset_repository, file_repository


def get_table_columns(db_path: str, table_name: str) -> set:
    """
    Get all column names for a table from the database schema.
    """
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute(f"PRAGMA table_info({table_name})")
    columns = {row[1] for row in cursor.fetchall()}
    conn.close()
    return columns


def extract_columns_from_query(query: str) -> set:
    """
    Extract column names from SELECT queries.
    """
    select_match = re.search(r"SELECT\s+(.*?)\s+FROM", query, re.IGNORECASE | re.DOTALL)
    if not select_match:
        return set()

    columns = [col.strip().split()[-1] for col in select_match.group(1).split(",") if col.strip()]
    return {col.lower() for col in columns}


def select_queries(module, table: str) -> list:
    source = inspect.getsource(module)
    # Expand the shared column list used by the dataset repository.
    columns = getattr(module, "_COLUMNS", None)
    if columns:
        source = source.replace("{_COLUMNS}", columns)
    return re.findall(rf"SELECT\s+.*?FROM\s+{table}\b", source, re.IGNORECASE | re.DOTALL)


EXPECTED_COLUMNS = {
    "datasets": {
        "dataset_id",
        "uploader",
        "published",
        "title",
        "description",
        "author_ids",
        "chunk_ids",
        "keywords",
    },
    "chunks": {"chunk_id", "dataset_id", "file_ids", "blob_store_id"},
    "files": {"file_id", "chunk_id", "name", "path", "size"},
    "authors": {"author_id", "name"},
}

REPOSITORY_MODULES = [
    ("datasets", dataset_repository),
    ("chunks", chunk_repository),
    ("files", file_repository),
    ("authors", author_repository),
]


@pytest.mark.parametrize("table", sorted(EXPECTED_COLUMNS))
def test_table_columns(database, table):
    assert get_table_columns(database.path, table) == EXPECTED_COLUMNS[table]


@pytest.mark.parametrize("table,module", REPOSITORY_MODULES)
def test_repository_select_queries(database, table, module):
    queries = select_queries(module, table)
    assert queries, f"No SELECT against {table} found"

    table_columns = get_table_columns(database.path, table)
    for query in queries:
        for col in extract_columns_from_query(query):
            assert col in table_columns, f"Column {col} not in {table} table schema"


def test_lookup_indexes_exist(database):
    conn = sqlite3.connect(database.path)
    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='index' AND name LIKE 'idx_%'")
    indexes = {row[0] for row in cursor.fetchall()}
    conn.close()

    assert {
        "idx_datasets_uploader",
        "idx_datasets_published",
        "idx_chunks_dataset",
        "idx_chunks_blob",
        "idx_files_chunk",
    } <= indexes
