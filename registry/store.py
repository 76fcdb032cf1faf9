"""Asynchronous metadata store over the per-entity repositories."""

import asyncio
import functools
from typing import Any, Callable, List

from registry.database import Database
from registry.repositories import (
    Author,
    AuthorFilter,
    AuthorRepository,
    Chunk,
    ChunkFilter,
    ChunkRepository,
    Dataset,
    DatasetFilter,
    DatasetPatch,
    DatasetRepository,
    File,
    FileFilter,
    FileRepository,
)


class MetadataStore:
    """
    Record set of datasets, chunks, files and authors.

    Every call is atomic for its own entity kind only; the store enforces no
    relationships between kinds. Blocking database work runs in the default
    executor so callers suspend instead of blocking the event loop. Failures
    surface as StoreError.
    """

    def __init__(self, database: Database):
        self.database = database
        self.datasets = DatasetRepository(database)
        self.chunks = ChunkRepository(database)
        self.files = FileRepository(database)
        self.authors = AuthorRepository(database)

    async def _run(self, func: Callable[..., Any], *args) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def ping(self) -> bool:
        return await self._run(self.database.ping)

    # Datasets

    async def get_datasets(self, dataset_filter: DatasetFilter) -> List[Dataset]:
        return await self._run(self.datasets.find, dataset_filter)

    async def insert_dataset(self, dataset: Dataset) -> bool:
        return await self._run(self.datasets.insert, dataset)

    async def update_dataset(self, dataset_filter: DatasetFilter, patch: DatasetPatch) -> bool:
        return await self._run(self.datasets.update, dataset_filter, patch)

    async def delete_dataset(self, dataset_filter: DatasetFilter) -> bool:
        await self._run(self.datasets.delete, dataset_filter)
        return True

    # Chunks

    async def get_chunks(self, chunk_filter: ChunkFilter) -> List[Chunk]:
        return await self._run(self.chunks.find, chunk_filter)

    async def insert_chunk(self, chunk: Chunk) -> bool:
        return await self._run(self.chunks.insert, chunk)

    async def delete_chunks(self, chunk_filter: ChunkFilter) -> bool:
        await self._run(self.chunks.delete, chunk_filter)
        return True

    # Files

    async def get_files(self, file_filter: FileFilter) -> List[File]:
        return await self._run(self.files.find, file_filter)

    async def insert_file(self, file: File) -> bool:
        return await self._run(self.files.insert, file)

    async def delete_files(self, file_filter: FileFilter) -> bool:
        await self._run(self.files.delete, file_filter)
        return True

    # Authors

    async def get_authors(self, author_filter: AuthorFilter) -> List[Author]:
        return await self._run(self.authors.find, author_filter)

    async def insert_author(self, author: Author) -> bool:
        return await self._run(self.authors.insert, author)
