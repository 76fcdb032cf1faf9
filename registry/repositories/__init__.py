"""Repository layer for data access."""

from registry.repositories.dataset_repository import Dataset, DatasetFilter, DatasetPatch, DatasetRepository
from registry.repositories.chunk_repository import Chunk, ChunkFilter, ChunkRepository, StorageIds
from registry.repositories.file_repository import File, FileFilter, FileRepository
from registry.repositories.author_repository import Author, AuthorFilter, AuthorRepository

__all__ = [
    "Dataset",
    "DatasetFilter",
    "DatasetPatch",
    "DatasetRepository",
    "Chunk",
    "ChunkFilter",
    "ChunkRepository",
    "StorageIds",
    "File",
    "FileFilter",
    "FileRepository",
    "Author",
    "AuthorFilter",
    "AuthorRepository",
]
