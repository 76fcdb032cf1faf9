"""Pydantic schemas for dataset, chunk and author endpoints."""

from typing import List, Optional

from pydantic import BaseModel

from registry.repositories import Author, Chunk, Dataset


class DatasetResponse(BaseModel):
    """Response model for dataset metadata."""
    dataset_id: str
    uploader: str
    published: bool
    title: Optional[str] = None
    description: Optional[str] = None
    author_ids: List[str]
    chunk_ids: List[str]
    keywords: List[str]

    @classmethod
    def from_record(cls, dataset: Dataset) -> "DatasetResponse":
        return cls(
            dataset_id=dataset.dataset_id,
            uploader=dataset.uploader,
            published=dataset.published,
            title=dataset.title,
            description=dataset.description,
            author_ids=dataset.author_ids,
            chunk_ids=dataset.chunk_ids,
            keywords=dataset.keywords,
        )


class StorageIdsResponse(BaseModel):
    blob_store_id: str


class ChunkResponse(BaseModel):
    """Response model for chunk metadata."""
    chunk_id: str
    dataset_id: str
    file_ids: List[str]
    storage_ids: StorageIdsResponse

    @classmethod
    def from_record(cls, chunk: Chunk) -> "ChunkResponse":
        return cls(
            chunk_id=chunk.chunk_id,
            dataset_id=chunk.dataset_id,
            file_ids=chunk.file_ids,
            storage_ids=StorageIdsResponse(blob_store_id=chunk.storage_ids.blob_store_id),
        )


class AuthorResponse(BaseModel):
    """Response model for an author."""
    author_id: str
    name: str

    @classmethod
    def from_record(cls, author: Author) -> "AuthorResponse":
        return cls(author_id=author.author_id, name=author.name)


class PublishDatasetRequest(BaseModel):
    """
    Request model for publishing a dataset.

    authors and keywords are comma-separated lists.
    """
    address: Optional[str] = None
    signature: Optional[str] = None
    dataset_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    authors: Optional[str] = None
    keywords: Optional[str] = None
