"""Pydantic schemas for API requests and responses."""

from registry.schemas.common import ErrorResponse, MessageResponse
from registry.schemas.datasets import (
    AuthorResponse,
    ChunkResponse,
    DatasetResponse,
    PublishDatasetRequest,
    StorageIdsResponse,
)
from registry.schemas.files import FileMetadataResponse

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "AuthorResponse",
    "ChunkResponse",
    "DatasetResponse",
    "PublishDatasetRequest",
    "StorageIdsResponse",
    "FileMetadataResponse",
]
