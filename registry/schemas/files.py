"""Pydantic schemas for file metadata endpoints."""

from pydantic import BaseModel

from registry.types import OwnedFile


class FileMetadataResponse(BaseModel):
    """Response model for file metadata with its blob store ID."""
    file_id: str
    chunk_id: str
    name: str
    path: str
    size: int
    storage_id: str

    @classmethod
    def from_owned_file(cls, owned: OwnedFile) -> "FileMetadataResponse":
        return cls(
            file_id=owned.file.file_id,
            chunk_id=owned.file.chunk_id,
            name=owned.file.name,
            path=owned.file.path,
            size=owned.file.size,
            storage_id=owned.storage_id,
        )
