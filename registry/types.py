"""Registry-specific data type definitions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from registry.repositories import File


@dataclass(frozen=True)
class PublishRequest:
    """
    Everything a client submits to publish a dataset.

    ``address`` is kept exactly as submitted because it is part of the
    signed message.
    """
    address: str
    signature: str
    dataset_id: str
    title: str
    description: str
    authors: List[str]
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PublishResult:
    dataset_id: str
    uploader: str
    author_ids: List[str]


@dataclass(frozen=True)
class DeleteRequest:
    address: str
    storage_id: str
    signature: str
    path: Optional[str] = None


class DeletionStep(str, Enum):
    FILES = "files"
    CHUNKS = "chunks"
    DATASET = "dataset"
    BLOB = "blob"


@dataclass(frozen=True)
class StepResult:
    step: DeletionStep
    succeeded: bool
    error: Optional[str] = None


@dataclass
class DeletionReport:
    """
    Outcome of each step of a cascading delete, in execution order.
    """
    dataset_id: str
    storage_id: str
    steps: List[StepResult] = field(default_factory=list)

    @property
    def blob_deleted(self) -> bool:
        return any(s.step is DeletionStep.BLOB and s.succeeded for s in self.steps)

    @property
    def failed_steps(self) -> List[DeletionStep]:
        return [s.step for s in self.steps if not s.succeeded]


@dataclass(frozen=True)
class OwnedFile:
    """A file together with the blob store ID of the chunk that packs it."""
    file: File
    storage_id: str
