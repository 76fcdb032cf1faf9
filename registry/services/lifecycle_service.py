"""Publish and cascading-delete workflows for datasets."""

from typing import Awaitable, Callable, List, Optional

from common.logging_config import get_logger
from registry.auth import SignatureVerifier, build_delete_message, build_publish_message, verify_signature
from registry.blob_store_client import BlobStore
from registry.config import BLOB_DELETE_RETRIES, PUBLISH_UPDATE_ATTEMPTS
from registry.exceptions import (
    AuthorizationError,
    BlobStoreError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from registry.repositories import Author, ChunkFilter, DatasetFilter, DatasetPatch, FileFilter
from registry.store import MetadataStore
from registry.types import (
    DeleteRequest,
    DeletionReport,
    DeletionStep,
    PublishRequest,
    PublishResult,
    StepResult,
)
from registry.utils import generate_uuid, is_valid_address, normalize_address

logger = get_logger(__name__)


class DatasetLifecycleService:
    """
    Mutating workflows over datasets.

    The store offers no multi-record transactions, so both workflows are
    ordered sequences of single-kind store operations. Mutations are
    authorized by a wallet signature over a fixed message, never by session.
    """

    def __init__(
        self,
        store: MetadataStore,
        blob_store: BlobStore,
        verifier: SignatureVerifier = verify_signature,
        publish_attempts: int = PUBLISH_UPDATE_ATTEMPTS,
        blob_delete_retries: int = BLOB_DELETE_RETRIES,
    ):
        self.store = store
        self.blob_store = blob_store
        self.verifier = verifier
        self.publish_attempts = publish_attempts
        self.blob_delete_retries = blob_delete_retries

    async def publish_dataset(self, request: PublishRequest) -> PublishResult:
        """
        Publish an unpublished dataset owned by request.address.

        Authors are created first, then the dataset's published flag and all
        its metadata are written by one store update, so no reader sees a
        published dataset with stale metadata. Authors inserted before a
        failure are not rolled back.

        Raises:
            ValidationError: A required field is missing or the address is malformed
            AuthorizationError: The signature was not produced by the address
            StoreError: An author insert failed or every update attempt failed
        """
        missing = [
            name for name in ("address", "signature", "dataset_id", "title", "description")
            if not getattr(request, name)
        ]
        if not request.authors:
            missing.append("authors")
        if missing:
            logger.warning(f"Publish rejected: missing parameter(s) {', '.join(missing)}")
            raise ValidationError("Failed to publish dataset. Missing parameters.")
        if not is_valid_address(request.address):
            raise ValidationError("Address must start with 0x and be 42 characters long")

        uploader = normalize_address(request.address)
        message = build_publish_message(request.address, request.dataset_id)
        if not self.verifier(message, request.signature, uploader):
            logger.warning(f"Publish rejected: signer != address [dataset_id={request.dataset_id}]")
            raise AuthorizationError("Failed to publish dataset. Signer != address")

        author_ids: List[str] = []
        for name in request.authors:
            author = Author(author_id=generate_uuid(), name=name)
            try:
                inserted = await self.store.insert_author(author)
            except StoreError as e:
                logger.error(f"Author insert failed [dataset_id={request.dataset_id}]: {e}")
                raise StoreError("Failed to insert author into database") from e
            if not inserted:
                raise StoreError("Failed to insert author into database")
            author_ids.append(author.author_id)

        dataset_filter = DatasetFilter(dataset_id=request.dataset_id, uploader=uploader)
        patch = DatasetPatch(
            published=True,
            title=request.title,
            description=request.description,
            author_ids=author_ids,
            keywords=list(request.keywords),
        )

        for attempt in range(1, self.publish_attempts + 1):
            try:
                if await self.store.update_dataset(dataset_filter, patch):
                    logger.info(f"Published dataset {request.dataset_id} for {uploader}")
                    return PublishResult(dataset_id=request.dataset_id, uploader=uploader, author_ids=author_ids)
                logger.warning(
                    f"Publish update matched no dataset [dataset_id={request.dataset_id}] "
                    f"(attempt {attempt}/{self.publish_attempts})"
                )
            except StoreError as e:
                logger.warning(
                    f"Publish update failed [dataset_id={request.dataset_id}] "
                    f"(attempt {attempt}/{self.publish_attempts}): {e}"
                )

        logger.error(f"Failed to publish dataset {request.dataset_id} for {uploader}")
        raise StoreError("Failed to publish dataset.")

    async def delete_storage_group(self, request: DeleteRequest) -> DeletionReport:
        """
        Delete an unpublished dataset identified by the blob store ID of one
        of its chunks, together with all its files, chunks and blob.

        Children go first (files, chunks), then the dataset, then the blob,
        so an interruption leaves at worst a dataset whose children are gone.
        Every step is an idempotent delete-by-id; a failed step is logged and
        recorded and the remaining steps still run.

        The blob runs last, after the chunk naming its storage ID is gone. If
        the blob step fails, a repeated request finds no chunk and the blob
        can no longer be reached through this API.

        Raises:
            ValidationError: Missing parameters or malformed address
            AuthorizationError: The signature was not produced by the address
            NotFoundError: No chunk or owned dataset for the storage ID
            ConflictError: The dataset is published
            BlobStoreError: Metadata removal ran but the blob could not be deleted
        """
        if not request.address or not request.storage_id or not request.signature:
            raise ValidationError("Missing parameter(s)")
        if not is_valid_address(request.address):
            raise ValidationError("Address must start with 0x and be 42 characters long")

        owner = normalize_address(request.address)
        message = build_delete_message(request.address, request.storage_id)
        if not self.verifier(message, request.signature, owner):
            logger.warning(f"Delete rejected: signer != address [storage_id={request.storage_id}]")
            raise AuthorizationError("Failed to delete file metadata. Signer != address")

        if request.path:
            logger.info(
                f"Single-file deletion is not supported; deleting entire storage group "
                f"{request.storage_id} (requested path {request.path})"
            )

        chunks = await self.store.get_chunks(ChunkFilter(storage_id=request.storage_id))
        if not chunks:
            raise NotFoundError("Failed to delete file metadata. No corresponding chunks found.")

        dataset_id = chunks[0].dataset_id
        datasets = await self.store.get_datasets(DatasetFilter(dataset_id=dataset_id, uploader=owner))
        if not datasets:
            raise NotFoundError("Failed to delete file metadata. No corresponding datasets found.")

        dataset = datasets[0]
        if dataset.published:
            logger.warning(f"Refusing to delete published dataset {dataset_id}")
            raise ConflictError("Cannot delete published dataset")

        report = DeletionReport(dataset_id=dataset_id, storage_id=request.storage_id)
        chunk_ids = list(dataset.chunk_ids)

        await self._run_step(
            report, DeletionStep.FILES,
            lambda: self.store.delete_files(FileFilter(chunk_ids=chunk_ids)),
        )
        await self._run_step(
            report, DeletionStep.CHUNKS,
            lambda: self.store.delete_chunks(ChunkFilter(ids=chunk_ids)),
        )
        await self._run_step(
            report, DeletionStep.DATASET,
            lambda: self.store.delete_dataset(DatasetFilter(dataset_id=dataset_id)),
        )
        await self._run_step(
            report, DeletionStep.BLOB,
            lambda: self.blob_store.delete(request.storage_id, self.blob_delete_retries),
        )

        if report.failed_steps:
            logger.warning(
                f"Dataset {dataset_id} deletion incomplete; failed steps: "
                f"{', '.join(step.value for step in report.failed_steps)}. "
                f"Orphaned records may remain."
            )

        if not report.blob_deleted:
            raise BlobStoreError("An unknown error occurred. Failed to delete dataset.")

        logger.info(f"Deleted dataset {dataset_id} and blob {request.storage_id} for {owner}")
        return report

    async def _run_step(
        self,
        report: DeletionReport,
        step: DeletionStep,
        action: Callable[[], Awaitable[bool]],
    ) -> None:
        error: Optional[str] = None
        try:
            succeeded = bool(await action())
        except (StoreError, BlobStoreError) as e:
            succeeded = False
            error = str(e)

        if succeeded:
            logger.debug(f"Delete step {step.value} succeeded [dataset_id={report.dataset_id}]")
        else:
            logger.error(f"Delete step {step.value} failed [dataset_id={report.dataset_id}]: {error or 'no result'}")

        report.steps.append(StepResult(step=step, succeeded=succeeded, error=error))
