"""Dataset, chunk, file and author metadata API routes."""

from typing import Awaitable, List, Optional, TypeVar, Union

from fastapi import APIRouter, Depends, Query

from common.logging_config import get_logger
from registry.dependencies import get_lifecycle_service, get_query_service
from registry.exceptions import NotFoundError, StoreError, ValidationError
from registry.schemas import (
    AuthorResponse,
    ChunkResponse,
    DatasetResponse,
    FileMetadataResponse,
    MessageResponse,
    PublishDatasetRequest,
)
from registry.services.lifecycle_service import DatasetLifecycleService
from registry.services.query_service import QueryService
from registry.types import DeleteRequest, PublishRequest
from registry.utils import parse_csv

logger = get_logger(__name__)

router = APIRouter(prefix="/metadata", tags=["Metadata"])

T = TypeVar("T")


async def _or_not_found(query: Awaitable[T], message: str) -> T:
    """Report a store failure on a read endpoint as not found."""
    try:
        return await query
    except StoreError as e:
        logger.error(f"{message}: {e}")
        raise NotFoundError(message) from e


@router.get("/datasets", response_model=List[DatasetResponse])
async def list_datasets_by_owner(
    address: str = Query(..., description="Uploader address"),
    query_service: QueryService = Depends(get_query_service),
):
    """
    Get metadata for every dataset, published or not, uploaded by an address.
    Does not require a signature.

    Raises:
        - 400: Missing address
        - 404: No datasets for the address
    """
    message = "No datasets for the specified address"
    datasets = await _or_not_found(query_service.get_by_owner(address), message)
    if not datasets:
        raise NotFoundError(message)
    return [DatasetResponse.from_record(d) for d in datasets]


@router.get("/datasets/published", response_model=Union[DatasetResponse, List[DatasetResponse]])
async def get_published_datasets(
    id: Optional[str] = Query(None, description="Return only this published dataset"),
    query_service: QueryService = Depends(get_query_service),
):
    """
    Get every published dataset, or a single one when id is given.

    Raises:
        - 404: No published dataset (with the given id)
    """
    if id:
        message = "There is no published dataset with the specified id"
        dataset = await _or_not_found(query_service.get_published_by_id(id), message)
        if dataset is None:
            raise NotFoundError(message)
        return DatasetResponse.from_record(dataset)

    message = "There are no published datasets"
    datasets = await _or_not_found(query_service.get_all_published(), message)
    if not datasets:
        raise NotFoundError(message)
    return [DatasetResponse.from_record(d) for d in datasets]


@router.get("/datasets/published/by-uploader", response_model=List[DatasetResponse])
async def list_published_by_uploader(
    uploader: str = Query(..., description="Uploader address"),
    query_service: QueryService = Depends(get_query_service),
):
    message = f"Found no datasets whose uploader is {uploader.lower()}"
    datasets = await _or_not_found(query_service.get_published_by_uploader(uploader), message)
    if not datasets:
        raise NotFoundError(message)
    return [DatasetResponse.from_record(d) for d in datasets]


@router.get("/datasets/published/search", response_model=List[DatasetResponse])
async def search_published_datasets(
    search: str = Query(..., min_length=1, description="Search text"),
    query_service: QueryService = Depends(get_query_service),
):
    """
    Full-text search over title, description and keywords of published datasets.

    Returns:
        - Matching datasets, possibly none

    Raises:
        - 400: Missing search text
        - 404: Search failed
    """
    datasets = await _or_not_found(query_service.search_published(search), "No published datasets found")
    return [DatasetResponse.from_record(d) for d in datasets]


@router.post("/datasets/publish", response_model=MessageResponse)
async def publish_dataset(
    request: PublishDatasetRequest,
    lifecycle_service: DatasetLifecycleService = Depends(get_lifecycle_service),
):
    """
    Publish a dataset.

    Parameters:
        - address: Uploader address
        - signature: Signature by address over address + dataset_id
        - dataset_id: Dataset to publish
        - title, description: Dataset metadata
        - authors: Comma-separated author names
        - keywords: Comma-separated keywords (optional)

    Raises:
        - 400: Missing parameters, bad signature, or the dataset could not be published
    """
    result = await lifecycle_service.publish_dataset(
        PublishRequest(
            address=request.address or "",
            signature=request.signature or "",
            dataset_id=request.dataset_id or "",
            title=request.title or "",
            description=request.description or "",
            authors=parse_csv(request.authors),
            keywords=parse_csv(request.keywords),
        )
    )
    return MessageResponse(
        message=f"Successfully published dataset {result.dataset_id} for {result.uploader}"
    )


@router.get("/datasets/published/chunks", response_model=List[ChunkResponse])
async def list_published_chunks(
    dataset_id: str = Query(..., description="Parent dataset ID"),
    query_service: QueryService = Depends(get_query_service),
):
    """
    Get a published dataset's chunks.

    Raises:
        - 404: Dataset not found or not published
    """
    message = f"Found no chunks whose parent dataset is {dataset_id}"
    try:
        chunks = await query_service.get_chunks_of_published_dataset(dataset_id)
    except (NotFoundError, StoreError) as e:
        logger.warning(f"{message}: {e}")
        raise NotFoundError(message) from e
    return [ChunkResponse.from_record(c) for c in chunks]


@router.get("/datasets/published/authors", response_model=List[AuthorResponse])
async def list_published_authors(
    dataset_id: str = Query(..., description="Dataset ID"),
    query_service: QueryService = Depends(get_query_service),
):
    """
    Get a published dataset's authors in publication order.

    Raises:
        - 400: Dataset has no authors
        - 404: Dataset not found or not published
    """
    authors = await query_service.get_authors_of_published_dataset(dataset_id)
    if not authors:
        raise ValidationError("There are no authors for the specified dataset")
    return [AuthorResponse.from_record(a) for a in authors]


@router.get("/files", response_model=List[FileMetadataResponse])
async def list_files_by_owner(
    address: str = Query(..., description="Uploader address"),
    query_service: QueryService = Depends(get_query_service),
):
    """
    Get metadata for every file uploaded by an address, each with the blob
    store ID of the archive that holds it. Does not require a signature.

    Raises:
        - 400: Missing address or lookup failed
    """
    owned_files = await query_service.get_files_of_owner(address)
    return [FileMetadataResponse.from_owned_file(f) for f in owned_files]


@router.delete("/files", response_model=MessageResponse)
async def delete_file_metadata(
    address: str = Query(..., description="Uploader address"),
    storage_id: str = Query(..., description="Blob store ID of the archive to delete"),
    signature: str = Query(..., description="Signature over the request path and query"),
    path: Optional[str] = Query(None, description="Accepted but ignored; the whole archive is deleted"),
    lifecycle_service: DatasetLifecycleService = Depends(get_lifecycle_service),
):
    """
    Delete an unpublished dataset with all its files, chunks and its archive.

    The signature must be over "/metadata/files?address=<address>&storage_id=<storage_id>".

    Raises:
        - 400: Missing or invalid parameters, bad signature, published dataset, or blob deletion failed
        - 404: No dataset for the storage ID
    """
    await lifecycle_service.delete_storage_group(
        DeleteRequest(address=address, storage_id=storage_id, signature=signature, path=path)
    )
    return MessageResponse(
        message=f"Successfully deleted file metadata for file with storage_id: {storage_id}"
    )
