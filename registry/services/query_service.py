"""Read-side queries over datasets, chunks, files and authors."""

from typing import Dict, List, Optional

from common.logging_config import get_logger
from registry.exceptions import NotFoundError
from registry.repositories import (
    Author,
    AuthorFilter,
    Chunk,
    ChunkFilter,
    Dataset,
    DatasetFilter,
    FileFilter,
)
from registry.store import MetadataStore
from registry.types import OwnedFile
from registry.utils import normalize_address

logger = get_logger(__name__)


class QueryService:
    def __init__(self, store: MetadataStore):
        self.store = store

    async def get_by_owner(self, address: str) -> List[Dataset]:
        return await self.store.get_datasets(DatasetFilter(uploader=normalize_address(address)))

    async def get_all_published(self) -> List[Dataset]:
        return await self.store.get_datasets(DatasetFilter(published=True))

    async def get_published_by_id(self, dataset_id: str) -> Optional[Dataset]:
        datasets = await self.store.get_datasets(DatasetFilter(dataset_id=dataset_id, published=True))
        return datasets[0] if datasets else None

    async def get_published_by_uploader(self, address: str) -> List[Dataset]:
        return await self.store.get_datasets(
            DatasetFilter(uploader=normalize_address(address), published=True)
        )

    async def search_published(self, text: str) -> List[Dataset]:
        return await self.store.get_datasets(DatasetFilter(published=True, search=text))

    async def get_chunks_of_published_dataset(self, dataset_id: str) -> List[Chunk]:
        """
        List a dataset's chunks, only if the dataset is published.

        Raises:
            NotFoundError: The dataset does not exist or is unpublished
        """
        await self._require_published(dataset_id)
        return await self.store.get_chunks(ChunkFilter(dataset_id=dataset_id))

    async def get_authors_of_published_dataset(self, dataset_id: str) -> List[Author]:
        """
        List a published dataset's authors in the order they were given.

        Raises:
            NotFoundError: The dataset does not exist or is unpublished
        """
        dataset = await self._require_published(dataset_id)
        authors = await self.store.get_authors(AuthorFilter(ids=dataset.author_ids))
        by_id = {author.author_id: author for author in authors}
        return [by_id[author_id] for author_id in dataset.author_ids if author_id in by_id]

    async def get_files_of_owner(self, address: str) -> List[OwnedFile]:
        """
        List every file in every dataset uploaded by address.

        Walks owner -> datasets -> chunks -> files and pairs each file with
        the blob store ID of the chunk that packs it. The join happens here,
        not in the store.
        """
        datasets = await self.get_by_owner(address)

        chunk_ids: List[str] = []
        for dataset in datasets:
            chunk_ids.extend(dataset.chunk_ids)

        chunks = await self.store.get_chunks(ChunkFilter(ids=chunk_ids))

        storage_id_by_file: Dict[str, str] = {}
        file_ids: List[str] = []
        for chunk in chunks:
            for file_id in chunk.file_ids:
                storage_id_by_file[file_id] = chunk.storage_ids.blob_store_id
                file_ids.append(file_id)

        files = await self.store.get_files(FileFilter(ids=file_ids))
        logger.debug(f"Resolved {len(files)} file(s) across {len(chunks)} chunk(s) for {address}")

        return [
            OwnedFile(file=file, storage_id=storage_id_by_file[file.file_id])
            for file in files
        ]

    async def _require_published(self, dataset_id: str) -> Dataset:
        dataset = await self.get_published_by_id(dataset_id)
        if dataset is None:
            raise NotFoundError(f"There is no published dataset with id {dataset_id}")
        return dataset
