"""Tests for read-side dataset queries."""

import pytest

from conftest import seed_dataset
from registry.exceptions import NotFoundError
from registry.repositories import Author, DatasetFilter, DatasetPatch
from registry.services.query_service import QueryService


@pytest.fixture
def query_service(store):
    return QueryService(store)


def publish(store, dataset_id, author_names=(), title="Title", description="Description", keywords=()):
    author_ids = []
    for index, name in enumerate(author_names):
        author_id = f"{dataset_id}-author-{index}"
        store.authors.insert(Author(author_id=author_id, name=name))
        author_ids.append(author_id)
    store.datasets.update(
        DatasetFilter(dataset_id=dataset_id),
        DatasetPatch(
            published=True,
            title=title,
            description=description,
            author_ids=author_ids,
            keywords=list(keywords),
        ),
    )


class TestDatasetQueries:
    """Test dataset lookups by owner, publication and text."""

    @pytest.mark.asyncio
    async def test_get_by_owner_includes_unpublished(self, query_service, store, owner):
        seed_dataset(store, owner.address)
        seed_dataset(store, owner.address, dataset_id="D2", chunk_id="C2", storage_id="E2", published=True)

        datasets = await query_service.get_by_owner(owner.address)

        assert [d.dataset_id for d in datasets] == ["D1", "D2"]

    @pytest.mark.asyncio
    async def test_get_by_owner_normalizes_address_case(self, query_service, store, owner):
        seed_dataset(store, owner.address)

        datasets = await query_service.get_by_owner(owner.checksum_address)

        assert [d.dataset_id for d in datasets] == ["D1"]

    @pytest.mark.asyncio
    async def test_get_by_owner_unknown_address(self, query_service, store, owner, other_wallet):
        seed_dataset(store, owner.address)

        assert await query_service.get_by_owner(other_wallet.address) == []

    @pytest.mark.asyncio
    async def test_get_all_published_excludes_unpublished(self, query_service, store, owner, other_wallet):
        seed_dataset(store, owner.address)
        seed_dataset(store, owner.address, dataset_id="D2", chunk_id="C2", storage_id="E2", published=True)
        seed_dataset(store, other_wallet.address, dataset_id="D3", chunk_id="C3", storage_id="E3", published=True)

        datasets = await query_service.get_all_published()

        assert [d.dataset_id for d in datasets] == ["D2", "D3"]

    @pytest.mark.asyncio
    async def test_get_published_by_id(self, query_service, store, owner):
        seed_dataset(store, owner.address, published=True)
        seed_dataset(store, owner.address, dataset_id="D2", chunk_id="C2", storage_id="E2")

        assert (await query_service.get_published_by_id("D1")).dataset_id == "D1"
        assert await query_service.get_published_by_id("D2") is None
        assert await query_service.get_published_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_get_published_by_uploader(self, query_service, store, owner, other_wallet):
        seed_dataset(store, owner.address, published=True)
        seed_dataset(store, owner.address, dataset_id="D2", chunk_id="C2", storage_id="E2")
        seed_dataset(store, other_wallet.address, dataset_id="D3", chunk_id="C3", storage_id="E3", published=True)

        datasets = await query_service.get_published_by_uploader(owner.checksum_address)

        assert [d.dataset_id for d in datasets] == ["D1"]

    @pytest.mark.asyncio
    async def test_search_only_returns_published_matches(self, query_service, store, owner):
        seed_dataset(store, owner.address)
        seed_dataset(store, owner.address, dataset_id="D2", chunk_id="C2", storage_id="E2")
        publish(store, "D2", title="Arctic ice cover", keywords=("climate",))
        store.datasets.update(DatasetFilter(dataset_id="D1"), DatasetPatch(title="Arctic draft"))

        assert [d.dataset_id for d in await query_service.search_published("arctic")] == ["D2"]
        assert [d.dataset_id for d in await query_service.search_published("climate")] == ["D2"]
        assert await query_service.search_published("unrelated") == []


class TestChildQueries:
    """Test chunk, author and file lookups."""

    @pytest.mark.asyncio
    async def test_chunks_of_published_dataset(self, query_service, store, owner):
        seed_dataset(store, owner.address, published=True)

        chunks = await query_service.get_chunks_of_published_dataset("D1")

        assert [c.chunk_id for c in chunks] == ["C1"]
        assert chunks[0].storage_ids.blob_store_id == "E1"
        assert chunks[0].file_ids == ["F1", "F2"]

    @pytest.mark.asyncio
    async def test_chunks_of_unpublished_dataset_are_hidden(self, query_service, store, owner):
        seed_dataset(store, owner.address)

        with pytest.raises(NotFoundError):
            await query_service.get_chunks_of_published_dataset("D1")

    @pytest.mark.asyncio
    async def test_authors_follow_publication_order(self, query_service, store, owner):
        seed_dataset(store, owner.address)
        publish(store, "D1", author_names=("Zoe", "Adam", "Mia"))

        authors = await query_service.get_authors_of_published_dataset("D1")

        assert [a.name for a in authors] == ["Zoe", "Adam", "Mia"]

    @pytest.mark.asyncio
    async def test_authors_of_unpublished_dataset_are_hidden(self, query_service, store, owner):
        seed_dataset(store, owner.address)

        with pytest.raises(NotFoundError):
            await query_service.get_authors_of_published_dataset("D1")

    @pytest.mark.asyncio
    async def test_files_of_owner_carry_storage_id(self, query_service, store, owner):
        seed_dataset(store, owner.address)
        seed_dataset(store, owner.address, dataset_id="D2", chunk_id="C2", storage_id="E2", file_ids=("F3",))

        owned = await query_service.get_files_of_owner(owner.address)

        storage_by_file = {o.file.file_id: o.storage_id for o in owned}
        assert storage_by_file == {"F1": "E1", "F2": "E1", "F3": "E2"}
        assert next(o for o in owned if o.file.file_id == "F1").file.path == "/data/F1.csv"

    @pytest.mark.asyncio
    async def test_files_of_owner_excludes_other_uploaders(self, query_service, store, owner, other_wallet):
        seed_dataset(store, owner.address)
        seed_dataset(store, other_wallet.address, dataset_id="D2", chunk_id="C2", storage_id="E2", file_ids=("F3",))

        owned = await query_service.get_files_of_owner(other_wallet.address)

        assert [o.file.file_id for o in owned] == ["F3"]

    @pytest.mark.asyncio
    async def test_files_of_unknown_owner(self, query_service, other_wallet):
        assert await query_service.get_files_of_owner(other_wallet.address) == []
