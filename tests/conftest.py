"""Shared pytest fixtures for all tests."""

from typing import List

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from registry.database import Database
from registry.repositories import Chunk, Dataset, File, StorageIds
from registry.store import MetadataStore

OWNER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
OTHER_KEY = "0x8da4ef21b864d2cc526dbdb2a120bd2874c36c9d0a1fb7f8c63d7f7a8b41de8f"


class Wallet:
    """Test wallet that signs messages the way a browser wallet does."""

    def __init__(self, private_key: str):
        self._account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        """Lowercase address, as stored by the registry."""
        return self._account.address.lower()

    @property
    def checksum_address(self) -> str:
        return self._account.address

    def sign(self, message: str) -> str:
        signed = self._account.sign_message(encode_defunct(text=message))
        return "0x" + bytes(signed.signature).hex()


class FakeBlobStore:
    """In-memory blob store recording delete calls."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.deleted: List[str] = []
        self.delete_retries: List[int] = []

    async def store(self, data: bytes, filename: str) -> str:
        return f"blob-{len(data)}"

    async def delete(self, blob_id: str, retries: int = 5) -> bool:
        self.deleted.append(blob_id)
        self.delete_retries.append(retries)
        return self.succeed


@pytest.fixture
def owner():
    return Wallet(OWNER_KEY)


@pytest.fixture
def other_wallet():
    return Wallet(OTHER_KEY)


@pytest.fixture
def database(tmp_path):
    """
    Create a temporary database with schema for each test.
    """
    db = Database(str(tmp_path / "registry.sqlite3"))
    db.init_schema()
    return db


@pytest.fixture
def store(database):
    return MetadataStore(database)


@pytest.fixture
def blob_store():
    return FakeBlobStore()


def seed_dataset(
    store: MetadataStore,
    uploader: str,
    dataset_id: str = "D1",
    chunk_id: str = "C1",
    storage_id: str = "E1",
    file_ids=("F1", "F2"),
    published: bool = False,
    title: str = None,
) -> Dataset:
    """
    Insert a consistent dataset -> chunk -> files chain through the repositories.
    """
    dataset = Dataset(
        dataset_id=dataset_id,
        uploader=uploader,
        published=published,
        title=title,
        chunk_ids=[chunk_id],
    )
    store.datasets.insert(dataset)
    store.chunks.insert(
        Chunk(
            chunk_id=chunk_id,
            dataset_id=dataset_id,
            storage_ids=StorageIds(blob_store_id=storage_id),
            file_ids=list(file_ids),
        )
    )
    for file_id in file_ids:
        store.files.insert(
            File(file_id=file_id, chunk_id=chunk_id, name=f"{file_id}.csv", path=f"/data/{file_id}.csv", size=10)
        )
    return dataset
