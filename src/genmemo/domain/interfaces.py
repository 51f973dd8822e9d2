"""
Ports (interfaces) for the storage and remote collaborators.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from .models import ProgressRecord, RemoteResult

RecordKey = tuple[str, str, int]  # (namespace, collection_id, item_key)


class RecordStore(ABC):
    """
    Port for durable key-value records and persisted sets.

    All operations are synchronous from the core's point of view. Set
    operations must be atomic with respect to each other: `set_remove` is a
    set difference, never a read-modify-write that could drop a concurrent
    `set_add` of another member.

    Implementations:
        - InMemoryRecordStore: dicts guarded by a lock.
        - JsonFileRecordStore: one JSON document on disk.
    """

    @abstractmethod
    def get(self, key: RecordKey) -> dict[str, Any] | None:
        pass

    @abstractmethod
    def put(self, key: RecordKey, value: dict[str, Any]) -> None:
        pass

    @abstractmethod
    def put_many(self, entries: dict[RecordKey, dict[str, Any]]) -> None:
        """Write several records as a single operation."""
        pass

    @abstractmethod
    def delete(self, key: RecordKey) -> None:
        pass

    @abstractmethod
    def keys(self, namespace: str, collection_id: str) -> list[int]:
        """Item keys stored under a namespace and collection."""
        pass

    @abstractmethod
    def set_members(self, name: str) -> frozenset[str]:
        pass

    @abstractmethod
    def set_add(self, name: str, members: Iterable[str]) -> None:
        pass

    @abstractmethod
    def set_remove(self, name: str, members: Iterable[str]) -> None:
        pass

    @abstractmethod
    def set_clear(self, name: str) -> None:
        pass


class ProgressChannel(ABC):
    """
    Port for the remote progress authority.

    Both calls return a result value and never raise for remote or
    transport errors.

    Implementations:
        - HttpProgressChannel: GenMemo web API over httpx.
    """

    @abstractmethod
    async def upload_progress(
        self, collection_id: str, batch: list[ProgressRecord]
    ) -> RemoteResult:
        pass

    @abstractmethod
    async def download_progress(self, collection_id: str) -> RemoteResult:
        pass

    async def close(self) -> None:
        """Release transport resources. Default: nothing to release."""
        return None


class SessionProvider(ABC):
    """Port exposing the current authentication token, if any."""

    @property
    @abstractmethod
    def token(self) -> str | None:
        pass

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)
