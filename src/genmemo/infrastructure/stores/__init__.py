# Record store adapters
from .json_store import JsonFileRecordStore
from .memory_store import InMemoryRecordStore

__all__ = ["InMemoryRecordStore", "JsonFileRecordStore"]
