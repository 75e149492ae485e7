from linkdeck.storage.base import CollectionStore
from linkdeck.storage.local import JsonFileStore
from linkdeck.storage.memory import MemoryStore
from linkdeck.storage.sql import SqlStore

__all__ = [
    "CollectionStore",
    "JsonFileStore",
    "MemoryStore",
    "SqlStore",
]
