from chat_combine.storage.base import StorageBackend
from chat_combine.storage.disk import DiskStorage
from chat_combine.storage.memory import InMemoryStorage

__all__ = [
    "StorageBackend",
    "DiskStorage",
    "InMemoryStorage",
]
