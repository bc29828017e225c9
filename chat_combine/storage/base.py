from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract base class for the raw-archive storage backends.

    Missing keys raise ``KeyError`` from :meth:`read`.
    """

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Write data to the given key."""
        ...

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Read data from the given key."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the given key; deleting a missing key is a no-op."""
        ...
