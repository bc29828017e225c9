from __future__ import annotations

from chat_combine.storage.base import StorageBackend


class InMemoryStorage(StorageBackend):
    """Dict-backed storage; lives for one session only."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def write(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)

    def read(self, key: str) -> bytes:
        return self._blobs[key]

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)
