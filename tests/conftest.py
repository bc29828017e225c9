from __future__ import annotations

import uuid
from collections.abc import Callable

import pytest

from chat_combine import ChatCombine
from chat_combine.archive.inspector import inspect_archive
from chat_combine.core.types import ArchiveInspectionResult
from chat_combine.package.recency import PathLengthScorer
from chat_combine.storage.memory import InMemoryStorage

AddArchive = Callable[[str, bytes], ArchiveInspectionResult]


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def add_archive(storage: InMemoryStorage) -> AddArchive:
    """Store raw archive bytes and return their inspection result."""

    def _add(name: str, data: bytes) -> ArchiveInspectionResult:
        key = f"{uuid.uuid4()}/{name}"
        storage.write(key, data)
        return inspect_archive(data, name, source_key=key)

    return _add


@pytest.fixture()
def cc(storage: InMemoryStorage) -> ChatCombine:
    return ChatCombine(storage, scorer=PathLengthScorer())
