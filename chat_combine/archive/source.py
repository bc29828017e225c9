from __future__ import annotations

import io
import logging
import zipfile
import zlib

from chat_combine.core.exceptions import ArchiveDecodeError, MissingSourceError
from chat_combine.core.types import ArchiveInspectionResult
from chat_combine.storage.base import StorageBackend

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (zipfile.BadZipFile, EOFError, OSError)

# Raised while decompressing a member whose container opened fine.
MEMBER_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError)


def load_zip(data: bytes, archive: str) -> zipfile.ZipFile:
    """Open raw bytes as a zip container, mapping failures to ArchiveDecodeError."""
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except _DECODE_ERRORS as exc:
        raise ArchiveDecodeError(archive, str(exc)) from exc


def read_source(storage: StorageBackend, key: str, archive: str) -> bytes:
    try:
        return storage.read(key)
    except KeyError as exc:
        logger.error("Raw bytes for %s are gone (key %s)", archive, key)
        raise MissingSourceError(archive, key) from exc


def open_source(
    storage: StorageBackend, result: ArchiveInspectionResult
) -> zipfile.ZipFile:
    """Re-open an inspected archive from storage."""
    data = read_source(storage, result.source_key, result.display_name)
    return load_zip(data, result.display_name)
