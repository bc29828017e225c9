"""Locate an export's root inside an uploaded archive and list what it holds."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import Counter
from collections.abc import Iterable, Sequence
from zipfile import ZipInfo

from chat_combine.archive.paths import (
    SEPARATOR,
    find_message_log,
    root_prefix_for,
    strip_root,
    top_segment,
    visible_entries,
)
from chat_combine.archive.source import load_zip, read_source
from chat_combine.config import CombineSettings
from chat_combine.core.exceptions import ChatCombineError
from chat_combine.core.types import (
    ArchiveInspectionResult,
    InspectionStatus,
    TopLevelItem,
    missing_log_reason,
)
from chat_combine.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def inspect_archive(
    data: bytes,
    display_name: str,
    *,
    source_key: str,
    settings: CombineSettings | None = None,
    identifier: str | None = None,
) -> ArchiveInspectionResult:
    """Inspect one raw archive.

    The first ``result.json`` found (at any depth) fixes the root prefix;
    everything outside that root is ignored. An archive without a log is
    returned as ``INVALID`` rather than raising.

    Raises:
        ArchiveDecodeError: *data* is not a readable zip container.
    """
    settings = settings or CombineSettings()
    identifier = identifier or str(uuid.uuid4())

    with load_zip(data, display_name) as zf:
        infos = visible_entries(zf.infolist(), settings)

    log_path = find_message_log(infos, settings.log_filename)
    if log_path is None:
        logger.warning("No %s found in %s", settings.log_filename, display_name)
        return ArchiveInspectionResult(
            identifier=identifier,
            display_name=display_name,
            source_key=source_key,
            status=InspectionStatus.INVALID,
            reason=missing_log_reason(settings.log_filename),
        )

    root_prefix = root_prefix_for(log_path)

    entries: list[str] = []
    folder_counts: Counter[str] = Counter()
    for info in infos:
        relative = strip_root(info.filename, root_prefix)
        if not relative or info.is_dir():
            continue
        entries.append(relative)
        if SEPARATOR in relative:
            folder_counts[top_segment(relative)] += 1

    summary = build_top_level_summary(infos, root_prefix, folder_counts)
    logger.info(
        "Inspected %s: root=%r, %d files, %d top-level items",
        display_name,
        root_prefix,
        len(entries),
        len(summary),
    )

    return ArchiveInspectionResult(
        identifier=identifier,
        display_name=display_name,
        source_key=source_key,
        root_prefix=root_prefix,
        message_log_path=log_path,
        entries=tuple(entries),
        top_level_summary=summary,
        status=InspectionStatus.VALID,
    )


def build_top_level_summary(
    infos: Iterable[ZipInfo],
    root_prefix: str,
    folder_counts: Counter[str],
) -> tuple[TopLevelItem, ...]:
    """One item per distinct top-level name, directories first.

    The first entry seen for a name decides whether it is listed as a file or
    a directory; later entries with the same name are skipped.
    """
    seen: set[str] = set()
    items: list[TopLevelItem] = []

    for info in infos:
        relative = strip_root(info.filename, root_prefix)
        if not relative:
            continue
        parts = relative.split(SEPARATOR)
        name = parts[0]
        if not name or name in seen:
            continue
        seen.add(name)

        if len(parts) == 1 and not info.is_dir():
            items.append(
                TopLevelItem(
                    name=name,
                    path=relative,
                    is_directory=False,
                    size=info.file_size or 0,
                )
            )
        else:
            items.append(
                TopLevelItem(
                    name=name,
                    path=name + SEPARATOR,
                    is_directory=True,
                    size=0,
                    file_count=folder_counts.get(name, 0),
                )
            )

    items.sort(key=lambda item: (not item.is_directory, item.name))
    return tuple(items)


class ArchiveInspector:
    """Inspects archives held in a :class:`StorageBackend`.

    Usage::

        inspector = ArchiveInspector(storage)
        outcomes = await inspector.inspect_many([("k1", "a.zip"), ("k2", "b.zip")])
    """

    def __init__(
        self, storage: StorageBackend, settings: CombineSettings | None = None
    ) -> None:
        self._storage = storage
        self._settings = settings or CombineSettings()

    def inspect(
        self, source_key: str, display_name: str, identifier: str | None = None
    ) -> ArchiveInspectionResult:
        data = read_source(self._storage, source_key, display_name)
        return inspect_archive(
            data,
            display_name,
            source_key=source_key,
            settings=self._settings,
            identifier=identifier,
        )

    async def inspect_many(
        self, sources: Sequence[tuple[str, str]]
    ) -> list[ArchiveInspectionResult | ChatCombineError]:
        """Inspect ``(source_key, display_name)`` pairs concurrently.

        Each archive fails on its own: a :class:`ChatCombineError` is returned
        in that archive's slot instead of aborting the others. Outcomes keep
        the input order.
        """
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self.inspect, key, name) for key, name in sources),
            return_exceptions=True,
        )
        results: list[ArchiveInspectionResult | ChatCombineError] = []
        for (_, name), outcome in zip(sources, outcomes, strict=True):
            if isinstance(outcome, ChatCombineError):
                logger.error("Inspection of %s failed: %s", name, outcome)
                results.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)
        return results
