"""Merge the message logs of several exports of one conversation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from chat_combine.core.exceptions import IdentityMismatchError
from chat_combine.core.types import (
    ArchiveInspectionResult,
    MergedLog,
    MergeOutcome,
    MergeStats,
    MessageRecord,
)
from chat_combine.merge.compatibility import require_mergeable
from chat_combine.merge.log import ParsedLog, load_log
from chat_combine.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def should_replace(kept: MessageRecord, candidate: MessageRecord) -> bool:
    """First seen wins, unless only the newcomer carries an edit marker."""
    return candidate.edited and not kept.edited


def dedupe_messages(
    streams: Iterable[Iterable[MessageRecord]],
) -> list[MessageRecord]:
    """Deduplicate across all streams by id and return records sorted by id.

    Streams are consumed in order, and each stream in its own order; that
    order decides which copy of an id counts as seen first.
    """
    kept: dict[int, MessageRecord] = {}
    for stream in streams:
        for message in stream:
            current = kept.get(message.id)
            if current is None or should_replace(current, message):
                kept[message.id] = message
    return sorted(kept.values(), key=lambda m: m.id)


def merge_logs(logs: Sequence[ParsedLog]) -> MergeOutcome:
    """Combine already-parsed logs into one :class:`MergedLog`.

    Identity fields come from the first log.

    Raises:
        IdentityMismatchError: a later log belongs to another chat.
        ValueError: *logs* is empty.
    """
    if not logs:
        raise ValueError("No message logs to merge")

    reference = logs[0]
    for log in logs[1:]:
        if log.chat_id != reference.chat_id:
            raise IdentityMismatchError(reference.chat_id, log.chat_id, log.archive)

    total = sum(len(log.messages) for log in logs)
    messages = dedupe_messages(log.messages for log in logs)

    stats = MergeStats(
        total_input_messages=total,
        unique_message_count=len(messages),
        duplicates_removed=max(0, total - len(messages)),
    )
    logger.info(
        "Merged %d logs: %d input messages, %d unique, %d duplicates removed",
        len(logs),
        stats.total_input_messages,
        stats.unique_message_count,
        stats.duplicates_removed,
    )

    merged = MergedLog(
        chat_name=reference.chat_name,
        chat_type=reference.chat_type,
        chat_id=reference.chat_id,
        messages=tuple(messages),
    )
    return MergeOutcome(log=merged, stats=stats)


def merge_archives(
    results: Sequence[ArchiveInspectionResult], storage: StorageBackend
) -> MergeOutcome:
    """Load every archive's log and merge them.

    Logs are parsed in the order *results* were supplied. Any parse failure
    aborts the whole merge.
    """
    require_mergeable(results)

    logs: list[ParsedLog] = []
    for result in results:
        log = load_log(storage, result)
        if logs and log.chat_id != logs[0].chat_id:
            raise IdentityMismatchError(logs[0].chat_id, log.chat_id, log.archive)
        logs.append(log)

    return merge_logs(logs)
