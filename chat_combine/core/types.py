from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


def missing_log_reason(log_filename: str = "result.json") -> str:
    return (
        f"No {log_filename} found in the archive. "
        "This may not be a valid Telegram export."
    )


class InspectionStatus(StrEnum):
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class TopLevelItem:
    """One row of an archive's top-level listing."""

    name: str
    path: str
    is_directory: bool
    size: int = 0
    file_count: int | None = None


@dataclass(frozen=True)
class DateSpan:
    """Inclusive range of message timestamps."""

    start: datetime
    end: datetime

    def overlaps(self, other: DateSpan) -> bool:
        return self.start <= other.end and other.start <= self.end

    def union(self, other: DateSpan) -> DateSpan:
        return DateSpan(min(self.start, other.start), max(self.end, other.end))

    def label(self) -> str:
        return f"{self.start.date().isoformat()} to {self.end.date().isoformat()}"


@dataclass(frozen=True)
class LogAnalysis:
    """Display summary of one message log."""

    chat_id: int | None
    chat_name: str | None
    chat_type: str | None
    message_count: int
    date_span: DateSpan | None = None

    def date_range_label(self) -> str:
        return self.date_span.label() if self.date_span else "unknown"


@dataclass(frozen=True)
class ArchiveInspectionResult:
    """Outcome of inspecting one uploaded archive.

    ``root_prefix`` is either empty or ends with ``/``; every path read from
    the archive afterwards is interpreted relative to it.
    ``message_log_path`` is the raw in-archive path, not root-adjusted.
    """

    identifier: str
    display_name: str
    source_key: str
    root_prefix: str = ""
    message_log_path: str | None = None
    entries: tuple[str, ...] = ()
    top_level_summary: tuple[TopLevelItem, ...] = ()
    status: InspectionStatus = InspectionStatus.VALID
    reason: str | None = None
    analysis_summary: LogAnalysis | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == InspectionStatus.VALID

    def with_analysis(self, analysis: LogAnalysis) -> ArchiveInspectionResult:
        return dataclasses.replace(self, analysis_summary=analysis)


@dataclass(frozen=True)
class ConversationIdentity:
    chat_id: int | None
    chat_name: str | None
    chat_type: str | None


@dataclass(frozen=True)
class CompatibilityWarning:
    code: str
    message: str
    archives: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompatibilityReport:
    """Result of checking that several archives belong to one conversation."""

    identity: ConversationIdentity
    warnings: list[CompatibilityWarning] = field(default_factory=list)
    analyses: list[LogAnalysis] = field(default_factory=list)

    @property
    def has_overlap(self) -> bool:
        return any(w.code == "overlapping_time_ranges" for w in self.warnings)

    @property
    def total_messages(self) -> int:
        return sum(a.message_count for a in self.analyses)

    @property
    def date_span(self) -> DateSpan | None:
        span: DateSpan | None = None
        for analysis in self.analyses:
            if analysis.date_span is None:
                continue
            span = (
                analysis.date_span if span is None else span.union(analysis.date_span)
            )
        return span


@dataclass(frozen=True)
class MessageRecord:
    """A message with the few fields the merge engine looks at.

    ``raw`` is the message exactly as it appeared in its log and is what gets
    serialized; nothing else about it is interpreted.
    """

    id: int
    edited: bool
    date: str | None
    raw: Mapping[str, Any] = field(compare=False, repr=False)


@dataclass(frozen=True)
class MergedLog:
    chat_name: str | None
    chat_type: str | None
    chat_id: int | None
    messages: tuple[MessageRecord, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.chat_name,
            "type": self.chat_type,
            "id": self.chat_id,
            "messages": [dict(m.raw) for m in self.messages],
        }

    def to_json_bytes(self, indent: int | None = 1) -> bytes:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False).encode(
            "utf-8"
        )


@dataclass(frozen=True)
class MergeStats:
    total_input_messages: int = 0
    unique_message_count: int = 0
    duplicates_removed: int = 0


@dataclass(frozen=True)
class MergeOutcome:
    log: MergedLog
    stats: MergeStats


@dataclass
class FileWinner:
    """Current winning copy of one root-relative path during packaging."""

    source: ArchiveInspectionResult
    entry_name: str
    recency_score: float


@dataclass(frozen=True)
class PackageResult:
    blob: bytes
    total_files: int
    folders: frozenset[str]
    message_log_written: bool = True
