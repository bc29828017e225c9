"""Public return types for the chat_combine API."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from chat_combine.core.types import (
    ArchiveInspectionResult,
    CompatibilityWarning,
    ConversationIdentity,
    MergeStats,
)


@dataclass(frozen=True)
class ArchiveInput:
    """Raw bytes of one uploaded archive plus the name the user sees."""

    name: str
    data: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> ArchiveInput:
        p = Path(path)
        return cls(name=p.name, data=p.read_bytes())


@dataclass(frozen=True)
class InspectionFailure:
    name: str
    message: str


@dataclass
class InspectionBatch:
    """Result from :meth:`ChatCombine.inspect`."""

    results: list[ArchiveInspectionResult] = field(default_factory=list)
    failures: list[InspectionFailure] = field(default_factory=list)

    @property
    def valid(self) -> list[ArchiveInspectionResult]:
        return [r for r in self.results if r.is_valid]

    @property
    def invalid(self) -> list[ArchiveInspectionResult]:
        return [r for r in self.results if not r.is_valid]

    @property
    def ready(self) -> bool:
        """More than one archive and every one of them usable."""
        return (
            len(self.results) > 1
            and not self.failures
            and all(r.is_valid for r in self.results)
        )


@dataclass
class CombineResult:
    """Result from :meth:`ChatCombine.combine`."""

    blob: bytes
    filename: str
    identity: ConversationIdentity
    stats: MergeStats
    total_files: int
    folders: list[str] = field(default_factory=list)
    warnings: list[CompatibilityWarning] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
