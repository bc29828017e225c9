from __future__ import annotations

import asyncio
import logging
import re
import uuid
from collections.abc import Sequence
from pathlib import PurePosixPath
from typing import Any

from chat_combine.archive.inspector import ArchiveInspector
from chat_combine.config import CombineSettings, parse_config
from chat_combine.core.exceptions import ChatCombineError, CombineError
from chat_combine.core.types import (
    ArchiveInspectionResult,
    CompatibilityReport,
    MergedLog,
    MergeOutcome,
    PackageResult,
)
from chat_combine.facade.types import (
    ArchiveInput,
    CombineResult,
    InspectionBatch,
    InspectionFailure,
)
from chat_combine.merge.compatibility import check_compatibility
from chat_combine.merge.engine import merge_archives
from chat_combine.merge.log import analyze_archive
from chat_combine.package.packager import package_archives
from chat_combine.package.recency import PlaceholderRecencyScorer, RecencyScorer
from chat_combine.storage.base import StorageBackend
from chat_combine.storage.memory import InMemoryStorage

logger = logging.getLogger(__name__)

_UNSAFE_SUBJECT = re.compile(r"[^\w.-]+")


class ChatCombine:
    """Main entry point for combining chat exports.

    Every operation takes and returns explicit values; the only state kept
    is the raw archive bytes in the storage backend.

    Usage::

        cc = ChatCombine()
        batch = await cc.inspect([ArchiveInput.from_path("a.zip"),
                                  ArchiveInput.from_path("b.zip")])
        report = await cc.check_compatibility(batch.valid)
        result = await cc.combine(batch.results)
        Path(result.filename).write_bytes(result.blob)
    """

    def __init__(
        self,
        storage: StorageBackend | None = None,
        *,
        scorer: RecencyScorer | None = None,
        settings: CombineSettings | None = None,
    ) -> None:
        self._storage = storage or InMemoryStorage()
        self._scorer = scorer or PlaceholderRecencyScorer()
        self._settings = settings or CombineSettings()
        self._inspector = ArchiveInspector(self._storage, self._settings)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ChatCombine:
        """Construct a ChatCombine instance from a configuration dict."""
        storage, scorer, settings = parse_config(config)
        return cls(storage, scorer=scorer, settings=settings)

    @property
    def settings(self) -> CombineSettings:
        return self._settings

    # ── Inspection ───────────────────────────────────────────────────

    async def inspect(self, archives: Sequence[ArchiveInput]) -> InspectionBatch:
        """Store and inspect every archive concurrently.

        An archive that cannot be decoded ends up in ``failures``; the others
        are still inspected.
        """
        sources: list[tuple[str, str]] = []
        for archive in archives:
            filename = PurePosixPath(archive.name).name or "archive.zip"
            key = f"{uuid.uuid4()}/{filename}"
            self._storage.write(key, archive.data)
            sources.append((key, archive.name))

        outcomes = await self._inspector.inspect_many(sources)

        batch = InspectionBatch()
        for (key, name), outcome in zip(sources, outcomes, strict=True):
            if isinstance(outcome, ChatCombineError):
                self._storage.delete(key)
                batch.failures.append(InspectionFailure(name, outcome.message))
            else:
                batch.results.append(outcome)
        return batch

    async def analyze(
        self, results: Sequence[ArchiveInspectionResult]
    ) -> list[ArchiveInspectionResult]:
        """Attach a message-count/date-range summary to each valid result."""
        analyzed: list[ArchiveInspectionResult] = []
        for result in results:
            if not result.is_valid:
                analyzed.append(result)
                continue
            analysis = await asyncio.to_thread(analyze_archive, self._storage, result)
            analyzed.append(result.with_analysis(analysis))
        return analyzed

    def forget(self, result: ArchiveInspectionResult) -> None:
        """Drop the stored bytes of an archive the user removed."""
        self._storage.delete(result.source_key)

    # ── Merge stages ─────────────────────────────────────────────────

    async def check_compatibility(
        self, results: Sequence[ArchiveInspectionResult]
    ) -> CompatibilityReport:
        return await asyncio.to_thread(check_compatibility, results, self._storage)

    async def merge(self, results: Sequence[ArchiveInspectionResult]) -> MergeOutcome:
        return await asyncio.to_thread(merge_archives, results, self._storage)

    async def package(
        self,
        results: Sequence[ArchiveInspectionResult],
        merged_log: MergedLog,
    ) -> PackageResult:
        return await asyncio.to_thread(
            package_archives,
            results,
            merged_log,
            self._storage,
            scorer=self._scorer,
            settings=self._settings,
        )

    async def combine(
        self,
        results: Sequence[ArchiveInspectionResult],
        *,
        subject: str | None = None,
    ) -> CombineResult:
        """Check, merge and package *results* into one archive.

        Invalid archives are left out and listed in ``skipped``. Past that,
        the combine is all-or-nothing: any failure raises
        :class:`CombineError` with the specific error as its cause.
        """
        valid = [r for r in results if r.is_valid]
        skipped = [r.display_name for r in results if not r.is_valid]
        for name in skipped:
            logger.warning("Skipping %s: no message log", name)

        try:
            return await asyncio.to_thread(self._combine, valid, skipped, subject)
        except ChatCombineError as exc:
            logger.error("combine failed: %s", exc)
            raise CombineError(f"Error combining files: {exc.message}") from exc

    def output_filename(self, subject: str | None = None) -> str:
        """``combined_<subject>.zip`` with the subject made filename-safe."""
        cleaned = _UNSAFE_SUBJECT.sub("_", subject or "").strip("_.")
        return self._settings.output_template.format(
            subject=cleaned or self._settings.default_subject
        )

    # ── Private helpers ──────────────────────────────────────────────

    def _combine(
        self,
        valid: list[ArchiveInspectionResult],
        skipped: list[str],
        subject: str | None,
    ) -> CombineResult:
        report = check_compatibility(valid, self._storage)
        outcome = merge_archives(valid, self._storage)
        packaged = package_archives(
            valid,
            outcome.log,
            self._storage,
            scorer=self._scorer,
            settings=self._settings,
        )
        return CombineResult(
            blob=packaged.blob,
            filename=self.output_filename(subject),
            identity=report.identity,
            stats=outcome.stats,
            total_files=packaged.total_files,
            folders=sorted(packaged.folders),
            warnings=report.warnings,
            skipped=skipped,
        )
