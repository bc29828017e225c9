"""Reconcile media files across exports and build the combined archive."""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Mapping, Sequence
from contextlib import ExitStack

from chat_combine.archive.paths import (
    SEPARATOR,
    is_excluded_path,
    strip_root,
    top_segment,
)
from chat_combine.archive.source import MEMBER_READ_ERRORS, open_source
from chat_combine.config import CombineSettings
from chat_combine.core.exceptions import ArchiveDecodeError
from chat_combine.core.types import (
    ArchiveInspectionResult,
    FileWinner,
    MergedLog,
    PackageResult,
)
from chat_combine.merge.compatibility import require_mergeable
from chat_combine.package.recency import PlaceholderRecencyScorer, RecencyScorer
from chat_combine.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def reconcile_files(
    results: Sequence[ArchiveInspectionResult],
    sources: Mapping[str, zipfile.ZipFile],
    scorer: RecencyScorer,
    settings: CombineSettings,
) -> tuple[dict[str, FileWinner], set[str]]:
    """Pick one copy of every root-relative path across *results*.

    The first copy of a path is kept and only replaced by a later copy with a
    strictly higher recency score. The root-level message log is skipped; the
    merged log replaces it.

    Returns the winner table (in first-seen path order) and the top-level
    folders of all kept paths.
    """
    winners: dict[str, FileWinner] = {}
    folders: set[str] = set()

    for result in results:
        zf = sources[result.identifier]
        for info in zf.infolist():
            if info.is_dir() or is_excluded_path(info.filename, settings):
                continue
            relative = strip_root(info.filename, result.root_prefix)
            if not relative or relative == settings.log_filename:
                continue

            if SEPARATOR in relative:
                folders.add(top_segment(relative))

            score = scorer.score(relative, result)
            current = winners.get(relative)
            if current is None or score > current.recency_score:
                if current is not None:
                    logger.debug(
                        "%s: %s replaces copy from %s",
                        relative,
                        result.display_name,
                        current.source.display_name,
                    )
                winners[relative] = FileWinner(
                    source=result, entry_name=info.filename, recency_score=score
                )

    return winners, folders


def write_package(
    merged_log: MergedLog,
    winners: Mapping[str, FileWinner],
    sources: Mapping[str, zipfile.ZipFile],
    settings: CombineSettings,
) -> bytes:
    """Write the merged log at the root, then every winning file."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(
        buffer, "w", zipfile.ZIP_DEFLATED, compresslevel=settings.compress_level
    ) as out:
        out.writestr(
            settings.log_filename, merged_log.to_json_bytes(settings.json_indent)
        )
        for path, winner in winners.items():
            source = sources[winner.source.identifier]
            original = source.getinfo(winner.entry_name)
            try:
                data = source.read(original)
            except MEMBER_READ_ERRORS as exc:
                raise ArchiveDecodeError(
                    winner.source.display_name, f"{winner.entry_name}: {exc}"
                ) from exc
            info = zipfile.ZipInfo(path, date_time=original.date_time)
            info.compress_type = zipfile.ZIP_DEFLATED
            out.writestr(info, data, compresslevel=settings.compress_level)
    return buffer.getvalue()


def package_archives(
    results: Sequence[ArchiveInspectionResult],
    merged_log: MergedLog,
    storage: StorageBackend,
    *,
    scorer: RecencyScorer | None = None,
    settings: CombineSettings | None = None,
) -> PackageResult:
    """Build the combined, flat-rooted archive for *results*.

    Either the whole container is produced or an exception propagates;
    nothing partial is returned.
    """
    require_mergeable(results)
    scorer = scorer or PlaceholderRecencyScorer()
    settings = settings or CombineSettings()

    with ExitStack() as stack:
        sources = {
            result.identifier: stack.enter_context(open_source(storage, result))
            for result in results
        }
        winners, folders = reconcile_files(results, sources, scorer, settings)
        blob = write_package(merged_log, winners, sources, settings)

    logger.info(
        "Packaged %d files in %d folders (%d bytes)",
        len(winners),
        len(folders),
        len(blob),
    )
    return PackageResult(
        blob=blob,
        total_files=len(winners),
        folders=frozenset(folders),
        message_log_written=True,
    )
