"""Gate a merge on every archive describing the same conversation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from itertools import combinations

from chat_combine.core.exceptions import (
    IdentityMismatchError,
    InsufficientArchivesError,
    MissingLogError,
)
from chat_combine.core.types import (
    ArchiveInspectionResult,
    CompatibilityReport,
    CompatibilityWarning,
    ConversationIdentity,
    LogAnalysis,
)
from chat_combine.merge.log import analyze_archive
from chat_combine.storage.base import StorageBackend

logger = logging.getLogger(__name__)

OVERLAP_WARNING = "overlapping_time_ranges"


def require_mergeable(results: Sequence[ArchiveInspectionResult]) -> None:
    """Refuse sets that cannot be merged at all."""
    if len(results) < 2:
        raise InsufficientArchivesError(len(results))
    for result in results:
        if not result.is_valid:
            raise MissingLogError(result.display_name, result.reason)


def overlap_warnings(
    names: Sequence[str], analyses: Sequence[LogAnalysis]
) -> list[CompatibilityWarning]:
    """One warning per unordered pair of archives whose date spans intersect."""
    warnings: list[CompatibilityWarning] = []
    for (i, a), (j, b) in combinations(enumerate(analyses), 2):
        if a.date_span is None or b.date_span is None:
            continue
        if a.date_span.overlaps(b.date_span):
            warnings.append(
                CompatibilityWarning(
                    code=OVERLAP_WARNING,
                    message=(
                        f"The date ranges of {names[i]} and {names[j]} overlap. "
                        "Some messages may be duplicated and will be merged "
                        "based on message ID."
                    ),
                    archives=(names[i], names[j]),
                )
            )
    return warnings


def build_report(
    names: Sequence[str], analyses: Sequence[LogAnalysis]
) -> CompatibilityReport:
    """Assert one chat id across *analyses* and collect overlap warnings.

    Raises:
        IdentityMismatchError: an archive's chat id differs from the first one.
    """
    reference = analyses[0]
    for name, analysis in zip(names[1:], analyses[1:], strict=True):
        if analysis.chat_id != reference.chat_id:
            logger.error(
                "Chat id mismatch: %s has %s, expected %s",
                name,
                analysis.chat_id,
                reference.chat_id,
            )
            raise IdentityMismatchError(reference.chat_id, analysis.chat_id, name)

    identity = ConversationIdentity(
        chat_id=reference.chat_id,
        chat_name=reference.chat_name,
        chat_type=reference.chat_type,
    )
    warnings = overlap_warnings(names, analyses)
    if warnings:
        logger.warning("%d pair(s) of exports overlap in time", len(warnings))

    return CompatibilityReport(
        identity=identity, warnings=warnings, analyses=list(analyses)
    )


def check_compatibility(
    results: Sequence[ArchiveInspectionResult], storage: StorageBackend
) -> CompatibilityReport:
    """Check that *results* can be merged into one conversation.

    Every log is analyzed before identities are compared, so a broken log
    anywhere fails the check with :class:`LogParseError`.
    """
    require_mergeable(results)
    analyses = [analyze_archive(storage, result) for result in results]
    return build_report([r.display_name for r in results], analyses)
