from chat_combine.core.exceptions import (
    ArchiveDecodeError,
    ChatCombineError,
    CombineError,
    IdentityMismatchError,
    InsufficientArchivesError,
    LogParseError,
    MissingLogError,
    MissingSourceError,
    UnknownProviderError,
)
from chat_combine.core.types import (
    ArchiveInspectionResult,
    CompatibilityReport,
    CompatibilityWarning,
    ConversationIdentity,
    DateSpan,
    FileWinner,
    InspectionStatus,
    LogAnalysis,
    MergedLog,
    MergeOutcome,
    MergeStats,
    MessageRecord,
    PackageResult,
    TopLevelItem,
)

__all__ = [
    "ArchiveDecodeError",
    "ArchiveInspectionResult",
    "ChatCombineError",
    "CombineError",
    "CompatibilityReport",
    "CompatibilityWarning",
    "ConversationIdentity",
    "DateSpan",
    "FileWinner",
    "IdentityMismatchError",
    "InsufficientArchivesError",
    "InspectionStatus",
    "LogAnalysis",
    "LogParseError",
    "MergedLog",
    "MergeOutcome",
    "MergeStats",
    "MessageRecord",
    "MissingLogError",
    "MissingSourceError",
    "PackageResult",
    "TopLevelItem",
    "UnknownProviderError",
]
