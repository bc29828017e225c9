from chat_combine.config import CombineSettings
from chat_combine.core.exceptions import (
    ArchiveDecodeError,
    ChatCombineError,
    CombineError,
    IdentityMismatchError,
    InsufficientArchivesError,
    LogParseError,
    MissingLogError,
    MissingSourceError,
)
from chat_combine.core.types import (
    ArchiveInspectionResult,
    CompatibilityReport,
    ConversationIdentity,
    InspectionStatus,
    MergedLog,
    MergeStats,
)
from chat_combine.facade import (
    ArchiveInput,
    ChatCombine,
    CombineResult,
    InspectionBatch,
)

__all__ = [
    "ArchiveDecodeError",
    "ArchiveInput",
    "ArchiveInspectionResult",
    "ChatCombine",
    "ChatCombineError",
    "CombineError",
    "CombineResult",
    "CombineSettings",
    "CompatibilityReport",
    "ConversationIdentity",
    "IdentityMismatchError",
    "InspectionBatch",
    "InspectionStatus",
    "InsufficientArchivesError",
    "LogParseError",
    "MergeStats",
    "MergedLog",
    "MissingLogError",
    "MissingSourceError",
]
