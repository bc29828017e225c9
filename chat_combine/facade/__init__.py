from chat_combine.facade.core import ChatCombine
from chat_combine.facade.types import (
    ArchiveInput,
    CombineResult,
    InspectionBatch,
    InspectionFailure,
)

__all__ = [
    "ArchiveInput",
    "ChatCombine",
    "CombineResult",
    "InspectionBatch",
    "InspectionFailure",
]
