from chat_combine.merge.compatibility import (
    OVERLAP_WARNING,
    build_report,
    check_compatibility,
    overlap_warnings,
)
from chat_combine.merge.engine import (
    dedupe_messages,
    merge_archives,
    merge_logs,
    should_replace,
)
from chat_combine.merge.log import (
    ParsedLog,
    analyze_archive,
    analyze_stream,
    load_log,
    parse_log,
    parse_timestamp,
)

__all__ = [
    "OVERLAP_WARNING",
    "ParsedLog",
    "analyze_archive",
    "analyze_stream",
    "build_report",
    "check_compatibility",
    "dedupe_messages",
    "load_log",
    "merge_archives",
    "merge_logs",
    "overlap_warnings",
    "parse_log",
    "parse_timestamp",
    "should_replace",
]
