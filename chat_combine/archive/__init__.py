from chat_combine.archive.inspector import (
    ArchiveInspector,
    build_top_level_summary,
    inspect_archive,
)
from chat_combine.archive.paths import is_excluded_path
from chat_combine.archive.source import load_zip, open_source

__all__ = [
    "ArchiveInspector",
    "build_top_level_summary",
    "inspect_archive",
    "is_excluded_path",
    "load_zip",
    "open_source",
]
