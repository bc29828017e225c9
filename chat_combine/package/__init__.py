from chat_combine.package.packager import (
    package_archives,
    reconcile_files,
    write_package,
)
from chat_combine.package.recency import (
    PathLengthScorer,
    PlaceholderRecencyScorer,
    RecencyScorer,
)

__all__ = [
    "PathLengthScorer",
    "PlaceholderRecencyScorer",
    "RecencyScorer",
    "package_archives",
    "reconcile_files",
    "write_package",
]
