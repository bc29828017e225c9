"""Path rules shared by inspection and packaging.

Archive member names always use ``/`` as separator, whatever platform
produced the zip.
"""

from __future__ import annotations

from collections.abc import Iterable
from zipfile import ZipInfo

from chat_combine.config import CombineSettings

SEPARATOR = "/"


def is_excluded_path(path: str, settings: CombineSettings) -> bool:
    """True for hidden entries and anything inside a platform metadata dir."""
    if path.startswith(settings.hidden_prefix):
        return True
    return any(part in settings.metadata_dirs for part in path.split(SEPARATOR))


def visible_entries(
    infos: Iterable[ZipInfo], settings: CombineSettings
) -> list[ZipInfo]:
    return [info for info in infos if not is_excluded_path(info.filename, settings)]


def find_message_log(infos: Iterable[ZipInfo], log_filename: str) -> str | None:
    """Return the first file entry named *log_filename*, at any depth."""
    suffix = SEPARATOR + log_filename
    for info in infos:
        if info.is_dir():
            continue
        if info.filename == log_filename or info.filename.endswith(suffix):
            return info.filename
    return None


def root_prefix_for(log_path: str) -> str:
    """``a/b/result.json`` -> ``a/b/``; a bare log name -> ``""``."""
    head, sep, _ = log_path.rpartition(SEPARATOR)
    return head + sep if sep else ""


def strip_root(path: str, root_prefix: str) -> str | None:
    """Make *path* root-relative, or ``None`` if it lies outside the root."""
    if not root_prefix:
        return path
    if not path.startswith(root_prefix):
        return None
    return path[len(root_prefix) :]


def top_segment(path: str) -> str:
    return path.split(SEPARATOR, 1)[0]
