import io
import json
import zipfile

import pytest

from chat_combine.config import CombineSettings
from chat_combine.core.exceptions import (
    ArchiveDecodeError,
    InsufficientArchivesError,
    MissingSourceError,
)
from chat_combine.core.types import ArchiveInspectionResult, MergedLog
from chat_combine.merge.engine import merge_archives
from chat_combine.package.packager import package_archives
from chat_combine.package.recency import PathLengthScorer, RecencyScorer
from chat_combine.testing.export_kit import (
    build_export,
    corrupt_member,
    filler,
    message,
)


class ArchiveRankScorer(RecencyScorer):
    """Scores every file by a fixed rank per archive."""

    def __init__(self, ranks: dict[str, float]) -> None:
        self.ranks = ranks

    def score(self, path: str, source: ArchiveInspectionResult) -> float:
        return self.ranks[source.display_name]


def _open(blob: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(blob))


@pytest.fixture()
def two_exports(add_archive):
    a = add_archive(
        "a.zip",
        build_export(
            42,
            [message(1), message(2)],
            root="ChatExport_2024-01/",
            media={"photos/a.jpg": b"A-from-a", "files/doc.pdf": b"pdf"},
            extra={
                ".DS_Store": b"x",
                "__MACOSX/ChatExport_2024-01/photos/._a.jpg": b"x",
                "unrelated/outside.txt": b"x",
            },
        ),
    )
    b = add_archive(
        "b.zip",
        build_export(
            42,
            [message(2), message(3)],
            media={"photos/a.jpg": b"A-from-b", "video/v.mp4": b"mp4"},
        ),
    )
    return a, b


def _merged(results, storage) -> MergedLog:
    return merge_archives(results, storage).log


class TestPackageArchives:
    def test_flat_layout(self, two_exports, storage):
        merged = _merged(two_exports, storage)
        package = package_archives(
            two_exports, merged, storage, scorer=PathLengthScorer()
        )

        with _open(package.blob) as zf:
            names = zf.namelist()
            log = json.loads(zf.read("result.json"))

        assert names[0] == "result.json"
        assert sorted(names) == [
            "files/doc.pdf",
            "photos/a.jpg",
            "result.json",
            "video/v.mp4",
        ]
        assert [m["id"] for m in log["messages"]] == [1, 2, 3]
        assert log["id"] == 42
        assert package.total_files == 3
        assert package.folders == frozenset({"photos", "files", "video"})
        assert package.message_log_written

    def test_excluded_and_outside_entries_dropped(self, two_exports, storage):
        package = package_archives(
            two_exports, _merged(two_exports, storage), storage
        )
        with _open(package.blob) as zf:
            names = zf.namelist()
        assert not any(n.startswith((".", "__MACOSX", "unrelated")) for n in names)
        assert not any("ChatExport" in n for n in names)

    def test_equal_scores_keep_first(self, two_exports, storage):
        package = package_archives(
            two_exports,
            _merged(two_exports, storage),
            storage,
            scorer=ArchiveRankScorer({"a.zip": 1, "b.zip": 1}),
        )
        with _open(package.blob) as zf:
            assert zf.read("photos/a.jpg") == b"A-from-a"

    def test_higher_score_replaces(self, two_exports, storage):
        package = package_archives(
            two_exports,
            _merged(two_exports, storage),
            storage,
            scorer=ArchiveRankScorer({"a.zip": 1, "b.zip": 2}),
        )
        with _open(package.blob) as zf:
            assert zf.read("photos/a.jpg") == b"A-from-b"

    def test_lower_score_does_not_replace(self, two_exports, storage):
        package = package_archives(
            two_exports,
            _merged(two_exports, storage),
            storage,
            scorer=ArchiveRankScorer({"a.zip": 5, "b.zip": 2}),
        )
        with _open(package.blob) as zf:
            assert zf.read("photos/a.jpg") == b"A-from-a"

    def test_log_json_indent(self, two_exports, storage):
        merged = _merged(two_exports, storage)
        package = package_archives(
            two_exports, merged, storage, settings=CombineSettings(json_indent=None)
        )
        with _open(package.blob) as zf:
            assert zf.read("result.json") == merged.to_json_bytes(None)

    def test_needs_two_archives(self, two_exports, storage):
        merged = _merged(two_exports, storage)
        with pytest.raises(InsufficientArchivesError):
            package_archives(two_exports[:1], merged, storage)

    def test_source_gone(self, two_exports, storage):
        merged = _merged(two_exports, storage)
        storage.delete(two_exports[1].source_key)
        with pytest.raises(MissingSourceError, match="b.zip"):
            package_archives(two_exports, merged, storage)

    def test_corrupt_media_names_archive(self, add_archive, storage):
        a = add_archive("a.zip", build_export(1, [message(1)]))
        data = build_export(1, [message(2)], media={"files/notes.txt": filler()})
        b = add_archive("b.zip", corrupt_member(data, "files/notes.txt"))
        merged = _merged([a, b], storage)

        with pytest.raises(ArchiveDecodeError, match="b.zip") as exc_info:
            package_archives([a, b], merged, storage, scorer=PathLengthScorer())
        assert "files/notes.txt" in exc_info.value.message
