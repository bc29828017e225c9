import pytest

from chat_combine.archive.inspector import ArchiveInspector, inspect_archive
from chat_combine.core.exceptions import ArchiveDecodeError, MissingSourceError
from chat_combine.core.types import InspectionStatus
from chat_combine.storage.memory import InMemoryStorage
from chat_combine.testing.export_kit import build_export, build_zip, result_json


def _inspect(data: bytes, name: str = "a.zip"):
    return inspect_archive(data, name, source_key="k")


class TestRootResolution:
    def test_log_at_root(self):
        data = build_zip({"result.json": '{"id": 42, "messages": [{"id": 1}]}'})
        result = _inspect(data)

        assert result.status == InspectionStatus.VALID
        assert result.is_valid
        assert result.root_prefix == ""
        assert result.message_log_path == "result.json"
        assert result.entries == ("result.json",)

    def test_nested_log(self):
        data = build_export(
            42,
            [],
            root="export/chat/",
            media={"photos/a.jpg": b"jpg"},
            extra={"other/readme.txt": "outside"},
        )
        result = _inspect(data)

        assert result.root_prefix == "export/chat/"
        assert result.message_log_path == "export/chat/result.json"
        assert "photos/a.jpg" in result.entries
        assert all(not e.startswith("other/") for e in result.entries)

    def test_first_log_fixes_root(self):
        data = build_zip(
            {
                "first/result.json": result_json(1, []),
                "second/result.json": result_json(1, []),
            }
        )
        assert _inspect(data).root_prefix == "first/"

    def test_metadata_copy_does_not_become_root(self):
        data = build_zip(
            {
                "__MACOSX/chat/result.json": "junk",
                ".trash/result.json": "junk",
                "chat/result.json": result_json(1, []),
            }
        )
        result = _inspect(data)
        assert result.root_prefix == "chat/"
        assert result.message_log_path == "chat/result.json"

    def test_missing_log_is_invalid(self):
        data = build_zip({"photos/a.jpg": b"x", "notes.txt": "hi"})
        result = _inspect(data, "photos.zip")

        assert result.status == InspectionStatus.INVALID
        assert not result.is_valid
        assert result.reason is not None
        assert "No result.json found" in result.reason
        assert result.message_log_path is None
        assert result.entries == ()
        assert result.top_level_summary == ()

    def test_identity_fields(self):
        result = inspect_archive(
            build_export(1, []), "Part 1.zip", source_key="key-1", identifier="id-1"
        )
        assert result.identifier == "id-1"
        assert result.display_name == "Part 1.zip"
        assert result.source_key == "key-1"

    def test_identifiers_are_unique(self):
        data = build_export(1, [])
        assert _inspect(data).identifier != _inspect(data).identifier

    def test_not_a_zip(self):
        with pytest.raises(ArchiveDecodeError, match="broken.zip"):
            _inspect(b"definitely not a zip", "broken.zip")


class TestEntries:
    def test_hidden_and_metadata_excluded(self):
        data = build_export(
            1,
            [],
            media={"photos/a.jpg": b"a"},
            extra={
                ".DS_Store": b"x",
                "__MACOSX/photos/._a.jpg": b"x",
            },
        )
        assert sorted(_inspect(data).entries) == ["photos/a.jpg", "result.json"]

    def test_directory_entries_not_listed(self):
        data = build_export(1, [], media={"photos/": b"", "photos/a.jpg": b"a"})
        assert sorted(_inspect(data).entries) == ["photos/a.jpg", "result.json"]


class TestTopLevelSummary:
    def test_directories_first_then_names(self):
        data = build_export(
            1,
            [],
            media={
                "photos/a.jpg": b"aa",
                "photos/b.jpg": b"bb",
                "files/doc.pdf": b"pdf",
                "Zeta.txt": b"z",
                "alpha.txt": b"alpha",
            },
        )
        summary = _inspect(data).top_level_summary

        assert [item.name for item in summary] == [
            "files",
            "photos",
            "Zeta.txt",
            "alpha.txt",
            "result.json",
        ]
        photos = summary[1]
        assert photos.is_directory
        assert photos.path == "photos/"
        assert photos.file_count == 2
        assert photos.size == 0

        alpha = summary[3]
        assert not alpha.is_directory
        assert alpha.size == len(b"alpha")
        assert alpha.file_count is None

    def test_empty_directory_listed(self):
        data = build_export(1, [], media={"stickers/": b""})
        summary = _inspect(data).top_level_summary
        stickers = next(item for item in summary if item.name == "stickers")
        assert stickers.is_directory
        assert stickers.file_count == 0

    def test_first_occurrence_decides_kind(self):
        data = build_export(1, [], media={"notes": b"plain", "notes/a.txt": b"a"})
        summary = _inspect(data).top_level_summary
        notes = [item for item in summary if item.name == "notes"]
        assert len(notes) == 1
        assert not notes[0].is_directory

    def test_nested_root_summary_is_root_relative(self):
        data = build_export(1, [], root="ChatExport/", media={"video/v.mp4": b"v"})
        names = [item.name for item in _inspect(data).top_level_summary]
        assert names == ["video", "result.json"]


class TestArchiveInspector:
    async def test_failures_are_isolated(self):
        storage = InMemoryStorage()
        storage.write("good", build_export(1, []))
        storage.write("bad", b"garbage")
        storage.write("nolog", build_zip({"a.txt": "a"}))

        outcomes = await ArchiveInspector(storage).inspect_many(
            [("good", "good.zip"), ("bad", "bad.zip"), ("nolog", "nolog.zip")]
        )

        assert len(outcomes) == 3
        assert outcomes[0].is_valid
        assert isinstance(outcomes[1], ArchiveDecodeError)
        assert "bad.zip" in outcomes[1].message
        assert not outcomes[2].is_valid

    async def test_missing_key(self):
        outcomes = await ArchiveInspector(InMemoryStorage()).inspect_many(
            [("gone", "gone.zip")]
        )
        assert isinstance(outcomes[0], MissingSourceError)

    def test_inspect_reads_storage(self):
        storage = InMemoryStorage()
        storage.write("k", build_export(5, [], root="x/"))
        result = ArchiveInspector(storage).inspect("k", "x.zip")
        assert result.root_prefix == "x/"
        assert result.source_key == "k"
