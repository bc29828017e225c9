"""Reading ``result.json`` out of an inspected archive."""

from __future__ import annotations

import codecs
import json
import logging
import zipfile
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import IO, Any

import ijson
from pydantic import ValidationError

from chat_combine.archive.source import MEMBER_READ_ERRORS, open_source
from chat_combine.core.exceptions import (
    LogParseError,
    MissingLogError,
    MissingSourceError,
)
from chat_combine.core.schemas import LogHeader, MessageHeader
from chat_combine.core.types import (
    ArchiveInspectionResult,
    DateSpan,
    LogAnalysis,
    MessageRecord,
)
from chat_combine.storage.base import StorageBackend

logger = logging.getLogger(__name__)

_SCALAR_EVENTS = {"string", "number", "boolean", "null"}
_ITEM_EVENTS = _SCALAR_EVENTS | {"start_map", "start_array"}
_HEADER_FIELDS = {"id", "name", "type"}
_OBJECT_EVENTS = {"start_map", "map_key", "end_map"}


@dataclass(frozen=True)
class ParsedLog:
    """A fully decoded message log of one archive."""

    archive: str
    chat_id: int | None
    chat_name: str | None
    chat_type: str | None
    messages: list[MessageRecord]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a message ``date``; ``None`` when missing or unparsable.

    Offset-aware values are normalised to naive UTC so that every timestamp
    compares against every other.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def parse_log(data: bytes, archive: str) -> ParsedLog:
    """Decode raw log bytes into a :class:`ParsedLog`.

    Raises:
        LogParseError: the log is not a JSON object, or a message has no
            integer ``id``.
    """
    try:
        payload = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise LogParseError(archive, f"Error parsing result.json: {exc}") from exc

    if not isinstance(payload, dict):
        raise LogParseError(archive, "result.json must contain a JSON object")

    try:
        header = LogHeader.model_validate(payload)
    except ValidationError as exc:
        raise LogParseError(archive, f"Invalid chat header: {exc}") from exc

    messages: list[MessageRecord] = []
    for index, raw in enumerate(header.messages):
        if not isinstance(raw, dict):
            raise LogParseError(archive, f"Message #{index} is not a JSON object")
        try:
            known = MessageHeader.model_validate(raw)
        except ValidationError as exc:
            raise LogParseError(
                archive, f"Message #{index} has no usable id: {exc}"
            ) from exc
        messages.append(
            MessageRecord(
                id=known.id, edited=known.is_edited, date=known.date, raw=raw
            )
        )

    return ParsedLog(
        archive=archive,
        chat_id=header.id,
        chat_name=header.name,
        chat_type=header.type,
        messages=messages,
    )


def analyze_stream(stream: IO[bytes], archive: str) -> LogAnalysis:
    """Stream a log for its identity, message count and date span.

    The header goes through :class:`LogHeader`, the same validation
    :func:`parse_log` applies, so both readers agree on the chat identity.
    Messages without a parseable ``date`` do not widen the span.
    """
    header_fields: dict[str, Any] = {}
    count = 0
    start: datetime | None = None
    end: datetime | None = None

    try:
        for prefix, event, value in ijson.parse(stream):
            if prefix == "" and event not in _OBJECT_EVENTS:
                raise LogParseError(archive, "result.json must contain a JSON object")
            if prefix in _HEADER_FIELDS and event in _SCALAR_EVENTS:
                header_fields[prefix] = value
            elif prefix == "messages.item" and event in _ITEM_EVENTS:
                count += 1
            elif prefix == "messages.item.date" and event == "string":
                ts = parse_timestamp(value)
                if ts is None:
                    continue
                start = ts if start is None else min(start, ts)
                end = ts if end is None else max(end, ts)
    except (ijson.JSONError, UnicodeDecodeError) as exc:
        raise LogParseError(archive, f"Error parsing result.json: {exc}") from exc

    try:
        header = LogHeader.model_validate(header_fields)
    except ValidationError as exc:
        raise LogParseError(archive, f"Invalid chat header: {exc}") from exc

    span = DateSpan(start, end) if start is not None and end is not None else None
    return LogAnalysis(
        chat_id=header.id,
        chat_name=header.name,
        chat_type=header.type,
        message_count=count,
        date_span=span,
    )


def _require_log(result: ArchiveInspectionResult) -> str:
    if not result.is_valid or result.message_log_path is None:
        raise MissingLogError(result.display_name, result.reason)
    return result.message_log_path


def _open_member(zf: zipfile.ZipFile, path: str, archive: str) -> IO[bytes]:
    try:
        return zf.open(path)
    except KeyError as exc:
        raise MissingSourceError(archive, path) from exc
    except MEMBER_READ_ERRORS as exc:
        raise LogParseError(archive, f"Cannot read {path}: {exc}") from exc


def read_log_bytes(storage: StorageBackend, result: ArchiveInspectionResult) -> bytes:
    path = _require_log(result)
    with open_source(storage, result) as zf, _open_member(
        zf, path, result.display_name
    ) as member:
        try:
            return member.read()
        except MEMBER_READ_ERRORS as exc:
            raise LogParseError(
                result.display_name, f"Cannot read {path}: {exc}"
            ) from exc


def load_log(storage: StorageBackend, result: ArchiveInspectionResult) -> ParsedLog:
    parsed = parse_log(read_log_bytes(storage, result), result.display_name)
    logger.info(
        "Parsed %s: chat %s, %d messages",
        result.display_name,
        parsed.chat_id,
        len(parsed.messages),
    )
    return parsed


def analyze_archive(
    storage: StorageBackend, result: ArchiveInspectionResult
) -> LogAnalysis:
    path = _require_log(result)
    with open_source(storage, result) as zf, _open_member(
        zf, path, result.display_name
    ) as member:
        try:
            if member.peek(len(codecs.BOM_UTF8))[:3] == codecs.BOM_UTF8:
                member.read(len(codecs.BOM_UTF8))
            return analyze_stream(member, result.display_name)
        except MEMBER_READ_ERRORS as exc:
            raise LogParseError(
                result.display_name, f"Cannot read {path}: {exc}"
            ) from exc
