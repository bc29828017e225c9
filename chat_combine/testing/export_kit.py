"""Helpers for building synthetic Telegram-style export archives in tests."""

from __future__ import annotations

import io
import json
import zipfile
from typing import Any


def build_zip(files: dict[str, bytes | str]) -> bytes:
    """Create an in-memory zip archive from a dict of {path: content}.

    Paths ending in ``/`` become directory entries.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.items():
            if isinstance(data, str):
                data = data.encode("utf-8")
            zf.writestr(name, data)
    return buf.getvalue()


def message(
    msg_id: int,
    date: str | None = "2024-01-01T10:00:00",
    *,
    text: str | None = None,
    edited: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """A message dict shaped like the ones in Telegram's result.json."""
    msg: dict[str, Any] = {"id": msg_id, "type": "message"}
    if date is not None:
        msg["date"] = date
    msg["from"] = extra.pop("sender", "Alice")
    msg["text"] = text if text is not None else f"message {msg_id}"
    if edited is not None:
        msg["edited"] = edited
    msg.update(extra)
    return msg


def result_json(
    chat_id: int,
    messages: list[dict[str, Any]],
    *,
    name: str = "Test Chat",
    chat_type: str = "personal_chat",
) -> str:
    return json.dumps(
        {"name": name, "type": chat_type, "id": chat_id, "messages": messages},
        indent=1,
        ensure_ascii=False,
    )


def build_export(
    chat_id: int,
    messages: list[dict[str, Any]],
    *,
    root: str = "",
    media: dict[str, bytes | str] | None = None,
    extra: dict[str, bytes | str] | None = None,
    name: str = "Test Chat",
) -> bytes:
    """Build a whole export zip.

    *root* (e.g. ``"ChatExport_2024-01-01/"``) is prefixed to the log and
    every *media* path; *extra* entries are written as given.
    """
    files: dict[str, bytes | str] = {
        f"{root}result.json": result_json(chat_id, messages, name=name)
    }
    for path, data in (media or {}).items():
        files[f"{root}{path}"] = data
    files.update(extra or {})
    return build_zip(files)


def corrupt_member(data: bytes, name: str, *, span: int = 32) -> bytes:
    """Overwrite bytes in the middle of *name*'s compressed data.

    The central directory stays intact, so the archive still opens and
    inspects; only reading the member fails.
    """
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo(name)
    offset = info.header_offset
    name_len = int.from_bytes(data[offset + 26 : offset + 28], "little")
    extra_len = int.from_bytes(data[offset + 28 : offset + 30], "little")
    body = offset + 30 + name_len + extra_len
    span = min(span, info.compress_size // 2)
    start = body + info.compress_size // 4

    corrupted = bytearray(data)
    corrupted[start : start + span] = b"\xff" * span
    return bytes(corrupted)


def filler(lines: int = 2_000) -> str:
    """Text long enough to give a member a sizeable compressed stream."""
    return "".join(f"line {i} of filler text\n" for i in range(lines))
