"""Pydantic schemas for the raw ``result.json`` message log."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Raw log schemas (only the fields the engine reads; the rest passes through)
# ---------------------------------------------------------------------------


class LogHeader(BaseModel):
    """Top-level identity of an export."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    name: str | None = None
    type: str | None = None
    messages: list[Any] = []

    @field_validator("messages", mode="before")
    @classmethod
    def _messages_or_empty(cls, value: Any) -> Any:
        # Absent or non-list ``messages`` counts as an empty log.
        return value if isinstance(value, list) else []


class MessageHeader(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    edited: Any = None
    date: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _date_as_text(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @property
    def is_edited(self) -> bool:
        return bool(self.edited)
