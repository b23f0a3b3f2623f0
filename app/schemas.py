"""Pydantic schemas for the HTTP API layer and the on-disk snapshot."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    FiniteFloat,
    StrictInt,
    TypeAdapter,
    field_serializer,
    field_validator,
)

from models.records import Reading


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision and ``Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    rendered = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


class GroupCreateRequest(BaseModel):
    """Body for explicit group creation.

    ``name`` is optional here so a missing name reaches the store and is
    reported as a 400 with a readable message.
    """

    name: Optional[str] = None


class GroupCreatedResponse(BaseModel):
    message: str
    name: str


class MessageResponse(BaseModel):
    message: str


class IngestRequest(BaseModel):
    """Body posted by sensors.

    Values are accepted as-is; the store decides whether they are numbers.
    """

    temperature: Any = None
    humidity: Any = None


# Integers stay integers on the wire; anything else must be a finite float.
Number = Union[StrictInt, FiniteFloat]


class LogEntry(BaseModel):
    """A reading as exposed over HTTP and persisted in the snapshot."""

    temperature: Number
    humidity: Number
    date: datetime
    alert: bool

    @field_validator("temperature", "humidity", mode="before")
    @classmethod
    def _reject_non_numbers(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        return value

    @field_validator("date")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_serializer("date")
    def _serialize_date(self, value: datetime) -> str:
        return format_timestamp(value)

    @classmethod
    def from_reading(cls, reading: Reading) -> "LogEntry":
        return cls(
            temperature=reading.temperature,
            humidity=reading.humidity,
            date=reading.timestamp,
            alert=reading.alert,
        )

    def to_reading(self) -> Reading:
        return Reading(
            temperature=self.temperature,
            humidity=self.humidity,
            timestamp=self.date,
            alert=self.alert,
        )


class IngestResponse(BaseModel):
    message: str
    log: LogEntry


SnapshotDocument = Dict[str, List[LogEntry]]

snapshot_adapter: TypeAdapter[SnapshotDocument] = TypeAdapter(SnapshotDocument)
