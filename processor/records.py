"""Turning a queued event into the immutable record that gets stored."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from ingestion.schemas import QueuedEvent


class InvalidTimestampError(ValueError):
    """The client timestamp cannot be read as a point in time."""


def parse_timestamp(value: Any) -> datetime:
    """
    Read a client timestamp as an aware UTC datetime.

    Accepted: ISO-8601 strings (``Z`` or offset, naive values taken as UTC,
    bare dates as midnight UTC, including the 8-digit basic form
    ``YYYYMMDD``) and epoch milliseconds as numbers or other digit strings.
    """
    if isinstance(value, bool):
        raise InvalidTimestampError(f"unparseable timestamp: {value!r}")

    if isinstance(value, str):
        digits = value.strip()
        if len(digits) == 8 and digits.isdigit():
            try:
                return datetime.combine(date.fromisoformat(digits), datetime.min.time(), tzinfo=timezone.utc)
            except ValueError:
                pass  # not a calendar date, read as epoch milliseconds
        if digits.lstrip("-").isdigit():
            value = int(digits)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidTimestampError(f"timestamp out of range: {value!r}") from e

    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            except ValueError as e:
                raise InvalidTimestampError(f"unparseable timestamp: {value!r}") from e
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    raise InvalidTimestampError(f"unparseable timestamp: {value!r}")


@dataclass(frozen=True)
class EventRecord:
    site_id: str
    event_type: str
    path: str
    user_id: str | None
    timestamp: datetime
    date: str  # YYYY-MM-DD partition key, UTC
    properties: dict[str, Any] = field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        doc = {
            "site_id": self.site_id,
            "event_type": self.event_type,
            "path": self.path,
            "user_id": self.user_id,
            "timestamp": self.timestamp,
            "date": self.date,
        }
        if self.properties:
            doc["properties"] = dict(self.properties)
        return doc


def build_record(event: QueuedEvent) -> EventRecord:
    ts = parse_timestamp(event.timestamp)
    return EventRecord(
        site_id=event.site_id,
        event_type=event.event_type,
        path=event.path or "/",
        user_id=event.user_id or None,
        timestamp=ts,
        date=ts.date().isoformat(),
        properties=event.properties,
    )
