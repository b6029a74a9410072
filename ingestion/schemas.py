"""Wire-level event shapes: what a site sends and what sits in the queue."""

import json
from typing import Any

from pydantic import BaseModel, Field

REQUIRED_FIELDS = ("site_id", "event_type", "timestamp")
DEFAULT_PATH = "/"


class QueuedEvent(BaseModel):
    """A validated, normalized event as serialized onto the queue.

    ``timestamp`` is carried exactly as the client sent it; it is parsed
    only when the consumer builds the stored record.
    """

    site_id: str
    event_type: str
    timestamp: Any
    path: str = DEFAULT_PATH
    user_id: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> str:
        return json.dumps(self.model_dump(), separators=(",", ":"))

    @classmethod
    def from_payload(cls, payload: str | bytes) -> "QueuedEvent":
        """Parse a queue payload. Raises ValueError for anything malformed,
        including bytes that are not UTF-8."""
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError(f"queue payload is {type(data).__name__}, expected object")
        reason = validate_event(data)
        if reason:
            raise ValueError(reason)
        return normalize_event(data)


def validate_event(body: dict[str, Any]) -> str | None:
    """Return the reason for the first missing required field, or None."""
    for field in REQUIRED_FIELDS:
        if not body.get(field):
            return f"{field} is required"
    return None


def normalize_event(body: dict[str, Any]) -> QueuedEvent:
    """Apply defaults and coercions. Idempotent on its own output."""
    user_id = body.get("user_id") or None
    properties = body.get("properties")
    return QueuedEvent(
        site_id=str(body["site_id"]),
        event_type=str(body["event_type"]),
        timestamp=body["timestamp"],
        path=str(body.get("path") or DEFAULT_PATH),
        user_id=str(user_id) if user_id is not None else None,
        properties=properties if isinstance(properties, dict) else {},
    )
