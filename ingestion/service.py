"""Ingestion: validate, normalize and enqueue one event per request."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from config import Settings, configure_logging
from ingestion.schemas import normalize_event, validate_event
from storage.event_queue import EventQueue, QueueError


class SubmitStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    QUEUE_ERROR = "queue_error"


@dataclass
class SubmitResult:
    status: SubmitStatus
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status is SubmitStatus.ACCEPTED


class IngestionService:
    """
    Accepts an event as soon as it is queue-resident. Persistence happens
    later in the consumer, so callers get an answer bounded by one RPUSH.
    """

    def __init__(self, queue: EventQueue, settings: Settings):
        self._queue = queue
        self.log = configure_logging("ingestion", settings.log_level)

    def submit(self, body: dict[str, Any]) -> SubmitResult:
        reason = validate_event(body)
        if reason:
            self.log.info("event_rejected", reason=reason, site_id=body.get("site_id"))
            return SubmitResult(SubmitStatus.REJECTED, reason)

        event = normalize_event(body)
        try:
            self._queue.append(event.to_payload())
        except QueueError as e:
            self.log.error("event_enqueue_failed", site_id=event.site_id, error=str(e))
            return SubmitResult(SubmitStatus.QUEUE_ERROR, "queue_error")

        self.log.debug("event_enqueued", site_id=event.site_id, event_type=event.event_type)
        return SubmitResult(SubmitStatus.ACCEPTED)
