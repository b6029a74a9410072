"""Queue consumer: drains queued events into the document store, one at a time."""

import threading
from enum import Enum

import redis

from config import Settings, configure_logging
from ingestion.schemas import QueuedEvent
from processor.dead_letter import DeadLetterQueue
from processor.records import build_record
from storage.cache import ConsumerStatusCache
from storage.event_queue import EventQueue, QueueError
from storage.event_store import EventStore, StoreError


class ConsumerState(str, Enum):
    WAITING = "waiting"
    PROCESSING = "processing"
    BACKING_OFF = "backing_off"
    STOPPED = "stopped"


class EventConsumer:
    """
    Single sequential consumer loop.

    WAITING → PROCESSING when an item is taken, PROCESSING → WAITING once it
    is stored (or dropped as malformed), PROCESSING → BACKING_OFF when the
    store fails, BACKING_OFF → WAITING after ``consumer_backoff_sec``.

    Taken items stay parked in the queue's processing list until acked, so a
    store failure puts the item back at the head instead of losing it. After
    ``consumer_max_attempts`` consecutive failures on the same payload it is
    dead-lettered.
    """

    def __init__(
        self,
        settings: Settings,
        queue: EventQueue,
        store: EventStore,
        dead_letters: DeadLetterQueue,
        status: ConsumerStatusCache | None = None,
    ):
        self.settings = settings
        self.log = configure_logging("consumer", settings.log_level)
        self._queue = queue
        self._store = store
        self._dlq = dead_letters
        self._status = status
        self._stop = threading.Event()
        self._state = ConsumerState.WAITING

        self._processed = 0
        self._dropped = 0
        self._failed = 0
        self._retry_payload: bytes | None = None
        self._retry_count = 0

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def counters(self) -> dict[str, int]:
        return {"processed": self._processed, "dropped": self._dropped, "failed": self._failed}

    def _transition(self, new_state: ConsumerState):
        if new_state is self._state:
            return
        self.log.debug("consumer_state", previous=self._state.value, state=new_state.value)
        self._state = new_state
        self._publish_status()

    def _publish_status(self):
        if self._status is None:
            return
        try:
            self._status.update(self._state.value, **self.counters)
        except redis.RedisError as e:
            self.log.warning("consumer_status_write_failed", error=str(e))

    def _back_off(self):
        self._transition(ConsumerState.BACKING_OFF)
        self._stop.wait(self.settings.consumer_backoff_sec)
        self._transition(ConsumerState.WAITING)

    def run_once(self, timeout: float | None = None) -> bool:
        """Run one loop iteration. Returns True if an item was taken."""
        if timeout is None:
            timeout = self.settings.queue_block_timeout

        self._transition(ConsumerState.WAITING)
        try:
            payload = self._queue.take(timeout)
        except QueueError:
            self._back_off()
            return False
        if payload is None:
            return False

        self._transition(ConsumerState.PROCESSING)
        try:
            self._handle(payload)
        except QueueError as e:
            # ack/release failed; the item stays parked and is recovered on restart
            self.log.error("queue_settle_failed", error=str(e))
            self._back_off()
            return True

        if self._state is ConsumerState.PROCESSING:
            self._transition(ConsumerState.WAITING)
        return True

    def _handle(self, payload: bytes):
        try:
            record = build_record(QueuedEvent.from_payload(payload))
        except ValueError as e:
            self._dropped += 1
            self.log.warning("queue_payload_malformed", error=str(e), payload=repr(payload[:500]))
            self._dlq.send(payload, e)
            self._queue.ack(payload)
            return

        try:
            self._store.insert(record.to_document())
        except StoreError as e:
            self._failed += 1
            self._on_store_failure(payload, e)
            return

        self._queue.ack(payload)
        self._processed += 1
        self._retry_payload, self._retry_count = None, 0
        if self._processed % 1000 == 0:
            self.log.info("consumer_progress", **self.counters)

    def _on_store_failure(self, payload: bytes, error: StoreError):
        if payload == self._retry_payload:
            self._retry_count += 1
        else:
            self._retry_payload, self._retry_count = payload, 1

        if self._retry_count >= self.settings.consumer_max_attempts:
            self.log.error("event_persist_abandoned", attempts=self._retry_count, error=str(error))
            self._dlq.send(payload, error, attempts=self._retry_count)
            self._queue.ack(payload)
            self._retry_payload, self._retry_count = None, 0
        else:
            self.log.error("event_persist_failed", attempt=self._retry_count, error=str(error))
            self._queue.release(payload)
        self._back_off()

    def _recover(self) -> bool:
        """Put parked items back, backing off until Redis answers or we are stopped."""
        while not self._stop.is_set():
            try:
                self._queue.recover()
                return True
            except QueueError:
                self._back_off()
        return False

    def run(self):
        """Recover parked items, then loop until stopped."""
        self.log.info("consumer_started", queue=self.settings.queue_key)
        try:
            self._recover()
            while not self._stop.is_set():
                try:
                    self.run_once()
                except Exception:
                    self.log.exception("consumer_iteration_error")
                    self._back_off()
        except KeyboardInterrupt:
            pass
        finally:
            self._transition(ConsumerState.STOPPED)
            self.log.info("consumer_stopped", **self.counters)

    def stop(self):
        self._stop.set()
