"""Reliable FIFO event queue on Redis lists.

Producers RPUSH onto the tail of ``queue_key``. A consumer takes from the
head with BLMOVE, which atomically parks the item on ``processing_key``
until it is acknowledged. Items left parked by a crashed consumer are put
back at the head by ``recover()``.
"""

import redis

from config import Settings, configure_logging
from storage.redis_client import RedisClient


class QueueError(Exception):
    """The queue could not be reached or rejected the command."""


class EventQueue:
    def __init__(self, client: RedisClient, settings: Settings):
        self._client = client
        self._queue_key = settings.queue_key
        self._processing_key = settings.processing_key
        self.log = configure_logging("event-queue", settings.log_level)

    def _run(self, op, **context):
        try:
            return self._client.execute_with_retry(op, raw=True)
        except redis.RedisError as e:
            self.log.error("queue_command_failed", queue=self._queue_key, error=str(e), **context)
            raise QueueError(str(e)) from e

    def append(self, payload: str | bytes) -> int:
        """Append to the tail. Returns the queue length after the push."""
        return self._run(lambda r: r.rpush(self._queue_key, payload), command="rpush")

    def take(self, timeout: float = 0) -> bytes | None:
        """Block until the head item is available and move it to the processing list.

        Payloads come back as raw bytes; decoding is the consumer's job.

        ``timeout`` of 0 blocks forever; otherwise returns None when nothing
        arrived in time.
        """
        return self._run(
            lambda r: r.blmove(self._queue_key, self._processing_key, timeout, "LEFT", "RIGHT"),
            command="blmove",
        )

    def ack(self, payload: bytes) -> None:
        """Forget a taken item for good."""
        self._run(lambda r: r.lrem(self._processing_key, 1, payload), command="lrem")

    def release(self, payload: bytes) -> None:
        """Return a taken item to the head so it is delivered next."""
        def _op(r):
            pipe = r.pipeline(transaction=True)
            pipe.lrem(self._processing_key, 1, payload)
            pipe.lpush(self._queue_key, payload)
            pipe.execute()
        self._run(_op, command="release")

    def recover(self) -> int:
        """Move everything parked in the processing list back to the head.

        Oldest parked item ends up first, ahead of anything still queued.
        """
        def _op(r):
            moved = 0
            while r.lmove(self._processing_key, self._queue_key, "RIGHT", "LEFT") is not None:
                moved += 1
            return moved
        moved = self._run(_op, command="recover")
        if moved:
            self.log.warning("queue_recovered_in_flight", count=moved)
        return moved

    def depth(self) -> int:
        return self._run(lambda r: r.llen(self._queue_key), command="llen")

    def in_flight(self) -> int:
        return self._run(lambda r: r.llen(self._processing_key), command="llen")
