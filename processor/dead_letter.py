"""Dead letter list — parks payloads the consumer gave up on, with error context."""

import json
import time

import redis

from config import Settings, configure_logging
from storage.redis_client import RedisClient


class DeadLetterQueue:
    """Capped Redis list of failure envelopes, newest first."""

    def __init__(self, client: RedisClient, settings: Settings):
        self.log = configure_logging("dlq", settings.log_level)
        self._client = client
        self._key = settings.dead_letter_key
        self._max = settings.dead_letter_max

    def send(self, payload: str | bytes, error: Exception, attempts: int = 1) -> bool:
        """Wrap the payload with error context and park it.

        Returns False when Redis refused the write; the payload is then only
        in the log.
        """
        envelope = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "failed_at": time.time() * 1000,
            "attempts": attempts,
            "payload": payload.decode("utf-8", errors="backslashreplace") if isinstance(payload, bytes) else payload,
        }

        def _op(r):
            pipe = r.pipeline()
            pipe.lpush(self._key, json.dumps(envelope))
            pipe.ltrim(self._key, 0, self._max - 1)
            pipe.execute()

        try:
            self._client.execute_with_retry(_op)
        except redis.RedisError as e:
            self.log.error("dead_letter_write_failed", error=str(e), payload=envelope["payload"])
            return False
        self.log.warning("message_sent_to_dlq", error_type=envelope["error_type"], attempts=attempts)
        return True

    def recent(self, limit: int = 50) -> list[dict]:
        def _op(r):
            return [json.loads(item) for item in r.lrange(self._key, 0, limit - 1)]
        return self._client.execute_with_retry(_op)

    def size(self) -> int:
        return self._client.execute_with_retry(lambda r: r.llen(self._key))
