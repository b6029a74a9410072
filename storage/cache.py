"""Consumer status mirror — a Redis hash the API reads to report on the worker."""

import time

import redis

from storage.redis_client import RedisClient


class ConsumerStatusCache:
    """
    Keeps the latest consumer state and counters in one Redis hash so any
    API process can read them without talking to the consumer.
    """

    def __init__(self, client: RedisClient, key: str):
        self._client = client
        self._key = key

    def update(self, state: str, **counters: int):
        mapping = {"state": state, "updated_at": time.time() * 1000}
        mapping.update(counters)

        def _op(r):
            r.hset(self._key, mapping=mapping)
        self._client.execute_with_retry(_op, max_retries=1)

    def get(self) -> dict:
        def _op(r):
            raw = r.hgetall(self._key)
            if not raw:
                return {}
            status = {"state": raw.get("state")}
            for k, v in raw.items():
                if k != "state":
                    status[k] = float(v) if k == "updated_at" else int(v)
            return status
        try:
            return self._client.execute_with_retry(_op, max_retries=1)
        except redis.RedisError:
            return {}
