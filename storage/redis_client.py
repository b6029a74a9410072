"""Pooled Redis client guarded by a circuit breaker, shared by queue and state writers."""

import time
from typing import Any, Callable

import redis

from config import Settings, configure_logging


class CircuitBreaker:
    """
    Three-state circuit breaker: CLOSED → OPEN → HALF_OPEN.

    CLOSED: Normal operation. Track consecutive failures.
    OPEN:   After failure_threshold failures, reject all calls immediately.
    HALF_OPEN: After recovery_timeout, allow one test call through.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: float = 30.0):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.state = self.CLOSED
        self.failure_count = 0
        self.last_failure_time = 0.0

    def can_execute(self) -> bool:
        if self.state == self.OPEN:
            if time.monotonic() - self.last_failure_time > self.recovery_timeout:
                self.state = self.HALF_OPEN
                return True
            return False
        return True

    def record_success(self):
        self.failure_count = 0
        self.state = self.CLOSED

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = time.monotonic()
        if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = self.OPEN


class CircuitOpenError(redis.ConnectionError):
    """Raised instead of calling Redis while the breaker is open."""


class RedisClient:
    """Process-scoped Redis handle: connection pool, circuit breaker and retries.

    Two pools share one server: a decoding one for hashes and JSON lists,
    and a raw one for queue payloads, which are opaque bytes. Tests (or
    embedding code) may hand in ready ``client`` / ``raw_client`` handles;
    otherwise pools are built from ``settings.redis_url``. Blocking list
    commands rely on the pools having no socket timeout.
    """

    def __init__(
        self,
        settings: Settings,
        client: redis.Redis | None = None,
        raw_client: redis.Redis | None = None,
    ):
        self.log = configure_logging("redis-client", settings.log_level)
        self._client = client
        self._raw_client = raw_client
        self._pool: redis.ConnectionPool | None = None
        self._raw_pool: redis.ConnectionPool | None = None
        if client is None:
            self._pool = redis.ConnectionPool.from_url(
                settings.redis_url,
                max_connections=settings.redis_pool_size,
                decode_responses=True,
            )
        if raw_client is None:
            self._raw_pool = redis.ConnectionPool.from_url(
                settings.redis_url,
                max_connections=settings.redis_pool_size,
            )
        if self._pool is not None or self._raw_pool is not None:
            self.log.info("redis_pool_created", url=settings.redis_url, pool_size=settings.redis_pool_size)
        self._circuit = CircuitBreaker(failure_threshold=5, recovery_timeout=30)

    def get_client(self) -> redis.Redis:
        if self._client is not None:
            return self._client
        return redis.Redis(connection_pool=self._pool)

    def get_raw_client(self) -> redis.Redis:
        """Client that returns replies as bytes, undecoded."""
        if self._raw_client is not None:
            return self._raw_client
        return redis.Redis(connection_pool=self._raw_pool)

    def execute_with_retry(
        self, func: Callable[[redis.Redis], Any], max_retries: int = 3, raw: bool = False
    ) -> Any:
        """Run ``func`` against Redis, retrying connection failures with backoff.

        ``raw`` selects the bytes-mode client.
        """
        if not self._circuit.can_execute():
            raise CircuitOpenError("Redis circuit breaker is open")

        last_error: Exception | None = None
        for attempt in range(max_retries):
            try:
                result = func(self.get_raw_client() if raw else self.get_client())
                self._circuit.record_success()
                return result
            except (redis.ConnectionError, redis.TimeoutError) as e:
                last_error = e
                self._circuit.record_failure()
                if attempt < max_retries - 1 and self._circuit.can_execute():
                    backoff = 0.1 * (2 ** attempt)
                    self.log.warning(
                        "redis_retry",
                        attempt=attempt + 1,
                        backoff=backoff,
                        error=str(e),
                    )
                    time.sleep(backoff)
                else:
                    break

        raise last_error  # type: ignore[misc]

    def ping(self) -> bool:
        try:
            return bool(self.execute_with_retry(lambda r: r.ping(), max_retries=1))
        except redis.RedisError:
            return False

    def close(self):
        for pool in (self._pool, self._raw_pool):
            if pool is not None:
                pool.disconnect()
        if self._pool is not None or self._raw_pool is not None:
            self.log.info("redis_pool_closed")

    def __enter__(self) -> "RedisClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def circuit_state(self) -> str:
        return self._circuit.state
