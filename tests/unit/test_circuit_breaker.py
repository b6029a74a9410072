"""Tests for the Redis circuit breaker and retry wrapper."""

import pytest
import redis

from storage.redis_client import CircuitBreaker, CircuitOpenError, RedisClient


class TestCircuitBreaker:
    def test_opens_after_threshold(self):
        cb = CircuitBreaker(failure_threshold=2, recovery_timeout=60)
        cb.record_failure()
        assert cb.can_execute()
        cb.record_failure()
        assert cb.state == "open"
        assert not cb.can_execute()

    def test_half_open_after_timeout(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=-1)
        cb.record_failure()
        assert cb.can_execute()
        assert cb.state == "half_open"

    def test_half_open_failure_reopens(self):
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=0)
        cb.state = "half_open"
        cb.record_failure()
        assert cb.state == "open"

    def test_success_closes(self):
        cb = CircuitBreaker(failure_threshold=1)
        cb.record_failure()
        cb.record_success()
        assert cb.state == "closed"
        assert cb.failure_count == 0


class TestExecuteWithRetry:
    def test_retries_connection_errors(self, settings, monkeypatch):
        monkeypatch.setattr("storage.redis_client.time.sleep", lambda s: None)
        client = RedisClient(settings, client=object())
        calls = []

        def flaky(r):
            calls.append(r)
            if len(calls) < 3:
                raise redis.ConnectionError("down")
            return "ok"

        assert client.execute_with_retry(flaky) == "ok"
        assert len(calls) == 3
        assert client.circuit_state == "closed"

    def test_raises_last_error(self, settings, monkeypatch):
        monkeypatch.setattr("storage.redis_client.time.sleep", lambda s: None)
        client = RedisClient(settings, client=object())

        def down(r):
            raise redis.ConnectionError("down")

        with pytest.raises(redis.ConnectionError):
            client.execute_with_retry(down)

    def test_fails_fast_when_open(self, settings):
        client = RedisClient(settings, client=object())
        client._circuit.state = "open"
        client._circuit.last_failure_time = float("inf")
        with pytest.raises(CircuitOpenError):
            client.execute_with_retry(lambda r: "never")
