"""Shared test fixtures."""

import fakeredis
import mongomock
import pytest

from config import Settings
from processor.consumer import EventConsumer
from processor.dead_letter import DeadLetterQueue
from storage.cache import ConsumerStatusCache
from storage.event_queue import EventQueue
from storage.event_store import EventStore
from storage.redis_client import RedisClient


@pytest.fixture
def settings():
    """Test settings with localhost defaults and no backoff delay."""
    return Settings(
        redis_url="redis://localhost:6379/1",
        mongo_uri="mongodb://localhost:27017",
        mongo_db="analytics_test",
        consumer_backoff_sec=0,
        consumer_max_attempts=3,
        queue_block_timeout=1,
    )


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(settings, redis_server):
    return RedisClient(
        settings,
        client=fakeredis.FakeRedis(server=redis_server, decode_responses=True),
        raw_client=fakeredis.FakeRedis(server=redis_server),
    )


@pytest.fixture
def queue(redis_client, settings):
    return EventQueue(redis_client, settings)


@pytest.fixture
def dead_letters(redis_client, settings):
    return DeadLetterQueue(redis_client, settings)


@pytest.fixture
def store(settings):
    return EventStore(settings, client=mongomock.MongoClient())


@pytest.fixture
def status_cache(redis_client, settings):
    return ConsumerStatusCache(redis_client, settings.consumer_state_key)


@pytest.fixture
def consumer(settings, queue, store, dead_letters, status_cache):
    return EventConsumer(settings, queue, store, dead_letters, status=status_cache)


@pytest.fixture
def make_event():
    """Factory for a valid raw event, with field overrides."""
    def _make(**overrides):
        body = {
            "site_id": "s1",
            "event_type": "pageview",
            "timestamp": "2025-11-12T10:00:00Z",
        }
        body.update(overrides)
        return body
    return _make
