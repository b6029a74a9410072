from .redis_client import CircuitOpenError, RedisClient
from .event_queue import EventQueue, QueueError
from .event_store import EventStore, StoreError, build_filter
from .cache import ConsumerStatusCache

__all__ = [
    "CircuitOpenError",
    "RedisClient",
    "EventQueue",
    "QueueError",
    "EventStore",
    "StoreError",
    "build_filter",
    "ConsumerStatusCache",
]
