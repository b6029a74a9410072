"""Health and readiness check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_redis, get_store
from storage.event_store import EventStore
from storage.redis_client import RedisClient

router = APIRouter()


@router.get("/health")
def health():
    """Liveness probe — returns 200 if the process is alive."""
    return {"status": "ok"}


@router.get("/ready")
def ready(
    redis: RedisClient = Depends(get_redis),
    store: EventStore = Depends(get_store),
):
    """Readiness probe — checks the queue and the document store."""
    redis_ok = redis.ping()
    store_ok = store.ping()
    body = {
        "status": "ready" if redis_ok and store_ok else "not_ready",
        "redis": "connected" if redis_ok else "unreachable",
        "mongo": "connected" if store_ok else "unreachable",
        "circuit_breaker": redis.circuit_state,
    }
    if not (redis_ok and store_ok):
        return JSONResponse(status_code=503, content=body)
    return body
