"""Prometheus-compatible metrics endpoint."""

import time

import redis
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from api.dependencies import get_queue
from processor.consumer import ConsumerState
from storage.event_queue import EventQueue, QueueError

router = APIRouter()

_CIRCUIT_STATES = {"closed": 0, "open": 1, "half_open": 2}
_CONSUMER_STATES = {state.value: i for i, state in enumerate(ConsumerState)}


def _gauge(lines: list[str], name: str, help_text: str, value: float):
    lines.extend([
        f"# HELP {name} {help_text}",
        f"# TYPE {name} gauge",
        f"{name} {value}",
        "",
    ])


@router.get("/metrics")
def prometheus_metrics(request: Request, queue: EventQueue = Depends(get_queue)):
    """Expose pipeline metrics in Prometheus text exposition format."""
    state = request.app.state
    lines: list[str] = []

    try:
        _gauge(lines, "analytics_queue_depth", "Events waiting in the queue", queue.depth())
        _gauge(lines, "analytics_queue_in_flight", "Events taken but not yet acknowledged", queue.in_flight())
        _gauge(lines, "analytics_dead_letters", "Payloads parked in the dead letter list", state.dead_letters.size())
    except (QueueError, redis.RedisError):
        pass

    consumer = state.consumer_status.get()
    if consumer:
        _gauge(
            lines,
            "analytics_consumer_state",
            "Consumer state (0=waiting, 1=processing, 2=backing_off, 3=stopped)",
            _CONSUMER_STATES.get(consumer["state"], -1),
        )
        for counter in ("processed", "dropped", "failed"):
            _gauge(
                lines,
                f"analytics_consumer_{counter}",
                f"Events {counter} by the consumer since it started",
                consumer.get(counter, 0),
            )

    _gauge(
        lines,
        "redis_circuit_breaker_state",
        "Circuit breaker state (0=closed, 1=open, 2=half_open)",
        _CIRCUIT_STATES.get(state.redis.circuit_state, 0),
    )
    _gauge(lines, "api_uptime_seconds", "Seconds since API start", round(time.time() - state.start_time, 1))
    return PlainTextResponse("\n".join(lines), media_type="text/plain; version=0.0.4")
