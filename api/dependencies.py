"""FastAPI dependency injection."""

from fastapi import Request

from ingestion.service import IngestionService
from reporting.service import ReportingService
from storage.event_queue import EventQueue
from storage.event_store import EventStore
from storage.redis_client import RedisClient


def get_redis(request: Request) -> RedisClient:
    return request.app.state.redis


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def get_queue(request: Request) -> EventQueue:
    return request.app.state.queue


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion


def get_reporting(request: Request) -> ReportingService:
    return request.app.state.reporting
