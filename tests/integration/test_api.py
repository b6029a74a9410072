"""End-to-end HTTP tests: ingestion → queue → consumer → store → reporting."""

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from storage.event_queue import EventQueue, QueueError
from storage.event_store import StoreError


@pytest.fixture
def client(settings, redis_client, store):
    app = create_app(settings, redis_client=redis_client, event_store=store)
    with TestClient(app) as c:
        yield c


class TestIngestionEndpoint:
    def test_accepts_valid_event(self, client, queue, make_event):
        resp = client.post("/event", json=make_event())
        assert resp.status_code == 202
        assert resp.json() == {"status": "accepted"}
        assert queue.depth() == 1

    def test_missing_event_type(self, client, queue, consumer, store):
        resp = client.post("/event", json={"site_id": "s1", "timestamp": "2025-11-12T10:00:00Z"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "event_type is required"}
        assert queue.depth() == 0
        assert consumer.run_once(timeout=1) is False
        assert store.count({"site_id": "s1"}) == 0

    def test_reports_first_missing_field(self, client):
        resp = client.post("/event", json={"timestamp": "2025-11-12T10:00:00Z"})
        assert resp.json() == {"error": "site_id is required"}

    def test_non_object_body(self, client):
        resp = client.post("/event", json=["not", "an", "event"])
        assert resp.status_code == 400
        assert resp.json() == {"error": "invalid_request"}

    def test_queue_unavailable(self, client, make_event, monkeypatch):
        def unavailable(self, payload):
            raise QueueError("redis down")

        monkeypatch.setattr(EventQueue, "append", unavailable)
        resp = client.post("/event", json=make_event())
        assert resp.status_code == 500
        assert resp.json() == {"error": "queue_error"}


class TestReportingEndpoint:
    def test_requires_site_id(self, client):
        resp = client.get("/stats")
        assert resp.status_code == 400
        assert resp.json() == {"error": "site_id is required"}

    def test_end_to_end_single_event(self, client, consumer, make_event):
        assert client.post("/event", json=make_event()).status_code == 202
        consumer.run_once(timeout=1)

        resp = client.get("/stats", params={"site_id": "s1", "date": "2025-11-12"})
        assert resp.status_code == 200
        assert resp.json() == {
            "site_id": "s1",
            "date": "2025-11-12",
            "total_views": 1,
            "unique_users": 0,
            "top_paths": [{"path": "/", "views": 1}],
        }

    def test_aggregates_across_dates_when_date_absent(self, client, consumer, make_event):
        events = [
            make_event(user_id="u1", path="/a"),
            make_event(user_id="u1", path="/a", timestamp="2025-11-13T08:00:00Z"),
            make_event(user_id="u2", path="/b"),
            make_event(path="/a"),
        ]
        for event in events:
            client.post("/event", json=event)
        for _ in events:
            consumer.run_once(timeout=1)

        body = client.get("/stats", params={"site_id": "s1"}).json()
        assert body["date"] is None
        assert body["total_views"] == 4
        assert body["unique_users"] == 2
        assert body["top_paths"] == [{"path": "/a", "views": 3}, {"path": "/b", "views": 1}]

        one_day = client.get("/stats", params={"site_id": "s1", "date": "2025-11-13"}).json()
        assert one_day["total_views"] == 1

    def test_store_failure(self, client, store, monkeypatch):
        def broken(match):
            raise StoreError("mongo down")

        monkeypatch.setattr(store, "count", broken)
        resp = client.get("/stats", params={"site_id": "s1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "internal_error"}


class TestOperationalEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_metrics(self, client, queue, make_event):
        client.post("/event", json=make_event())
        text = client.get("/metrics").text
        assert "analytics_queue_depth 1" in text
        assert "redis_circuit_breaker_state 0" in text
