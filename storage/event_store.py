"""MongoDB-backed store of event records plus the aggregation queries reporting needs."""

from typing import Any

from pymongo import ASCENDING, DESCENDING, IndexModel, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from config import Settings, configure_logging


class StoreError(Exception):
    """The document store failed a read or a write."""


def build_filter(site_id: str, date: str | None = None) -> dict[str, Any]:
    """Equality match on tenant, narrowed to one date partition when given."""
    match: dict[str, Any] = {"site_id": site_id}
    if date:
        match["date"] = date
    return match


class EventStore:
    """
    Append-only collection of event records. Documents are never updated or
    deleted here; every insert is independent (no dedup key, no upsert).
    """

    INDEXES = [
        IndexModel([("site_id", ASCENDING)]),
        IndexModel([("timestamp", ASCENDING)]),
        IndexModel([("date", ASCENDING)]),
        IndexModel([("site_id", ASCENDING), ("date", ASCENDING)]),
    ]

    def __init__(self, settings: Settings, client: MongoClient | None = None):
        self.log = configure_logging("event-store", settings.log_level)
        self._owns_client = client is None
        self._client = client if client is not None else MongoClient(settings.mongo_uri, tz_aware=True)
        self._collection: Collection = self._client[settings.mongo_db][settings.mongo_collection]
        self.log.info("event_store_ready", db=settings.mongo_db, collection=settings.mongo_collection)

    def _run(self, op, **context):
        try:
            return op(self._collection)
        except PyMongoError as e:
            self.log.error("store_command_failed", error=str(e), **context)
            raise StoreError(str(e)) from e

    def ensure_indexes(self) -> None:
        self._run(lambda c: c.create_indexes(self.INDEXES), command="create_indexes")

    def insert(self, document: dict[str, Any]) -> Any:
        # insert_one adds _id to the dict it is given
        result = self._run(lambda c: c.insert_one(dict(document)), command="insert_one")
        return result.inserted_id

    def count(self, match: dict[str, Any]) -> int:
        return self._run(lambda c: c.count_documents(match), command="count_documents")

    def distinct_users(self, match: dict[str, Any]) -> int:
        """Distinct user ids, ignoring anonymous (null or empty) events."""
        users = self._run(lambda c: c.distinct("user_id", match), command="distinct")
        return sum(1 for u in users if u is not None and u != "")

    def top_paths(self, match: dict[str, Any], limit: int = 10) -> list[dict[str, Any]]:
        pipeline = [
            {"$match": match},
            {"$group": {"_id": "$path", "views": {"$sum": 1}}},
            {"$sort": {"views": DESCENDING, "_id": ASCENDING}},
            {"$limit": limit},
        ]
        rows = self._run(lambda c: list(c.aggregate(pipeline)), command="aggregate")
        return [{"path": row["_id"], "views": row["views"]} for row in rows]

    def ping(self) -> bool:
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
            self.log.info("event_store_closed")

    def __enter__(self) -> "EventStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
