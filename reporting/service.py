"""Reporting: per-site traffic stats computed from stored event records."""

from dataclasses import asdict, dataclass, field
from typing import Any

from config import Settings, configure_logging
from storage.event_store import EventStore, build_filter


class MissingParameterError(ValueError):
    pass


@dataclass
class SiteStats:
    site_id: str
    date: str | None
    total_views: int
    unique_users: int
    top_paths: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ReportingService:
    """
    The three metrics are separate store queries, not one snapshot; under
    concurrent ingestion they may reflect slightly different moments.
    """

    def __init__(self, store: EventStore, settings: Settings):
        self._store = store
        self._top_n = settings.top_paths_limit
        self.log = configure_logging("reporting", settings.log_level)

    def stats(self, site_id: str | None, date: str | None = None) -> SiteStats:
        if not site_id:
            raise MissingParameterError("site_id is required")
        date = date or None

        match = build_filter(site_id, date)
        stats = SiteStats(
            site_id=site_id,
            date=date,
            total_views=self._store.count(match),
            unique_users=self._store.distinct_users(match),
            top_paths=self._store.top_paths(match, self._top_n),
        )
        self.log.debug("stats_computed", site_id=site_id, date=date, total_views=stats.total_views)
        return stats
