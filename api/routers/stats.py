"""Reporting endpoint: aggregated traffic stats for one site."""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_reporting
from reporting.service import ReportingService

router = APIRouter()


@router.get("/stats")
def get_stats(
    site_id: str | None = Query(default=None, description="Tenant to report on"),
    date: str | None = Query(default=None, description="Optional YYYY-MM-DD partition"),
    reporting: ReportingService = Depends(get_reporting),
):
    """Total views, distinct users and top paths for a site, optionally one day."""
    return reporting.stats(site_id, date).to_dict()
