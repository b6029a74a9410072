"""Ingestion endpoint: one analytics event per POST."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_ingestion
from ingestion.service import IngestionService, SubmitStatus

router = APIRouter()

_STATUS_CODES = {
    SubmitStatus.ACCEPTED: 202,
    SubmitStatus.REJECTED: 400,
    SubmitStatus.QUEUE_ERROR: 500,
}


@router.post("/event")
def post_event(
    body: dict[str, Any] = Body(...),
    ingestion: IngestionService = Depends(get_ingestion),
):
    """Validate and enqueue an event. 202 means queued, not yet stored."""
    result = ingestion.submit(body)
    if result.accepted:
        content = {"status": "accepted"}
    else:
        content = {"error": result.reason}
    return JSONResponse(status_code=_STATUS_CODES[result.status], content=content)
