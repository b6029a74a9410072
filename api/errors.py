"""Exception handlers that keep every failure in the ``{"error": code}`` shape."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config import configure_logging
from reporting.service import MissingParameterError
from storage.event_store import StoreError

log = configure_logging("api-errors")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "invalid_request"})

    @app.exception_handler(MissingParameterError)
    async def missing_parameter_handler(request: Request, exc: MissingParameterError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        log.error("request_store_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "internal_error"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error("request_unhandled_error", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": "internal_error"})
