"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.errors import ApiError
from app.repositories.base import EventStore, StoreError
from app.routes import events_router, users_router
from app.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


def create_app(store: EventStore | None = None) -> FastAPI:
    """Build the application.

    Without an explicit ``store`` the backend is chosen from settings on the
    first request (SQLite when ``EVENTHUB_DATABASE_PATH`` is set, in-memory
    otherwise).
    """
    app = FastAPI(title="Eventhub API", version="1.0.0")
    app.state.store = store

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorResponse(
            code="VALIDATION_ERROR",
            message="Could not parse request",
            details={
                "errors": [
                    {"loc": [str(part) for part in error["loc"]], "msg": error["msg"], "type": error["type"]}
                    for error in exc.errors()
                ]
            },
        )
        return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("store.unavailable method=%s path=%s error=%s", request.method, request.url.path, exc)
        payload = ErrorResponse(code="STORAGE_UNAVAILABLE", message="Storage is unavailable")
        return JSONResponse(status_code=503, content=payload.model_dump(mode="json", exclude_none=True))

    @app.get("/api/v1/health", tags=["Health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    api_prefix = "/api/v1"
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(events_router, prefix=api_prefix)

    return app


app = create_app()
