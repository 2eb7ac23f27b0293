"""HTTP trigger for the producer: ``POST /api/scanner``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from template_scanner.pipeline.producer import enqueue_stale
from template_scanner.services import ScannerServices

logger = logging.getLogger(__name__)

ServicesFactory = Callable[[], AbstractAsyncContextManager[ScannerServices]]

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ─── Response Models ─────────────────────────────────────────


class ScanJob(BaseModel):
    """One template that was put on the queue."""

    id: int
    visit_link: str


class EnqueueResponse(BaseModel):
    message: str
    jobs: list[ScanJob] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str


# ─── App ─────────────────────────────────────────────────────


def create_app(services_factory: ServicesFactory, *, batch_size: int = 10) -> FastAPI:
    """Build the trigger app.

    ``services_factory`` is entered once for the lifetime of the app, so the
    HTTP and queue connections are shared across requests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with services_factory() as services:
            app.state.services = services
            yield

    app = FastAPI(title="template-scanner", docs_url=None, redoc_url=None, lifespan=lifespan)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException):
        # methods outside _ALL_METHODS never reach trigger_scan
        if exc.status_code == 405:
            return JSONResponse({"error": "Method not allowed"}, status_code=405, headers=exc.headers)
        return await http_exception_handler(request, exc)

    @app.api_route(
        "/api/scanner",
        methods=_ALL_METHODS,
        response_model=EnqueueResponse,
        responses={405: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def trigger_scan(request: Request):
        if request.method != "POST":
            return JSONResponse({"error": "Method not allowed"}, status_code=405)

        services: ScannerServices = request.app.state.services
        try:
            result = await enqueue_stale(services.store, services.queue, max_batch=batch_size)
        except Exception as exc:
            logger.exception("Scanner trigger failed")
            return JSONResponse({"error": str(exc)}, status_code=500)
        return EnqueueResponse.model_validate(result.to_dict())

    return app
