from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from city_explorer.api.router import api_router
from city_explorer.core.errors import (
    GENERIC_ERROR_MESSAGE,
    APIError,
    CityExplorerError,
)
from city_explorer.core.settings import get_settings


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="City Explorer API")

    def _with_trace_id_header(
        headers: dict[str, str] | None, trace_id: str | None
    ) -> dict[str, str] | None:
        """Return headers merged with X-Trace-Id when trace_id is present."""

        if not trace_id:
            return headers
        merged: dict[str, str] = dict(headers or {})
        merged["X-Trace-Id"] = trace_id
        return merged

    def _generic_error(
        request, exc: BaseException, *, reason: str | None = None
    ) -> PlainTextResponse:
        # Clients only ever see one message; the cause stays in the logs.
        trace_id = getattr(request.state, "trace_id", None)
        method = getattr(request, "method", None)
        path = getattr(getattr(request, "url", None), "path", None)
        logger.error(
            "%s (trace_id=%s method=%s path=%s): %s",
            type(exc).__name__,
            trace_id,
            method,
            path,
            reason if reason is not None else exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return PlainTextResponse(
            GENERIC_ERROR_MESSAGE,
            status_code=500,
            headers=_with_trace_id_header(None, trace_id),
        )

    # The browser front end lives on another origin and sends no credentials.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_allow_origin],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _trace_id_middleware(request, call_next):
        trace_id = request.headers.get("X-Trace-Id") or str(uuid.uuid4())
        request.state.trace_id = trace_id
        response = await call_next(request)
        response.headers["X-Trace-Id"] = trace_id
        return response

    @app.exception_handler(APIError)
    async def _api_error_handler(request, exc: APIError):
        reason = f"{exc.code}: {exc.message}"
        if exc.details is not None:
            reason = f"{reason} details={exc.details!r}"
        return _generic_error(request, exc, reason=reason)

    @app.exception_handler(CityExplorerError)
    async def _domain_error_handler(request, exc: CityExplorerError):
        return _generic_error(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request, exc: RequestValidationError):
        return _generic_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request, exc: StarletteHTTPException):
        trace_id = getattr(request.state, "trace_id", None)
        return PlainTextResponse(
            exc.detail if isinstance(exc.detail, str) else "HTTP error",
            status_code=exc.status_code,
            headers=_with_trace_id_header(exc.headers, trace_id),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request, exc: Exception):
        return _generic_error(request, exc)

    app.include_router(api_router)

    return app


app = create_app()
