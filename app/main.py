from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router
from logging_config import configure_logging
from services.traffic import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    logger.info(
        "Traffic service ready",
        extra={"record_count": len(service.table.scan())},
    )
    try:
        yield
    finally:
        build_default_service.cache_clear()


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _describe_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    cause = (error.get("ctx") or {}).get("error")
    message = str(cause) if cause is not None else error.get("msg", "Invalid value")
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [_describe_validation_error(error) for error in exc.errors()]
    return _error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "Invalid request")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"method": request.method, "path": request.url.path},
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    response = await call_next(request)
    logger.info(
        "Handled request",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
        },
    )
    return response


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    if not settings.auth_secret:
        logger.error("TRAFFIC_AUTH_SECRET is not set; every /traffic request will fail with 500")
    app = FastAPI(
        title="Traffic Dashboard API",
        description="CRUD API for daily visit counts with per-date uniqueness.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()
