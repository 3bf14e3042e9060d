"""FastAPI application entry point.

Run with `uvicorn app.main:app` (binds HOST/PORT from settings when run
as a script). Every error leaves the app as

    {"error": str, "details": Any, "code": str, "request_id": str}

and every response carries the request's X-Request-ID header.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.v1 import router as api_v1_router
from app.core.config import get_settings
from app.core.database import db_manager
from app.core.errors import BrandPipelineError
from app.core.logging import get_logger, setup_logging
from app.integrations.openai import close_openai, init_openai
from app.integrations.s3 import close_s3, init_s3

setup_logging()
logger = get_logger(__name__)

# Keys redacted from logged request bodies (case-insensitive)
SENSITIVE_FIELDS = frozenset({"password", "token", "secret", "api_key", "authorization"})

# Pydantic error types that mean the field was absent or blank
MISSING_ERROR_TYPES = frozenset({"missing", "string_too_short"})


def sanitize_body(body: Any) -> Any:
    """Copy of a JSON body with sensitive values replaced by ****."""
    if not isinstance(body, dict):
        return body
    return {
        key: "****" if key.lower() in SENSITIVE_FIELDS else sanitize_body(value)
        for key, value in body.items()
    }


def missing_fields(errors: list[dict[str, Any]]) -> list[str] | None:
    """Field names when every validation error is an absent/blank field, else None."""
    if not errors or any(e.get("type") not in MISSING_ERROR_TYPES for e in errors):
        return None
    # loc is ("body", "field", ...) or ("query", "field")
    return [".".join(str(part) for part in e["loc"][1:]) or str(e["loc"][0]) for e in errors]


def error_response(
    request: Request,
    status_code: int,
    error: str,
    code: str,
    details: Any = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "details": details,
            "code": code,
            "request_id": getattr(request.state, "request_id", "unknown"),
        },
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a request_id and logs each request with its outcome and timing."""

    async def _log_body(self, request: Request, request_id: str) -> None:
        body = await request.body()
        if not body:
            return
        try:
            payload: Any = sanitize_body(json.loads(body))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.debug(
                "Request body (non-JSON)",
                extra={"request_id": request_id, "body_length": len(body)},
            )
            return
        logger.debug("Request body", extra={"request_id": request_id, "body": payload})

    async def dispatch(self, request: Request, call_next: Any) -> Any:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.monotonic()

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params) or None,
            },
        )
        if request.method not in ("GET", "HEAD", "OPTIONS") and logger.isEnabledFor(
            logging.DEBUG
        ):
            await self._log_body(request, request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        status_code = response.status_code
        if status_code >= 500:
            level, message = logging.ERROR, "Request failed"
        elif status_code >= 400:
            level, message = logging.WARNING, "Request error"
        else:
            level, message = logging.INFO, "Request completed"
        logger.log(
            level,
            message,
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
            },
        )
        return response


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Absent or blank fields are 400 MISSING_INPUT; any other problem is 422."""
    errors = list(exc.errors())
    logger.warning(
        "Validation error",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "errors": [{"loc": list(e.get("loc", ())), "type": e.get("type")} for e in errors],
        },
    )

    fields = missing_fields(errors)
    if fields is not None:
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Missing required fields",
            "MISSING_INPUT",
            fields,
        )

    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "; ".join(f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in errors),
        "VALIDATION_ERROR",
        [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors],
    )


async def handle_pipeline_error(request: Request, exc: BrandPipelineError) -> JSONResponse:
    logger.error(
        "Pipeline error",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "error_code": exc.code,
            "error_message": exc.message,
        },
    )
    return error_response(request, exc.status_code, exc.message, exc.code, exc.details)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "error_type": type(exc).__name__,
            "error_message": str(exc),
        },
        exc_info=True,
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An internal error occurred. Please try again later.",
        "INTERNAL_ERROR",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Open the database pool and external clients; close them on shutdown."""
    settings = get_settings()
    logger.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )

    db_manager.init_db(settings)

    completion_client, _ = await init_openai()
    if not completion_client.available:
        logger.warning("OpenAI not configured (missing OPENAI_API_KEY)")
    s3_client = await init_s3()
    if not s3_client.available:
        logger.warning("S3 not configured (missing S3_BUCKET/S3_ACCESS_KEY/S3_SECRET_KEY)")

    yield

    logger.info("Shutting down application")
    await close_openai()
    await close_s3()
    await db_manager.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    # The browser client is the only caller in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url] if settings.frontend_url else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(BrandPipelineError, handle_pipeline_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health/db", tags=["Health"])
    async def database_health() -> dict[str, str | bool]:
        """Report whether the database answers SELECT 1."""
        is_healthy = await db_manager.check_connection()
        return {"status": "ok" if is_healthy else "error", "database": is_healthy}

    app.include_router(api_v1_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
