from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from classgrid.api.routes import change_requests, health, schedules
from classgrid.core.config import get_settings
from classgrid.core.exceptions import AppError, InvariantViolationError
from classgrid.core.middleware import (
    RequestSizeLimitMiddleware,
    RequestTimingMiddleware,
    SecurityHeadersMiddleware,
)
from classgrid.db.bootstrap import ensure_runtime_schema_compatibility

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, InvariantViolationError):
        logger.error(
            "Invariant violation on %s %s: %s %s",
            request.method,
            request.url.path,
            exc.internal_message,
            exc.context,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestTimingMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(change_requests.router, prefix=settings.api_prefix, tags=["change-requests"])
app.include_router(schedules.router, prefix=settings.api_prefix, tags=["schedules"])
