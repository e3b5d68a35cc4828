"""FastAPI application entry point.

Configures CORS, structured logging, error handlers, lifespan events
(including the APScheduler OTP sweep) and router registration.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.constants import MSG_INTERNAL_ERROR, MSG_INVALID_REQUEST
from app.core.errors import ServiceError
from app.core.logging import setup_logging
from app.dependencies import get_otp_registry
from app.routers import auth, health, users
from app.scheduler.jobs import shutdown_scheduler, start_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: the sweep job lives exactly as long as the app."""
    setup_logging()
    logger.info("Application starting up")
    start_scheduler(get_otp_registry())
    yield
    shutdown_scheduler()
    logger.info("Application shutting down")


app = FastAPI(
    title="Civil With Karthik Auth API",
    description="Google and email OTP sign-in plus user profile storage",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Error handlers
# Every failure leaves as {success: false, message}.
# ---------------------------------------------------------------------------

def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
    return _failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Raw input is left out of the log; it may carry an OTP
    logger.info(
        "request_rejected",
        extra={"path": request.url.path, "error_count": len(exc.errors())},
    )
    return _failure(400, MSG_INVALID_REQUEST)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return _failure(500, MSG_INTERNAL_ERROR)


# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
