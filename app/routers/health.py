"""Liveness and health endpoints.

GET / returns a plain-text banner.  GET /health reports store connectivity,
scheduler state and the number of live OTP entries; 503 when the store is
unreachable.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse, PlainTextResponse

from app.core.config import settings
from app.dependencies import get_otp_registry, get_user_directory
from app.scheduler.jobs import is_scheduler_running
from app.services.otp import OtpRegistry
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return f"{settings.BRAND_NAME} Auth Server is running!"


@router.get("/health")
def health_check(
    directory: UserDirectory = Depends(get_user_directory),
    registry: OtpRegistry = Depends(get_otp_registry),
) -> Any:
    """Return 200 when the user store answers, 503 otherwise."""
    db_status = "disconnected"

    try:
        if directory.ping():
            db_status = "connected"
    except Exception:
        logger.warning("Health check: Supabase connection failed", exc_info=True)

    payload: dict[str, Any] = {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "scheduler": "running" if is_scheduler_running() else "stopped",
        "pending_otps": len(registry),
    }

    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload)

    return payload
