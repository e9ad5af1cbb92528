"""System health endpoint."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import text

from ...config import Settings
from ...infra.db import get_engine
from ...infra.logging import get_logger
from ..dependencies import get_settings

router = APIRouter(prefix="/api", tags=["health"])
logger = get_logger(__name__)


def _entry_store_status() -> str:
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("entry_store_unreachable", extra={"error": str(exc)})
        return "unreachable"
    return "ok"


@router.get("/healthz")
def healthcheck(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """Return coarse-grained backend readiness information."""

    entry_store = _entry_store_status()
    return {
        "status": "ok" if entry_store == "ok" else "degraded",
        "environment": settings.environment,
        "entryStore": entry_store,
    }
