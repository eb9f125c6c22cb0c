"""Health check endpoints."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.dependencies import get_generation_client
from app.db.database import get_db
from app.services.gemini_service import GenerationClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check(
    db: Session = Depends(get_db),
    client: GenerationClient = Depends(get_generation_client),
) -> Dict[str, Any]:
    """
    Readiness check: database reachable, generation service reachable.

    The service stays "ready" when only generation is down, since recipes
    still come back through the fallback path.
    """
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.warning("Readiness: database check failed: %s", e)
        database_ok = False

    check = getattr(client, "check_connection", None)
    generation_ok = await check() if check is not None else True

    return {
        "status": "ready" if database_ok else "unavailable",
        "dependencies": {
            "database": "ok" if database_ok else "error",
            "generation": "ok" if generation_ok else "degraded",
        },
    }
