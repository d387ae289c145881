"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check — verifies database connectivity."""
    database_ok = await ping(db)
    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": database_ok,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if not database_ok:
        logger.error("Health check failed: database unreachable")
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body
