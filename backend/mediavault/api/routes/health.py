"""
Health endpoints.

``/ready`` reports whether the studio store and the search index can be
queried. ``/version`` reports what this instance runs with, including the
label push toggles and the events that have plugins bound.
"""

from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.core.config import Settings
from mediavault.core.dependencies import get_db, get_settings
from mediavault.models import StudioSearchDocument

router = APIRouter()


@router.get("", response_model=Dict[str, str])
async def health_check() -> Dict[str, str]:
    """Liveness: the process is up."""
    return {"status": "healthy"}


async def _check_store(db: AsyncSession) -> Dict[str, Any]:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        await db.rollback()
        return {"status": "not ready", "error": str(e)}
    return {"status": "ready"}


async def _check_search_index(db: AsyncSession) -> Dict[str, Any]:
    try:
        result = await db.execute(
            select(func.count()).select_from(StudioSearchDocument)
        )
    except SQLAlchemyError as e:
        await db.rollback()
        return {"status": "not ready", "error": str(e)}
    return {"status": "ready", "documents": result.scalar_one()}


@router.get("/ready", response_model=Dict[str, Any])
async def readiness_check(
    db: AsyncSession = Depends(get_db),
) -> Union[Dict[str, Any], JSONResponse]:
    """Readiness: 503 unless the store and the search index answer."""
    checks = {
        "database": await _check_store(db),
        "search_index": await _check_search_index(db),
    }
    ready = all(check["status"] == "ready" for check in checks.values())
    body = {"status": "ready" if ready else "not ready", "checks": checks}
    if not ready:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/version", response_model=Dict[str, Any])
async def version_info(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Name, version and studio behaviour switches of this instance."""
    return {
        "name": settings.app.name,
        "version": settings.app.version,
        "environment": settings.app.environment,
        "apply_studio_labels": [
            toggle.value for toggle in settings.matching.apply_studio_labels
        ],
        "plugin_events": sorted(settings.plugins.events),
    }
