"""
Health checks: process liveness and database reachability.
"""

from fastapi import APIRouter

from app.database import ping_database
from app.errors import ServiceUnavailableError

router = APIRouter()


@router.get("", response_model=dict, summary="Liveness")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/database", response_model=dict, summary="MongoDB connectivity")
async def database_health() -> dict:
    if not await ping_database():
        raise ServiceUnavailableError("Database unavailable")
    return {"status": "ok", "database": "connected"}
