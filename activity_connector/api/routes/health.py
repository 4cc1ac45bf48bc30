from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.factory import get_store

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(store: AbstractActivityStore = Depends(get_store)) -> JSONResponse:
    """Readiness check: the activity store must answer PING.

    Returns:
        200 with ``{"status": "ok", "store": "up"}`` or 503 with ``store: "down"``.
    """

    result = await store.ping()
    if result.degraded or not result.value:
        return JSONResponse(status_code=503, content={"status": "unavailable", "store": "down"})
    return JSONResponse(status_code=200, content={"status": "ok", "store": "up"})
