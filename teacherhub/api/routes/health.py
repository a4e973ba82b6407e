"""Health Probes — liveness and readiness for the TeacherHub API.

Invariants:
    - GET /health/ answers 200 while the process runs, without touching storage
    - GET /health/ready answers 503 when the durable slot cannot be read
    - Readiness reports the in-memory record counts so a stale or empty load is visible

Design Decisions:
    - Storage is taken from app.state, the same object the store persists through
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "teacherhub-api"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(request: Request):
    return {"status": "healthy", "service": SERVICE_NAME, "version": request.app.version}


@router.get("/ready")
async def readiness(request: Request):
    storage = getattr(request.app.state, "storage", None)
    if storage is None or not await storage.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "storage_unavailable"},
        )

    store = getattr(request.app.state, "store", None)
    loaded = store.snapshot if store is not None else None
    return {
        "status": "ready",
        "checks": {"storage": "healthy"},
        "records": {
            "students": len(loaded.students) if loaded else 0,
            "groups": len(loaded.groups) if loaded else 0,
        },
    }
