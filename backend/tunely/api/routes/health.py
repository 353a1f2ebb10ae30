"""Health Probes — liveness for the process, readiness for the entity store.

Invariants:
    - GET /health/ answers 200 while the process runs, without touching the DB
    - GET /health/ready answers 503 and names every failing check
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from tunely import __version__
from tunely.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


async def _readiness_checks() -> dict[str, bool]:
    # db_manager is read at call time; it is created in the app lifespan
    manager = database.db_manager
    return {"database": bool(manager) and await manager.health_check()}


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": "tunely-api", "version": __version__}


@router.get("/ready")
async def readiness():
    checks = await _readiness_checks()
    failing = sorted(name for name, ok in checks.items() if not ok)
    if failing:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "failing": failing},
            headers={"Retry-After": "5"},
        )
    return {
        "status": "ready",
        "checks": {name: "healthy" for name in checks},
    }
