from fastapi import APIRouter
from fastapi.responses import JSONResponse

from collabill.db import db_ping
from collabill.redis_client import redis_ping

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# readiness probe
@router.get("/ready")
def ready():
    checks: dict[str, bool] = {
        "db": db_ping(),
        "redis": redis_ping(),
    }
    ok = all(checks.values())

    # 200 only when db + redis are reachable, 503 with details if not
    return JSONResponse(
        status_code=200 if ok else 503,
        content={"status": "ok" if ok else "unready", "checks": checks},
    )
