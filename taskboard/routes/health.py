from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taskboard.config import settings
from taskboard.db import db_ping
from taskboard.redis_client import redis_ping

router = APIRouter(tags=["health"])

# name -> probe; redis only matters while the limiter is on
def _probes() -> dict:
    probes = {"db": db_ping}
    if settings.rate_limit_enabled:
        probes["redis"] = redis_ping
    return probes

@router.get("/health")
def health() -> dict:
    return {"status": "ok", "env": settings.app_env}

@router.get("/ready")
def ready():
    checks: dict[str, bool] = {}
    for name, probe in _probes().items():
        checks[name] = probe()

    ok = all(checks.values())
    body = {"status": "ok" if ok else "unready", "checks": checks}
    return JSONResponse(status_code=200 if ok else 503, content=body)
