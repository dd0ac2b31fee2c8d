from collections.abc import Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from taskboard.db import db_ping
from taskboard.redis_client import redis_ping

router = APIRouter(tags=["health"])

def _probe(fn: Callable[[], bool]) -> tuple[bool, str | None]:
    try:
        return bool(fn()), None
    except Exception as e:
        msg = str(e).strip()
        return False, f"{e.__class__.__name__}{(': ' + msg) if msg else ''}"

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# 200 only when db and redis answer, 503 with per-check details otherwise
@router.get("/ready")
def ready():
    results = {"db": _probe(db_ping), "redis": _probe(redis_ping)}
    checks = {name: ok for name, (ok, _) in results.items()}
    errors = {name: err for name, (_, err) in results.items() if err}

    ok = all(checks.values())
    body: dict = {"status": "ok" if ok else "unready", "checks": checks}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=200 if ok else 503, content=body)
