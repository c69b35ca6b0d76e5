from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from teamsync.core.cache import cache_service
from teamsync.core.worker import automation_manager
from teamsync.db.mongodb import db

router = APIRouter()


@router.get("/live", summary="Liveness Probe")
async def liveness():
    """
    Liveness probe to check if the application process is running.
    """
    return {"status": "alive"}


@router.get("/ready", summary="Readiness Probe")
async def readiness():
    """
    Detailed readiness probe.
    Checks:
    1. MongoDB connectivity (ping)
    2. Automation sweeper status
    3. Redis cache availability (optional - service can run without it)
    """
    components = {"database": "unknown", "automation": "unknown", "cache": "unknown"}
    is_ready = True

    # 1. Check MongoDB
    try:
        if db.client:
            await db.client.admin.command("ping")
            components["database"] = "connected"
        else:
            components["database"] = "client_not_initialized"
            is_ready = False
    except Exception as e:
        components["database"] = f"error: {str(e)}"
        is_ready = False

    # 2. Check the sweeper. Membership requests do not depend on it.
    if not automation_manager.enabled:
        components["automation"] = "disabled"
    elif automation_manager.running:
        components["automation"] = f"running (every {automation_manager.interval_minutes} minutes)"
    else:
        components["automation"] = "stopped"

    # 3. Check Redis Cache (optional - degraded but functional without it)
    try:
        cache_health = await cache_service.health_check()
        if cache_health.get("status") == "healthy":
            components["cache"] = "connected"
        else:
            components["cache"] = "unavailable (degraded mode)"
    except Exception as e:
        components["cache"] = f"unavailable: {str(e)}"

    if is_ready:
        return {"status": "ready", "components": components}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "components": components},
    )


@router.get("/cache", summary="Cache Health")
async def cache_health():
    """
    Get cache connection status.
    """
    try:
        return await cache_service.health_check()
    except Exception as e:
        return {
            "status": "error",
            "error": str(e),
            "available": False,
        }
