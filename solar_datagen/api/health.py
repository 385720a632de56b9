"""
Health check endpoint.

GET /health returns {"status": "ok"} with HTTP 200 and no authentication,
for container health checks and internal monitoring. The scheduler flag
tells whether the daily timer task is alive.

CHANGELOG:
- 2026-10-08: Initial creation
"""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    """Return a simple health status."""
    runtime = getattr(request.app.state, "runtime", None)
    return {
        "status": "ok",
        "scheduler_running": bool(runtime and runtime.timer.running),
    }
