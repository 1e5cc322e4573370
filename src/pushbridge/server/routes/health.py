"""Health check routes."""

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """Readiness check endpoint.

    Returns:
        Readiness status with pending message and armed timer counts.
    """
    scheduler = request.app.state.scheduler
    return {
        "status": "ready" if scheduler.running else "starting",
        "pending": len(scheduler.store),
        "timers": len(scheduler.timers),
    }
