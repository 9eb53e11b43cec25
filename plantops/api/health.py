"""
Liveness endpoint for the plant operations API.

GET /health returns {"status": "ok"} with HTTP 200 and needs no token; it
is meant for container health checks and load balancers.

CHANGELOG:
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status."""
    return {"status": "ok"}
