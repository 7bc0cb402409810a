"""
Utility routes
"""
from fastapi import APIRouter

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
async def health_check() -> bool:
    """
    Liveness probe for load balancers and container orchestrators.

    Request path: GET /api/utils/health-check/
    """
    return True
