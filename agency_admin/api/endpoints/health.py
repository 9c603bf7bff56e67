"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter

from ...infrastructure.dependencies import get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, object]:
    """Check the health of the console's adapters.

    Returns:
        Overall status plus availability of each adapter
    """
    container = get_service_container()
    adapters = {
        "admin_api": container.get_admin_api().is_available,
        "supabase": (
            container.get_role_store().is_available
            and container.get_conversation_store().is_available
        ),
    }
    return {
        "status": "healthy" if all(adapters.values()) else "degraded",
        "adapters": adapters,
    }
