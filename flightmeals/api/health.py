"""Health check endpoint."""
import logging

from fastapi import APIRouter, Request

from flightmeals.core.config import settings
from flightmeals.services.session import manager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request):
    """Report liveness plus the meal service this engine talks to."""
    client = request.client.host if request.client else "unknown"
    logger.debug(f"[HEALTH] Health check requested - client: {client}")
    return {
        "status": "healthy",
        "mealService": settings.api_base_url,
        "activeSessions": manager.active_session_count(),
    }
