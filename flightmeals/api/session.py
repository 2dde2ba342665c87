"""Shopper session endpoints."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from flightmeals.core.dependencies import SESSION_COOKIE, get_session_manager
from flightmeals.services.session.manager import ShopperSessionManager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.delete("/api/session")
async def end_session(
    request: Request,
    manager: ShopperSessionManager = Depends(get_session_manager),
):
    """End the caller's session: drop its cart and menu and clear the cookie."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id:
        manager.end_session(session_id)

    response = JSONResponse(content={"success": True, "message": "Session ended"})
    response.delete_cookie(SESSION_COOKIE)
    return response
