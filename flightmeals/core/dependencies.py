"""FastAPI dependencies."""
from typing import Optional

from fastapi import Depends, Request, Response

from flightmeals.core.config import settings
from flightmeals.services.auth.token_store import FileTokenStore, TokenStore
from flightmeals.services.channel.channel import ResilientChannel
from flightmeals.services.channel.policy import RetryPolicy
from flightmeals.services.ordering.orchestrator import OrderOrchestrator
from flightmeals.services.ordering.profile import DietaryProfileService
from flightmeals.services.session.manager import ShopperSessionManager
from flightmeals.services.session.models import ShopperSession

SESSION_COOKIE = "session_id"

_channel: Optional[ResilientChannel] = None


def get_token_store() -> TokenStore:
    """Get the session token store."""
    return FileTokenStore(settings.token_file)


def get_channel() -> ResilientChannel:
    """Get the process-wide channel to the meal service."""
    global _channel
    if _channel is None:
        _channel = ResilientChannel(
            base_url=settings.api_base_url,
            token_store=get_token_store(),
            policy=RetryPolicy.from_settings(settings),
            timeout=settings.request_timeout,
        )
    return _channel


async def close_channel() -> None:
    """Close the channel on shutdown."""
    global _channel
    if _channel is not None:
        await _channel.close()
        _channel = None


def get_session_manager(channel: ResilientChannel = Depends(get_channel)) -> ShopperSessionManager:
    """Get shopper session manager instance."""
    return ShopperSessionManager(channel)


def get_orchestrator(channel: ResilientChannel = Depends(get_channel)) -> OrderOrchestrator:
    """Get order orchestrator instance."""
    return OrderOrchestrator(channel)


def get_profile_service(channel: ResilientChannel = Depends(get_channel)) -> DietaryProfileService:
    """Get dietary profile service instance."""
    return DietaryProfileService(channel)


def get_shopper_session(
    request: Request,
    response: Response,
    manager: ShopperSessionManager = Depends(get_session_manager),
) -> ShopperSession:
    """Resolve the caller's shopper session from its cookie, creating one if needed."""
    session = manager.get_or_create(request.cookies.get(SESSION_COOKIE))
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.session_id,
        httponly=True,
        max_age=settings.session_ttl_seconds,
        samesite="lax",
    )
    return session
