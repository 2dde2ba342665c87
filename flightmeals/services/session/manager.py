"""Shopper session manager."""
import logging
import secrets
from datetime import datetime, timezone
from typing import Dict, Optional

from flightmeals.core.config import settings
from flightmeals.services.channel.channel import ResilientChannel
from flightmeals.services.menu.catalog import MenuCatalogService
from flightmeals.services.session.models import ShopperSession

logger = logging.getLogger(__name__)

# Module-level session storage (persists across requests)
# In production, use Redis or similar
_sessions: Dict[str, ShopperSession] = {}


def active_session_count() -> int:
    return len(_sessions)


def create_session_id() -> str:
    """Generate an opaque session id."""
    return secrets.token_urlsafe(16)


class ShopperSessionManager:
    """
    Creates and looks up shopper sessions.

    Sessions idle for longer than ``ttl_seconds`` are dropped the next time
    any session is looked up, matching the lifetime of the session cookie.
    """

    def __init__(self, channel: ResilientChannel, ttl_seconds: Optional[int] = None):
        self.channel = channel
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds

    def get_session(self, session_id: Optional[str]) -> Optional[ShopperSession]:
        """Get an existing session."""
        if not session_id:
            return None
        return _sessions.get(session_id)

    def create_session(self) -> ShopperSession:
        """Create a new session with an empty cart."""
        session = ShopperSession(
            session_id=create_session_id(),
            catalog_service=MenuCatalogService(self.channel),
        )
        _sessions[session.session_id] = session
        logger.info(f"[SESSION] Created session {session.session_id[:6]}...")
        return session

    def get_or_create(self, session_id: Optional[str]) -> ShopperSession:
        """Resolve a session id, expiring idle sessions first."""
        now = datetime.now(timezone.utc)
        self.prune_expired(now)
        session = self.get_session(session_id)
        if session is None:
            session = self.create_session()
        session.touch(now)
        return session

    def prune_expired(self, now: Optional[datetime] = None) -> int:
        """Drop every session idle for longer than the TTL. Returns how many were dropped."""
        expired = [
            session_id
            for session_id, session in _sessions.items()
            if session.idle_seconds(now) > self.ttl_seconds
        ]
        for session_id in expired:
            self.end_session(session_id)
        if expired:
            logger.info(f"[SESSION] Expired {len(expired)} idle session(s)")
        return len(expired)

    def end_session(self, session_id: str) -> None:
        """Forget a session."""
        if _sessions.pop(session_id, None) is not None:
            logger.info(f"[SESSION] Ended session {session_id[:6]}...")
