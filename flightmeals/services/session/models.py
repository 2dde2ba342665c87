"""Shopper session models."""
from datetime import datetime, timezone
from typing import Optional

from flightmeals.services.menu.catalog import MenuCatalogService
from flightmeals.services.ordering.cart import Cart


class ShopperSession:
    """One traveler's cart and last fetched menu."""

    def __init__(
        self,
        session_id: str,
        catalog_service: MenuCatalogService,
        cart: Optional[Cart] = None,
    ):
        self.session_id = session_id
        self.catalog_service = catalog_service
        self.cart = cart or Cart()
        self.selected_slot_id: Optional[str] = None
        self.passenger_id: Optional[str] = None
        self.last_seen = datetime.now(timezone.utc)

    def touch(self, now: Optional[datetime] = None) -> None:
        """Mark the session as used."""
        self.last_seen = now or datetime.now(timezone.utc)

    def idle_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or datetime.now(timezone.utc)) - self.last_seen).total_seconds()
