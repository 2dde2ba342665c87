"""Dietary profile service."""
from typing import Any, Dict

from flightmeals.services.channel.channel import RequestSpec, ResilientChannel
from flightmeals.services.ordering.models import DietaryProfile


class DietaryProfileService:
    """Reads and updates a passenger's dietary profile."""

    def __init__(self, channel: ResilientChannel):
        self.channel = channel

    async def get(self, passenger_id: str) -> DietaryProfile:
        """Get a passenger's profile."""
        data = await self.channel.execute(
            RequestSpec(
                method="GET",
                path=f"/dietary-profile/{passenger_id}",
                failure_message="Failed to fetch dietary profile",
            )
        )
        return DietaryProfile.model_validate(data)

    async def update(self, passenger_id: str, changes: Dict[str, Any]) -> DietaryProfile:
        """Update some fields of a passenger's profile."""
        data = await self.channel.execute(
            RequestSpec(
                method="PUT",
                path=f"/dietary-profile/{passenger_id}",
                body=changes,
                failure_message="Failed to update dietary profile",
            )
        )
        return DietaryProfile.model_validate(data)
