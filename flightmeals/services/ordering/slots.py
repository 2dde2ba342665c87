"""Meal slot gating."""
from enum import Enum
from typing import Dict, Iterable, List, Optional

from flightmeals.core.errors import NoSlotSelectedError, SlotUnavailableError
from flightmeals.services.menu.models import MealSlot


class SlotState(str, Enum):
    """Client-side view of a meal slot."""

    LOCKED = "locked"  # Closed by the service, whatever the active flag says
    UPCOMING = "upcoming"  # Open but not yet serving
    ACTIVE = "active"  # Open and serving; the only state orders may target

    def __str__(self) -> str:
        return self.value


def derive_slot_state(slot: MealSlot) -> SlotState:
    """Locked wins over active; otherwise active or upcoming."""
    if slot.locked:
        return SlotState.LOCKED
    if slot.active:
        return SlotState.ACTIVE
    return SlotState.UPCOMING


class MealSlotGate:
    """
    Decides which meal slots an order may target.

    Built from the slots of the latest menu fetch. The service owns the lock
    and active flags; this only reads them.
    """

    def __init__(self, slots: Iterable[MealSlot]):
        self._slots: Dict[str, MealSlot] = {slot.id: slot for slot in slots}

    def state_of(self, slot_id: str) -> Optional[SlotState]:
        """Derived state of a slot, or None if the menu has no such slot."""
        slot = self._slots.get(slot_id)
        return derive_slot_state(slot) if slot else None

    def is_submittable(self, slot_id: Optional[str]) -> bool:
        return bool(slot_id) and self.state_of(slot_id) == SlotState.ACTIVE

    def require_submittable(self, slot_id: Optional[str]) -> MealSlot:
        """
        Return the slot if an order may target it.

        Raises:
            NoSlotSelectedError: No slot id given
            SlotUnavailableError: Slot is locked, upcoming, or unknown
        """
        if not slot_id:
            raise NoSlotSelectedError()
        state = self.state_of(slot_id)
        if state != SlotState.ACTIVE:
            raise SlotUnavailableError(slot_id, str(state) if state else None)
        return self._slots[slot_id]

    def select(self, slot_id: str) -> MealSlot:
        """
        Validate a traveler's slot choice.

        Locked and unknown slots are rejected immediately. Upcoming slots may
        be selected but cannot be submitted until they become active.
        """
        slot = self._slots.get(slot_id)
        if slot is None or derive_slot_state(slot) == SlotState.LOCKED:
            raise SlotUnavailableError(slot_id, str(SlotState.LOCKED) if slot else None)
        return slot

    def submittable_slots(self) -> List[MealSlot]:
        return [slot for slot in self._slots.values() if derive_slot_state(slot) == SlotState.ACTIVE]
