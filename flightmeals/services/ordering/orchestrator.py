"""Order submission orchestration."""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from flightmeals.core.errors import EmptyCartError, NoSlotSelectedError, RejectedError
from flightmeals.services.channel.channel import RequestSpec, ResilientChannel
from flightmeals.services.menu.models import MenuCatalog
from flightmeals.services.ordering.cart import Cart
from flightmeals.services.ordering.models import DietaryProfile, Order, OrderLine, OrderSubmission
from flightmeals.services.ordering.slots import MealSlotGate

logger = logging.getLogger(__name__)


def _parse_order(data: Any, failure_message: str) -> Order:
    try:
        return Order.model_validate(data)
    except ValidationError as e:
        logger.error(f"[ORDER] Malformed order payload: {e}")
        raise RejectedError(failure_message, {"validation_errors": e.error_count()}) from e


class OrderOrchestrator:
    """
    Places orders: local preconditions first, then one channel call.

    The orchestrator never edits the cart. On success the caller decides when
    to clear it; on failure the cart is exactly as it was.
    """

    def __init__(self, channel: ResilientChannel):
        self.channel = channel

    def build_submission(
        self,
        cart: Cart,
        slot_id: str,
        profile: Optional[DietaryProfile] = None,
    ) -> OrderSubmission:
        """Build the request body for a cart that already passed preconditions."""
        restrictions = set(cart.dietary_restrictions)
        if profile is not None:
            restrictions.update(profile.restrictions)

        return OrderSubmission(
            items=[
                OrderLine(
                    menu_item_id=line.item_id,
                    quantity=line.quantity,
                    special_instructions=line.instructions,
                    price=line.unit_price,
                )
                for line in cart.lines
            ],
            dietary_restrictions=sorted(restrictions),
            special_requests=cart.special_request,
            seat=cart.seat,
            meal_slot=slot_id,
        )

    def check_preconditions(self, cart: Cart, selected_slot_id: Optional[str], catalog: MenuCatalog) -> None:
        """
        Fail fast, in order: empty cart, no slot, slot not active.

        Raises:
            EmptyCartError, NoSlotSelectedError, SlotUnavailableError
        """
        if cart.is_empty():
            raise EmptyCartError()
        if not selected_slot_id:
            raise NoSlotSelectedError()
        MealSlotGate(catalog.meal_slots).require_submittable(selected_slot_id)

    async def submit(
        self,
        cart: Cart,
        selected_slot_id: Optional[str],
        catalog: MenuCatalog,
        profile: Optional[DietaryProfile] = None,
    ) -> Order:
        """
        Submit the cart as an order against a meal slot.

        Returns:
            The order as confirmed by the service

        Raises:
            OrderingError: A local precondition failed (no request was made)
            ChannelError / RejectedError: The service call failed
        """
        self.check_preconditions(cart, selected_slot_id, catalog)
        submission = self.build_submission(cart, selected_slot_id, profile)

        logger.info(
            f"[ORDER] Submitting order - {len(submission.items)} lines, "
            f"{cart.count()} units, slot: {selected_slot_id}, seat: {cart.seat or 'unset'}"
        )
        data = await self.channel.execute(
            RequestSpec(
                method="POST",
                path="/order",
                body=submission.to_payload(),
                failure_message="Failed to create order",
            )
        )
        order = _parse_order(data, "Failed to create order")
        logger.info(f"[ORDER] Order confirmed - id: {order.id}, booking: {order.booking_ref}")
        return order

    async def get_orders(self, booking_ref: str) -> List[Order]:
        """Get every order under a booking reference."""
        data = await self.channel.execute(
            RequestSpec(
                method="GET",
                path=f"/order/{booking_ref}",
                failure_message="Failed to fetch order",
            )
        )
        if not isinstance(data, list):
            data = [data]
        return [_parse_order(item, "Failed to fetch order") for item in data]

    async def update_order(self, order_id: str, changes: Dict[str, Any]) -> Order:
        """Resubmit changed fields of an existing order."""
        data = await self.channel.execute(
            RequestSpec(
                method="PUT",
                path=f"/order/{order_id}",
                body=changes,
                failure_message="Failed to update order",
            )
        )
        return _parse_order(data, "Failed to update order")

    async def cancel_order(self, order_id: str) -> None:
        """Ask the service to cancel an order."""
        await self.channel.execute(
            RequestSpec(
                method="DELETE",
                path=f"/order/{order_id}",
                expects_data=False,
                failure_message="Failed to cancel order",
            )
        )
        logger.info(f"[ORDER] Order cancelled - id: {order_id}")
