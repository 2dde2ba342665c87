"""Order API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from flightmeals.api.cart import CartRequest
from flightmeals.api.errors import error_response
from flightmeals.core.dependencies import get_orchestrator, get_profile_service, get_shopper_session
from flightmeals.services.ordering.orchestrator import OrderOrchestrator
from flightmeals.services.ordering.profile import DietaryProfileService
from flightmeals.services.session.models import ShopperSession

router = APIRouter()
logger = logging.getLogger(__name__)


class SubmitOrderRequest(CartRequest):
    meal_slot: Optional[str] = None
    passenger_id: Optional[str] = None


@router.post("/api/orders", status_code=201)
async def submit_order(
    body: SubmitOrderRequest,
    session: ShopperSession = Depends(get_shopper_session),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    profiles: DietaryProfileService = Depends(get_profile_service),
):
    """
    Submit the session's cart.

    Once the service confirms, only the units that were sent leave the cart;
    anything added while the order was in flight stays.
    """
    catalog = session.catalog_service.snapshot
    if catalog is None:
        return error_response(409, "Load the menu before placing an order.")

    cart = session.cart
    slot_id = body.meal_slot or session.selected_slot_id
    orchestrator.check_preconditions(cart, slot_id, catalog)

    profile = None
    passenger_id = body.passenger_id or session.passenger_id
    if passenger_id:
        profile = await profiles.get(passenger_id)

    # Taken with no await before the submission is built
    submitted = cart.submitted_quantities()
    submitted_request = cart.special_request
    order = await orchestrator.submit(cart, slot_id, catalog, profile=profile)

    cart.remove_submitted(submitted)
    if cart.special_request == submitted_request:
        cart.special_request = ""
    if session.selected_slot_id == slot_id:
        session.selected_slot_id = None
    logger.info(
        f"[ORDERS] Order {order.id} placed - {sum(submitted.values())} units removed, "
        f"{cart.count()} left in cart"
    )
    return {"success": True, "data": order.model_dump(mode="json", by_alias=True)}


@router.get("/api/orders/{booking_ref}")
async def get_orders(
    booking_ref: str,
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    """Get orders under a booking reference."""
    orders = await orchestrator.get_orders(booking_ref)
    return {"success": True, "data": [order.model_dump(mode="json", by_alias=True) for order in orders]}


@router.delete("/api/orders/{order_id}")
async def cancel_order(
    order_id: str,
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    """Cancel an order."""
    await orchestrator.cancel_order(order_id)
    return {"success": True, "message": "Order cancelled"}
