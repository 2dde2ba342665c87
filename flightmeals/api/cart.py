"""Cart API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from flightmeals.api.errors import error_response
from flightmeals.core.dependencies import get_shopper_session
from flightmeals.services.ordering.slots import MealSlotGate
from flightmeals.services.session.models import ShopperSession

router = APIRouter()
logger = logging.getLogger(__name__)


class CartRequest(BaseModel):
    """Base for camelCase request bodies."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddItemRequest(CartRequest):
    item_id: str
    quantity: int = 1
    instructions: Optional[str] = None


class UpdateItemRequest(CartRequest):
    quantity: Optional[int] = None
    instructions: Optional[str] = None


class UpdateCartRequest(CartRequest):
    seat: Optional[str] = None
    special_request: Optional[str] = None
    dietary_restrictions: Optional[List[str]] = None
    meal_slot: Optional[str] = None
    passenger_id: Optional[str] = None


def serialize_cart(session: ShopperSession) -> dict:
    """Cart payload for the UI."""
    cart = session.cart
    return {
        "items": [
            {
                "itemId": line.item_id,
                "name": line.name,
                "quantity": line.quantity,
                "unitPrice": float(line.unit_price),
                "instructions": line.instructions,
            }
            for line in cart.lines
        ],
        "itemCount": cart.count(),
        "total": float(cart.total()),
        "seat": cart.seat,
        "specialRequest": cart.special_request,
        "dietaryRestrictions": cart.dietary_restrictions,
        "mealSlot": session.selected_slot_id,
        "passengerId": session.passenger_id,
        "summary": cart.get_summary(),
    }


@router.get("/api/cart")
async def get_cart(session: ShopperSession = Depends(get_shopper_session)):
    """Get the session's cart."""
    return {"success": True, "data": serialize_cart(session)}


@router.post("/api/cart/items")
async def add_item(body: AddItemRequest, session: ShopperSession = Depends(get_shopper_session)):
    """Add a menu item from the last fetched menu."""
    catalog = session.catalog_service.snapshot
    if catalog is None:
        return error_response(409, "Load the menu before adding items.")

    item = catalog.get_item(body.item_id)
    if item is None:
        return error_response(404, f"Menu item '{body.item_id}' was not found.")

    session.cart.add(item, body.quantity, body.instructions)
    logger.info(f"[CART] Added {body.quantity}x {item.id} - cart now {session.cart.count()} units")
    return {"success": True, "data": serialize_cart(session)}


@router.put("/api/cart/items/{item_id}")
async def update_item(
    item_id: str,
    body: UpdateItemRequest,
    session: ShopperSession = Depends(get_shopper_session),
):
    """Change a line's quantity or instructions."""
    if session.cart.get_line(item_id) is None:
        return error_response(404, f"Item '{item_id}' is not in the cart.")

    if body.quantity is not None:
        session.cart.set_quantity(item_id, body.quantity)
    if "instructions" in body.model_fields_set:
        session.cart.set_instructions(item_id, body.instructions)
    return {"success": True, "data": serialize_cart(session)}


@router.delete("/api/cart/items/{item_id}")
async def remove_item(item_id: str, session: ShopperSession = Depends(get_shopper_session)):
    """Remove a line from the cart."""
    session.cart.remove(item_id)
    return {"success": True, "data": serialize_cart(session)}


@router.put("/api/cart")
async def update_cart(body: UpdateCartRequest, session: ShopperSession = Depends(get_shopper_session)):
    """Update seat, special request, dietary restrictions, passenger or the selected meal slot."""
    cart = session.cart
    if body.seat is not None:
        cart.seat = body.seat.strip()
    if body.special_request is not None:
        cart.special_request = body.special_request
    if body.dietary_restrictions is not None:
        cart.dietary_restrictions = sorted(set(body.dietary_restrictions))
    if body.passenger_id is not None:
        session.passenger_id = body.passenger_id.strip() or None
    if body.meal_slot is not None:
        catalog = session.catalog_service.snapshot
        if catalog is None:
            return error_response(409, "Load the menu before choosing a meal slot.")
        slot = MealSlotGate(catalog.meal_slots).select(body.meal_slot)
        session.selected_slot_id = slot.id
    return {"success": True, "data": serialize_cart(session)}
