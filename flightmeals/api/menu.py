"""Menu API endpoints."""
import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from flightmeals.api.errors import error_response
from flightmeals.core.dependencies import get_shopper_session
from flightmeals.services.menu.models import CabinClass, FilterSpec, MenuCatalog
from flightmeals.services.ordering.slots import derive_slot_state
from flightmeals.services.session.models import ShopperSession

router = APIRouter()
logger = logging.getLogger(__name__)


def _split_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def serialize_catalog(catalog: MenuCatalog, spec: FilterSpec, session: ShopperSession) -> dict:
    """Menu payload for the UI: visible items plus slots with their derived state."""
    visible = session.catalog_service.visible_items(spec)
    return {
        "menu": [item.model_dump(mode="json", by_alias=True) for item in visible],
        "mealSlots": [
            {**slot.model_dump(mode="json", by_alias=True), "state": str(derive_slot_state(slot))}
            for slot in catalog.meal_slots
        ],
        "flight": catalog.flight.model_dump(mode="json", by_alias=True) if catalog.flight else None,
        "categories": [str(category) for category in catalog.categories],
    }


@router.get("/api/menu")
async def get_menu(
    flight_number: str = Query(alias="flightNumber"),
    date: str = Query(),
    cabin_class: CabinClass = Query(default=CabinClass.ECONOMY, alias="cabinClass"),
    dietary_restrictions: Optional[str] = Query(default=None, alias="dietaryRestrictions"),
    category: str = Query(default="all"),
    min_price: Decimal = Query(default=Decimal("0"), alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(default=None, alias="maxPrice", ge=0),
    session: ShopperSession = Depends(get_shopper_session),
):
    """Fetch the flight's menu and return the filtered view."""
    tags = _split_tags(dietary_restrictions)
    logger.info(
        f"[MENU] Request received - flight: {flight_number}, date: {date}, "
        f"cabin: {cabin_class}, dietary: {tags or 'none'}, category: {category}"
    )

    try:
        spec = FilterSpec(
            cabin_class=cabin_class,
            dietary_restrictions=frozenset(tags),
            price_range=(min_price, max_price),
            category=category,
        )
    except ValidationError as e:
        logger.info(f"[MENU] Invalid filter - {e.error_count()} error(s)")
        return error_response(422, "Invalid menu filter.")

    catalog = await session.catalog_service.fetch(
        flight_number, date, cabin_class, tags, discard_earlier=True
    )
    return {"success": True, "data": serialize_catalog(catalog, spec, session)}
