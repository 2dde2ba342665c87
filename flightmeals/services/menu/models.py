"""Menu models."""
from datetime import time
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel


class CabinClass(str, Enum):
    """Cabin classes a menu can be served in."""

    ECONOMY = "economy"
    PREMIUM_ECONOMY = "premium_economy"
    BUSINESS = "business"
    FIRST = "first"

    def __str__(self) -> str:
        return self.value


class Category(str, Enum):
    """Menu item categories."""

    MAIN = "main"
    SIDE = "side"
    DESSERT = "dessert"
    BEVERAGE = "beverage"

    def __str__(self) -> str:
        return self.value


class RemoteModel(BaseModel):
    """Read-only model mirroring a camelCase service payload."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class NutritionalInfo(RemoteModel):
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None


class MenuItem(RemoteModel):
    """Menu item model."""

    id: str
    name: str
    description: str = ""
    price: Decimal = Field(ge=0)
    category: Category
    cabin_class: CabinClass
    allergens: FrozenSet[str] = frozenset()
    dietary_categories: FrozenSet[str] = frozenset()
    available: bool = True
    stock_quantity: int = Field(default=0, ge=0)
    nutritional_info: Optional[NutritionalInfo] = None
    image_url: Optional[str] = None

    @field_serializer("price")
    def _price_as_number(self, price: Decimal) -> float:
        return float(price)


class MealSlot(RemoteModel):
    """A service window (breakfast, lunch...) as last reported by the service."""

    id: str
    name: str
    start_time: time
    end_time: time
    locked: bool = Field(default=False, validation_alias=AliasChoices("isLocked", "locked"))
    active: bool = Field(default=False, validation_alias=AliasChoices("isActive", "active"))
    crew_assigned: List[str] = []


class Flight(RemoteModel):
    """Flight metadata returned alongside the menu."""

    flight_number: str
    date: str
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    aircraft_type: Optional[str] = None
    route_id: Optional[str] = None


class MenuCatalog(RemoteModel):
    """
    Immutable snapshot of one menu fetch.

    A refetch builds a new catalog; catalogs are never merged or edited.
    """

    items: Tuple[MenuItem, ...] = Field(default=(), alias="menu")
    meal_slots: Tuple[MealSlot, ...] = ()
    flight: Optional[Flight] = None

    def get_item(self, item_id: str) -> Optional[MenuItem]:
        """Get a menu item by id."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def get_slot(self, slot_id: str) -> Optional[MealSlot]:
        """Get a meal slot by id."""
        for slot in self.meal_slots:
            if slot.id == slot_id:
                return slot
        return None

    @property
    def categories(self) -> List[Category]:
        """Categories present in this catalog, in first-seen order."""
        seen: List[Category] = []
        for item in self.items:
            if item.category not in seen:
                seen.append(item.category)
        return seen


class FilterSpec(RemoteModel):
    """
    What the traveler wants to see. A view, never applied to the catalog itself.

    ``price_range`` bounds are inclusive; an upper bound of None is unbounded.
    """

    cabin_class: Optional[CabinClass] = None
    dietary_restrictions: FrozenSet[str] = frozenset()
    price_range: Tuple[Decimal, Optional[Decimal]] = (Decimal("0"), None)
    category: Union[Category, Literal["all"]] = "all"

    @model_validator(mode="after")
    def _check_price_range(self) -> "FilterSpec":
        low, high = self.price_range
        if high is not None and high < low:
            raise ValueError("price_range upper bound must not be below the lower bound")
        return self
