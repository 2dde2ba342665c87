"""Order models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_serializer, field_validator

from flightmeals.services.menu.models import RemoteModel


class OrderStatus(str, Enum):
    """Order lifecycle as reported by the service."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class OrderLine(RemoteModel):
    """Line item as sent to and returned by the service."""

    menu_item_id: str
    quantity: int = Field(gt=0)
    special_instructions: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)

    @field_serializer("price")
    def _price_as_number(self, price: Decimal) -> float:
        return float(price)


class Order(RemoteModel):
    """Server-confirmed order. Read-only on the client."""

    id: str
    booking_ref: str
    passenger_id: Optional[str] = None
    seat: str = ""
    items: List[OrderLine] = []
    total_amount: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    timestamp: datetime
    dietary_restrictions: List[str] = []
    special_requests: str = ""
    meal_slot: Optional[str] = None
    flight_number: Optional[str] = None
    flight_date: Optional[str] = None

    @field_validator("special_requests", mode="before")
    @classmethod
    def _join_requests(cls, value):
        if value is None:
            return ""
        if isinstance(value, list):
            return "; ".join(str(v) for v in value if v)
        return value


class OrderSubmission(RemoteModel):
    """Body of the order-creation request."""

    items: List[OrderLine]
    dietary_restrictions: List[str] = []
    special_requests: str = ""
    seat: str = ""
    meal_slot: str

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DietaryProfile(RemoteModel):
    """A passenger's standing dietary needs."""

    passenger_id: str
    restrictions: List[str] = []
    allergies: List[str] = []
    preferences: List[str] = []
    medical_notes: Optional[str] = None
