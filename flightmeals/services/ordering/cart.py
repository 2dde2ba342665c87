"""Shopping cart state."""
import logging
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from flightmeals.core.errors import InvalidQuantityError, ItemUnavailableError
from flightmeals.services.menu.models import MenuItem

logger = logging.getLogger(__name__)


def _check_quantity(quantity: int, item_id: str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity, item_id)


class CartLine(BaseModel):
    """One menu item in the cart, with the price it had when added."""

    item_id: str
    name: str = ""
    quantity: int = Field(default=1, gt=0)
    unit_price: Decimal = Field(ge=0)
    instructions: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    """
    The traveler's cart.

    Holds at most one line per menu item. Count and total are computed from
    the lines on every read.
    """

    lines: List[CartLine] = []
    special_request: str = ""
    seat: str = ""
    dietary_restrictions: List[str] = []

    def get_line(self, item_id: str) -> Optional[CartLine]:
        """Get the line for a menu item, if present."""
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None

    def add(self, item: MenuItem, quantity: int = 1, instructions: Optional[str] = None) -> CartLine:
        """Add an item, merging into its existing line."""
        _check_quantity(quantity, item.id)
        if not item.available:
            raise ItemUnavailableError(item.id, item.name)

        line = self.get_line(item.id)
        if line is not None:
            line.quantity += quantity
            if instructions:
                line.instructions = instructions
            logger.debug(f"[CART] Merged {quantity}x {item.id} - now {line.quantity}")
            return line

        line = CartLine(
            item_id=item.id,
            name=item.name,
            quantity=quantity,
            unit_price=item.price,
            instructions=instructions,
        )
        self.lines.append(line)
        logger.debug(f"[CART] Added {quantity}x {item.id} at {item.price}")
        return line

    def remove(self, item_id: str) -> None:
        """Remove an item's line. Removing an absent item does nothing."""
        self.lines = [line for line in self.lines if line.item_id != item_id]

    def set_quantity(self, item_id: str, quantity: int) -> None:
        """Replace a line's quantity, keeping its instructions."""
        _check_quantity(quantity, item_id)
        line = self.get_line(item_id)
        if line is None:
            logger.debug(f"[CART] set_quantity ignored for absent item {item_id}")
            return
        line.quantity = quantity

    def set_instructions(self, item_id: str, instructions: Optional[str]) -> None:
        """Attach free-text instructions to a line."""
        line = self.get_line(item_id)
        if line is not None:
            line.instructions = instructions or None

    def count(self) -> int:
        """Total number of units in the cart."""
        return sum(line.quantity for line in self.lines)

    def total(self) -> Decimal:
        """Sum of quantity times captured unit price."""
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    def is_empty(self) -> bool:
        return not self.lines

    def clear(self) -> None:
        """Empty the cart after a confirmed order."""
        self.lines = []
        self.special_request = ""

    def submitted_quantities(self) -> Dict[str, int]:
        """Quantities per item as they stand now, for a later ``remove_submitted``."""
        return {line.item_id: line.quantity for line in self.lines}

    def remove_submitted(self, submitted: Mapping[str, int]) -> None:
        """
        Take ordered units out of the cart.

        Only the submitted quantities are removed; lines added or raised while
        the order was in flight keep the difference.
        """
        remaining = []
        for line in self.lines:
            line.quantity -= submitted.get(line.item_id, 0)
            if line.quantity > 0:
                remaining.append(line)
        self.lines = remaining

    def get_summary(self) -> str:
        """Get a text summary of the cart."""
        if not self.lines:
            return "Your cart is empty."
        lines = []
        for line in self.lines:
            qty_str = f"{line.quantity}x " if line.quantity > 1 else ""
            note_str = f" ({line.instructions})" if line.instructions else ""
            lines.append(f"- {qty_str}{line.name or line.item_id}{note_str}")
        lines.append(f"Total: ${self.total():.2f}")
        return "\n".join(lines)
