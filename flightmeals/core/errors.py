"""
Error taxonomy for the ordering engine.

Exception Hierarchy:
    FlightMealsError (base)
    ├── ChannelError            - transport failure classified by the error table
    ├── RejectedError           - service answered success:false in a 2xx envelope
    ├── StaleResponseError      - response arrived for a superseded request
    └── OrderingError           - local domain precondition failed (no network)
        ├── InvalidQuantityError
        ├── ItemUnavailableError
        ├── EmptyCartError
        ├── NoSlotSelectedError
        └── SlotUnavailableError

Every error carries a ``kind`` and a display-ready ``message``. Diagnostics
for internal logging go in ``details`` and are never shown to travelers.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Every failure kind the engine can surface."""

    # Transport kinds, produced by the classifier
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"

    # Envelope said success:false
    REJECTED = "rejected"

    # Local kinds
    EMPTY_CART = "empty_cart"
    NO_SLOT_SELECTED = "no_slot_selected"
    SLOT_UNAVAILABLE = "slot_unavailable"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_UNAVAILABLE = "item_unavailable"
    STALE_RESPONSE = "stale_response"

    def __str__(self) -> str:
        """Return the string value of the kind."""
        return self.value


class FlightMealsError(Exception):
    """
    Base exception for all engine errors.

    Callers can catch every engine failure with a single except clause and
    display ``message`` directly.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# REMOTE ERRORS - raised by the resilient channel
# =============================================================================

class ChannelError(FlightMealsError):
    """
    A request to the meal service failed at the transport or HTTP level.

    The kind and retryability come from the classification table, so the
    same failure always produces the same message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        retryable: bool,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if status_code is not None:
            error_details["status_code"] = status_code
        super().__init__(message, error_details)
        self.kind = kind
        self.retryable = retryable
        self.status_code = status_code


class RejectedError(FlightMealsError):
    """
    The service answered with a 2xx status but an envelope of success:false.

    This is a domain answer, not a transport fault, so it is never retried.
    """

    kind = ErrorKind.REJECTED


class StaleResponseError(FlightMealsError):
    """A response arrived for a request the caller had already discarded."""

    kind = ErrorKind.STALE_RESPONSE

    def __init__(self, generation: int, current: int):
        super().__init__(
            "This request was superseded by a newer one.",
            {"generation": generation, "current_generation": current},
        )
        self.generation = generation


# =============================================================================
# LOCAL ERRORS - raised before any network call
# =============================================================================

class OrderingError(FlightMealsError):
    """Base class for local cart and order precondition failures."""


class InvalidQuantityError(OrderingError):
    """Quantity must be a positive whole number."""

    kind = ErrorKind.INVALID_QUANTITY

    def __init__(self, quantity: Any, item_id: Optional[str] = None):
        details: Dict[str, Any] = {"quantity": quantity}
        if item_id is not None:
            details["item_id"] = item_id
        super().__init__("Quantity must be at least 1.", details)
        self.quantity = quantity


class ItemUnavailableError(OrderingError):
    """The menu item is flagged unavailable and cannot be added."""

    kind = ErrorKind.ITEM_UNAVAILABLE

    def __init__(self, item_id: str, item_name: str):
        super().__init__(
            f"{item_name} is currently out of stock.",
            {"item_id": item_id},
        )
        self.item_id = item_id


class EmptyCartError(OrderingError):
    kind = ErrorKind.EMPTY_CART

    def __init__(self):
        super().__init__("Please add items to your cart.")


class NoSlotSelectedError(OrderingError):
    kind = ErrorKind.NO_SLOT_SELECTED

    def __init__(self):
        super().__init__("Please select a meal slot.")


class SlotUnavailableError(OrderingError):
    """The selected slot is locked, upcoming, or not part of the menu."""

    kind = ErrorKind.SLOT_UNAVAILABLE

    def __init__(self, slot_id: str, state: Optional[str] = None):
        details: Dict[str, Any] = {"slot_id": slot_id}
        if state is not None:
            details["state"] = state
        super().__init__("This meal slot is not open for orders.", details)
        self.slot_id = slot_id
        self.state = state
