"""Shared test fixtures and configuration."""
import json
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import Mock

import httpx
import pytest
import yaml
from fastapi.testclient import TestClient

from flightmeals.main import app
from flightmeals.core.dependencies import get_channel
from flightmeals.services.auth.token_store import InMemoryTokenStore
from flightmeals.services.channel.channel import ResilientChannel
from flightmeals.services.channel.policy import RetryPolicy
from flightmeals.services.menu.models import MenuCatalog


BASE_URL = "http://meals.test/api"


def envelope(data: Any) -> Dict[str, Any]:
    """Wrap a payload the way the meal service does."""
    return {"success": True, "data": data}


class FakeMealService:
    """
    In-process stand-in for the remote meal service.

    Every request is recorded. Outcomes queued with ``queue`` are served
    first, in order; after that requests are routed to canned handlers.
    A queued outcome is a status code, an httpx exception class, or a
    ready-made httpx.Response.
    """

    def __init__(self, menu_payload: Dict[str, Any]):
        self.menu_payload = menu_payload
        self.requests: List[httpx.Request] = []
        self._queued: List[Any] = []
        self.orders: Dict[str, Dict[str, Any]] = {}

    def queue(self, *outcomes: Any) -> None:
        self._queued.extend(outcomes)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._queued:
            outcome = self._queued.pop(0)
            if isinstance(outcome, type) and issubclass(outcome, Exception):
                raise outcome("simulated transport failure", request=request)
            if isinstance(outcome, int):
                return httpx.Response(outcome)
            return outcome
        return self._route(request)

    def _route(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        method = request.method

        if method == "GET" and path == "/menu":
            return httpx.Response(200, json=envelope(self.menu_payload))

        if method == "POST" and path == "/order":
            body = json.loads(request.content)
            order_id = f"order_{len(self.orders) + 1}"
            order = {
                "id": order_id,
                "bookingRef": "BK1001",
                "passengerId": "anonymous",
                "seat": body.get("seat") or "12A",
                "items": body["items"],
                "totalAmount": sum(i["price"] * i["quantity"] for i in body["items"]),
                "status": "pending",
                "timestamp": "2024-01-15T10:30:00Z",
                "dietaryRestrictions": body.get("dietaryRestrictions", []),
                "specialRequests": body.get("specialRequests", ""),
                "mealSlot": body.get("mealSlot"),
                "flightNumber": "AA123",
                "flightDate": "2024-01-15",
            }
            self.orders[order_id] = order
            return httpx.Response(201, json=envelope(order))

        if method == "GET" and path.startswith("/order/"):
            ref = path.split("/")[-1]
            matches = [o for o in self.orders.values() if o["bookingRef"] == ref]
            if not matches:
                return httpx.Response(404, json={"success": False, "error": "No orders found"})
            return httpx.Response(200, json=envelope(matches))

        if method == "PUT" and path.startswith("/order/"):
            order_id = path.split("/")[-1]
            if order_id not in self.orders:
                return httpx.Response(404, json={"success": False, "error": "Order not found"})
            self.orders[order_id].update(json.loads(request.content))
            return httpx.Response(200, json=envelope(self.orders[order_id]))

        if method == "DELETE" and path.startswith("/order/"):
            order_id = path.split("/")[-1]
            if order_id not in self.orders:
                return httpx.Response(404, json={"success": False, "error": "Order not found"})
            self.orders[order_id]["status"] = "cancelled"
            return httpx.Response(200, json={"success": True, "message": "Order cancelled"})

        if path.startswith("/dietary-profile/"):
            passenger_id = path.split("/")[-1]
            profile = {
                "passengerId": passenger_id,
                "restrictions": ["halal"],
                "allergies": ["peanuts"],
                "preferences": [],
            }
            if method == "PUT":
                profile.update(json.loads(request.content))
            return httpx.Response(200, json=envelope(profile))

        if method == "GET" and path.startswith("/flight/"):
            return httpx.Response(200, json=envelope(self.menu_payload["flight"]))

        return httpx.Response(404, json={"success": False, "error": "Route not found"})


@pytest.fixture
def test_menu_path():
    """Return path to test menu YAML file."""
    return Path(__file__).parent / "fixtures" / "menu.yaml"


@pytest.fixture
def menu_payload(test_menu_path):
    """Menu response payload as the service would send it."""
    with open(test_menu_path, "r") as f:
        return yaml.safe_load(f)


@pytest.fixture
def catalog(menu_payload):
    """Parsed catalog built from the test menu."""
    return MenuCatalog.model_validate(menu_payload)


@pytest.fixture
def fake_service(menu_payload):
    return FakeMealService(menu_payload)


@pytest.fixture
def token_store():
    return InMemoryTokenStore("test-token")


@pytest.fixture
def failure_observer():
    return Mock()


@pytest.fixture
def channel(fake_service, token_store, failure_observer):
    """Channel wired to the fake service with the default retry policy."""
    return ResilientChannel(
        base_url=BASE_URL,
        token_store=token_store,
        policy=RetryPolicy(),
        timeout=10.0,
        failure_observer=failure_observer,
        transport=httpx.MockTransport(fake_service),
    )


@pytest.fixture
def clean_shopper_sessions():
    """Clean up shopper sessions before and after tests."""
    from flightmeals.services.session import manager
    manager._sessions.clear()
    yield
    manager._sessions.clear()


@pytest.fixture
def test_client(channel, clean_shopper_sessions):
    """Create FastAPI test client talking to the fake meal service."""
    app.dependency_overrides[get_channel] = lambda: channel

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
