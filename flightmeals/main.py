"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from flightmeals.api import cart, health, menu, orders, session
from flightmeals.api.errors import flightmeals_error_handler
from flightmeals.core.config import settings
from flightmeals.core.dependencies import close_channel
from flightmeals.core.errors import FlightMealsError
from flightmeals.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    yield
    # Shutdown
    await close_channel()


app = FastAPI(
    title="Flight Meals",
    description="In-flight meal ordering engine",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(FlightMealsError, flightmeals_error_handler)

app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(cart.router, tags=["cart"])
app.include_router(orders.router, tags=["orders"])
app.include_router(session.router, tags=["session"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("flightmeals.main:app", host=settings.host, port=settings.port)
