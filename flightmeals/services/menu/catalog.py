"""Menu catalog fetching and filtering."""
import logging
from typing import Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from flightmeals.core.errors import FlightMealsError, RejectedError, StaleResponseError
from flightmeals.services.channel.channel import RequestSpec, ResilientChannel
from flightmeals.services.menu.models import CabinClass, FilterSpec, Flight, MenuCatalog, MenuItem

logger = logging.getLogger(__name__)


def matches_filter(item: MenuItem, spec: FilterSpec) -> bool:
    """Check one item against a filter: cabin, category, price, then dietary tags."""
    if spec.cabin_class is not None and item.cabin_class != spec.cabin_class:
        return False

    if spec.category != "all" and item.category != spec.category:
        return False

    low, high = spec.price_range
    if item.price < low or (high is not None and item.price > high):
        return False

    if spec.dietary_restrictions and not (item.dietary_categories & spec.dietary_restrictions):
        return False

    return True


class FilteredMenu:
    """
    Lazy view of the items passing a filter.

    Nothing is evaluated until iteration, and every iteration starts over
    from the same source items.
    """

    def __init__(self, items: Iterable[MenuItem], spec: FilterSpec):
        self._items = tuple(items)
        self.spec = spec

    def __iter__(self) -> Iterator[MenuItem]:
        return (item for item in self._items if matches_filter(item, self.spec))

    def ids(self) -> List[str]:
        """Ids of the visible items, in catalog order."""
        return [item.id for item in self]


def apply_filter(
    source: Union[MenuCatalog, Iterable[MenuItem]], spec: FilterSpec
) -> FilteredMenu:
    """Filter a catalog (or an already filtered view) without touching it."""
    items = source.items if isinstance(source, MenuCatalog) else source
    return FilteredMenu(items, spec)


class MenuCatalogService:
    """
    Fetches menu snapshots through the channel and keeps the last good one.

    A failed fetch leaves the previous snapshot in place. Each fetch gets a
    generation number; ``discard_pending`` (or ``fetch(..., discard_earlier=True)``)
    marks every older in-flight fetch as stale so its response is dropped.
    """

    def __init__(self, channel: ResilientChannel):
        self.channel = channel
        self._snapshot: Optional[MenuCatalog] = None
        self._generation = 0
        self._discard_floor = 0

    @property
    def snapshot(self) -> Optional[MenuCatalog]:
        """The most recently committed catalog, if any fetch has succeeded."""
        return self._snapshot

    def discard_pending(self) -> None:
        """Ignore the results of every fetch started so far."""
        self._discard_floor = self._generation

    async def fetch(
        self,
        flight_number: str,
        date: str,
        cabin_class: Union[CabinClass, str],
        dietary_tags: Optional[Iterable[str]] = None,
        discard_earlier: bool = False,
    ) -> MenuCatalog:
        """
        Fetch the menu for a flight, date and cabin.

        Raises:
            ChannelError / RejectedError: The fetch failed (snapshot unchanged)
            StaleResponseError: A newer fetch superseded this one
        """
        if discard_earlier:
            self.discard_pending()
        self._generation += 1
        generation = self._generation

        params = {
            "flightNumber": flight_number,
            "date": date,
            "cabinClass": str(cabin_class),
        }
        tags = list(dietary_tags or [])
        if tags:
            params["dietaryRestrictions"] = ",".join(tags)

        logger.info(
            f"[MENU] Fetching menu - flight: {flight_number}, date: {date}, "
            f"cabin: {cabin_class}, generation: {generation}"
        )

        def is_stale() -> bool:
            return generation <= self._discard_floor

        try:
            data = await self.channel.execute(
                RequestSpec(
                    method="GET",
                    path="/menu",
                    params=params,
                    failure_message="Failed to fetch menu",
                ),
                is_abandoned=is_stale,
            )
        except FlightMealsError as e:
            if is_stale():
                logger.info(f"[MENU] Discarded fetch failed - generation: {generation}, kind: {e.kind}")
                raise StaleResponseError(generation, self._generation) from e
            raise

        try:
            catalog = MenuCatalog.model_validate(data)
        except ValidationError as e:
            logger.error(f"[MENU] Malformed menu payload: {e}")
            raise RejectedError("Failed to fetch menu", {"validation_errors": e.error_count()}) from e

        if is_stale():
            logger.info(f"[MENU] Dropping stale menu response - generation: {generation}")
            raise StaleResponseError(generation, self._generation)

        self._snapshot = catalog
        logger.info(
            f"[MENU] Menu loaded - {len(catalog.items)} items, {len(catalog.meal_slots)} meal slots"
        )
        return catalog

    async def fetch_flight(self, flight_number: str, date: str) -> Flight:
        """Fetch flight metadata on its own."""
        data = await self.channel.execute(
            RequestSpec(
                method="GET",
                path=f"/flight/{flight_number}/{date}",
                failure_message="Failed to fetch flight info",
            )
        )
        return Flight.model_validate(data)

    def visible_items(self, spec: FilterSpec) -> FilteredMenu:
        """Filtered view over the current snapshot (empty before the first fetch)."""
        if self._snapshot is None:
            return FilteredMenu((), spec)
        return apply_filter(self._snapshot, spec)
