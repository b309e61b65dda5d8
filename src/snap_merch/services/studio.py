"""Vendor workflow: capture, identify, rank, generate, sell."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from snap_merch.domain.products import get_product
from snap_merch.domain.sessions import (
    CarSession,
    EventSession,
    GeneratedStyle,
    MockupResult,
    Order,
    ShippingAddress,
    idle_styles,
)
from snap_merch.domain.styles import StyleConfig, get_style
from snap_merch.domain.vehicles import VehicleIdentity
from snap_merch.services.artwork import ArtworkService
from snap_merch.services.event_store import EventStore, new_id
from snap_merch.services.generation import GenerationOrchestrator
from snap_merch.services.images import create_thumbnail, is_data_url
from snap_merch.services.pricing import UnknownProductError, build_order_item
from snap_merch.services.style_priority import rank_styles
from snap_merch.services.vehicles import VehicleService

INITIAL_BATCH_SIZE = 4
MORE_BATCH_SIZE = 4

# Live cars are cached per vendor: (user_id, car_id).
_CarKey = tuple[str | None, str]

_logger = logging.getLogger(__name__)


class CarNotFoundError(LookupError):
    """Raised when a car id is not part of the current event."""


class UnknownStyleError(ValueError):
    """Raised for style ids outside the catalog."""


class StyleAlreadyGeneratingError(ValueError):
    """Raised when a style is requested while its generation is in flight."""


class MissingIdentityError(ValueError):
    """Raised when generation is requested before the car is identified."""


class DesignUnavailableError(ValueError):
    """Raised when a mockup is requested for a style without a finished image."""


class PhotoUnavailableError(ValueError):
    """Raised when the original photo has already been released."""


class ColorIdentificationError(RuntimeError):
    """Raised when the vision model could not name the paint color."""


@dataclass(frozen=True)
class CaptureResult:
    car: CarSession
    ranked_styles: list[StyleConfig]
    warning: str | None = None


@dataclass(frozen=True)
class GenerationReport:
    """Outcome of one orchestration run for a car."""

    car: CarSession
    requested: list[str]
    completed: dict[str, str]
    failed: dict[str, str]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class StudioService:
    """Drives a vendor's interaction with each photographed car.

    Live cars keep full images in memory; the event store only ever sees the
    stripped projection. Every change replaces the car snapshot instead of
    mutating it, so generation callbacks that interleave each apply exactly
    one style update on top of the latest snapshot.

    The event store decides which cars exist: a cached car is only served
    while it is still part of that vendor's current event session, and
    cached cars of past sessions are evicted on the next lookup.
    """

    event_store: EventStore
    vehicle_service: VehicleService
    orchestrator: GenerationOrchestrator
    artwork_service: ArtworkService
    initial_batch_size: int = INITIAL_BATCH_SIZE
    more_batch_size: int = MORE_BATCH_SIZE
    clock: Callable[[], datetime] = _utcnow
    _cars: dict[_CarKey, CarSession] = field(default_factory=dict, init=False)
    _visible: dict[_CarKey, int] = field(default_factory=dict, init=False)

    async def capture_car(
        self, image_data_url: str, user_id: str | None = None
    ) -> CaptureResult:
        """Create a car session for a photo and identify the vehicle."""
        thumbnail = await asyncio.to_thread(create_thumbnail, image_data_url)
        car = CarSession(
            id=new_id(),
            created_at=self.clock(),
            photo_base64=image_data_url,
            photo_thumbnail=thumbnail,
            styles=idle_styles(),
        )
        identity, warning = await self.vehicle_service.identify_or_placeholder(
            image_data_url
        )
        car = replace(car, identity=identity)
        self._evict_stale(user_id)
        self._cars[(user_id, car.id)] = car
        self._visible[(user_id, car.id)] = self.initial_batch_size
        self.event_store.add_car_session(car, user_id)
        return CaptureResult(
            car=car, ranked_styles=rank_styles(identity), warning=warning
        )

    def get_car(self, car_id: str, user_id: str | None = None) -> CarSession:
        car = self._lookup(car_id, user_id)
        if car is None:
            raise CarNotFoundError(car_id)
        return car

    def ranked_styles(
        self, car_id: str, user_id: str | None = None
    ) -> list[StyleConfig]:
        return rank_styles(self._identity_of(self.get_car(car_id, user_id)))

    def update_identity(
        self, car_id: str, identity: VehicleIdentity, user_id: str | None = None
    ) -> CarSession:
        """Replace the vehicle identity wholesale."""
        car = replace(self.get_car(car_id, user_id), identity=identity)
        self._store(car, user_id)
        return car

    async def start_generation(
        self, car_id: str, user_id: str | None = None
    ) -> GenerationReport:
        """Generate the top-ranked styles using the photo as reference.

        The full photo is released once the batch settles.
        """
        car = self.get_car(car_id, user_id)
        ranked = rank_styles(self._identity_of(car))
        self._visible[(user_id, car_id)] = self.initial_batch_size
        targets = _startable(car, ranked[: self.initial_batch_size])
        report = await self._run(
            car_id, targets, car.photo_base64 or None, user_id
        )
        released = replace(report.car, photo_base64="")
        if self._lookup(car_id, user_id) is not None:
            self._store(released, user_id)
        return replace(report, car=released)

    async def generate_more(
        self, car_id: str, user_id: str | None = None
    ) -> GenerationReport:
        """Generate the next window of the ranked order without a reference."""
        car = self.get_car(car_id, user_id)
        ranked = rank_styles(self._identity_of(car))
        visible = self._visible.get((user_id, car_id), self.initial_batch_size)
        upper = min(visible + self.more_batch_size, len(ranked))
        self._visible[(user_id, car_id)] = upper
        targets = _startable(car, ranked[visible:upper])
        return await self._run(car_id, targets, None, user_id)

    async def generate_selected(
        self, car_id: str, style_ids: Sequence[str], user_id: str | None = None
    ) -> GenerationReport:
        """Generate (or regenerate) caller-chosen styles in the given order."""
        car = self.get_car(car_id, user_id)
        self._identity_of(car)
        targets: list[StyleConfig] = []
        for style_id in dict.fromkeys(style_ids):
            style = get_style(style_id)
            if style is None:
                raise UnknownStyleError(style_id)
            targets.append(style)
        return await self._run(car_id, targets, None, user_id)

    async def create_mockup(  # noqa: PLR0913
        self,
        car_id: str,
        style_id: str,
        product_id: str,
        color_name: str | None = None,
        user_id: str | None = None,
    ) -> MockupResult:
        """Render a product mockup for a finished design."""
        car = self.get_car(car_id, user_id)
        product = get_product(product_id)
        if product is None:
            raise UnknownProductError(f"Unknown product: {product_id}")
        color = next(
            (c for c in product.colors if c.name == color_name),
            product.colors[0] if product.colors else None,
        )
        design = car.get_style(style_id)
        if design is None or design.status != "done" or not is_data_url(
            design.image_url
        ):
            raise DesignUnavailableError(style_id)

        pending = MockupResult(
            product_id=product.id,
            style_id=style_id,
            status="generating",
            color=color.name if color else None,
        )
        self._put_mockup(car_id, pending, user_id)
        try:
            image = await self.artwork_service.render_mockup(
                design.image_url,
                product,
                color_name=color.name if color else "White",
                color_hex=color.hex if color else "#FFFFFF",
                car_description=self._identity_of(car).display_name,
            )
        except Exception:
            _logger.exception("Mockup %s/%s failed", product.id, style_id)
            result = replace(pending, status="error")
        else:
            result = replace(pending, status="done", image_url=image)
        self._put_mockup(car_id, result, user_id)
        return result

    async def tweak_style(
        self,
        car_id: str,
        style_id: str,
        instruction: str,
        user_id: str | None = None,
    ) -> GeneratedStyle:
        """Edit a finished design with a free-text instruction.

        A failed edit keeps the previous image and records the error on it.
        """
        car = self.get_car(car_id, user_id)
        style = get_style(style_id)
        if style is None:
            raise UnknownStyleError(style_id)
        identity = self._identity_of(car)
        current = car.get_style(style_id)
        if current is not None and current.status == "generating":
            raise StyleAlreadyGeneratingError(style_id)
        if current is None or current.status != "done" or not is_data_url(
            current.image_url
        ):
            raise DesignUnavailableError(style_id)

        self._store(
            car.with_style(replace(current, status="generating", error=None)),
            user_id,
        )
        try:
            image = await self.artwork_service.tweak_design(
                current.image_url, instruction, identity, style
            )
        except Exception as exc:
            _logger.exception("Tweak of %s for car %s failed", style_id, car_id)
            result = replace(current, status="done", error=str(exc) or "Tweak failed")
        else:
            result = GeneratedStyle(style_id=style_id, status="done", image_url=image)
        self._apply_style(car_id, result, user_id)
        return result

    async def identify_color(
        self, car_id: str, user_id: str | None = None
    ) -> CarSession:
        """Ask the vision model for the exact paint color of the captured car."""
        car = self.get_car(car_id, user_id)
        identity = self._identity_of(car)
        if not car.photo_base64:
            raise PhotoUnavailableError(f"Photo of car {car_id} is no longer held")
        try:
            color = await self.vehicle_service.identify_color(
                car.photo_base64, identity.year, identity.make, identity.model
            )
        except Exception as exc:
            _logger.exception("Color identification failed for car %s", car_id)
            raise ColorIdentificationError(str(exc)) from exc
        latest = self.get_car(car_id, user_id)
        updated = replace(
            latest, identity=replace(latest.identity or identity, color=color)
        )
        self._store(updated, user_id)
        return updated

    def place_order(  # noqa: PLR0913
        self,
        car_id: str,
        items: Iterable[dict[str, str | None]],
        customer_email: str,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        shipping_address: ShippingAddress | None = None,
        payment_id: str | None = None,
        user_id: str | None = None,
    ) -> Order:
        """Price items from the catalog and record the order."""
        car = self.get_car(car_id, user_id)
        priced = [
            build_order_item(
                product_id=str(item["product_id"]),
                style_id=str(item["style_id"]),
                size=item.get("size"),
                color=item.get("color"),
            )
            for item in items
        ]
        if not priced:
            raise UnknownProductError("An order needs at least one item")
        order = Order(
            id=new_id(),
            car_session_id=car.id,
            items=priced,
            customer_email=customer_email,
            created_at=self.clock(),
            status="confirmed" if payment_id else "pending",
            customer_name=customer_name,
            customer_phone=customer_phone,
            shipping_address=shipping_address,
            payment_id=payment_id,
        )
        self.event_store.save_order(order, user_id)
        self._store(replace(car, orders=[*car.orders, order]), user_id)
        return order

    async def _run(
        self,
        car_id: str,
        targets: list[StyleConfig],
        reference_image: str | None,
        user_id: str | None,
    ) -> GenerationReport:
        car = self.get_car(car_id, user_id)
        identity = self._identity_of(car)
        for style in targets:
            current = car.get_style(style.id)
            if current is not None and current.status == "generating":
                raise StyleAlreadyGeneratingError(style.id)

        for style in targets:
            car = car.with_style(GeneratedStyle(style_id=style.id, status="generating"))
        self._store(car, user_id)

        failed: dict[str, str] = {}

        def on_complete(style_id: str, image_url: str) -> None:
            self._apply_style(
                car_id,
                GeneratedStyle(style_id=style_id, status="done", image_url=image_url),
                user_id,
            )

        def on_error(style_id: str, message: str) -> None:
            failed[style_id] = message
            self._apply_style(
                car_id,
                GeneratedStyle(style_id=style_id, status="error", error=message),
                user_id,
            )

        completed = await self.orchestrator.generate_batch(
            identity, targets, reference_image, on_complete, on_error
        )
        return GenerationReport(
            car=self._lookup(car_id, user_id) or car,
            requested=[style.id for style in targets],
            completed=completed,
            failed=failed,
        )

    def _apply_style(
        self, car_id: str, style: GeneratedStyle, user_id: str | None
    ) -> None:
        latest = self._lookup(car_id, user_id)
        if latest is None:
            _logger.warning(
                "Dropping %s result for unknown car %s", style.style_id, car_id
            )
            return
        self._store(latest.with_style(style), user_id)

    def _put_mockup(
        self, car_id: str, mockup: MockupResult, user_id: str | None
    ) -> None:
        car = self._lookup(car_id, user_id)
        if car is None:
            _logger.warning("Dropping mockup for unknown car %s", car_id)
            return
        others = [
            m
            for m in car.mockups
            if (m.product_id, m.style_id) != (mockup.product_id, mockup.style_id)
        ]
        self._store(replace(car, mockups=[*others, mockup]), user_id)

    def _lookup(self, car_id: str, user_id: str | None) -> CarSession | None:
        """Return the live car if it belongs to the vendor's current session."""
        stored = self._evict_stale(user_id).get_car(car_id)
        if stored is None:
            return None
        return self._cars.get((user_id, car_id), stored)

    def _evict_stale(self, user_id: str | None) -> EventSession:
        """Drop cached cars that left the vendor's current event session."""
        session = self.event_store.get_event_session(user_id)
        current_ids = {car.id for car in session.cars}
        for cache in (self._cars, self._visible):
            stale = [
                key for key in cache if key[0] == user_id and key[1] not in current_ids
            ]
            for key in stale:
                del cache[key]
        return session

    def _store(self, car: CarSession, user_id: str | None) -> None:
        self._cars[(user_id, car.id)] = car
        self.event_store.put_car_session(car, user_id)

    @staticmethod
    def _identity_of(car: CarSession) -> VehicleIdentity:
        if car.identity is None:
            raise MissingIdentityError(f"Car {car.id} has not been identified yet")
        return car.identity


def _startable(car: CarSession, styles: Sequence[StyleConfig]) -> list[StyleConfig]:
    """Keep styles that have not started or that failed."""
    startable = []
    for style in styles:
        current = car.get_style(style.id)
        if current is None or current.status in {"idle", "error"}:
            startable.append(style)
    return startable
