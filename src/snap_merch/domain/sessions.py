"""Domain models for event and car sessions."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal

from snap_merch.domain.styles import STYLE_IDS
from snap_merch.domain.vehicles import VehicleIdentity

GenerationStatus = Literal["idle", "generating", "done", "error"]
OrderStatus = Literal["pending", "confirmed", "fulfilled"]


@dataclass(frozen=True)
class GeneratedStyle:
    """Generation state for one catalog style of a car."""

    style_id: str
    status: GenerationStatus = "idle"
    image_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class MockupResult:
    """Rendered product mockup for a style."""

    product_id: str
    style_id: str
    status: GenerationStatus = "idle"
    image_url: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class OrderItem:
    """Single merchandise line item."""

    product_id: str
    style_id: str
    price: float
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class ShippingAddress:
    first_name: str
    last_name: str
    address1: str
    city: str
    state: str
    zip: str
    country: str
    address2: str = ""


@dataclass(frozen=True)
class Order:
    """Customer order for artwork merchandise."""

    id: str
    car_session_id: str
    items: list[OrderItem]
    customer_email: str
    created_at: datetime
    status: OrderStatus = "pending"
    customer_name: str | None = None
    customer_phone: str | None = None
    shipping_address: ShippingAddress | None = None
    payment_id: str | None = None

    @property
    def total(self) -> float:
        return round(sum(item.price for item in self.items), 2)


@dataclass(frozen=True)
class CarSession:
    """One photographed vehicle and everything generated for it."""

    id: str
    created_at: datetime
    photo_base64: str = ""
    photo_thumbnail: str = ""
    identity: VehicleIdentity | None = None
    styles: list[GeneratedStyle] = field(default_factory=list)
    mockups: list[MockupResult] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    share_url: str | None = None

    def get_style(self, style_id: str) -> GeneratedStyle | None:
        """Return the generation state for a style id, if present."""
        for style in self.styles:
            if style.style_id == style_id:
                return style
        return None

    def with_style(self, updated: GeneratedStyle) -> "CarSession":
        """Return a copy with one style entry replaced by id."""
        styles = [
            updated if style.style_id == updated.style_id else style
            for style in self.styles
        ]
        return replace(self, styles=styles)


@dataclass(frozen=True)
class EventSession:
    """All cars photographed during one event day."""

    id: str
    name: str
    date: str
    created_at: datetime
    cars: list[CarSession] = field(default_factory=list)

    def get_car(self, car_id: str) -> CarSession | None:
        for car in self.cars:
            if car.id == car_id:
                return car
        return None


def idle_styles() -> list[GeneratedStyle]:
    """Return one idle entry per catalog style, in catalog order."""
    return [GeneratedStyle(style_id=style_id) for style_id in STYLE_IDS]
