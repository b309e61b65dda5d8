"""Supabase-backed mirror of event sessions."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from snap_merch.domain.sessions import (
    CarSession,
    EventSession,
    GeneratedStyle,
    Order,
    OrderItem,
    ShippingAddress,
    idle_styles,
)
from snap_merch.domain.vehicles import VehicleColor, VehicleIdentity
from snap_merch.services.event_store import keep_thumbnail
from snap_merch.services.images import is_data_url
from snap_merch.services.mirror import EventMirrorRepository

_NO_IDS = ["__none__"]


def style_row_id(car_id: str, style_id: str) -> str:
    """Deterministic row id so repeated syncs update instead of append."""
    return f"{car_id}_{style_id}"


@dataclass
class SupabaseEventMirrorRepository(EventMirrorRepository):
    """Supabase implementation for the snap_* tables."""

    client: Client

    def upsert_event(self, session: EventSession, user_id: str) -> None:
        """Upsert the event row."""
        self.client.table("snap_events").upsert(
            {
                "id": session.id,
                "user_id": user_id,
                "name": session.name,
                "date": session.date,
            },
            on_conflict="id",
        ).execute()

    def upsert_car(self, car: CarSession, event_id: str) -> None:
        """Upsert a car row with a small thumbnail at most."""
        self.client.table("snap_cars").upsert(
            {
                "id": car.id,
                "event_id": event_id,
                "photo_thumbnail": (
                    car.photo_thumbnail if keep_thumbnail(car.photo_thumbnail) else None
                ),
                "identity": _identity_json(car.identity),
                "share_url": car.share_url,
            },
            on_conflict="id",
        ).execute()

    def upsert_style(self, car_id: str, style: GeneratedStyle) -> None:
        """Upsert a style row; inline image data is never stored."""
        self.client.table("snap_styles").upsert(
            {
                "id": style_row_id(car_id, style.style_id),
                "car_id": car_id,
                "style_id": style.style_id,
                "image_url": (
                    style.image_url
                    if style.image_url and not is_data_url(style.image_url)
                    else None
                ),
                "status": style.status,
                "error": style.error,
            },
            on_conflict="id",
        ).execute()

    def upsert_order(self, order: Order) -> None:
        """Upsert an order row."""
        self.client.table("snap_orders").upsert(
            {
                "id": order.id,
                "car_id": order.car_session_id,
                "customer_email": order.customer_email,
                "customer_name": order.customer_name,
                "customer_phone": order.customer_phone,
                "shipping_address": _address_json(order.shipping_address),
                "items": [_item_json(item) for item in order.items],
                "payment_id": order.payment_id,
                "status": order.status,
            },
            on_conflict="id",
        ).execute()

    def load_event(self, user_id: str, day: str) -> EventSession | None:
        """Return the latest event for the day with its cars, styles and orders."""
        events = (
            self.client.table("snap_events")
            .select("*")
            .eq("user_id", user_id)
            .eq("date", day)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not events.data:
            return None
        event = events.data[0]

        cars = (
            self.client.table("snap_cars")
            .select("*")
            .eq("event_id", event["id"])
            .order("created_at", desc=True)
            .execute()
        )
        car_rows = cars.data or []
        car_ids = [row["id"] for row in car_rows] or _NO_IDS

        styles = self._select_for_cars("snap_styles", car_ids)
        orders = self._select_for_cars("snap_orders", car_ids)
        styles_by_car: dict[str, list[GeneratedStyle]] = {}
        for row in styles:
            styles_by_car.setdefault(row["car_id"], []).append(_style_from_row(row))
        orders_by_car: dict[str, list[Order]] = {}
        for row in orders:
            orders_by_car.setdefault(row["car_id"], []).append(_order_from_row(row))

        return EventSession(
            id=event["id"],
            name=event["name"],
            date=event["date"],
            created_at=_parse_timestamp(event.get("created_at")),
            cars=[
                CarSession(
                    id=row["id"],
                    created_at=_parse_timestamp(row.get("created_at")),
                    photo_thumbnail=row.get("photo_thumbnail") or "",
                    identity=_identity_from_json(row.get("identity")),
                    styles=_fill_styles(styles_by_car.get(row["id"], [])),
                    orders=orders_by_car.get(row["id"], []),
                    share_url=row.get("share_url"),
                )
                for row in car_rows
            ],
        )

    def _select_for_cars(
        self, table: str, car_ids: list[str]
    ) -> list[dict[str, object]]:
        response = self.client.table(table).select("*").in_("car_id", car_ids).execute()
        return response.data or []


def _fill_styles(loaded: list[GeneratedStyle]) -> list[GeneratedStyle]:
    by_id = {style.style_id: style for style in loaded}
    return [by_id.get(style.style_id, style) for style in idle_styles()]


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return datetime.now(tz=UTC)


def _identity_json(identity: VehicleIdentity | None) -> dict[str, object] | None:
    if identity is None:
        return None
    return {
        "year": identity.year,
        "make": identity.make,
        "model": identity.model,
        "trim": identity.trim,
        "color": {"name": identity.color.name, "hex": identity.color.hex},
    }


def _identity_from_json(raw: object) -> VehicleIdentity | None:
    if not isinstance(raw, dict):
        return None
    color = raw.get("color") or {}
    return VehicleIdentity(
        year=str(raw.get("year", "")),
        make=str(raw.get("make", "")),
        model=str(raw.get("model", "")),
        trim=str(raw.get("trim", "")),
        color=VehicleColor(
            name=str(color.get("name", "")), hex=str(color.get("hex", ""))
        ),
    )


def _style_from_row(row: dict[str, object]) -> GeneratedStyle:
    return GeneratedStyle(
        style_id=str(row["style_id"]),
        status=row.get("status") or "idle",
        image_url=row.get("image_url"),
        error=row.get("error"),
    )


def _item_json(item: OrderItem) -> dict[str, object]:
    return {
        "productId": item.product_id,
        "styleId": item.style_id,
        "size": item.size,
        "color": item.color,
        "price": item.price,
    }


def _address_json(address: ShippingAddress | None) -> dict[str, str] | None:
    if address is None:
        return None
    return {
        "firstName": address.first_name,
        "lastName": address.last_name,
        "address1": address.address1,
        "address2": address.address2,
        "city": address.city,
        "state": address.state,
        "zip": address.zip,
        "country": address.country,
    }


def _order_from_row(row: dict[str, object]) -> Order:
    address = row.get("shipping_address")
    return Order(
        id=str(row["id"]),
        car_session_id=str(row["car_id"]),
        items=[
            OrderItem(
                product_id=item["productId"],
                style_id=item["styleId"],
                price=float(item["price"]),
                size=item.get("size"),
                color=item.get("color"),
            )
            for item in row.get("items") or []
        ],
        customer_email=str(row["customer_email"]),
        created_at=_parse_timestamp(row.get("created_at")),
        status=row.get("status") or "pending",
        customer_name=row.get("customer_name"),
        customer_phone=row.get("customer_phone"),
        shipping_address=(
            ShippingAddress(
                first_name=address["firstName"],
                last_name=address["lastName"],
                address1=address["address1"],
                address2=address.get("address2", ""),
                city=address["city"],
                state=address["state"],
                zip=address["zip"],
                country=address["country"],
            )
            if isinstance(address, dict)
            else None
        ),
        payment_id=row.get("payment_id"),
    )
