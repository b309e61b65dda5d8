"""Local persistence of the current event session."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from snap_merch.domain.sessions import CarSession, EventSession, Order
from snap_merch.services.images import is_data_url
from snap_merch.services.local_store import LocalStore
from snap_merch.services.mirror import EventMirror

EVENT_SESSION_KEY = "snapmerch_event_session"
ORDERS_KEY = "snapmerch_orders"
DEFAULT_EVENT_NAME = "Cars & Coffee"

THUMBNAIL_MAX_CHARS = 15_000
DATA_URL_MAX_CHARS = 500
TRIMMED_CAR_LIMIT = 3

_EVENT_ADAPTER = TypeAdapter(EventSession)
_ORDERS_ADAPTER = TypeAdapter(list[Order])

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def new_id() -> str:
    return str(uuid4())


def is_large_data_url(value: str | None) -> bool:
    """Return True for inline image payloads too big to keep locally."""
    return is_data_url(value) and len(value) > DATA_URL_MAX_CHARS


def keep_thumbnail(thumbnail: str | None) -> bool:
    return bool(thumbnail) and len(thumbnail) < THUMBNAIL_MAX_CHARS


def strip_car(car: CarSession) -> CarSession:
    """Drop the photo and inline images from a car, keeping small thumbnails."""
    return replace(
        car,
        photo_base64="",
        photo_thumbnail=(
            car.photo_thumbnail if keep_thumbnail(car.photo_thumbnail) else ""
        ),
        styles=[
            replace(style, image_url="")
            if is_large_data_url(style.image_url)
            else replace(style, image_url=style.image_url or "")
            for style in car.styles
        ],
        mockups=[
            replace(mockup, image_url="")
            if is_large_data_url(mockup.image_url)
            else replace(mockup, image_url=mockup.image_url or "")
            for mockup in car.mockups
        ],
    )


def strip_event_session(session: EventSession) -> EventSession:
    return replace(session, cars=[strip_car(car) for car in session.cars])


@dataclass
class EventStore:
    """Event session store backed by local storage and an optional mirror.

    The user id is always passed in by the caller; remote sync only happens
    when one is given.
    """

    local_store: LocalStore
    mirror: EventMirror | None = None
    clock: Callable[[], datetime] = _utcnow

    def today(self) -> str:
        return self.clock().date().isoformat()

    def get_event_session(self, user_id: str | None = None) -> EventSession:
        """Return today's event session, starting a fresh one on rollover."""
        key = _session_key(user_id)
        stored = self.local_store.get_item(key)
        if stored:
            try:
                session = _EVENT_ADAPTER.validate_json(stored)
            except ValidationError:
                _logger.warning("Discarding corrupted event session for %s", key)
                self.local_store.remove_item(key)
            else:
                if session.date == self.today():
                    return session
        return self.create_new_event_session(user_id)

    def create_new_event_session(
        self, user_id: str | None = None, name: str = DEFAULT_EVENT_NAME
    ) -> EventSession:
        session = EventSession(
            id=new_id(),
            name=name,
            date=self.today(),
            created_at=self.clock(),
            cars=[],
        )
        self.save_event_session(session, user_id)
        return session

    def save_event_session(
        self, session: EventSession, user_id: str | None = None
    ) -> None:
        """Persist a stripped copy locally and schedule the remote mirror.

        Never raises on storage pressure: the write is retried with fewer cars
        and no thumbnails, and as a last resort the local copy is dropped.
        """
        self._write_local(_session_key(user_id), session)
        if user_id and self.mirror is not None:
            self.mirror.schedule_event_sync(session, user_id)

    def add_car_session(
        self, car: CarSession, user_id: str | None = None
    ) -> EventSession:
        """Add a car as the newest entry of today's event."""
        session = self.get_event_session(user_id)
        updated = replace(session, cars=[car, *session.cars])
        self.save_event_session(updated, user_id)
        return updated

    def update_car_session(
        self, car_id: str, user_id: str | None = None, **changes: object
    ) -> EventSession:
        """Replace fields of a stored car; unknown car ids are ignored."""
        session = self.get_event_session(user_id)
        if session.get_car(car_id) is None:
            return session
        updated = replace(
            session,
            cars=[
                replace(car, **changes) if car.id == car_id else car
                for car in session.cars
            ],
        )
        self.save_event_session(updated, user_id)
        return updated

    def put_car_session(
        self, car: CarSession, user_id: str | None = None
    ) -> EventSession:
        """Store a whole car snapshot, adding it when missing."""
        session = self.get_event_session(user_id)
        if session.get_car(car.id) is None:
            return self.add_car_session(car, user_id)
        updated = replace(
            session,
            cars=[
                car if existing.id == car.id else existing
                for existing in session.cars
            ],
        )
        self.save_event_session(updated, user_id)
        return updated

    def get_car_session(
        self, car_id: str, user_id: str | None = None
    ) -> CarSession | None:
        return self.get_event_session(user_id).get_car(car_id)

    def get_orders(self, user_id: str | None = None) -> list[Order]:
        stored = self.local_store.get_item(_orders_key(user_id))
        if not stored:
            return []
        try:
            return _ORDERS_ADAPTER.validate_json(stored)
        except ValidationError:
            _logger.warning("Discarding corrupted order list")
            return []

    def save_order(self, order: Order, user_id: str | None = None) -> None:
        """Record an order locally (newest first) and mirror it."""
        orders = [order, *self.get_orders(user_id)]
        try:
            self.local_store.set_item(
                _orders_key(user_id), _ORDERS_ADAPTER.dump_json(orders).decode()
            )
        except OSError:
            _logger.warning("Local store full, order %s kept remote only", order.id)
        if user_id and self.mirror is not None:
            self.mirror.schedule_order_sync(order)

    async def hydrate(self, user_id: str) -> EventSession | None:
        """Load today's event from the remote mirror into local storage."""
        if self.mirror is None:
            return None
        session = await self.mirror.load_event_session(user_id, self.today())
        if session is not None:
            self._write_local(_session_key(user_id), session)
        return session

    def _write_local(self, key: str, session: EventSession) -> None:
        stripped = strip_event_session(session)
        try:
            self.local_store.set_item(key, _dump(stripped))
            return
        except OSError:
            _logger.warning("Local store full, trimming event %s", session.id)
        trimmed = replace(
            stripped,
            cars=[
                replace(car, photo_thumbnail="")
                for car in stripped.cars[:TRIMMED_CAR_LIMIT]
            ],
        )
        try:
            self.local_store.set_item(key, _dump(trimmed))
        except OSError:
            _logger.warning("Local store still full, dropping event %s", session.id)
            self.local_store.remove_item(key)


def _dump(session: EventSession) -> str:
    return _EVENT_ADAPTER.dump_json(session).decode()


def _session_key(user_id: str | None) -> str:
    return f"{EVENT_SESSION_KEY}:{user_id}" if user_id else EVENT_SESSION_KEY


def _orders_key(user_id: str | None) -> str:
    return f"{ORDERS_KEY}:{user_id}" if user_id else ORDERS_KEY
